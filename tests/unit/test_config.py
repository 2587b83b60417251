"""
Unit tests for kvcheck.config
"""

import json

import pytest

from kvcheck.config import (
    Collation,
    RunConfig,
    SchemaVariant,
    config_from_env,
    randomize_config,
    read_config_file,
)
from kvcheck.errors import ConfigurationError


class TestRunConfig:
    def test_defaults(self):
        config = RunConfig()
        assert config.variant is SchemaVariant.ROW
        assert config.sut == "sqlite"
        assert config.oracle == "memory"
        assert config.collation is Collation.DEFAULT

    def test_variant_string_converted(self):
        assert RunConfig(variant="FIX").variant is SchemaVariant.FIX

    def test_unknown_variant(self):
        with pytest.raises(ConfigurationError):
            RunConfig(variant="btree")

    def test_bitmask(self):
        assert RunConfig(bitcnt=3).bitmask == 0b111

    def test_reverse_collation(self):
        assert RunConfig(reverse=True).collation is Collation.REVERSE

    @pytest.mark.parametrize("overrides", [
        {"rows": 0},
        {"ops": -1},
        {"runs": 0},
        {"delete_pct": 101},
        {"bitcnt": 9},
        {"variant": "var", "reverse": True},
        {"variant": "fix", "sut": "memory", "oracle": "sqlite"},
        {"key_min": 5},
        {"key_min": 20, "key_max": 15},
        {"value_min": 9},
        {"page_size": 1000},
        {"cache_pages": -1},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ConfigurationError):
            RunConfig(**overrides)

    def test_role_swap_allowed_outside_fixed_variant(self):
        config = RunConfig(variant="var", sut="memory", oracle="sqlite")
        assert config.sut == "memory"

    def test_merged_ignores_none(self):
        config = RunConfig().merged(rows=50, ops=None)
        assert config.rows == 50
        assert config.ops == RunConfig().ops

    def test_merged_rejects_unknown_keys(self):
        with pytest.raises(ConfigurationError):
            RunConfig().merged(tables="x")

    def test_dict_round_trip(self):
        config = RunConfig(variant="var", rows=77, seed=3)
        assert RunConfig.from_dict(config.to_dict()) == config

    def test_from_file(self, tmp_path):
        path = tmp_path / "run.json"
        path.write_text(json.dumps({"variant": "fix", "bitcnt": 4}))
        config = RunConfig.from_file(path)
        assert config.variant is SchemaVariant.FIX
        assert config.bitcnt == 4

    def test_file_must_hold_object(self, tmp_path):
        path = tmp_path / "run.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError):
            read_config_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            read_config_file(tmp_path / "absent.json")


class TestConfigFromEnv:
    def test_reads_prefixed_variables(self):
        overrides = config_from_env({
            "KVCHECK_ROWS": "500",
            "KVCHECK_VARIANT": "var",
            "KVCHECK_LOG_OPS": "true",
            "UNRELATED": "1",
        })
        assert overrides == {"rows": 500, "variant": "var", "log_ops": True}

    def test_bad_integer(self):
        with pytest.raises(ConfigurationError):
            config_from_env({"KVCHECK_OPS": "many"})

    def test_empty_environment(self):
        assert config_from_env({}) == {}


class TestRandomizeConfig:
    def test_same_seed_same_config(self):
        assert randomize_config(7) == randomize_config(7)

    def test_seed_recorded(self):
        assert randomize_config(7).seed == 7

    def test_pinned_values_kept(self):
        for seed in range(20):
            config = randomize_config(seed, variant="fix", rows=10)
            assert config.variant is SchemaVariant.FIX
            assert config.rows == 10
            assert not config.reverse

    def test_drawn_configs_are_valid(self):
        for seed in range(50):
            randomize_config(seed).validate()

    def test_pinned_variant_ignores_case(self):
        assert randomize_config(3, variant="ROW").variant is SchemaVariant.ROW

    def test_unknown_pinned_variant(self):
        with pytest.raises(ConfigurationError, match="unknown schema variant"):
            randomize_config(3, variant="btree")
