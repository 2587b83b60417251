"""
Run configuration.

A RunConfig is assembled from, in increasing priority: field defaults,
a JSON configuration file, ``KVCHECK_*`` environment variables and
command-line flags. ``randomize_config`` draws every value that was not
pinned explicitly from a seed, so a campaign can explore the
configuration space reproducibly.
"""

import json
import os
import random
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any

from .errors import ConfigurationError

# Width of the zero-padded row number that prefixes generated keys and values
ROW_PREFIX_WIDTH = 10
MAX_ROWS = 10 ** ROW_PREFIX_WIDTH - 1


class SchemaVariant(str, Enum):
    """Layout of the table under test."""

    ROW = "row"  # explicit variable-length key
    VAR = "var"  # record number key, variable-length value
    FIX = "fix"  # record number key, fixed bit-width value

    @property
    def is_column(self) -> bool:
        return self is not SchemaVariant.ROW


class Collation(str, Enum):
    DEFAULT = "default"
    REVERSE = "reverse"


# Stores that report never-written FIX rows as zero instead of absent
ZERO_FILL_STORES = frozenset({"memory"})


def parse_variant(value: Any) -> SchemaVariant:
    """Coerce a variant name from a file, env var or flag, ignoring case."""
    if isinstance(value, SchemaVariant):
        return value
    try:
        return SchemaVariant(str(value).lower())
    except ValueError:
        raise ConfigurationError(f"unknown schema variant: {value!r}") from None


@dataclass(frozen=True)
class RunConfig:
    """Everything that determines a run, given its seed."""

    variant: SchemaVariant = SchemaVariant.ROW
    rows: int = 1000
    ops: int = 2000
    delete_pct: int = 10
    insert_pct: int = 10
    write_pct: int = 30
    bitcnt: int = 8
    seed: int | None = None
    runs: int = 1
    log_ops: bool = False
    reverse: bool = False
    key_min: int = 10
    key_max: int = 32
    value_min: int = 20
    value_max: int = 64
    repeat_data_pct: int = 0
    sut: str = "sqlite"
    oracle: str = "memory"
    home: str | None = None
    page_size: int = 4096
    cache_pages: int = 2000

    def __post_init__(self) -> None:
        # Accept plain strings from files, env and argparse
        object.__setattr__(self, "variant", parse_variant(self.variant))
        self.validate()

    @property
    def collation(self) -> Collation:
        return Collation.REVERSE if self.reverse else Collation.DEFAULT

    @property
    def bitmask(self) -> int:
        return (1 << self.bitcnt) - 1

    def validate(self) -> None:
        """Raise ConfigurationError on the first invalid setting."""
        if not 1 <= self.rows <= MAX_ROWS:
            raise ConfigurationError(f"rows must be in [1, {MAX_ROWS}], got {self.rows}")
        if self.ops < 0:
            raise ConfigurationError(f"ops must be >= 0, got {self.ops}")
        if self.runs < 1:
            raise ConfigurationError(f"runs must be >= 1, got {self.runs}")
        for name in ("delete_pct", "insert_pct", "write_pct", "repeat_data_pct"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ConfigurationError(f"{name} must be in [0, 100], got {value}")
        if not 1 <= self.bitcnt <= 8:
            raise ConfigurationError(f"bitcnt must be in [1, 8], got {self.bitcnt}")
        if self.reverse and self.variant is not SchemaVariant.ROW:
            raise ConfigurationError("reverse collation is only valid for the row variant")
        if (
            self.variant is SchemaVariant.FIX
            and self.sut in ZERO_FILL_STORES
            and self.oracle not in ZERO_FILL_STORES
        ):
            raise ConfigurationError(
                f"fix variant: a zero-filling sut ({self.sut}) needs a zero-filling oracle, "
                f"got {self.oracle}"
            )
        if not ROW_PREFIX_WIDTH <= self.key_min <= self.key_max:
            raise ConfigurationError(
                f"key lengths must satisfy {ROW_PREFIX_WIDTH} <= key_min <= key_max, "
                f"got {self.key_min}/{self.key_max}"
            )
        if not ROW_PREFIX_WIDTH <= self.value_min <= self.value_max:
            raise ConfigurationError(
                f"value lengths must satisfy {ROW_PREFIX_WIDTH} <= value_min <= value_max, "
                f"got {self.value_min}/{self.value_max}"
            )
        if self.page_size < 512 or self.page_size > 65536 or self.page_size & (self.page_size - 1):
            raise ConfigurationError(
                f"page_size must be a power of two in [512, 65536], got {self.page_size}"
            )
        if self.cache_pages < 0:
            raise ConfigurationError(f"cache_pages must be >= 0, got {self.cache_pages}")

    def merged(self, **overrides: Any) -> "RunConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigurationError(f"unknown configuration keys: {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["variant"] = self.variant.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunConfig":
        return cls().merged(**data)

    @classmethod
    def from_file(cls, path: str | Path) -> "RunConfig":
        return cls.from_dict(read_config_file(path))


def read_config_file(path: str | Path) -> dict[str, Any]:
    """Load a JSON object of configuration keys."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"cannot read configuration file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"configuration file {path} must hold a JSON object")
    return data


_BOOL_TRUE = ("true", "1", "yes", "on")


def config_from_env(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """
    Collect configuration overrides from ``KVCHECK_<FIELD>`` variables.

    Returns a dict suitable for ``RunConfig.merged``; fields without a
    variable are left out.
    """
    environ = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}

    for f in fields(RunConfig):
        raw = environ.get(f"KVCHECK_{f.name.upper()}")
        if raw is None:
            continue
        if f.name in ("log_ops", "reverse"):
            overrides[f.name] = raw.lower() in _BOOL_TRUE
        elif f.name in ("variant", "sut", "oracle", "home"):
            overrides[f.name] = raw
        else:
            try:
                overrides[f.name] = int(raw)
            except ValueError:
                raise ConfigurationError(
                    f"KVCHECK_{f.name.upper()} must be an integer, got {raw!r}"
                ) from None

    return overrides


def randomize_config(seed: int, **pinned: Any) -> RunConfig:
    """
    Draw a configuration from ``seed``.

    Keyword arguments pin fields; pinned values are never redrawn.
    """
    rng = random.Random(seed)
    variant = parse_variant(pinned.get("variant") or rng.choice([v.value for v in SchemaVariant]))

    key_min = rng.randint(ROW_PREFIX_WIDTH, 20)
    value_min = rng.randint(ROW_PREFIX_WIDTH, 40)
    drawn = {
        "variant": variant,
        "rows": rng.randint(10, 100000),
        "ops": rng.randint(0, 100000),
        "delete_pct": rng.randint(0, 45),
        "insert_pct": rng.randint(0, 45),
        "write_pct": rng.randint(0, 90),
        "bitcnt": rng.randint(1, 8),
        "reverse": variant is SchemaVariant.ROW and rng.randint(0, 9) == 0,
        "key_min": key_min,
        "key_max": rng.randint(key_min, 64),
        "value_min": value_min,
        "value_max": rng.randint(value_min, 256),
        "repeat_data_pct": rng.choice([0, 0, 10, 50]),
        "page_size": 1 << rng.randint(9, 16),
        "seed": seed,
    }
    drawn.update({k: v for k, v in pinned.items() if v is not None})
    return RunConfig().merged(**drawn)
