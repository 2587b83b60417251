"""
Unit tests for kvcheck.driver
"""

from unittest.mock import MagicMock

import pytest

from kvcheck.config import RunConfig
from kvcheck.driver import Operation, OperationDriver, choose_operation
from kvcheck.errors import MismatchError, StoreError
from kvcheck.events import EventHandler
from kvcheck.loader import BulkLoader
from kvcheck.stores import CursorKind


class TestChooseOperation:
    @pytest.mark.parametrize("roll,expected", [
        (0, Operation.DELETE),
        (9, Operation.DELETE),
        (10, Operation.INSERT),
        (19, Operation.INSERT),
        (20, Operation.UPDATE),
        (49, Operation.UPDATE),
        (50, Operation.READ),
        (99, Operation.READ),
    ])
    def test_cumulative_thresholds(self, roll, expected):
        assert choose_operation(roll, 10, 10, 30) is expected

    def test_all_reads(self):
        assert all(choose_operation(r, 0, 0, 0) is Operation.READ for r in range(100))

    def test_percentages_over_100_leave_no_reads(self):
        assert choose_operation(99, 50, 50, 50) is Operation.INSERT


def loaded_driver(context_factory, **overrides) -> OperationDriver:
    config = RunConfig(**{"rows": 50, "ops": 0, **overrides})
    ctx = context_factory(config, seed=11)
    BulkLoader(ctx).load()
    return OperationDriver(ctx)


class TestDriverSteps:
    def test_column_insert_appends_past_row_count(self, context_factory):
        driver = loaded_driver(context_factory, variant="var")
        record = driver._insert(5)

        assert record.kind is Operation.INSERT
        assert record.row == 51
        assert record.cursor is CursorKind.INSERT
        assert driver.context.row_count == 51
        assert driver.context.max_written_row == 51
        assert driver.context.oracle.get(51) == driver.context.sut.get(51)

    def test_two_appends_are_consecutive(self, context_factory):
        driver = loaded_driver(context_factory, variant="var")
        first = driver._insert(1).row
        second = driver._insert(1).row
        assert (first, second) == (51, 52)

    def test_column_insert_rejects_stale_row(self, context_factory):
        driver = loaded_driver(context_factory, variant="var")
        driver.context.sut.append = MagicMock(return_value=50)
        with pytest.raises(MismatchError):
            driver._insert(1)

    def test_row_insert_is_upsert(self, context_factory):
        driver = loaded_driver(context_factory)
        record = driver._insert(7)
        assert record.row == 7
        assert driver.context.row_count == 50
        assert driver.context.sut.get(record.key) == driver.context.generator.generate_value(7)

    def test_delete_then_delete_again(self, context_factory):
        driver = loaded_driver(context_factory, variant="var")
        assert driver._delete(9).notfound is False
        assert driver._delete(9).notfound is True

    def test_fixed_delete_always_found(self, context_factory):
        driver = loaded_driver(context_factory, variant="fix")
        assert driver._delete(9).notfound is False
        assert driver._delete(9).notfound is False
        assert driver.context.sut.get(9) == b"\x00"

    def test_update_writes_both_sides(self, context_factory):
        driver = loaded_driver(context_factory)
        driver._delete(3)
        driver._update(3)
        key = driver.context.generator.generate_key(3)
        assert driver.context.sut.get(key) == driver.context.oracle.get(key)

    def test_probe_moves_and_stops_at_end(self, context_factory):
        driver = loaded_driver(context_factory, variant="var")
        driver._insert(1)
        moves = driver.probe(CursorKind.INSERT)
        assert 1 <= moves <= 4

    def test_store_error_annotated(self, context_factory):
        driver = loaded_driver(context_factory, delete_pct=100, insert_pct=0, write_pct=0)
        driver.context.sut.delete = MagicMock(side_effect=StoreError("boom", side="sut"))
        with pytest.raises(StoreError) as exc_info:
            driver.step()
        assert exc_info.value.operation == "delete"
        assert exc_info.value.row is not None


class TestDriverRun:
    def test_run_executes_all_ops(self, context_factory, variant):
        config = RunConfig(variant=variant, rows=100, ops=300, delete_pct=20, insert_pct=20, write_pct=30)
        ctx = context_factory(config, seed=5)
        BulkLoader(ctx).load()

        assert OperationDriver(ctx).run() == 300
        assert ctx.operations["read"] >= 300 - ctx.operations["delete"] - ctx.operations["insert"] - ctx.operations["update"]

    def test_progress_every_ten(self, context_factory):
        config = RunConfig(rows=20, ops=25)
        ctx = context_factory(config)
        ctx.events = MagicMock(spec=EventHandler)
        BulkLoader(ctx).load()
        ctx.events.reset_mock()

        OperationDriver(ctx).run()
        counters = [c.args[1] for c in ctx.events.on_progress.call_args_list]
        assert counters == [0, 10, 20]

    def test_ops_logged_when_enabled(self, context_factory):
        config = RunConfig(rows=20, ops=5, log_ops=True)
        ctx = context_factory(config)
        BulkLoader(ctx).load()
        ctx.events = MagicMock(spec=EventHandler)

        OperationDriver(ctx).run()
        assert ctx.events.on_message.call_count >= 5

    def test_same_seed_same_operations(self, context_factory):
        config = RunConfig(variant="var", rows=50, ops=200, insert_pct=20)
        results = []
        for _ in range(2):
            ctx = context_factory(config, seed=99)
            BulkLoader(ctx).load()
            OperationDriver(ctx).run()
            results.append((dict(ctx.operations), ctx.row_count))
        assert results[0] == results[1]
