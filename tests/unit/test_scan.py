"""
Unit tests for kvcheck.scan
"""

from unittest.mock import MagicMock

import pytest

from kvcheck.config import RunConfig
from kvcheck.errors import MismatchError, NotFoundMismatchError
from kvcheck.events import EventHandler
from kvcheck.loader import BulkLoader
from kvcheck.scan import ScanVerifier, dump_compare


class TestVisitOrder:
    @pytest.mark.parametrize("seed", range(10))
    def test_each_row_visited_once(self, context_factory, seed):
        ctx = context_factory(RunConfig(rows=10), seed=seed)
        order = ScanVerifier(ctx).visit_order(503)
        assert sorted(order) == list(range(1, 504))

    def test_order_varies_with_seed(self, context_factory):
        orders = {
            tuple(ScanVerifier(context_factory(RunConfig(rows=10), seed=s)).visit_order(200))
            for s in range(10)
        }
        assert len(orders) > 1


class TestScan:
    def test_scan_reads_every_row(self, context_factory, variant):
        ctx = context_factory(RunConfig(variant=variant, rows=120))
        BulkLoader(ctx).load()
        assert ScanVerifier(ctx).scan() == 120
        assert ctx.operations["read"] == 120

    def test_scan_finds_corruption(self, context_factory):
        ctx = context_factory(RunConfig(variant="var", rows=50))
        BulkLoader(ctx).load()
        ctx.sut.put(17, b"corrupted")
        with pytest.raises(MismatchError) as exc_info:
            ScanVerifier(ctx).scan()
        assert exc_info.value.row == 17

    def test_scan_finds_lost_row(self, context_factory):
        ctx = context_factory(RunConfig(variant="var", rows=50))
        BulkLoader(ctx).load()
        ctx.sut.delete(23)
        with pytest.raises(NotFoundMismatchError):
            ScanVerifier(ctx).scan()

    def test_progress_after_thousand(self, context_factory):
        ctx = context_factory(RunConfig(variant="var", rows=2500))
        BulkLoader(ctx).load()
        ctx.events = MagicMock(spec=EventHandler)
        ScanVerifier(ctx).scan()
        counters = [c.args[1] for c in ctx.events.on_progress.call_args_list]
        assert counters == [1001, 2002]


class TestDumpCompare:
    def test_identical_stores(self, context_factory, variant):
        ctx = context_factory(RunConfig(variant=variant, rows=40))
        BulkLoader(ctx).load()
        assert dump_compare(ctx) == 40

    def test_empty_stores(self, context_factory):
        ctx = context_factory(RunConfig(rows=10))
        assert dump_compare(ctx) == 0

    def test_extra_row_in_sut(self, context_factory):
        ctx = context_factory(RunConfig(variant="var", rows=10))
        BulkLoader(ctx).load()
        ctx.sut.append(b"extra")
        with pytest.raises(NotFoundMismatchError):
            dump_compare(ctx)

    def test_missing_middle_row(self, context_factory):
        ctx = context_factory(RunConfig(rows=10))
        BulkLoader(ctx).load()
        ctx.oracle.delete(ctx.generator.generate_key(5))
        with pytest.raises(MismatchError) as exc_info:
            dump_compare(ctx)
        assert exc_info.value.reason == "key mismatch"
