"""
Unit tests for the bounded worker pool and record descriptions
"""

import asyncio

import pytest

from ingestion.sync.base import describe_record, run_bounded


class TestRunBounded:

    @staticmethod
    def tracking_worker(seen, peak):
        in_flight = {"now": 0}

        async def worker(item):
            in_flight["now"] += 1
            peak.append(in_flight["now"])
            await asyncio.sleep(0.01)
            seen.append(item)
            in_flight["now"] -= 1

        return worker

    @pytest.mark.asyncio
    async def test_runs_up_to_limit_in_parallel(self):
        seen, peak = [], []

        await run_bounded(range(10), self.tracking_worker(seen, peak), limit=3)

        assert sorted(seen) == list(range(10))
        assert max(peak) == 3

    @pytest.mark.asyncio
    async def test_limit_one_is_sequential(self):
        seen, peak = [], []

        await run_bounded(range(4), self.tracking_worker(seen, peak), limit=1)

        assert seen == [0, 1, 2, 3]
        assert max(peak) == 1

    @pytest.mark.asyncio
    async def test_non_positive_limit_still_runs(self):
        seen, peak = [], []

        await run_bounded(range(3), self.tracking_worker(seen, peak), limit=0)

        assert sorted(seen) == [0, 1, 2]
        assert max(peak) == 1

    @pytest.mark.asyncio
    async def test_empty_page(self):
        seen, peak = [], []
        await run_bounded([], self.tracking_worker(seen, peak), limit=4)
        assert seen == []


class TestDescribeRecord:

    @pytest.mark.parametrize("raw,expected", [
        ({"Id": 5}, "Id=5"),
        ({"FactionID": 2, "Name": "Alpha"}, "FactionID=2"),
        ({"PersonToPositionID": 7001, "PersonID": 101}, "PersonID=101"),
        ({"Name": "nameless"}, "<no id>"),
        (["not", "a", "dict"], "<non-object record>"),
    ])
    def test_describe(self, raw, expected):
        assert describe_record(raw) == expected
