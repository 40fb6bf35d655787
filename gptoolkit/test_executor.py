"""
Tests for the bounded concurrency executor
"""

import asyncio
import unittest

from gptoolkit.executor import BatchExecutor, is_sequence_result
from gptoolkit.run_state import RunState
from gptoolkit.settings import ApiSettings


class Recorder:
    """Chunk operation that tracks how many calls overlap."""

    def __init__(self, delay=0.01, fail_on=None, result=None):
        self.delay = delay
        self.fail_on = fail_on
        self.result = result
        self.in_flight = 0
        self.max_in_flight = 0
        self.calls = []

    async def __call__(self, chunk, *args):
        self.calls.append((list(chunk), args))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if self.fail_on is not None and self.fail_on in chunk:
                raise RuntimeError(f"boom {self.fail_on}")
            if self.result is not None:
                return self.result
            return [f"done-{item}" for item in chunk]
        finally:
            self.in_flight -= 1


def make_executor(single=2, batch=1, run_state=None):
    settings = ApiSettings(max_concurrent_single_api_req=single, max_concurrent_batch_api_req=batch)
    return BatchExecutor(settings, run_state or RunState())


class TestBatchExecutor(unittest.IsolatedAsyncioTestCase):
    async def test_sequential_chunks_with_batch_cap_of_one(self):
        op = Recorder()
        results = await make_executor(batch=1).execute(op, is_sequence_result, 2, [1, 2, 3, 4, 5])
        self.assertEqual([chunk for chunk, _ in op.calls], [[1, 2], [3, 4], [5]])
        self.assertEqual(op.max_in_flight, 1)
        self.assertEqual(len(results), 5)

    async def test_caps_are_independent(self):
        executor = make_executor(single=4, batch=2)

        single = Recorder()
        await executor.execute(single, None, 1, list(range(20)))
        self.assertEqual(single.max_in_flight, 4)

        batch = Recorder()
        await executor.execute(batch, None, 3, list(range(20)))
        self.assertEqual(batch.max_in_flight, 2)
        self.assertEqual(len(batch.calls), 7)

    async def test_results_follow_settle_order(self):
        delays = {"slow": 0.05, "fast": 0.0}

        async def op(chunk):
            await asyncio.sleep(delays[chunk[0]])
            return list(chunk)

        results = await make_executor(batch=2).execute(op, None, 1, ["slow", "fast"])
        self.assertEqual(results, ["fast", "slow"])

    async def test_failing_chunk_is_isolated(self):
        op = Recorder(fail_on=3)
        with self.assertLogs("gptoolkit", level="ERROR") as logs:
            results = await make_executor(batch=2).execute(op, is_sequence_result, 2, [1, 2, 3, 4, 5])
        self.assertEqual(sorted(results), ["done-1", "done-2", "done-5"])
        self.assertEqual(len(op.calls), 3)
        self.assertTrue(any("Api error" in line for line in logs.output))

    async def test_failed_success_check_keeps_results(self):
        op = Recorder(result=("not", "a", "list"))
        with self.assertLogs("gptoolkit", level="ERROR") as logs:
            results = await make_executor().execute(op, is_sequence_result, 1, [1, 2])
        self.assertEqual(len(results), 6)
        self.assertEqual(sum("Error executing action" in line for line in logs.output), 2)

    async def test_outcomes_record_failures(self):
        op = Recorder(fail_on=2)
        batch = await make_executor(single=3).run(op, 1, [1, 2, 3], success_check=is_sequence_result)
        self.assertFalse(batch.cancelled)
        self.assertEqual(len(batch.outcomes), 3)
        self.assertEqual(len(batch.failures), 1)
        failure = batch.failures[0]
        self.assertEqual(failure.chunk, [2])
        self.assertIsInstance(failure.error, RuntimeError)
        self.assertEqual(sorted(batch.items), ["done-1", "done-3"])

    async def test_trailing_args_are_passed_to_every_chunk(self):
        op = Recorder()
        await make_executor().execute(op, None, 1, ["a", "b"], True, "album")
        self.assertEqual([args for _, args in op.calls], [(True, "album"), (True, "album")])

    async def test_stopped_before_start(self):
        run_state = RunState()
        run_state.stop()
        op = Recorder()
        results = await make_executor(run_state=run_state).execute(op, None, 2, [1, 2, 3])
        self.assertIsNone(results)
        self.assertEqual(op.calls, [])

    async def test_stop_mid_run_drains_in_flight(self):
        run_state = RunState()
        finished = []

        async def op(chunk):
            if chunk == [2]:
                run_state.stop()
            await asyncio.sleep(0.02)
            finished.append(chunk[0])
            return list(chunk)

        results = await make_executor(single=2, run_state=run_state).execute(op, None, 1, [1, 2, 3, 4, 5])
        self.assertIsNone(results)
        self.assertEqual(sorted(finished), [1, 2])

    async def test_empty_items(self):
        op = Recorder()
        self.assertEqual(await make_executor().execute(op, None, 5, []), [])
        self.assertEqual(op.calls, [])

    async def test_chunk_size_must_be_positive(self):
        with self.assertRaises(ValueError):
            await make_executor().execute(Recorder(), None, 0, [1])


if __name__ == "__main__":
    unittest.main()
