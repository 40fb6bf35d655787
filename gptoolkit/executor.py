import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Sequence

from .run_state import RunState
from .settings import ApiSettings
from .utils import chunked, logger

Operation = Callable[..., Awaitable[Any]]
SuccessCheck = Callable[[Any], bool]


def is_sequence_result(result: Any) -> bool:
    return isinstance(result, list)


def _operation_name(operation: Operation) -> str:
    return getattr(operation, "__name__", type(operation).__name__)


@dataclass(slots=True)
class ChunkOutcome:
    """Settled state of one chunk request."""

    chunk: list
    result: Any = None
    error: Exception | None = None
    check_passed: bool = True

    @property
    def ok(self) -> bool:
        return self.error is None and self.check_passed

    @property
    def items(self) -> list:
        if self.error is not None or not isinstance(self.result, (list, tuple)):
            return []
        return list(self.result)


@dataclass(slots=True)
class BatchResult:
    """Outcomes in settle order. `cancelled` is set when admission stopped early."""

    outcomes: list[ChunkOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def items(self) -> list:
        return [item for outcome in self.outcomes for item in outcome.items]

    @property
    def failures(self) -> list[ChunkOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]


class BatchExecutor:
    """Runs an operation over chunks of items with a cap on requests in flight.

    Single item requests (`chunk_size == 1`) and multi-item requests draw
    from separate caps.
    """

    def __init__(self, settings: ApiSettings, run_state: RunState) -> None:
        self.settings = settings
        self.run_state = run_state

    def concurrency_for(self, chunk_size: int) -> int:
        if chunk_size == 1:
            return self.settings.max_concurrent_single_api_req
        return self.settings.max_concurrent_batch_api_req

    async def run(
        self,
        operation: Operation,
        chunk_size: int,
        items: Sequence,
        *args: Any,
        success_check: SuccessCheck | None = None,
    ) -> BatchResult:
        """
        Call `operation(chunk, *args)` for every chunk of `items`.

        A chunk is admitted only once a slot frees up, whichever in-flight
        request settles first. The run state is checked before every
        admission; once it reports stopped no further chunk is issued, but
        chunks already in flight are awaited before returning.

        Args:
            operation: Coroutine function taking a chunk plus `args`.
            chunk_size: Maximum items per chunk.
            items: Items to split into chunks, order preserved within chunks.
            *args: Trailing arguments passed with every chunk.
            success_check: Predicate over a settled result; a False verdict is recorded, not raised.

        Returns:
            BatchResult: Per-chunk outcomes in the order they settled.

        Raises:
            ValueError: If chunk_size is smaller than 1.
        """
        batch = BatchResult()
        slots = asyncio.Semaphore(self.concurrency_for(chunk_size))
        in_flight: set[asyncio.Task] = set()

        async def run_chunk(chunk: list) -> None:
            try:
                result = await operation(chunk, *args)
                check_passed = success_check is None or bool(success_check(result))
            except Exception as e:
                batch.outcomes.append(ChunkOutcome(chunk=chunk, error=e))
            else:
                batch.outcomes.append(
                    ChunkOutcome(chunk=chunk, result=result, check_passed=check_passed)
                )
            finally:
                slots.release()

        try:
            for chunk in chunked(items, chunk_size):
                if not self.run_state.is_running:
                    batch.cancelled = True
                    break

                await slots.acquire()
                if not self.run_state.is_running:
                    slots.release()
                    batch.cancelled = True
                    break

                if chunk_size != 1:
                    logger.info(f"Processing {len(chunk)} items")

                task = asyncio.create_task(run_chunk(chunk))
                in_flight.add(task)
                task.add_done_callback(in_flight.discard)
        finally:
            if in_flight:
                await asyncio.gather(*in_flight)

        return batch

    async def execute(
        self,
        operation: Operation,
        success_check: SuccessCheck | None,
        chunk_size: int,
        items: Sequence,
        *args: Any,
    ) -> list | None:
        """
        Run `operation` over `items` and flatten the results.

        Failed chunks are logged and left out; they never stop the rest of
        the batch. Results are in settle order, not submission order.

        Returns:
            list | None: Combined results of the successful chunks, None if the run was stopped.
        """
        batch = await self.run(
            operation, chunk_size, items, *args, success_check=success_check
        )
        name = _operation_name(operation)
        for outcome in batch.failures:
            if outcome.error is not None:
                logger.error(f"{name} Api error {outcome.error!r}")
            else:
                logger.error(f"Error executing action {name}")

        if batch.cancelled:
            return None
        return batch.items
