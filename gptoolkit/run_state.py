import asyncio


class RunState:
    """Cooperative cancellation flag shared by the pagination and batch layers.

    Work already issued always runs to completion; the flag is only polled
    before the next page fetch or chunk admission.
    """

    def __init__(self) -> None:
        self._stopped = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return not self._stopped.is_set()

    def stop(self) -> None:
        self._stopped.set()
