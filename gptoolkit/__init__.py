from .api import Api
from .client import Client
from .executor import BatchExecutor, BatchResult, ChunkOutcome
from .pagination import collect_all
from .parser import parse
from .run_state import RunState
from .settings import ApiSettings

__all__ = (
    "Api",
    "ApiSettings",
    "BatchExecutor",
    "BatchResult",
    "ChunkOutcome",
    "Client",
    "RunState",
    "collect_all",
    "parse",
)
