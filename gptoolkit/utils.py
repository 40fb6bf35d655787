import logging
from collections.abc import Mapping
from typing import Any, Iterator, Sequence, TypeVar

from rich.logging import RichHandler

T = TypeVar("T")

logger = logging.getLogger("gptoolkit")


def create_logger(log_level: str) -> logging.Logger:
    """Create rich logger"""
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    logger.setLevel(log_level)
    return logger


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Split items into contiguous chunks of at most `size` elements."""
    if size < 1:
        raise ValueError(f"Chunk size must be a positive integer, got {size!r}")
    for i in range(0, len(items), size):
        yield list(items[i : i + size])


def dig(data: Any, *path: int | str) -> Any:
    """
    Follow `path` into nested lists and mappings.

    Integer steps index lists (negative indices count from the end), other
    steps look up mapping keys. Any miss, out of range index or step into a
    scalar yields None instead of raising.
    """
    current = data
    for step in path:
        if isinstance(current, (list, tuple)):
            if not isinstance(step, int) or isinstance(step, bool):
                return None
            if not -len(current) <= step < len(current):
                return None
            current = current[step]
        elif isinstance(current, Mapping):
            current = current.get(step)
        else:
            return None
        if current is None:
            return None
    return current


def ext_lookup(ext_map: Any, tag: int) -> Any:
    """Find the value stored under the integer extension tag in `ext_map`.

    JSON object keys come in as strings, so keys are compared by integer value.
    """
    if not isinstance(ext_map, Mapping):
        return None
    for key, value in ext_map.items():
        if isinstance(key, bool):
            continue
        if isinstance(key, int) and key == tag:
            return value
        if isinstance(key, str) and key.isascii() and key.isdigit() and int(key) == tag:
            return value
    return None


def to_int(value: Any) -> int | None:
    """Integer parse of a numeric string or number, None if it doesn't parse."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None
