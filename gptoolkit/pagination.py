from typing import Any, Awaitable, Callable

from .models import Page
from .run_state import RunState
from .utils import logger


async def collect_all(
    run_state: RunState,
    fetch_page: Callable[..., Awaitable[Page | None]],
    *fetch_args: Any,
) -> list | None:
    """
    Drain a paginated endpoint into a single list.

    `fetch_page` is called as `fetch_page(*fetch_args, page_id)` starting with
    `page_id=None` and continuing with each page's `next_page_id` until a page
    comes back without one. Pages with no items but a cursor keep the loop going.

    Args:
        run_state: Polled before every fetch.
        fetch_page: Coroutine function returning a decoded page.
        *fetch_args: Leading arguments for `fetch_page`.

    Returns:
        list | None: Items of all pages in fetch order, or None if the run was stopped.
    """
    items = []
    next_page_id: str | None = None
    while True:
        if not run_state.is_running:
            return None

        page = await fetch_page(*fetch_args, next_page_id)
        if page is None:
            break

        if page.items:
            logger.info(f"Found {len(page.items)} items")
            items.extend(page.items)

        next_page_id = page.next_page_id
        if not next_page_id:
            break
    return items
