from typing import Any, Callable

from .exceptions import UnsupportedRpcId
from .models import (
    Album,
    AlbumItem,
    ItemInfo,
    ItemInfoExt,
    LockedFolderItem,
    MediaInfoExt,
    MediaItem,
    Page,
    SharedLink,
    TimelinePage,
    TrashItem,
)
from .rpc_ids import (
    ALBUM_METADATA_TAG,
    DESCRIPTION_SHORT_TAG,
    DURATION_TAG,
    FAVORITE_TAG,
    LIVE_PHOTO_TAG,
    NOT_OWNED_MARKER,
    RpcId,
)
from .utils import dig, ext_lookup, to_int


def _ext(d: Any, tag: int, index: int) -> Any:
    """Value at `index` under `tag` in the item's trailing extension map."""
    return dig(ext_lookup(dig(d, -1), tag), index)


def _has_ext(d: Any, tag: int) -> bool:
    return ext_lookup(dig(d, -1), tag) is not None


def _is_owned(d: Any) -> bool:
    markers = dig(d, 7)
    if not isinstance(markers, list):
        return False
    return not any(
        isinstance(entry, list) and NOT_OWNED_MARKER in entry for entry in markers
    )


def _tri_state(value: Any, truthy: int) -> bool | None:
    return None if value is None else value == truthy


def _map_items(items: Any, parse_item: Callable[[Any], Any]) -> list:
    if not isinstance(items, list):
        return []
    return [parse_item(d) for d in items]


def _parse_library_item(d: Any) -> MediaItem:
    """Parse a single library item from the raw data."""
    return MediaItem(
        product_id=dig(d, 0),
        media_id=dig(d, 3),
        timestamp=dig(d, 2),
        creation_timestamp=dig(d, 5),
        thumb=dig(d, 1, 0),
        res_width=dig(d, 1, 1),
        res_height=dig(d, 1, 2),
        is_archived=dig(d, 13),
        is_favorite=_ext(d, FAVORITE_TAG, 0),
        duration=_ext(d, DURATION_TAG, 0),
        description_short=_ext(d, DESCRIPTION_SHORT_TAG, 0),
        is_live_photo=_has_ext(d, LIVE_PHOTO_TAG),
        live_photo_duration=_ext(d, LIVE_PHOTO_TAG, 1),
        is_owned=_is_owned(d),
    )


def _parse_locked_folder_item(d: Any) -> LockedFolderItem:
    return LockedFolderItem(
        product_id=dig(d, 0),
        media_id=dig(d, 3),
        timestamp=dig(d, 2),
        creation_timestamp=dig(d, 5),
        duration=_ext(d, DURATION_TAG, 0),
    )


def _parse_shared_link(d: Any) -> SharedLink:
    return SharedLink(
        product_id=dig(d, 6),
        link_id=dig(d, 17),
        item_count=dig(d, 3),
    )


def _parse_album(d: Any) -> Album:
    return Album(
        product_id=dig(d, 0),
        album_id=dig(d, 6, 0),
        name=_ext(d, ALBUM_METADATA_TAG, 1),
        item_count=_ext(d, ALBUM_METADATA_TAG, 3),
        is_shared=_ext(d, ALBUM_METADATA_TAG, 4) or False,
    )


def _parse_album_item(d: Any) -> AlbumItem:
    return AlbumItem(
        product_id=dig(d, 0),
        media_id=dig(d, 3),
        timestamp=dig(d, 2),
        creation_timestamp=dig(d, 5),
        thumb=dig(d, 1, 0),
        res_width=dig(d, 1, 1),
        res_height=dig(d, 1, 2),
        duration=_ext(d, DURATION_TAG, 0),
        is_live_photo=_has_ext(d, LIVE_PHOTO_TAG),
        live_photo_duration=_ext(d, LIVE_PHOTO_TAG, 1),
    )


def _parse_trash_item(d: Any) -> TrashItem:
    return TrashItem(
        product_id=dig(d, 0),
        media_id=dig(d, 3),
        timestamp=dig(d, 2),
        creation_timestamp=dig(d, 5),
        thumb=dig(d, 1, 0),
        res_width=dig(d, 1, 1),
        res_height=dig(d, 1, 2),
        duration=_ext(d, DURATION_TAG, 0),
    )


def _parse_bulk_media_info_item(d: Any) -> MediaInfoExt:
    """Parse one entry of a bulk media info response.

    The space usage triple lives in the last element of ``d[1]``.
    """
    return MediaInfoExt(
        product_id=dig(d, 0),
        description_full=dig(d, 1, 2),
        file_name=dig(d, 1, 3),
        timestamp=dig(d, 1, 6),
        creation_timestamp=dig(d, 1, 8),
        size=dig(d, 1, 9),
        takes_up_space=_tri_state(dig(d, 1, -1, 0), 1),
        space_taken=dig(d, 1, -1, 1),
        is_original_quality=_tri_state(dig(d, 1, -1, 2), 2),
    )


def _timeline_page(data: list) -> TimelinePage:
    return TimelinePage(
        items=_map_items(dig(data, 0), _parse_library_item),
        next_page_id=dig(data, 1),
        last_item_timestamp=to_int(dig(data, 2)),
    )


def _library_generic_page(data: list) -> Page[MediaItem]:
    return Page(
        items=_map_items(dig(data, 0), _parse_library_item),
        next_page_id=dig(data, 1),
    )


def _locked_folder_page(data: list) -> Page[LockedFolderItem]:
    # cursor comes first on this endpoint
    return Page(
        items=_map_items(dig(data, 1), _parse_locked_folder_item),
        next_page_id=dig(data, 0),
    )


def _shared_links_page(data: list) -> Page[SharedLink]:
    return Page(
        items=_map_items(dig(data, 0), _parse_shared_link),
        next_page_id=dig(data, 1),
    )


def _albums_page(data: list) -> Page[Album]:
    return Page(
        items=_map_items(dig(data, 0), _parse_album),
        next_page_id=dig(data, 1),
    )


def _album_items_page(data: list) -> Page[AlbumItem]:
    return Page(
        items=_map_items(dig(data, 1), _parse_album_item),
        next_page_id=dig(data, 2),
    )


def _trash_page(data: list) -> Page[TrashItem]:
    return Page(
        items=_map_items(dig(data, 0), _parse_trash_item),
        next_page_id=dig(data, 1),
    )


def _item_info(data: list) -> ItemInfo:
    return ItemInfo(item=_parse_library_item(dig(data, 0)), download_url=dig(data, 1))


def _item_info_ext(data: list) -> ItemInfoExt:
    # Offsets unconfirmed against live responses; description backfill reads [0][1] and [0][31][0].
    return ItemInfoExt(
        product_id=dig(data, 0, 0),
        dedup_key=dig(data, 0, 11),
        description_full=dig(data, 0, 1),
        file_name=dig(data, 0, 2),
        timestamp=dig(data, 0, 3),
        creation_timestamp=dig(data, 0, 5),
        size=dig(data, 0, 6),
        takes_up_space=_tri_state(dig(data, 0, 30, 0), 1),
        space_taken=dig(data, 0, 30, 1),
        is_original_quality=_tri_state(dig(data, 0, 30, 2), 2),
        other=dig(data, 0, 31, 0),
    )


def _bulk_media_info(data: list) -> list[MediaInfoExt]:
    return _map_items(data, _parse_bulk_media_info_item)


_GRAMMARS: dict[RpcId, Callable[[list], Any]] = {
    RpcId.LIBRARY_TIMELINE: _timeline_page,
    RpcId.LOCKED_FOLDER: _locked_folder_page,
    RpcId.LIBRARY_GENERIC: _library_generic_page,
    RpcId.SHARED_LINKS: _shared_links_page,
    RpcId.ALBUMS: _albums_page,
    RpcId.ALBUM_ITEMS: _album_items_page,
    RpcId.TRASH: _trash_page,
    RpcId.ITEM_INFO: _item_info,
    RpcId.ITEM_INFO_EXT: _item_info_ext,
    RpcId.BULK_MEDIA_INFO: _bulk_media_info,
}


def parse(data: Any, rpc_id: RpcId | str) -> Any:
    """
    Decode a raw batchexecute payload into entities.

    Args:
        data: Parsed JSON payload of the rpc.
        rpc_id: Rpc id the payload was returned for.

    Returns:
        A page, a single entity or a list of entities depending on the rpc id.
        None if the payload is empty.

    Raises:
        UnsupportedRpcId: If there is no response grammar for the rpc id.
    """
    if not isinstance(data, list) or not data:
        return None

    try:
        grammar = _GRAMMARS[RpcId(rpc_id)]
    except (KeyError, ValueError):
        raise UnsupportedRpcId(rpc_id) from None
    return grammar(data)
