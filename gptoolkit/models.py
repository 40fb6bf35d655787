from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class MediaItem:
    product_id: str | None
    media_id: str | None
    timestamp: int | None = None
    creation_timestamp: int | None = None
    thumb: str | None = None
    res_width: int | None = None
    res_height: int | None = None
    is_archived: bool | None = None
    is_favorite: Any = None
    duration: int | None = None
    description_short: str | None = None
    is_live_photo: bool = False
    live_photo_duration: int | None = None
    is_owned: bool = False

    @property
    def media_key(self) -> str | None:
        return self.product_id

    @property
    def dedup_key(self) -> str | None:
        return self.media_id


@dataclass(slots=True)
class LockedFolderItem:
    product_id: str | None
    media_id: str | None
    timestamp: int | None = None
    creation_timestamp: int | None = None
    duration: int | None = None

    @property
    def media_key(self) -> str | None:
        return self.product_id

    @property
    def dedup_key(self) -> str | None:
        return self.media_id


@dataclass(slots=True)
class AlbumItem:
    product_id: str | None
    media_id: str | None
    timestamp: int | None = None
    creation_timestamp: int | None = None
    thumb: str | None = None
    res_width: int | None = None
    res_height: int | None = None
    duration: int | None = None
    is_live_photo: bool = False
    live_photo_duration: int | None = None

    @property
    def media_key(self) -> str | None:
        return self.product_id

    @property
    def dedup_key(self) -> str | None:
        return self.media_id


@dataclass(slots=True)
class TrashItem:
    product_id: str | None
    media_id: str | None
    timestamp: int | None = None
    creation_timestamp: int | None = None
    thumb: str | None = None
    res_width: int | None = None
    res_height: int | None = None
    duration: int | None = None

    @property
    def media_key(self) -> str | None:
        return self.product_id

    @property
    def dedup_key(self) -> str | None:
        return self.media_id


@dataclass(slots=True)
class Album:
    product_id: str | None
    album_id: str | None = None
    name: str | None = None
    item_count: int | None = None
    is_shared: bool = False

    @property
    def media_key(self) -> str | None:
        return self.product_id


@dataclass(slots=True)
class SharedLink:
    product_id: str | None
    link_id: str | None = None
    item_count: int | None = None

    @property
    def media_key(self) -> str | None:
        return self.product_id


@dataclass(slots=True)
class MediaInfoExt:
    """Bulk media info entry. Space flags are None when the service omits them."""

    product_id: str | None
    description_full: str | None = None
    file_name: str | None = None
    timestamp: int | None = None
    creation_timestamp: int | None = None
    size: int | None = None
    takes_up_space: bool | None = None
    space_taken: int | None = None
    is_original_quality: bool | None = None

    @property
    def media_key(self) -> str | None:
        return self.product_id


@dataclass(slots=True)
class ItemInfo:
    item: MediaItem
    download_url: str | None = None

    @property
    def media_key(self) -> str | None:
        return self.item.product_id

    @property
    def dedup_key(self) -> str | None:
        return self.item.media_id


@dataclass(slots=True)
class ItemInfoExt:
    """Extended single item info.

    ``description_full`` is the user set description only; ``other`` is the
    description carried over from the file's metadata. The bulk info endpoint
    merges the two, this one keeps them apart.
    """

    product_id: str | None
    dedup_key: str | None = None
    description_full: str | None = None
    file_name: str | None = None
    timestamp: int | None = None
    creation_timestamp: int | None = None
    size: int | None = None
    takes_up_space: bool | None = None
    space_taken: int | None = None
    is_original_quality: bool | None = None
    other: str | None = None

    @property
    def media_key(self) -> str | None:
        return self.product_id


@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    next_page_id: str | None = None


@dataclass(slots=True)
class TimelinePage(Page[MediaItem]):
    last_item_timestamp: int | None = None
