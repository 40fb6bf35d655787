from typing import Any, Awaitable, Callable, Sequence

from .api import Api
from .executor import BatchExecutor, is_sequence_result
from .models import Album, AlbumItem, LockedFolderItem, MediaInfoExt, MediaItem, Page, SharedLink, TrashItem
from .pagination import collect_all
from .run_state import RunState
from .settings import ApiSettings
from .utils import logger

# U+200B is not whitespace, so the service keeps a description that only
# differs from the 'Other' field by this trailing character.
ZERO_WIDTH_SPACE = "\u200b"


class Client:
    """Bulk operations on top of the Google Photos web api."""

    def __init__(
        self,
        api: Api,
        settings: ApiSettings | None = None,
        run_state: RunState | None = None,
    ) -> None:
        self.api = api
        self.settings = settings or ApiSettings()
        self.run_state = run_state or RunState()
        self.executor = BatchExecutor(self.settings, self.run_state)

    async def get_all_items(self, fetch_page: Callable[..., Awaitable[Page | None]], *args: Any) -> list | None:
        return await collect_all(self.run_state, fetch_page, *args)

    async def get_all_library_items(self) -> list[MediaItem] | None:
        return await self.get_all_items(self.api.get_library_page)

    async def get_all_albums(self) -> list[Album] | None:
        return await self.get_all_items(self.api.get_albums)

    async def get_all_shared_links(self) -> list[SharedLink] | None:
        return await self.get_all_items(self.api.get_shared_links)

    async def get_all_media_in_shared_link(self, shared_link_id: str) -> list[AlbumItem] | None:
        return await self.get_all_items(self.api.get_album_page, shared_link_id)

    async def get_all_media_in_album(self, album_media_key: str) -> list[AlbumItem] | None:
        return await self.get_all_items(self.api.get_album_page, album_media_key)

    async def get_all_trash_items(self) -> list[TrashItem] | None:
        return await self.get_all_items(self.api.get_trash_items)

    async def get_all_favorite_items(self) -> list[MediaItem] | None:
        return await self.get_all_items(self.api.get_favorite_items)

    async def get_all_search_items(self, search_query: str) -> list[MediaItem] | None:
        return await self.get_all_items(self.api.search, search_query)

    async def get_all_locked_folder_items(self) -> list[LockedFolderItem] | None:
        return await self.get_all_items(self.api.get_locked_folder_items)

    async def move_to_locked_folder(self, media_items: Sequence) -> list | None:
        logger.info(f"Moving {len(media_items)} items to locked folder")
        dedup_keys = [item.dedup_key for item in media_items]
        return await self.executor.execute(
            self.api.move_to_locked_folder,
            is_sequence_result,
            self.settings.locked_folder_op_size,
            dedup_keys,
        )

    async def remove_from_locked_folder(self, media_items: Sequence) -> list | None:
        logger.info(f"Moving {len(media_items)} items out of locked folder")
        dedup_keys = [item.dedup_key for item in media_items]
        return await self.executor.execute(
            self.api.remove_from_locked_folder,
            is_sequence_result,
            self.settings.locked_folder_op_size,
            dedup_keys,
        )

    async def move_to_trash(self, media_items: Sequence) -> list | None:
        """
        Move media items to trash.

        Args:
            media_items: Items exposing `dedup_key`.

        Returns:
            list | None: Combined api results, None if stopped.
        """
        logger.info(f"Moving {len(media_items)} items to trash")
        dedup_keys = [item.dedup_key for item in media_items]
        return await self.executor.execute(
            self.api.move_items_to_trash,
            is_sequence_result,
            self.settings.operation_size,
            dedup_keys,
        )

    async def restore_from_trash(self, trash_items: Sequence) -> list | None:
        logger.info(f"Restoring {len(trash_items)} items from trash")
        dedup_keys = [item.dedup_key for item in trash_items]
        return await self.executor.execute(
            self.api.restore_from_trash,
            is_sequence_result,
            self.settings.operation_size,
            dedup_keys,
        )

    async def _set_flag(
        self, operation, media_items: Sequence, attr: str, value: bool, message: str, nothing_to_do: str
    ) -> list | None:
        logger.info(message.format(count=len(media_items)))
        # items with an unknown state are sent as well
        targets = [item for item in media_items if getattr(item, attr, None) is not value]
        if not targets:
            logger.info(nothing_to_do)
            return []
        dedup_keys = [item.dedup_key for item in targets]
        return await self.executor.execute(
            operation,
            is_sequence_result,
            self.settings.operation_size,
            dedup_keys,
            value,
        )

    async def send_to_archive(self, media_items: Sequence) -> list | None:
        return await self._set_flag(
            self.api.set_archive,
            media_items,
            "is_archived",
            True,
            "Sending {count} items to archive",
            "All target items are already archived!",
        )

    async def unarchive(self, media_items: Sequence) -> list | None:
        return await self._set_flag(
            self.api.set_archive,
            media_items,
            "is_archived",
            False,
            "Removing {count} items from archive",
            "All target items are not archived!",
        )

    async def set_as_favorite(self, media_items: Sequence) -> list | None:
        return await self._set_flag(
            self.api.set_favorite,
            media_items,
            "is_favorite",
            True,
            "Setting {count} items as favorite",
            "All target items are already favorite!",
        )

    async def unfavorite(self, media_items: Sequence) -> list | None:
        return await self._set_flag(
            self.api.set_favorite,
            media_items,
            "is_favorite",
            False,
            "Removing {count} items from favorites",
            "All target items are not favorite!",
        )

    async def add_to_existing_album(self, media_items: Sequence, target_album: Album) -> list | None:
        """
        Add media items to an album. Shared albums go through their own endpoint.

        Args:
            media_items: Items exposing `media_key`.
            target_album: Destination album.
        """
        logger.info(f'Adding {len(media_items)} items to album "{target_album.name}"')
        media_keys = [item.media_key for item in media_items]
        add_items = self.api.add_items_to_shared_album if target_album.is_shared else self.api.add_items_to_album
        return await self.executor.execute(
            add_items,
            is_sequence_result,
            self.settings.operation_size,
            media_keys,
            target_album.media_key,
        )

    async def add_to_new_album(self, media_items: Sequence, target_album_name: str) -> list | None:
        logger.info(f'Creating new album "{target_album_name}"')
        album_media_key = await self.api.create_album(target_album_name)
        album = Album(product_id=album_media_key, name=target_album_name, is_shared=False)
        return await self.add_to_existing_album(media_items, album)

    async def get_batch_media_info_chunked(self, media_items: Sequence) -> list[MediaInfoExt] | None:
        logger.info("Getting items' media info")
        media_keys = [item.media_key for item in media_items]
        return await self.executor.execute(
            self.api.get_batch_media_info,
            None,
            self.settings.info_size,
            media_keys,
        )

    async def set_one_description_to_other(self, media_items: Sequence) -> list[bool]:
        """
        Copy the 'Other' field of a single item into its empty description.

        Args:
            media_items: One element chunk.

        Returns:
            list[bool]: `[True]` if a description was written, `[False]` otherwise.
        """
        item = media_items[0]
        try:
            info = await self.api.get_item_info_ext(item.media_key)
            if info is not None and not info.description_full and info.other:
                await self.api.set_item_description(item.dedup_key, info.other + ZERO_WIDTH_SPACE)
                return [True]
            return [False]
        except Exception:
            logger.debug(f"Error setting description of {item.media_key}")
            raise

    async def set_description_to_other(self, media_items: Sequence) -> list[bool] | None:
        # Bulk media info can't be used here: its description is non-empty
        # when either the description or the 'Other' field is set.
        logger.info(f"Setting up to {len(media_items)} empty descriptions from 'Other' field")
        results = await self.executor.execute(self.set_one_description_to_other, None, 1, media_items)
        if results is None:
            return None
        logger.info(f"Set {sum(1 for result in results if result)} descriptions from 'Other' field")
        return results
