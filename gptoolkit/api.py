import asyncio
import json
import re
from typing import Any, Sequence

import httpx
from httpx import Response

from .exceptions import AuthError, ResponseFormatError
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
from .parser import parse
from .rpc_ids import RpcId
from .utils import dig, logger

DEFAULT_TIMEOUT = 60
RETRIES = 5
RETRY_DELAY = 1
BASE_URL = "https://photos.google.com"

_WIZ_FIELDS = {"at": "SNlM0e", "sid": "FdrFJe", "bl": "cfb2h"}


class Api:
    def __init__(
        self,
        cookies: str,
        proxy: str = "",
        language: str = "en",
        timeout: int = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the Google Photos web api.

        Args:
            cookies: `Cookie` header value of a signed in photos.google.com session.
            proxy: Proxy url `protocol://username:password@ip:port`.
            language: Value for the `hl` query parameter.
            timeout: Requests timeout, seconds.
            transport: Optional httpx transport, used by tests.
        """
        self.cookies = cookies
        self.proxy = proxy
        self.language = language
        self.timeout = timeout
        self.user_agent = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/129.0.0.0 Safari/537.36"
        self.at: str | None = None
        self.sid: str | None = None
        self.bl: str | None = None
        self.req_id = 100000
        self.lock = asyncio.Lock()
        self.httpclient = httpx.AsyncClient(
            base_url=BASE_URL,
            headers={"Cookie": cookies, "User-Agent": self.user_agent},
            proxy=proxy or None,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "Api":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.httpclient.aclose()

    async def init_session(self, force: bool = False) -> None:
        """
        Scrape the session tokens batchexecute requests need from the landing page.

        Raises:
            AuthError: If the page carries no `at` token, i.e. the cookies aren't signed in.
            httpx.HTTPStatusError: If the page request fails.
        """
        async with self.lock:
            if self.at and not force:
                return
            response = await self.httpclient.get("/", follow_redirects=True)
            response.raise_for_status()
            tokens = {}
            for attr, key in _WIZ_FIELDS.items():
                match = re.search(rf'"{key}":"([^"]*)"', response.text)
                tokens[attr] = match.group(1) if match else None
            if not tokens["at"]:
                raise AuthError("No session token on photos.google.com, check the cookies")
            self.at, self.sid, self.bl = tokens["at"], tokens["sid"], tokens["bl"]

    async def _request(self, method: str, url: str, **kwargs) -> Response:
        """
        Makes an http request.
        Retries on 500 and 503 (up to RETRIES times), refreshes the session once on 401/403.
        Returns other response codes immediately.
        """
        retry = 0
        refreshed = False
        while True:
            response = await getattr(self.httpclient, method)(url, **kwargs)

            if response.status_code in {401, 403} and not refreshed:
                logger.warning(f"Session rejected ({response.status_code}), refreshing")
                await self.init_session(force=True)
                kwargs["data"] = self._with_token(kwargs.get("data"))
                refreshed = True
                continue
            if response.status_code in {500, 503} and retry < RETRIES:
                retry += 1
                await asyncio.sleep(RETRY_DELAY)
                continue
            return response

    def _with_token(self, data: dict | None) -> dict | None:
        if data is None or "at" not in data:
            return data
        return {**data, "at": self.at}

    async def make_api_request(self, rpc_id: RpcId, request_data: Any) -> Any:
        """
        Send a single rpc through the batchexecute endpoint.

        Args:
            rpc_id: Rpc to call.
            request_data: Positional request payload, serialized to JSON.

        Returns:
            Any: The rpc's parsed JSON payload.

        Raises:
            httpx.HTTPStatusError: If the api request fails.
            ResponseFormatError: If the response has no payload for the rpc.
        """
        if not self.at:
            await self.init_session()

        self.req_id += 1
        params = {
            "rpcids": str(rpc_id),
            "source-path": "/",
            "f.sid": self.sid or "",
            "bl": self.bl or "",
            "hl": self.language,
            "pageId": "none",
            "_reqid": str(self.req_id),
            "rt": "c",
        }
        envelope = [[[str(rpc_id), json.dumps(request_data), None, "generic"]]]
        data = {"f.req": json.dumps(envelope), "at": self.at}

        response = await self._request(
            "post",
            "/_/PhotosUi/data/batchexecute",
            params=params,
            data=data,
            headers={"Content-Type": "application/x-www-form-urlencoded;charset=UTF-8"},
        )
        response.raise_for_status()
        return self._decode_batchexecute(response.text, rpc_id)

    @staticmethod
    def _decode_batchexecute(body: str, rpc_id: RpcId) -> Any:
        for line in body.splitlines():
            if "wrb.fr" not in line:
                continue
            try:
                envelope = json.loads(line)
                payload = envelope[0][2]
            except (ValueError, IndexError, TypeError) as e:
                raise ResponseFormatError(f"Malformed {rpc_id} response") from e
            return json.loads(payload) if payload else None
        raise ResponseFormatError(f"No payload in {rpc_id} response")

    async def get_items_by_taken_date(
        self, timestamp: int | None = None, page_id: str | None = None, page_size: int = 500
    ) -> TimelinePage | None:
        """Library timeline page, newest first, starting at `timestamp` if given."""
        request_data = [page_id, timestamp, page_size, None, 1, 1]
        response = await self.make_api_request(RpcId.LIBRARY_TIMELINE, request_data)
        return parse(response, RpcId.LIBRARY_TIMELINE)

    async def get_library_page(self, page_id: str | None = None) -> TimelinePage | None:
        return await self.get_items_by_taken_date(page_id=page_id)

    async def search(self, search_query: str, page_id: str | None = None) -> Page[MediaItem] | None:
        request_data = [search_query, None, page_id]
        response = await self.make_api_request(RpcId.LIBRARY_GENERIC, request_data)
        return parse(response, RpcId.LIBRARY_GENERIC)

    async def get_favorite_items(self, page_id: str | None = None) -> Page[MediaItem] | None:
        request_data = ["Favorites", [3], page_id]
        response = await self.make_api_request(RpcId.LIBRARY_GENERIC, request_data)
        return parse(response, RpcId.LIBRARY_GENERIC)

    async def get_trash_items(self, page_id: str | None = None) -> Page[TrashItem] | None:
        request_data = [page_id]
        response = await self.make_api_request(RpcId.TRASH, request_data)
        return parse(response, RpcId.TRASH)

    async def get_locked_folder_items(self, page_id: str | None = None) -> Page[LockedFolderItem] | None:
        request_data = [page_id]
        response = await self.make_api_request(RpcId.LOCKED_FOLDER, request_data)
        return parse(response, RpcId.LOCKED_FOLDER)

    async def get_albums(self, page_id: str | None = None, page_size: int = 100) -> Page[Album] | None:
        request_data = [page_id, None, None, None, 1, None, None, page_size, [2], 5]
        response = await self.make_api_request(RpcId.ALBUMS, request_data)
        return parse(response, RpcId.ALBUMS)

    async def get_shared_links(self, page_id: str | None = None) -> Page[SharedLink] | None:
        request_data = [page_id, None, 2, None, 3]
        response = await self.make_api_request(RpcId.SHARED_LINKS, request_data)
        return parse(response, RpcId.SHARED_LINKS)

    async def get_album_page(self, album_media_key: str, page_id: str | None = None) -> Page[AlbumItem] | None:
        """Album or shared link contents. `album_media_key` accepts a shared link id too."""
        request_data = [album_media_key, page_id, None, None]
        response = await self.make_api_request(RpcId.ALBUM_ITEMS, request_data)
        return parse(response, RpcId.ALBUM_ITEMS)

    async def get_item_info(self, media_key: str) -> ItemInfo | None:
        request_data = [media_key, None, None]
        response = await self.make_api_request(RpcId.ITEM_INFO, request_data)
        return parse(response, RpcId.ITEM_INFO)

    async def get_item_info_ext(self, media_key: str) -> ItemInfoExt | None:
        """Extended item info, the only endpoint that reports the 'Other' description separately."""
        request_data = [media_key, 1, None, None, 1]
        response = await self.make_api_request(RpcId.ITEM_INFO_EXT, request_data)
        return parse(response, RpcId.ITEM_INFO_EXT)

    async def get_batch_media_info(self, media_keys: Sequence[str]) -> list[MediaInfoExt]:
        """
        Get media info for multiple items.

        Args:
            media_keys: Media keys of the target items.

        Returns:
            list[MediaInfoExt]: One entry per item found.
        """
        fields = [None, None, None, None, None, None, None, None, None, None, [], None, None, None, None, None, None, None, None, None, None, []]
        request_data = [[[[key] for key in media_keys]], [fields]]
        response = await self.make_api_request(RpcId.BULK_MEDIA_INFO, request_data)
        return parse(dig(response, 0), RpcId.BULK_MEDIA_INFO) or []

    async def move_items_to_trash(self, dedup_keys: Sequence[str]) -> list:
        """
        Move remote media items to the trash using deduplication keys.

        Args:
            dedup_keys: Deduplication keys for the media items to be trashed.

        Returns:
            list: Api response.

        Raises:
            httpx.HTTPStatusError: If the api request fails.
        """
        request_data = [None, 1, list(dedup_keys), 3]
        return await self.make_api_request(RpcId.MODIFY_TRASH, request_data)

    async def restore_from_trash(self, dedup_keys: Sequence[str]) -> list:
        """Restore items from trash.

        Args:
            dedup_keys: Sequence of target items' dedup keys.
        """
        request_data = [None, 3, list(dedup_keys), 2]
        return await self.make_api_request(RpcId.MODIFY_TRASH, request_data)

    async def set_archive(self, dedup_keys: Sequence[str], is_archived: bool) -> list:
        """Sets or removes the archived status for multiple items.

        Args:
            dedup_keys: Sequence of target items' dedup keys.
            is_archived: Whether to archive (True) or unarchive (False).
        """
        action_map = {True: 1, False: 2}
        request_data = [[[None, [action_map[is_archived]], [None, key]] for key in dedup_keys], None, 1]
        return await self.make_api_request(RpcId.SET_ARCHIVE, request_data)

    async def set_favorite(self, dedup_keys: Sequence[str], is_favorite: bool) -> list:
        """Sets or removes the favorite status for multiple items.

        Args:
            dedup_keys: Sequence of target items' dedup keys.
            is_favorite: Whether to mark the items as favorite (True) or remove favorite status (False).
        """
        action_map = {True: 1, False: 2}
        request_data = [[[None, key] for key in dedup_keys], [action_map[is_favorite]]]
        return await self.make_api_request(RpcId.SET_FAVORITE, request_data)

    async def move_to_locked_folder(self, dedup_keys: Sequence[str]) -> list:
        request_data = [list(dedup_keys), []]
        return await self.make_api_request(RpcId.MOVE_TO_LOCKED_FOLDER, request_data)

    async def remove_from_locked_folder(self, dedup_keys: Sequence[str]) -> list:
        request_data = [list(dedup_keys)]
        return await self.make_api_request(RpcId.REMOVE_FROM_LOCKED_FOLDER, request_data)

    async def create_album(self, album_name: str) -> str | None:
        """Create an empty album.

        Args:
            album_name: Album name.

        Returns:
            str: Album media key.
        """
        request_data = [album_name, None, 2]
        response = await self.make_api_request(RpcId.CREATE_ALBUM, request_data)
        return dig(response, 0, 0)

    async def add_items_to_album(self, media_keys: Sequence[str], album_media_key: str) -> list:
        """Add media to an album.

        Args:
            media_keys: Media keys of the media items to be added to album.
            album_media_key: Target album media key.
        """
        request_data = [list(media_keys), None, album_media_key]
        return await self.make_api_request(RpcId.ADD_TO_ALBUM, request_data)

    async def add_items_to_shared_album(self, media_keys: Sequence[str], album_media_key: str) -> list:
        request_data = [album_media_key, [2, None, [[[key]] for key in media_keys]]]
        return await self.make_api_request(RpcId.ADD_TO_SHARED_ALBUM, request_data)

    async def set_item_description(self, dedup_key: str, description: str) -> list:
        """Set item's description

        Args:
            dedup_key: Target item's dedup key.
            description: New description.
        """
        request_data = [None, description, dedup_key]
        return await self.make_api_request(RpcId.SET_DESCRIPTION, request_data)
