"""
Tests for the batchexecute transport
"""

import json
import unittest
from unittest.mock import patch
from urllib.parse import parse_qs

import httpx

from gptoolkit.api import Api
from gptoolkit.exceptions import AuthError, ResponseFormatError
from gptoolkit.models import TimelinePage

LANDING_PAGE = 'window.WIZ_global_data = {"FdrFJe":"sid-1","SNlM0e":"%s","cfb2h":"bl-1"};'


def batchexecute_body(rpc_id, payload):
    line = json.dumps([["wrb.fr", rpc_id, json.dumps(payload), None, None, None, "generic"]])
    return f")]}}'\n\n{len(line)}\n{line}\n25\n[[\"e\",4,null,null,133]]\n"


class FakeService:
    """Stands in for photos.google.com behind an httpx.MockTransport."""

    def __init__(self, responses, tokens=("AT1",)):
        self.responses = list(responses)
        self.tokens = list(tokens)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            token = self.tokens.pop(0) if len(self.tokens) > 1 else self.tokens[0]
            return httpx.Response(200, text=LANDING_PAGE % token)
        self.requests.append(request)
        status, body = self.responses.pop(0)
        return httpx.Response(status, text=body)

    def form(self, index):
        return parse_qs(self.requests[index].content.decode())


class TestApi(unittest.IsolatedAsyncioTestCase):
    def make_api(self, service):
        return Api(cookies="SID=abc", transport=httpx.MockTransport(service))

    async def test_request_envelope_and_decode(self):
        payload = [[["k1", ["t", 1, 2], 10, "d1", None, 9, None, [], None, None, None, None, None, False, {}]], None, "11"]
        service = FakeService([(200, batchexecute_body("lcxiM", payload))])
        async with self.make_api(service) as api:
            page = await api.get_items_by_taken_date(page_id="cursor")

        self.assertIsInstance(page, TimelinePage)
        self.assertEqual(page.items[0].dedup_key, "d1")
        self.assertEqual(page.last_item_timestamp, 11)

        request = service.requests[0]
        self.assertEqual(request.url.path, "/_/PhotosUi/data/batchexecute")
        self.assertEqual(request.url.params["rpcids"], "lcxiM")
        self.assertEqual(request.url.params["f.sid"], "sid-1")
        self.assertEqual(request.url.params["bl"], "bl-1")
        form = service.form(0)
        self.assertEqual(form["at"], ["AT1"])
        envelope = json.loads(form["f.req"][0])
        self.assertEqual(envelope[0][0][0], "lcxiM")
        self.assertEqual(json.loads(envelope[0][0][1])[0], "cursor")

    async def test_action_returns_raw_result(self):
        service = FakeService([(200, batchexecute_body("XwAOJf", [[1], [2]]))])
        async with self.make_api(service) as api:
            result = await api.move_items_to_trash(["d1", "d2"])
        self.assertEqual(result, [[1], [2]])
        envelope = json.loads(service.form(0)["f.req"][0])
        self.assertEqual(json.loads(envelope[0][0][1]), [None, 1, ["d1", "d2"], 3])

    async def test_create_album_returns_media_key(self):
        service = FakeService([(200, batchexecute_body("OXvT9d", [["album-key"]]))])
        async with self.make_api(service) as api:
            self.assertEqual(await api.create_album("Trip"), "album-key")

    async def test_server_errors_are_retried(self):
        service = FakeService([(503, ""), (500, ""), (200, batchexecute_body("laUYf", []))])
        with patch("gptoolkit.api.RETRY_DELAY", 0):
            async with self.make_api(service) as api:
                self.assertEqual(await api.add_items_to_album(["k1"], "album"), [])
        self.assertEqual(len(service.requests), 3)

    async def test_rejected_session_is_refreshed(self):
        service = FakeService([(401, ""), (200, batchexecute_body("Ftfh0", []))], tokens=["AT1", "AT2"])
        async with self.make_api(service) as api:
            await api.set_favorite(["d1"], True)
        self.assertEqual(service.form(0)["at"], ["AT1"])
        self.assertEqual(service.form(1)["at"], ["AT2"])

    async def test_client_errors_raise(self):
        service = FakeService([(400, "bad")])
        async with self.make_api(service) as api:
            with self.assertRaises(httpx.HTTPStatusError):
                await api.restore_from_trash(["d1"])

    async def test_missing_payload(self):
        service = FakeService([(200, ")]}'\n\n[[\"e\",4]]\n")])
        async with self.make_api(service) as api:
            with self.assertRaises(ResponseFormatError):
                await api.get_trash_items()

    async def test_signed_out_cookies(self):
        service = FakeService([], tokens=[""])
        async with self.make_api(service) as api:
            with self.assertRaises(AuthError):
                await api.get_albums()


if __name__ == "__main__":
    unittest.main()
