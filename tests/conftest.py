import html
import json
from dataclasses import dataclass, field
from typing import Any

import pytest
import requests

from nicostream import NicoClient, PlaybackResolver

VIDEO_ID = "sm9"
API_URL = "https://www.nicovideo.jp/api/watch/v3_guest/sm9"
PAGE_URL = "https://www.nicovideo.jp/watch/sm9"
ACCESS_RIGHTS_URL = "https://nvapi.nicovideo.jp/v1/watch/sm9/access-rights/hls"
CONTENT_URL = "https://cdn/video.m3u8"

MASTER_PLAYLIST = '#EXT-X-MEDIA:TYPE=AUDIO,URI="https://x/audio.m3u8"\n#EXT-X-MEDIA:TYPE=VIDEO,URI="https://x/video.m3u8"'


def watch_data(track_id: str | None = "watch-track-1", key: str | None = "key-123", audios: list[str] | None = None) -> dict[str, Any]:
    return {
        "client": {"watchTrackId": track_id},
        "media": {
            "domand": {
                "accessRightKey": key,
                "audios": [{"id": a} for a in (audios if audios is not None else ["audio-aac-192kbps", "audio-aac-64kbps"])],
            }
        },
        "video": {"id": VIDEO_ID, "title": "Test Video", "duration": 319},
    }


def watch_page(data: dict[str, Any]) -> str:
    escaped = html.escape(json.dumps(data), quote=True)
    return f'<html><body><div id="js-initial-watch-data" data-api-data="{escaped}" data-environment="{{}}"></div></body></html>'


@dataclass
class MockResponse:
    status_code: int = 200
    text: str = ""
    close_count: int = 0

    @classmethod
    def from_json(cls, payload: Any, status_code: int = 200) -> "MockResponse":
        return cls(status_code=status_code, text=json.dumps(payload))

    def close(self) -> None:
        self.close_count += 1

    def __enter__(self) -> "MockResponse":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass
class FakeSession:
    """Session double answering from a table of (method, url) routes."""

    routes: dict[tuple[str, str], MockResponse | Exception] = field(default_factory=dict)
    calls: list[dict[str, Any]] = field(default_factory=list)
    responses: list[MockResponse] = field(default_factory=list)
    proxies: dict[str, str] = field(default_factory=dict)
    closed: bool = False

    def add(self, method: str, url: str, response: MockResponse | Exception) -> None:
        self.routes[(method, url)] = response

    def _send(self, method: str, url: str, **kwargs: Any) -> MockResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        route = self.routes.get((method, url))
        if route is None:
            raise AssertionError(f"Unexpected URL requested: {method.upper()} {url}")
        if isinstance(route, Exception):
            raise route
        self.responses.append(route)
        return route

    def get(self, url: str, **kwargs: Any) -> MockResponse:
        return self._send("get", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> MockResponse:
        return self._send("post", url, **kwargs)

    def close(self) -> None:
        self.closed = True

    def urls(self) -> list[str]:
        return [call["url"] for call in self.calls]


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def client(fake_session: FakeSession) -> NicoClient:
    return NicoClient(session=fake_session)  # type: ignore[arg-type]


@pytest.fixture()
def resolver(client: NicoClient) -> PlaybackResolver:
    return PlaybackResolver(client)


@pytest.fixture()
def happy_session(fake_session: FakeSession) -> FakeSession:
    """Session where every endpoint answers successfully through the API."""
    fake_session.add("get", API_URL, MockResponse.from_json({"meta": {"status": 200}, "data": watch_data()}))
    fake_session.add("post", ACCESS_RIGHTS_URL, MockResponse.from_json({"data": {"contentUrl": CONTENT_URL}}))
    fake_session.add("get", CONTENT_URL, MockResponse(text=MASTER_PLAYLIST))
    return fake_session


@pytest.fixture()
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")
