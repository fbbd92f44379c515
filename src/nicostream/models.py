"""Data models for nicostream."""

import threading
from dataclasses import dataclass, field
from typing import Any


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> str | None:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return None
    return str(value) or None


@dataclass(frozen=True)
class VideoMetadata:
    """Snapshot of the watch data needed to request a stream."""

    video_id: str
    watch_track_id: str | None = None
    access_right_key: str | None = None
    audio_quality_ids: list[str] = field(default_factory=list)
    title: str | None = None
    duration: int | None = None

    @classmethod
    def from_watch_data(cls, video_id: str, data: dict[str, Any]) -> "VideoMetadata":
        """Build metadata from the ``data`` object of the watch API or page.

        Sections of an unexpected type are treated as missing.

        Args:
            video_id: The video identifier
            data: Watch data as returned by the API or embedded in the page

        Returns:
            Parsed metadata; fields the payload lacks are left empty

        """
        client = _section(data, "client")
        domand = _section(_section(data, "media"), "domand")
        video = _section(data, "video")

        audios = domand.get("audios")
        audio_ids = []
        for audio in audios if isinstance(audios, list) else []:
            audio_id = _text(audio.get("id")) if isinstance(audio, dict) else None
            if audio_id:
                audio_ids.append(audio_id)

        duration = video.get("duration")
        return cls(
            video_id=video_id,
            watch_track_id=_text(client.get("watchTrackId")),
            access_right_key=_text(domand.get("accessRightKey")),
            audio_quality_ids=audio_ids,
            title=_text(video.get("title")),
            duration=duration if isinstance(duration, int) and not isinstance(duration, bool) else None,
        )

    @property
    def audio_quality_id(self) -> str | None:
        """First listed audio quality, or None."""
        return self.audio_quality_ids[0] if self.audio_quality_ids else None


@dataclass(frozen=True)
class AccessRights:
    """Result of an access rights request."""

    content_url: str


@dataclass(eq=False)
class ResolutionAttempt:
    """State owned by a single resolution of one video.

    ``cancel`` may be called from any thread. It stops the attempt before its
    next request and closes the response it is currently reading, which
    releases that connection. A request still waiting for response headers
    ends when the caller's timeout does.
    """

    video_id: str
    action_track_id: str
    _cancelled: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _response: Any = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def cancelled(self) -> bool:
        """Whether ``cancel`` was called."""
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Abort this attempt."""
        self._cancelled.set()
        with self._lock:
            response = self._response
        if response is not None:
            response.close()

    def bind_response(self, response: Any) -> None:
        """Record the response being read so ``cancel`` can close it."""
        with self._lock:
            self._response = response
        # cancelled between sending the request and binding its response
        if self._cancelled.is_set():
            response.close()

    def release_response(self, response: Any) -> None:
        with self._lock:
            if self._response is response:
                self._response = None


@dataclass(frozen=True)
class ResolvedStream:
    """Everything learned while resolving a video."""

    video_id: str
    audio_playlist_url: str
    playback_url: str
    action_track_id: str
    metadata: VideoMetadata


@dataclass
class ResolveResult:
    """Result of resolving one identifier in a batch."""

    video_id: str
    success: bool
    message: str
    audio_playlist_url: str | None = None
    error: Exception | None = None
