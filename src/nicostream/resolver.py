"""Resolve NicoNico videos to their HLS audio playlist."""

import logging
import threading
from collections.abc import Callable
from typing import Any

from .client import NicoClient
from .exceptions import (
    AccessRightsDeniedError,
    AudioVariantNotFoundError,
    MetadataUnavailableError,
    MissingStreamDescriptorError,
    NicoStreamError,
)
from .m3u import find_audio_playlist
from .models import ResolutionAttempt, ResolvedStream, ResolveResult, VideoMetadata
from .parallel import parallel_process
from .utils import generate_action_track_id


class PlaybackResolver:
    """Turns a video identifier into the URL of its audio-only HLS playlist.

    A resolver keeps no per-video state. Every call to ``resolve`` works on
    its own ``ResolutionAttempt``, so one resolver can be shared between
    threads. To cancel a single resolution, create its attempt with
    ``start``, hand it to ``run`` and call ``attempt.cancel()``.
    """

    def __init__(
        self,
        client: NicoClient | None = None,
        *,
        proxy: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            client: HTTP client to use. Created from proxy and timeout if omitted.
            proxy: Proxy URL for a newly created client
            timeout: Request timeout for a newly created client

        """
        self.logger = logging.getLogger(__name__)
        self.client = client or NicoClient(proxy=proxy, timeout=timeout)
        self._running: set[ResolutionAttempt] = set()
        self._running_lock = threading.Lock()

    def cancel(self) -> None:
        """Cancel every resolution running right now.

        Resolutions started afterwards are not affected.
        """
        with self._running_lock:
            attempts = list(self._running)
        for attempt in attempts:
            attempt.cancel()

    def start(self, video_id: str) -> ResolutionAttempt:
        """Create the attempt for a new resolution of ``video_id``.

        Args:
            video_id: Video identifier

        Returns:
            A fresh attempt with its own action track id

        """
        return ResolutionAttempt(video_id=video_id, action_track_id=generate_action_track_id())

    def resolve(self, video_id: str) -> str:
        """Resolve a video to its audio playlist URL.

        Args:
            video_id: Video identifier, e.g. ``sm9``

        Returns:
            URL of the audio-only HLS playlist

        Raises:
            TransportError: If a request fails
            ResolutionError: If the video cannot be resolved

        """
        return self.resolve_stream(video_id).audio_playlist_url

    def resolve_stream(self, video_id: str) -> ResolvedStream:
        """Resolve a video and return everything learned on the way."""
        return self.run(self.start(video_id))

    def run(self, attempt: ResolutionAttempt) -> ResolvedStream:
        """Carry out a resolution attempt.

        Args:
            attempt: Attempt created by ``start``

        Returns:
            The resolved stream

        Raises:
            TransportError: If a request fails
            ResolutionError: If the video cannot be resolved or the attempt was cancelled

        """
        with self._running_lock:
            self._running.add(attempt)
        try:
            metadata = self._load_metadata(attempt)
            playback_url = self._load_playback_url(attempt, metadata)
            self.logger.debug("Starting NicoNico track from URL: %s", playback_url)

            audio_playlist_url = self._load_audio_playlist_url(attempt, playback_url)
            self.logger.debug("Resolved %s to audio playlist %s", attempt.video_id, audio_playlist_url)
        finally:
            with self._running_lock:
                self._running.discard(attempt)

        return ResolvedStream(
            video_id=attempt.video_id,
            audio_playlist_url=audio_playlist_url,
            playback_url=playback_url,
            action_track_id=attempt.action_track_id,
            metadata=metadata,
        )

    def _metadata_sources(self) -> list[tuple[str, Callable[[ResolutionAttempt], dict[str, Any] | None]]]:
        return [
            ("watch API", self._fetch_from_api),
            ("watch page", self._fetch_from_watch_page),
        ]

    def _fetch_from_api(self, attempt: ResolutionAttempt) -> dict[str, Any] | None:
        return self.client.get_watch_api_data(attempt.video_id, attempt.action_track_id, attempt=attempt)

    def _fetch_from_watch_page(self, attempt: ResolutionAttempt) -> dict[str, Any] | None:
        return self.client.get_watch_page_data(attempt.video_id, attempt=attempt)

    def _load_metadata(self, attempt: ResolutionAttempt) -> VideoMetadata:
        data = None
        for name, source in self._metadata_sources():
            data = source(attempt)
            if data is not None:
                self.logger.debug("Got watch data for %s from %s", attempt.video_id, name)
                break
            self.logger.warning("Couldn't retrieve NicoNico video details for %s from %s", attempt.video_id, name)

        if data is None:
            error = MetadataUnavailableError(attempt.video_id)
            self.logger.error(str(error))
            raise error

        metadata = VideoMetadata.from_watch_data(attempt.video_id, data)

        # the API rejects stale action track ids, so always carry the newest one
        if metadata.watch_track_id:
            attempt.action_track_id = metadata.watch_track_id

        return metadata

    def _load_playback_url(self, attempt: ResolutionAttempt, metadata: VideoMetadata) -> str:
        access_right_key = metadata.access_right_key
        audio_quality_id = metadata.audio_quality_id
        if not access_right_key or not audio_quality_id:
            missing = "access right key" if not access_right_key else "audio quality"
            error = MissingStreamDescriptorError(attempt.video_id, f"watch data has no {missing}")
            self.logger.error(str(error))
            raise error

        access_rights = self.client.request_access_rights(
            attempt.video_id,
            attempt.action_track_id,
            access_right_key,
            audio_quality_id,
            attempt=attempt,
        )
        if access_rights is None:
            error = AccessRightsDeniedError(attempt.video_id)
            self.logger.error(str(error))
            raise error

        return access_rights.content_url

    def _load_audio_playlist_url(self, attempt: ResolutionAttempt, playback_url: str) -> str:
        manifest = self.client.get_manifest(playback_url, attempt=attempt)
        try:
            return find_audio_playlist(manifest, base_url=playback_url)
        except AudioVariantNotFoundError as e:
            error = AudioVariantNotFoundError(attempt.video_id, e.cause)
            self.logger.error(str(error))
            raise error from e

    def resolve_many(self, video_ids: list[str], max_workers: int = 4) -> list[ResolveResult]:
        """Resolve several videos concurrently.

        A failure only affects the result of its own video.

        Args:
            video_ids: Video identifiers to resolve
            max_workers: Number of worker threads

        Returns:
            One ResolveResult per identifier, in input order

        """

        def _resolve_one(video_id: str, index: int, total: int) -> str:
            self.logger.info("Resolving %s (%s/%s)", video_id, index + 1, total)
            return self.resolve(video_id)

        outcomes = parallel_process(video_ids, _resolve_one, max_workers, self.logger)

        results = []
        for video_id, (success, url, error) in zip(video_ids, outcomes):
            if success:
                results.append(ResolveResult(video_id, True, "Resolved", audio_playlist_url=url))
            else:
                message = str(error) if isinstance(error, NicoStreamError) else f"Unexpected error: {error}"
                results.append(ResolveResult(video_id, False, message, error=error))
        return results
