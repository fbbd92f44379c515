"""NicoNico HTTP client for the watch API, watch page and DMS endpoints."""

import html
import json
import logging
from typing import Any

import requests

from .exceptions import ResolutionCancelledError, TransportError
from .models import AccessRights, ResolutionAttempt
from .utils import (
    ACCESS_RIGHTS_URL,
    FRONTEND_ID,
    FRONTEND_VERSION,
    REQUESTED_WITH,
    VIDEO_QUALITY_PLACEHOLDER,
    WATCH_API_URL,
    WATCH_PAGE_URL,
    extract_between,
)


def _is_success_with_content(status_code: int) -> bool:
    return 200 <= status_code < 300 and status_code != 204


def _raise_if_cancelled(attempt: ResolutionAttempt | None, cause: Exception | None = None) -> None:
    if attempt is not None and attempt.cancelled:
        raise ResolutionCancelledError(attempt.video_id) from cause


class NicoClient:
    """Client for the NicoNico endpoints needed to play a video."""

    def __init__(
        self,
        proxy: str | None = None,
        *,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            proxy: Proxy URL (e.g. "http://proxy.example.com:8080" or "socks5://proxy.example.com:1080")
            session: Session to send requests with. A new one is created if omitted.
            timeout: Per-request timeout in seconds passed to requests; None waits indefinitely.

        """
        self.logger = logging.getLogger(__name__)
        self._session = session or requests.Session()
        self._timeout = timeout

        # Configure proxy if provided
        if proxy:
            proxies = {"http": proxy, "https": proxy}
            self._session.proxies = proxies

    def close(self) -> None:
        """Close the session and its idle pooled connections."""
        self._session.close()

    def __enter__(self) -> "NicoClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _fetch(
        self,
        method: str,
        url: str,
        description: str,
        *,
        check_status: bool = True,
        attempt: ResolutionAttempt | None = None,
        **kwargs: Any,
    ) -> tuple[int, str]:
        """Perform one request and read its body.

        The response is closed before returning, on success and on error.
        While the body is read the response is bound to ``attempt``, so
        cancelling the attempt closes it.

        Args:
            method: "get" or "post"
            url: URL to request
            description: What is being fetched, for messages
            check_status: Raise on a status without content instead of returning it
            attempt: Resolution attempt the request belongs to
            **kwargs: Passed on to requests

        Returns:
            Tuple of (status_code, body_text)

        Raises:
            TransportError: If the request fails, or the status is not a success and check_status is set
            ResolutionCancelledError: If the attempt was cancelled before or during the request

        """
        _raise_if_cancelled(attempt)
        send = self._session.post if method == "post" else self._session.get
        try:
            with send(url, timeout=self._timeout, stream=True, **kwargs) as response:
                if attempt is not None:
                    attempt.bind_response(response)
                try:
                    status_code = response.status_code
                    if check_status and not _is_success_with_content(status_code):
                        error_msg = f"Response code for {description} is {status_code}"
                        self.logger.error(error_msg)
                        raise TransportError(url, status_code, error_msg)
                    return status_code, response.text
                finally:
                    if attempt is not None:
                        attempt.release_response(response)
        except requests.RequestException as e:
            _raise_if_cancelled(attempt, e)
            error_msg = f"Failed to fetch {description}: {str(e)}"
            self.logger.error(error_msg)
            raise TransportError(url, None, error_msg) from e
        except (OSError, ValueError, AttributeError) as e:
            # urllib3 raises these when the body is read from a closed response
            _raise_if_cancelled(attempt, e)
            raise

    def get_watch_api_data(
        self,
        video_id: str,
        action_track_id: str,
        *,
        attempt: ResolutionAttempt | None = None,
    ) -> dict[str, Any] | None:
        """Get watch data from the guest watch API.

        Args:
            video_id: Video identifier
            action_track_id: Current action track id
            attempt: Resolution attempt the request belongs to

        Returns:
            The ``data`` object, or None if the API returned nothing usable

        Raises:
            TransportError: If the request could not be sent

        """
        params = {
            "_frontendId": FRONTEND_ID,
            "_frontendVersion": FRONTEND_VERSION,
            "actionTrackId": action_track_id,
            "i18nLanguage": "en-us",
        }
        url = WATCH_API_URL.format(video_id=video_id)
        status_code, body = self._fetch("get", url, "api response", check_status=False, attempt=attempt, params=params)

        if not _is_success_with_content(status_code):
            self.logger.debug("Watch API answered %s for %s", status_code, video_id)
            return None
        if not body.strip():
            return None

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            self.logger.debug("Watch API returned invalid JSON for %s: %s", video_id, e)
            return None

        data = payload.get("data") if isinstance(payload, dict) else None
        return data if isinstance(data, dict) and data else None

    def get_watch_page_data(self, video_id: str, *, attempt: ResolutionAttempt | None = None) -> dict[str, Any] | None:
        """Get watch data embedded in the watch page.

        Args:
            video_id: Video identifier
            attempt: Resolution attempt the request belongs to

        Returns:
            The decoded ``data-api-data`` object, or None if the page has none

        Raises:
            TransportError: If the page could not be loaded

        """
        url = WATCH_PAGE_URL.format(video_id=video_id)
        _, body = self._fetch("get", url, "video main page", attempt=attempt)

        encoded = extract_between(body, 'data-api-data="', '"')
        if not encoded:
            self.logger.debug("No data-api-data attribute on watch page of %s", video_id)
            return None

        try:
            data = json.loads(html.unescape(encoded))
        except json.JSONDecodeError as e:
            self.logger.debug("Watch page data of %s is not valid JSON: %s", video_id, e)
            return None

        return data if isinstance(data, dict) and data else None

    def request_access_rights(
        self,
        video_id: str,
        action_track_id: str,
        access_right_key: str,
        audio_quality_id: str,
        *,
        attempt: ResolutionAttempt | None = None,
    ) -> AccessRights | None:
        """Request an HLS content URL from DMS.

        Video is only requested because the endpoint requires a pair; the
        lowest quality is used and only the audio rendition is played.

        Args:
            video_id: Video identifier
            action_track_id: Current action track id
            access_right_key: Key from the watch data
            audio_quality_id: Audio quality to request
            attempt: Resolution attempt the request belongs to

        Returns:
            Access rights with the content URL, or None if none was granted

        Raises:
            TransportError: If the request fails or returns an error status

        """
        url = ACCESS_RIGHTS_URL.format(video_id=video_id)
        headers = {
            "X-Access-Right-Key": access_right_key,
            "X-Frontend-Id": FRONTEND_ID,
            "X-Frontend-Version": FRONTEND_VERSION,
            "X-Requested-With": REQUESTED_WITH,
        }
        body = {"outputs": [[VIDEO_QUALITY_PLACEHOLDER, audio_quality_id]]}
        _, text = self._fetch(
            "post",
            url,
            "dms response",
            attempt=attempt,
            params={"actionTrackId": action_track_id},
            headers=headers,
            json=body,
        )

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            self.logger.error("Invalid JSON in access rights response for %s: %s", video_id, e)
            return None

        data = payload.get("data") if isinstance(payload, dict) else None
        content_url = data.get("contentUrl") if isinstance(data, dict) else None
        if not isinstance(content_url, str) or not content_url:
            return None
        return AccessRights(content_url=content_url)

    def get_manifest(self, url: str, *, attempt: ResolutionAttempt | None = None) -> str:
        """Get playlist text.

        Args:
            url: Playlist URL
            attempt: Resolution attempt the request belongs to

        Returns:
            The playlist body

        Raises:
            TransportError: If the request fails or returns an error status

        """
        _, body = self._fetch("get", url, "track access info", attempt=attempt)
        return body
