import re
import time
import uuid
from urllib.parse import urlparse

REQUEST_TIMEOUT = 30

FRONTEND_ID = "6"
FRONTEND_VERSION = "0"
REQUESTED_WITH = "https://www.nicovideo.jp"
ACTION_TRACK_ID_PREFIX = "NicoStream"
VIDEO_QUALITY_PLACEHOLDER = "video-h264-144p"

WATCH_API_URL = "https://www.nicovideo.jp/api/watch/v3_guest/{video_id}"
WATCH_PAGE_URL = "https://www.nicovideo.jp/watch/{video_id}"
ACCESS_RIGHTS_URL = "https://nvapi.nicovideo.jp/v1/watch/{video_id}/access-rights/hls"

_VIDEO_ID_RE = re.compile(r"^[a-z]{2}\d+$")
_WATCH_HOSTS = {"nicovideo.jp", "www.nicovideo.jp", "sp.nicovideo.jp", "nico.ms"}


def generate_action_track_id() -> str:
    """Create a fresh action track id for a resolution attempt.

    The id keeps the ``<token>_<milliseconds>`` shape the site uses itself.
    The random part keeps two attempts started in the same millisecond apart.

    Returns:
        A new action track id

    """
    token = uuid.uuid4().hex[:10]
    return f"{ACTION_TRACK_ID_PREFIX}{token}_{int(time.time() * 1000)}"


def extract_between(text: str, start: str, end: str) -> str | None:
    """Return the text between the first ``start`` marker and the next ``end``.

    Args:
        text: The text to search
        start: Opening marker
        end: Closing marker

    Returns:
        The enclosed text, or None if either marker is missing

    """
    start_index = text.find(start)
    if start_index < 0:
        return None
    start_index += len(start)
    end_index = text.find(end, start_index)
    if end_index < 0:
        return None
    return text[start_index:end_index]


def parse_video_id(url_or_id: str) -> str | None:
    """Extract a video identifier from a watch URL, short link or bare id.

    Args:
        url_or_id: Something like ``sm9``, ``https://www.nicovideo.jp/watch/sm9``
            or ``https://nico.ms/sm9``

    Returns:
        The video identifier, or None if not recognized

    """
    candidate = url_or_id.strip()
    if _VIDEO_ID_RE.match(candidate):
        return candidate

    # scheme-less URLs still carry a host
    if "://" not in candidate:
        candidate = f"https://{candidate}"

    try:
        parsed = urlparse(candidate)
    except ValueError:
        return None

    if (parsed.hostname or "") not in _WATCH_HOSTS:
        return None

    path = parsed.path.rstrip("/")
    if parsed.hostname == "nico.ms":
        video_id = path.lstrip("/")
    else:
        match = re.match(r"^/watch/([^/]+)$", path)
        video_id = match.group(1) if match else ""

    return video_id if _VIDEO_ID_RE.match(video_id) else None
