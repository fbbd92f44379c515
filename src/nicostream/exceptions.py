"""Custom exceptions for nicostream."""


class ResolutionKind:
    """Names of the ways a resolution attempt can fail."""

    TRANSPORT = "TransportError"
    METADATA_UNAVAILABLE = "MetadataUnavailable"
    MISSING_STREAM_DESCRIPTOR = "MissingStreamDescriptor"
    ACCESS_RIGHTS_DENIED = "AccessRightsDenied"
    AUDIO_VARIANT_NOT_FOUND = "AudioVariantNotFound"
    CANCELLED = "Cancelled"


class NicoStreamError(Exception):
    """Base exception for all nicostream errors."""

    kind = ""


class TransportError(NicoStreamError):
    """Exception raised when an HTTP request fails or returns an error status."""

    kind = ResolutionKind.TRANSPORT

    def __init__(self, url: str, status_code: int | None = None, message: str | None = None) -> None:
        """Initialize the exception.

        Args:
            url: The URL that was requested
            status_code: The HTTP status code if available
            message: Additional error message

        """
        self.url = url
        self.status_code = status_code
        msg = f"Request failed: {url}"
        if status_code:
            msg = f"{msg} (Status: {status_code})"
        if message:
            msg = f"{msg} - {message}"
        super().__init__(msg)


class ResolutionError(NicoStreamError):
    """Exception raised when a video cannot be resolved to an audio playlist."""

    def __init__(self, video_id: str, kind: str, cause: str | None = None) -> None:
        """Initialize the exception.

        Args:
            video_id: The video identifier being resolved
            kind: One of the ``ResolutionKind`` names
            cause: Human-readable reason

        """
        self.video_id = video_id
        self.kind = kind
        self.cause = cause
        msg = f"{kind} for {video_id}" if video_id else kind
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg)


class MetadataUnavailableError(ResolutionError):
    """Neither the watch API nor the watch page returned video metadata."""

    def __init__(self, video_id: str, cause: str | None = None) -> None:
        super().__init__(video_id, ResolutionKind.METADATA_UNAVAILABLE, cause or "no metadata from API or watch page")


class MissingStreamDescriptorError(ResolutionError):
    """Metadata lacks the access right key or an audio quality."""

    def __init__(self, video_id: str, cause: str | None = None) -> None:
        super().__init__(video_id, ResolutionKind.MISSING_STREAM_DESCRIPTOR, cause or "video is not available as a DMS stream")


class AccessRightsDeniedError(ResolutionError):
    """The access rights endpoint did not hand out a content URL."""

    def __init__(self, video_id: str, cause: str | None = None) -> None:
        super().__init__(video_id, ResolutionKind.ACCESS_RIGHTS_DENIED, cause or "no content URL in access rights response")


class AudioVariantNotFoundError(ResolutionError):
    """The manifest has no ``EXT-X-MEDIA`` line of type ``AUDIO``."""

    def __init__(self, video_id: str = "", cause: str | None = None) -> None:
        super().__init__(video_id, ResolutionKind.AUDIO_VARIANT_NOT_FOUND, cause or "valid audio directive was not found in manifest")


class ResolutionCancelledError(ResolutionError):
    """The resolution was cancelled by the caller."""

    def __init__(self, video_id: str) -> None:
        super().__init__(video_id, ResolutionKind.CANCELLED, "resolution was cancelled")
