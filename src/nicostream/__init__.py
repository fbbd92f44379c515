"""Resolve NicoNico videos to streamable HLS audio playlists."""

from .client import NicoClient
from .exceptions import (
    AccessRightsDeniedError,
    AudioVariantNotFoundError,
    MetadataUnavailableError,
    MissingStreamDescriptorError,
    NicoStreamError,
    ResolutionCancelledError,
    ResolutionError,
    ResolutionKind,
    TransportError,
)
from .m3u import Directive, PlainLine, find_audio_playlist, iter_directives, parse_line
from .models import (
    AccessRights,
    ResolutionAttempt,
    ResolvedStream,
    ResolveResult,
    VideoMetadata,
)
from .parallel import parallel_process
from .resolver import PlaybackResolver
from .utils import REQUEST_TIMEOUT, generate_action_track_id, parse_video_id

__all__ = [
    # Main classes
    "NicoClient",
    "PlaybackResolver",
    # Exceptions
    "NicoStreamError",
    "TransportError",
    "ResolutionError",
    "ResolutionKind",
    "MetadataUnavailableError",
    "MissingStreamDescriptorError",
    "AccessRightsDeniedError",
    "AudioVariantNotFoundError",
    "ResolutionCancelledError",
    # Models
    "AccessRights",
    "ResolutionAttempt",
    "ResolvedStream",
    "ResolveResult",
    "VideoMetadata",
    # Manifest parsing
    "Directive",
    "PlainLine",
    "parse_line",
    "iter_directives",
    "find_audio_playlist",
    # Parallel processing
    "parallel_process",
    # Other utilities
    "REQUEST_TIMEOUT",
    "generate_action_track_id",
    "parse_video_id",
]
