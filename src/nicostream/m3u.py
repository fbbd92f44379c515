"""Extended M3U line parsing and audio rendition lookup."""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from urllib.parse import urljoin

from .exceptions import AudioVariantNotFoundError

DIRECTIVE_MARKER = "#EXT"
MEDIA_DIRECTIVE = "EXT-X-MEDIA"

_ARGUMENT_RE = re.compile(r'([A-Z0-9-]+)=(?:"([^"]*)"|([^,]*))(?:,|$)')


@dataclass(frozen=True)
class Directive:
    """A ``#EXT...`` line with its parsed attribute list."""

    name: str
    arguments: dict[str, str] = field(default_factory=dict)
    raw: str = ""


@dataclass(frozen=True)
class PlainLine:
    """Any line that is not a directive: URIs, comments, blank lines."""

    text: str


ManifestLine = Directive | PlainLine


def parse_line(raw_line: str) -> ManifestLine:
    """Classify a single manifest line.

    Args:
        raw_line: One line of manifest text

    Returns:
        A Directive for ``#EXT`` lines, a PlainLine otherwise

    """
    line = raw_line.strip()
    if not line.startswith(DIRECTIVE_MARKER):
        return PlainLine(line)

    name, separator, argument_text = line[1:].partition(":")
    if not separator:
        return Directive(name, {}, line)

    arguments: dict[str, str] = {}
    for match in _ARGUMENT_RE.finditer(argument_text):
        key, quoted, bare = match.groups()
        arguments[key] = quoted if quoted is not None else bare
    return Directive(name, arguments, line)


def iter_directives(manifest_text: str) -> Iterator[Directive]:
    """Yield the directives of a manifest in document order."""
    for raw_line in manifest_text.splitlines():
        line = parse_line(raw_line)
        if isinstance(line, Directive):
            yield line


def find_audio_playlist(manifest_text: str, base_url: str | None = None) -> str:
    """Find the URI of the first audio rendition in a master playlist.

    DMS serves video and audio as separate renditions, so the audio playlist
    is announced by an ``EXT-X-MEDIA`` line with ``TYPE=AUDIO``.

    Args:
        manifest_text: Master playlist text
        base_url: URL the playlist was loaded from; relative URIs are joined onto it

    Returns:
        The audio playlist URL

    Raises:
        AudioVariantNotFoundError: If no audio rendition is declared

    """
    for directive in iter_directives(manifest_text):
        if directive.name != MEDIA_DIRECTIVE or directive.arguments.get("TYPE") != "AUDIO":
            continue
        uri = directive.arguments.get("URI")
        if uri:
            return urljoin(base_url, uri) if base_url else uri

    raise AudioVariantNotFoundError()
