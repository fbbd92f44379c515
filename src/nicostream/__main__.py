import argparse
import logging
import os
import sys
from dataclasses import dataclass, field

from nicostream import PlaybackResolver
from nicostream.utils import REQUEST_TIMEOUT, parse_video_id

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s]%(message)s")


@dataclass
class ResolveRequest:
    """Configuration for a resolve request."""

    targets: list[str] = field(default_factory=list)
    proxy: str | None = None
    timeout: float | None = REQUEST_TIMEOUT
    workers: int = 4
    verbose: bool = False


def main(argv: list[str] | None = None) -> None:
    """Parse command line arguments and print the audio playlist URL of each video."""
    parser = argparse.ArgumentParser(description="Resolve NicoNico videos to HLS audio playlist URLs.")
    parser.add_argument(
        "targets",
        nargs="+",
        help="Video IDs or watch URLs (e.g. sm9 or https://www.nicovideo.jp/watch/sm9)",
    )
    parser.add_argument(
        "--proxy",
        "-p",
        type=str,
        default=os.environ.get("NICOSTREAM_PROXY") or None,
        help='Proxy URL (e.g. "http://proxy.example.com:8080" or "socks5://proxy.example.com:1080")',
    )
    parser.add_argument("--timeout", "-t", type=float, default=REQUEST_TIMEOUT, help="Request timeout in seconds")
    parser.add_argument("--workers", "-w", type=int, default=4, help="Number of videos to resolve in parallel")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every request")

    args = parser.parse_args(argv)

    sys.exit(
        _process_request(
            ResolveRequest(
                targets=args.targets,
                proxy=args.proxy,
                timeout=args.timeout,
                workers=args.workers,
                verbose=args.verbose,
            )
        )
    )


def _process_request(request: ResolveRequest) -> int:
    """Resolve all targets and print one line per video.

    Args:
        request: The resolve request configuration

    Returns:
        Process exit code: 0 if every target resolved, 1 otherwise

    """
    logger = logging.getLogger("nicostream")
    if request.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    video_ids = []
    failed = False
    for target in request.targets:
        video_id = parse_video_id(target)
        if video_id is None:
            logger.error("Could not determine video ID from %s", target)
            failed = True
            continue
        video_ids.append(video_id)

    if not video_ids:
        return 1

    resolver = PlaybackResolver(proxy=request.proxy, timeout=request.timeout)
    try:
        results = resolver.resolve_many(video_ids, request.workers)
    finally:
        resolver.client.close()

    for result in results:
        if result.success:
            print(f"{result.video_id}\t{result.audio_playlist_url}")
        else:
            logger.error("%s: %s", result.video_id, result.message)
            failed = True

    return 1 if failed else 0


if __name__ == "__main__":
    main()
