"""Command line entry point."""

import argparse
import io
import sys
from collections.abc import Sequence
from pathlib import Path

from clean_recently_used import __version__
from clean_recently_used.config import settings
from clean_recently_used.exceptions import CleanRecentlyUsedError, ManifestError
from clean_recently_used.logger import logger, setup_logging
from clean_recently_used.manifest import clean_manifest, locate_manifest
from clean_recently_used.timing import timer
from clean_recently_used.xbel.stream_filter import FilterReport, filter_stream


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="clean-recently-used",
        description=(
            "Remove entries under the given path prefixes from the recently used "
            "files list (recently-used.xbel)."
        ),
    )
    parser.add_argument(
        "prefixes",
        nargs="*",
        metavar="PREFIX",
        help=(
            "Local path prefix whose entries are removed. Matching is a plain "
            "string prefix test. Defaults to CRU_PATHS_TO_CLEAN."
        ),
    )
    parser.add_argument(
        "--manifest",
        type=Path,
        default=None,
        help="Path to the manifest. Defaults to recently-used.xbel in the user data directory.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report what would be removed; leave the manifest untouched.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Log every removed entry.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def _dry_run(manifest: Path, prefixes: list[str]) -> FilterReport:
    if not manifest.is_file():
        msg = f"Manifest not found: {manifest}"
        raise ManifestError(msg)
    try:
        with manifest.open("rb") as source:
            return filter_stream(source, io.BytesIO(), prefixes, settings.cru_read_chunk_size)
    except OSError as exc:
        msg = f"Cannot read {manifest}: {exc}"
        raise ManifestError(msg) from exc


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    prefixes = args.prefixes or settings.default_prefixes()
    if not prefixes:
        logger.warning("No path prefixes given; the manifest is rewritten unchanged")

    try:
        manifest = args.manifest or locate_manifest(settings)
        if args.dry_run:
            report = _dry_run(manifest, prefixes)
            print(f"{manifest}: would keep {report.kept}, would remove {report.removed}")
            return 0

        with timer(f"Cleaning {manifest}"):
            clean_manifest(manifest, prefixes, settings.cru_read_chunk_size)
    except CleanRecentlyUsedError as exc:
        logger.error("%s", exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
