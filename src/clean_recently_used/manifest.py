"""Locating and rewriting the recently-used manifest on disk."""

import os
import shutil
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from clean_recently_used.config import Settings
from clean_recently_used.exceptions import ManifestError
from clean_recently_used.logger import logger
from clean_recently_used.xbel.reader import DEFAULT_CHUNK_SIZE
from clean_recently_used.xbel.stream_filter import FilterReport, filter_stream

__all__ = ["clean_manifest", "locate_manifest", "temporary_output_path"]


def locate_manifest(settings: Settings) -> Path:
    """Return the path of the manifest in the user data directory.

    Raises:
        ManifestError: If no data directory can be determined.

    """
    data_dir = settings.data_dir()
    if data_dir is None:
        msg = "Cannot determine the user data directory; set CRU_DATA_DIR"
        raise ManifestError(msg)
    return data_dir / settings.cru_manifest_name


def temporary_output_path(manifest: Path, now: datetime | None = None) -> Path:
    """Return a timestamped sibling of ``manifest`` to write the new version to.

    Args:
        manifest: The manifest being rewritten.
        now: Timestamp to use; the current local time when omitted.

    Returns:
        Path like ``recently-used.xbel-2020-09-25T20:00:00.123456+02:00``.

    """
    timestamp = (now or datetime.now()).astimezone().isoformat()
    return manifest.with_name(f"{manifest.name}-{timestamp}")


def clean_manifest(
    manifest: Path,
    prefixes: Iterable[str],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    now: datetime | None = None,
) -> FilterReport:
    """Filter ``manifest`` in place.

    The filtered document is written to a fresh temporary file that only
    replaces the manifest once the whole pass succeeded. On failure the
    temporary file is removed and the manifest is left untouched.

    Args:
        manifest: Path of the manifest to rewrite.
        prefixes: Local path prefixes whose bookmarks are removed.
        chunk_size: Number of bytes read at a time.
        now: Timestamp for the temporary file name.

    Returns:
        FilterReport with the number of bookmarks kept and removed.

    Raises:
        ManifestError: If the manifest is missing or cannot be read, written
            or replaced.
        FilterError: If the manifest cannot be filtered safely.

    """
    if not manifest.is_file():
        msg = f"Manifest not found: {manifest}"
        raise ManifestError(msg)

    output = temporary_output_path(manifest, now)
    try:
        sink = output.open("xb")
    except FileExistsError as exc:
        msg = f"Temporary output already exists: {output}"
        raise ManifestError(msg) from exc
    except OSError as exc:
        msg = f"Cannot create {output}: {exc}"
        raise ManifestError(msg) from exc

    try:
        with sink, manifest.open("rb") as source:
            report = filter_stream(source, sink, prefixes, chunk_size)
            os.fsync(sink.fileno())
        shutil.copymode(manifest, output)
        os.replace(output, manifest)
    except OSError as exc:
        output.unlink(missing_ok=True)
        msg = f"Cannot rewrite {manifest}: {exc}"
        raise ManifestError(msg) from exc
    except BaseException:
        output.unlink(missing_ok=True)
        raise

    logger.info(
        "Rewrote %s: kept %d bookmark(s), removed %d",
        manifest,
        report.kept,
        report.removed,
    )
    return report
