# app/core/storage.py

import os
import re
import shutil
import uuid

from loguru import logger

# 1. Locations (absolute, so the app can be started from any cwd)
APP_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
STATIC_DIR = os.path.join(APP_DIR, "static")
DOWNLOADS_DIR = os.path.join(STATIC_DIR, "downloads")
DOWNLOADS_URL_PREFIX = "/static/downloads"

# Anything outside this set (path separators, quotes, non-ASCII) becomes "_"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def safe_filename_part(text: str, fallback: str) -> str:
    """
    Turns free text (an applicant's name) into a filename fragment that is
    safe on disk and inside a Content-Disposition header.
    """
    slug = _UNSAFE_FILENAME_CHARS.sub("_", text.strip()).strip("._")
    return slug or fallback


def ensure_storage_dirs() -> None:
    os.makedirs(DOWNLOADS_DIR, exist_ok=True)


def save_download(session_id: uuid.UUID, filename: str, data: bytes) -> tuple[str, str]:
    """
    Writes the applicant's copy of the combined PDF.
    - One folder per session, so two applicants with the same name never collide.
    - Returns (filesystem path, public URL under /static).
    """
    folder = os.path.realpath(os.path.join(DOWNLOADS_DIR, str(session_id)))
    file_path = os.path.realpath(os.path.join(folder, filename))
    if os.path.dirname(file_path) != folder:
        raise ValueError(f"Refusing to write {filename!r} outside the session download folder")

    os.makedirs(folder, exist_ok=True)
    with open(file_path, "wb") as f:
        f.write(data)

    logger.info(f"Saved applicant copy {file_path} ({len(data)} bytes)")
    return file_path, f"{DOWNLOADS_URL_PREFIX}/{session_id}/{filename}"


def remove_downloads(session_id: uuid.UUID) -> None:
    """Deletes a session's download folder, if any."""
    folder = os.path.join(DOWNLOADS_DIR, str(session_id))
    if not os.path.isdir(folder):
        return

    for name in os.listdir(folder):
        try:
            os.remove(os.path.join(folder, name))
        except OSError as e:
            logger.warning(f"Could not remove {name} from {folder}: {e}")
    try:
        os.rmdir(folder)
    except OSError as e:
        logger.warning(f"Could not remove download folder {folder}: {e}")


def clear_downloads() -> int:
    """
    Startup sweep: sessions do not survive a restart, so no download
    folder left on disk belongs to a live session any more.
    """
    if not os.path.isdir(DOWNLOADS_DIR):
        return 0

    removed = 0
    for name in os.listdir(DOWNLOADS_DIR):
        path = os.path.join(DOWNLOADS_DIR, name)
        if not os.path.isdir(path):
            continue
        shutil.rmtree(path, ignore_errors=True)
        removed += 1

    if removed:
        logger.info(f"Removed {removed} download folder(s) left by a previous run")
    return removed
