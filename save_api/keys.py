"""
Object key layout and image content types.

Every key lives under the authenticated user's prefix:

  {username}/data.json                            current JSON payload
  {username}/data.json.backup.YYYY-MM-DD_HH-MM-SS-mmm   backups (UTC)
  {username}/img/{filename}                       images
"""

import re
import secrets
import string
from datetime import datetime, timezone

JSON_NAME = "data.json"
BACKUP_MARKER = ".backup."
BACKUP_TIME_FORMAT = "%Y-%m-%d_%H-%M-%S"

CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "svg+xml": "image/svg+xml",
}
DEFAULT_CONTENT_TYPE = "image/png"

# data-URL tag -> file extension for generated names
EXTENSIONS = {
    "jpeg": "jpg",
    "jpg": "jpg",
    "png": "png",
    "gif": "gif",
    "webp": "webp",
    "svg+xml": "svg",
    "svg": "svg",
}

FILENAME_TOKEN_LENGTH = 24
_TOKEN_ALPHABET = string.ascii_letters + string.digits

_DATA_URL = re.compile(r"^data:image/([\w.+-]+);base64,", re.IGNORECASE)
_BACKUP_STAMP = re.compile(r"^(\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2})(?:-(\d{3}))?$")


def json_key(username):
    return f"{username}/{JSON_NAME}"


def backup_prefix(username):
    return f"{json_key(username)}{BACKUP_MARKER}"


def format_backup_time(when):
    """UTC, millisecond precision; lexicographic order equals chronological order."""
    when = when.astimezone(timezone.utc)
    return f"{when.strftime(BACKUP_TIME_FORMAT)}-{when.microsecond // 1000:03d}"


def backup_key(username, when):
    return f"{backup_prefix(username)}{format_backup_time(when)}"


def parse_backup_timestamp(key):
    """Return the UTC datetime embedded in a backup key, or None if it isn't one."""
    marker = key.rfind(BACKUP_MARKER)
    if marker < 0:
        return None
    match = _BACKUP_STAMP.match(key[marker + len(BACKUP_MARKER):])
    if not match:
        return None
    try:
        stamp = datetime.strptime(match.group(1), BACKUP_TIME_FORMAT)
    except ValueError:
        return None
    millis = int(match.group(2) or 0)
    return stamp.replace(microsecond=millis * 1000, tzinfo=timezone.utc)


def image_key(username, filename):
    return f"{username}/img/{filename}"


def is_safe_filename(filename):
    if not isinstance(filename, str) or not filename.strip():
        return False
    if "/" in filename or "\\" in filename:
        return False
    return filename not in (".", "..")


def file_extension(filename):
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def infer_content_type(ext_or_tag):
    return CONTENT_TYPES.get((ext_or_tag or "").lower(), DEFAULT_CONTENT_TYPE)


def split_data_url(image):
    """Split 'data:image/png;base64,AAAA' into ('png', 'AAAA'). Plain base64 gives (None, image)."""
    match = _DATA_URL.match(image)
    if not match:
        return None, image
    return match.group(1).lower(), image[match.end():]


def generate_filename(tag=None):
    token = "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(FILENAME_TOKEN_LENGTH))
    extension = EXTENSIONS.get((tag or "").lower(), "png")
    return f"{token}.{extension}"
