"""Repair mis-decoded upload filenames and derive output base names."""
import logging
import unicodedata
from pathlib import PurePosixPath

logger = logging.getLogger("converter.filenames")

DEFAULT_BASE_NAME = "image"


def reinterpret_filename(raw: str) -> str:
    """
    Undo a latin-1 decode of UTF-8 bytes: 'í\x95\x9cê¸\x80.png' -> '한글.png'.
    Names that are not latin-1 text, or whose bytes are not valid UTF-8, are returned unchanged.
    """
    try:
        return raw.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        return raw


def normalize_filename(raw: str) -> str:
    """Reinterpret then compose (NFC) so macOS-decomposed names match their composed form."""
    fixed = reinterpret_filename(raw or "")
    if fixed != raw:
        logger.debug("Re-decoded filename %r -> %r", raw, fixed)
    return unicodedata.normalize("NFC", fixed)


def base_name(filename: str) -> str:
    """Final path component without its extension. Client-sent directories are dropped."""
    name = PurePosixPath(filename.replace("\\", "/")).name
    stem = PurePosixPath(name).stem if name not in ("", ".", "..") else ""
    return stem or DEFAULT_BASE_NAME
