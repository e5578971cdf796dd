"""Per-format encoder options derived from the generic quality/compression form fields."""
import re
from dataclasses import dataclass
from typing import Optional, Union

from converter.conversion.models import OutputFormat
from converter.errors import UnsupportedFormat

DEFAULT_QUALITY = {
    OutputFormat.JPEG: 80,
    OutputFormat.JPG: 80,
    OutputFormat.PNG: 80,
    OutputFormat.WEBP: 80,
    OutputFormat.AVIF: 50,
    OutputFormat.TIFF: 80,
}
DEFAULT_PNG_COMPRESSION = 6
DEFAULT_WEBP_EFFORT = 4
DEFAULT_AVIF_EFFORT = 4
DEFAULT_GIF_EFFORT = 7

PALETTE_QUALITY_THRESHOLD = 50  # PNG below this uses palette mode
LOSSLESS_QUALITY_THRESHOLD = 100  # WEBP/AVIF at or above this go lossless
TIFF_COMPRESSION = "lzw"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class JpegOptions:
    quality: int
    use_advanced_encoder: bool = True


@dataclass(frozen=True)
class PngOptions:
    quality: int
    compression_level: int  # 0-9
    use_palette: bool


@dataclass(frozen=True)
class WebpOptions:
    quality: int
    effort: int  # 0-6
    lossless: bool


@dataclass(frozen=True)
class AvifOptions:
    quality: int
    effort: int  # 0-9
    lossless: bool


@dataclass(frozen=True)
class TiffOptions:
    quality: int
    compression: str = TIFF_COMPRESSION


@dataclass(frozen=True)
class GifOptions:
    effort: int  # 1-10


FormatOptions = Union[JpegOptions, PngOptions, WebpOptions, AvifOptions, TiffOptions, GifOptions]


def parse_int(raw) -> Optional[int]:
    """Leading integer of a form value ('80', ' 75px', 90.5 -> 80, 75, 90); None if there is none."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw)
    m = _LEADING_INT.match(str(raw))
    return int(m.group(1)) if m else None


def parse_format(token: Optional[str]) -> OutputFormat:
    try:
        return OutputFormat((token or "").strip().lower())
    except ValueError:
        raise UnsupportedFormat(f"Unsupported format: {token or '(none)'}") from None


def resolve(format_token: Optional[str], quality=None, compression=None) -> FormatOptions:
    """
    Map a format token plus raw quality/compression into that format's option set.
    Missing or unparseable numbers fall back to the format default; values are not clamped here.
    Raises UnsupportedFormat for tokens outside the fixed set.
    """
    fmt = parse_format(format_token)
    quality = parse_int(quality)
    compression = parse_int(compression)

    if fmt is OutputFormat.GIF:
        return GifOptions(effort=DEFAULT_GIF_EFFORT if compression is None else compression)

    if quality is None:
        quality = DEFAULT_QUALITY[fmt]

    if fmt in (OutputFormat.JPEG, OutputFormat.JPG):
        return JpegOptions(quality=quality, use_advanced_encoder=True)
    if fmt is OutputFormat.PNG:
        return PngOptions(
            quality=quality,
            compression_level=DEFAULT_PNG_COMPRESSION if compression is None else compression,
            use_palette=quality < PALETTE_QUALITY_THRESHOLD,
        )
    if fmt is OutputFormat.WEBP:
        return WebpOptions(
            quality=quality,
            effort=DEFAULT_WEBP_EFFORT if compression is None else compression,
            lossless=quality >= LOSSLESS_QUALITY_THRESHOLD,
        )
    if fmt is OutputFormat.AVIF:
        return AvifOptions(
            quality=quality,
            effort=DEFAULT_AVIF_EFFORT if compression is None else compression,
            lossless=quality >= LOSSLESS_QUALITY_THRESHOLD,
        )
    return TiffOptions(quality=quality)
