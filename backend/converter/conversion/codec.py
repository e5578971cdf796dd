"""Pillow adapter: decode uploaded bytes and encode them with resolved format options."""
import io
import logging
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from converter.conversion.options import (
    AvifOptions,
    FormatOptions,
    GifOptions,
    JpegOptions,
    PngOptions,
    TiffOptions,
    WebpOptions,
)
from converter.errors import CodecError

logger = logging.getLogger("converter.codec")

_PIL_FORMAT = {
    JpegOptions: "JPEG",
    PngOptions: "PNG",
    WebpOptions: "WEBP",
    AvifOptions: "AVIF",
    TiffOptions: "TIFF",
    GifOptions: "GIF",
}
_TIFF_COMPRESSION = {"lzw": "tiff_lzw", "deflate": "tiff_adobe_deflate", "none": None}
GIF_OPTIMIZE_EFFORT = 5


@dataclass(frozen=True)
class EncodedImage:
    data: bytes
    width: int
    height: int

    @property
    def size(self) -> int:
        return len(self.data)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info)


PNG_MODES = ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA")
GIF_MODES = ("1", "L", "P", "RGB", "RGBA")


def _to_truecolor(img: Image.Image, keep_alpha: bool = True) -> Image.Image:
    # float samples have no direct RGB conversion
    if img.mode == "F":
        img = img.convert("L")
    return img.convert("RGBA" if keep_alpha and _has_alpha(img) else "RGB")


def _prepare_mode(img: Image.Image, options: FormatOptions) -> Image.Image:
    """Bring the pixel buffer into a storage mode the target encoder accepts."""
    if isinstance(options, JpegOptions):
        if img.mode not in ("RGB", "L", "CMYK"):
            return _to_truecolor(img, keep_alpha=False)
        return img
    if isinstance(options, (WebpOptions, AvifOptions)):
        if img.mode not in ("RGB", "RGBA"):
            return _to_truecolor(img)
        return img
    if isinstance(options, PngOptions) and options.use_palette:
        base = img if img.mode in ("RGB", "RGBA") else _to_truecolor(img)
        colors = _clamp(round(256 * _clamp(options.quality, 1, 100) / 100), 2, 256)
        return base.quantize(colors=colors, method=Image.Quantize.FASTOCTREE)
    if isinstance(options, PngOptions) and img.mode not in PNG_MODES:
        return _to_truecolor(img)
    if isinstance(options, GifOptions) and img.mode not in GIF_MODES:
        return _to_truecolor(img)
    return img


def save_kwargs(options: FormatOptions) -> dict:
    """Pillow save() keyword arguments for an option set, clamped to the encoder's range."""
    if isinstance(options, JpegOptions):
        kw = {"quality": _clamp(options.quality, 1, 100)}
        if options.use_advanced_encoder:
            kw.update(optimize=True, progressive=True)
        return kw
    if isinstance(options, PngOptions):
        return {"compress_level": _clamp(options.compression_level, 0, 9)}
    if isinstance(options, WebpOptions):
        return {
            "quality": _clamp(options.quality, 0, 100),
            "method": _clamp(options.effort, 0, 6),
            "lossless": options.lossless,
        }
    if isinstance(options, AvifOptions):
        kw = {
            "quality": 100 if options.lossless else _clamp(options.quality, 0, 100),
            "speed": _clamp(10 - options.effort, 0, 10),
        }
        if options.lossless:
            kw["subsampling"] = "4:4:4"
        return kw
    if isinstance(options, TiffOptions):
        return {"compression": _TIFF_COMPRESSION.get(options.compression, "tiff_lzw")}
    if isinstance(options, GifOptions):
        return {"optimize": _clamp(options.effort, 1, 10) >= GIF_OPTIMIZE_EFFORT}
    raise TypeError(f"Unknown options type: {type(options).__name__}")


def supported_formats() -> list[str]:
    """Output formats the installed Pillow build can encode."""
    Image.init()
    return [fmt.lower() for fmt in _PIL_FORMAT.values() if fmt in Image.SAVE]


class PillowCodec:
    """Image Codec Library backed by Pillow."""

    def decode(self, data: bytes) -> Image.Image:
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
            return img
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError) as e:
            raise CodecError(f"Cannot decode image: {e}") from e

    def encode(self, data: bytes, options: FormatOptions) -> EncodedImage:
        """Decode bytes and re-encode them with the given options. Raises CodecError on either step."""
        pil_format = _PIL_FORMAT[type(options)]
        img = self.decode(data)
        try:
            width, height = img.size
            out_img = _prepare_mode(img, options)
            buf = io.BytesIO()
            try:
                out_img.save(buf, format=pil_format, **save_kwargs(options))
            except KeyError as e:
                raise CodecError(f"{pil_format} encoding is not supported by this Pillow build") from e
            except (OSError, ValueError) as e:
                raise CodecError(f"Cannot encode {pil_format}: {e}") from e
            return EncodedImage(data=buf.getvalue(), width=width, height=height)
        finally:
            img.close()
