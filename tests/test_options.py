"""Tests for per-format option resolution."""

import pytest

from converter.conversion.options import (
    AvifOptions,
    GifOptions,
    JpegOptions,
    PngOptions,
    TiffOptions,
    WebpOptions,
    parse_int,
    resolve,
)
from converter.errors import UnsupportedFormat


class TestDefaults:
    def test_jpeg(self):
        assert resolve("jpeg") == JpegOptions(quality=80, use_advanced_encoder=True)

    def test_jpg_token(self):
        assert resolve("jpg") == JpegOptions(quality=80, use_advanced_encoder=True)

    def test_png(self):
        assert resolve("png") == PngOptions(quality=80, compression_level=6, use_palette=False)

    def test_webp(self):
        assert resolve("webp") == WebpOptions(quality=80, effort=4, lossless=False)

    def test_avif(self):
        assert resolve("avif") == AvifOptions(quality=50, effort=4, lossless=False)

    def test_tiff(self):
        assert resolve("tiff") == TiffOptions(quality=80, compression="lzw")

    def test_gif(self):
        assert resolve("gif") == GifOptions(effort=7)

    @pytest.mark.parametrize("raw", ["", "abc", "  ", None])
    def test_unparseable_values_use_defaults(self, raw):
        assert resolve("webp", raw, raw) == WebpOptions(quality=80, effort=4, lossless=False)


class TestThresholds:
    def test_png_palette_below_50(self):
        assert resolve("png", quality=30).use_palette is True
        assert resolve("png", quality=49).use_palette is True

    def test_png_no_palette_at_or_above_50(self):
        assert resolve("png", quality=50).use_palette is False
        assert resolve("png", quality=70).use_palette is False

    @pytest.mark.parametrize("fmt", ["webp", "avif"])
    def test_lossless_at_100(self, fmt):
        assert resolve(fmt, quality=100).lossless is True
        assert resolve(fmt, quality=120).lossless is True

    @pytest.mark.parametrize("fmt", ["webp", "avif"])
    def test_lossy_below_100(self, fmt):
        assert resolve(fmt, quality=99).lossless is False


class TestPassThrough:
    def test_jpeg_quality_not_clamped(self):
        assert resolve("jpeg", "150").quality == 150
        assert resolve("jpeg", "-5").quality == -5

    def test_png_compression_level(self):
        assert resolve("png", "80", "9").compression_level == 9
        assert resolve("png", "80", "0").compression_level == 0

    def test_webp_effort(self):
        assert resolve("webp", "75", "6") == WebpOptions(quality=75, effort=6, lossless=False)

    def test_avif_effort(self):
        assert resolve("avif", "60", "9").effort == 9

    def test_gif_ignores_quality(self):
        assert resolve("gif", "10", "3") == GifOptions(effort=3)

    def test_tiff_compression_fixed(self):
        assert resolve("tiff", "40", "9") == TiffOptions(quality=40, compression="lzw")

    def test_format_token_case_insensitive(self):
        assert isinstance(resolve(" PNG "), PngOptions)


class TestUnsupported:
    @pytest.mark.parametrize("token", ["bmp", "heic", "", None, "jpeg2000"])
    def test_unknown_token(self, token):
        with pytest.raises(UnsupportedFormat):
            resolve(token, "80", "4")


class TestParseInt:
    @pytest.mark.parametrize(
        "raw, expected",
        [("80", 80), (" 75px", 75), ("90.5", 90), (90.5, 90), (42, 42), ("-3", -3), ("x1", None), (None, None)],
    )
    def test_leading_integer(self, raw, expected):
        assert parse_int(raw) == expected
