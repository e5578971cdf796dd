"""Conversion request/response models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class OutputFormat(str, Enum):
    JPEG = "jpeg"
    JPG = "jpg"
    PNG = "png"
    WEBP = "webp"
    AVIF = "avif"
    TIFF = "tiff"
    GIF = "gif"

    @property
    def extension(self) -> str:
        """File extension written for this format (both JPEG tokens write .jpg)."""
        if self in (OutputFormat.JPEG, OutputFormat.JPG):
            return "jpg"
        return self.value


SUPPORTED_FORMATS = [f.value for f in OutputFormat]


@dataclass
class UploadedFile:
    filename: str
    data: bytes


@dataclass
class ConversionRequest:
    """One /api/convert call. Quality and compression stay raw until option resolution."""

    format: Optional[str]
    files: list[UploadedFile] = field(default_factory=list)
    quality: Optional[str] = None
    compression: Optional[str] = None


@dataclass(frozen=True)
class ConversionResult:
    original: str
    converted: str
    size: int  # bytes
    width: int
    height: int
    path: str

    def to_dict(self) -> dict:
        return {
            "original": self.original,
            "converted": self.converted,
            "size": self.size,
            "width": self.width,
            "height": self.height,
            "path": self.path,
        }


@dataclass
class BatchResult:
    output_dir: str
    results: list[ConversionResult] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict:
        return {
            "success": True,
            "count": self.count,
            "outputDir": self.output_dir,
            "results": [r.to_dict() for r in self.results],
        }
