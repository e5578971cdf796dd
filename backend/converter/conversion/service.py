"""Batch conversion: resolve options once, then convert and write each uploaded file in order."""
import logging
from pathlib import Path
from typing import Optional

from converter.config import ROLLBACK_ON_FAILURE
from converter.conversion.codec import PillowCodec
from converter.conversion.filenames import base_name, normalize_filename
from converter.conversion.models import BatchResult, ConversionRequest, ConversionResult, UploadedFile
from converter.conversion.options import FormatOptions, parse_format, resolve
from converter.errors import CodecError, ConverterError, EmptyBatch, WriteError
from converter.output_dir import OutputLocation, get_output_location

logger = logging.getLogger("converter.service")


class ConversionService:
    """
    Converts a batch sequentially. The first failing file aborts the batch; with
    rollback enabled, files this batch already wrote are removed before the error propagates.
    """

    def __init__(
        self,
        location: Optional[OutputLocation] = None,
        codec: Optional[PillowCodec] = None,
        rollback_on_failure: bool = ROLLBACK_ON_FAILURE,
    ):
        self.location = location or get_output_location()
        self.codec = codec or PillowCodec()
        self.rollback_on_failure = rollback_on_failure

    def convert(self, request: ConversionRequest) -> BatchResult:
        if not request.files:
            raise EmptyBatch("No image files uploaded")
        fmt = parse_format(request.format)
        options = resolve(fmt.value, request.quality, request.compression)
        output_dir = self.location.get()
        logger.info("Converting %s file(s) to %s in %s (%s)", len(request.files), fmt.value, output_dir, options)

        results: list[ConversionResult] = []
        written: list[Path] = []
        for upload in request.files:
            try:
                result = self._convert_one(upload, fmt.extension, options, output_dir)
            except ConverterError as e:
                logger.error("Conversion of %r to %s failed: %s", upload.filename, fmt.value, e)
                self._rollback(written)
                raise
            except Exception as e:
                logger.exception("Conversion of %r to %s failed: %s", upload.filename, fmt.value, e)
                self._rollback(written)
                raise CodecError(str(e)) from e
            written.append(Path(result.path))
            results.append(result)
        return BatchResult(output_dir=str(output_dir), results=results)

    def _convert_one(
        self,
        upload: UploadedFile,
        extension: str,
        options: FormatOptions,
        output_dir: Path,
    ) -> ConversionResult:
        original = normalize_filename(upload.filename)
        converted = f"{base_name(original)}.{extension}"
        out_path = output_dir / converted
        encoded = self.codec.encode(upload.data, options)
        try:
            out_path.write_bytes(encoded.data)
        except (OSError, ValueError) as e:
            raise WriteError(f"Cannot write {out_path}: {getattr(e, 'strerror', None) or e}") from e
        logger.info("Converted %s -> %s (%s bytes)", original, out_path.name, encoded.size)
        return ConversionResult(
            original=original,
            converted=converted,
            size=encoded.size,
            width=encoded.width,
            height=encoded.height,
            path=str(out_path),
        )

    def _rollback(self, written: list[Path]) -> None:
        """Remove outputs of the aborted batch."""
        if not self.rollback_on_failure or not written:
            return
        for p in dict.fromkeys(written):
            try:
                p.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not remove %s: %s", p, e)
        logger.info("Rolled back %s output file(s)", len(set(written)))
