"""API routes for output-folder management and batch conversion."""
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile

from converter.config import MAX_IMAGE_SIZE_BYTES, MAX_IMAGES_PER_UPLOAD
from converter.conversion.codec import supported_formats
from converter.conversion.models import SUPPORTED_FORMATS, ConversionRequest, UploadedFile
from converter.conversion.service import ConversionService
from converter.errors import FileTooLarge, TooManyFiles
from converter.output_dir import OutputLocation, get_output_location

logger = logging.getLogger("converter.api")
router = APIRouter(prefix="/api", tags=["converter"])


def get_service(location: OutputLocation = Depends(get_output_location)) -> ConversionService:
    return ConversionService(location=location)


async def _read_uploads(files: list[UploadFile]) -> list[UploadedFile]:
    """Read every upload into memory, enforcing the per-request limits first."""
    if len(files) > MAX_IMAGES_PER_UPLOAD:
        raise TooManyFiles(f"Max {MAX_IMAGES_PER_UPLOAD} images per upload")
    max_mb = MAX_IMAGE_SIZE_BYTES // (1024 * 1024)
    uploads: list[UploadedFile] = []
    for file in files:
        chunks: list[bytes] = []
        total = 0
        while chunk := await file.read(1024 * 1024):
            total += len(chunk)
            if total > MAX_IMAGE_SIZE_BYTES:
                raise FileTooLarge(f"File too large: {file.filename} (max {max_mb} MB)")
            chunks.append(chunk)
        uploads.append(UploadedFile(filename=file.filename or "", data=b"".join(chunks)))
    return uploads


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/formats")
def get_formats():
    return {"formats": SUPPORTED_FORMATS, "available": supported_formats()}


@router.get("/limits")
def get_limits():
    """Return upload limits for the client."""
    return {
        "max_images_per_upload": MAX_IMAGES_PER_UPLOAD,
        "max_image_size_mb": MAX_IMAGE_SIZE_BYTES // (1024 * 1024),
        "max_image_size_bytes": MAX_IMAGE_SIZE_BYTES,
    }


@router.post("/set-output")
def set_output(
    output_path: Optional[str] = Body(None, embed=True, alias="outputPath"),
    location: OutputLocation = Depends(get_output_location),
):
    output_dir = location.set(output_path)
    return {"success": True, "outputDir": str(output_dir)}


@router.get("/output-dir")
def output_dir(location: OutputLocation = Depends(get_output_location)):
    return {"outputDir": str(location.get())}


@router.post("/convert")
async def convert(
    images: Optional[list[UploadFile]] = File(None),
    format: Optional[str] = Form(None),
    quality: Optional[str] = Form(None),
    compression: Optional[str] = Form(None),
    svc: ConversionService = Depends(get_service),
):
    """Convert all uploaded images to one format. Any per-file failure fails the whole batch."""
    request = ConversionRequest(
        format=format,
        files=await _read_uploads(images or []),
        quality=quality,
        compression=compression,
    )
    batch = await asyncio.to_thread(svc.convert, request)
    return batch.to_dict()


@router.post("/open-folder")
def open_folder(location: OutputLocation = Depends(get_output_location)):
    location.open_in_file_manager()
    return {"success": True}
