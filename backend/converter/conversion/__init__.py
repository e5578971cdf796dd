from .service import ConversionService
from .models import BatchResult, ConversionRequest, ConversionResult, OutputFormat, UploadedFile

__all__ = ["ConversionService", "BatchResult", "ConversionRequest", "ConversionResult", "OutputFormat", "UploadedFile"]
