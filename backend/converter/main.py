"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from converter.api.routes import router
from converter.config import CORS_ORIGINS, HOST, PORT, PUBLIC_DIR, logger as config_logger
from converter.errors import ConverterError
from converter.output_dir import get_output_location

logging.getLogger("uvicorn").setLevel(logging.INFO)
api_logger = logging.getLogger("converter.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    output_dir = get_output_location().get()
    config_logger.info("Image converter started")
    config_logger.info("Output folder: %s", output_dir)
    config_logger.info("Open in browser: http://localhost:%s", PORT)
    yield
    config_logger.info("Image converter shutting down")


app = FastAPI(
    title="Image Converter API",
    description="Batch-convert uploaded images to JPEG, PNG, WebP, AVIF, TIFF or GIF.",
    version="1.0.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def converter_error_handler(request: Request, exc: ConverterError):
    api_logger.warning("%s %s -> %s %s: %s", request.method, request.url.path, exc.status_code, type(exc).__name__, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Render malformed bodies as 400 with the same {error} shape as other failures."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


app.add_exception_handler(ConverterError, converter_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.include_router(router)

if PUBLIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=PUBLIC_DIR, html=True), name="public")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("converter.main:app", host=HOST, port=PORT)
