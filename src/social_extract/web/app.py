"""FastAPI web server for the social-media screenshot extractor.

Accepts screenshot uploads, sends them to the vision model, and returns both
the canonical table text and the normalized rows.  Also exposes the
normalizer and the tab-separated export on their own so the frontend can
re-parse an edited reply or copy a renamed table without another model call.

Usage:
    python -m social_extract.web.app
    # => Uvicorn running on http://localhost:8000
"""

import logging
import os

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from social_extract.extractor.config import AUTO_DETECT, IMAGE_EXTENSIONS, PLATFORMS, ROW_LOCALE
from social_extract.extractor.errors import ConfigurationError, ExtractionError, PayloadTooLargeError, TransientExtractionError
from social_extract.extractor.invoke import ImageInput, extract_reply, mime_type_for
from social_extract.normalizer.export import export_tsv
from social_extract.normalizer.pipeline import NormalizedReply, normalize
from social_extract.normalizer.schema import DEFAULT_SCHEMA_VERSION, SCHEMAS, Row, RowSchema, get_schema

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

HOST = os.getenv("EXTRACT_HOST", "0.0.0.0")
PORT = int(os.getenv("EXTRACT_PORT", "8000"))

# HTTP status returned for each extraction failure class
_ERROR_STATUS: dict[type[ExtractionError], int] = {
    ConfigurationError: 500,
    PayloadTooLargeError: 413,
    TransientExtractionError: 503,
}


# ---------------------------------------------------------------------------
# Request / response bodies
# ---------------------------------------------------------------------------


class TableResponse(BaseModel):
    """Normalized table returned to the frontend."""

    canonical_text: str
    rows: list[Row]
    row_count: int
    schema_version: str
    raw_text: str | None = None


class NormalizeRequest(BaseModel):
    raw_text: str = ""
    schema_version: str = DEFAULT_SCHEMA_VERSION
    locale: str = ROW_LOCALE


class ExportRequest(BaseModel):
    rows: list[Row] = Field(default_factory=list)
    header_labels: dict[str, str] | list[str] | None = None
    include_index: bool = True
    index_label: str = "#"
    schema_version: str = DEFAULT_SCHEMA_VERSION


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_schema(version: str, locale: str = ROW_LOCALE) -> RowSchema:
    """Return the requested schema or raise 422 for an unknown version."""
    try:
        return get_schema(version, locale)
    except KeyError as exc:
        raise HTTPException(status_code=422, detail=f"Unknown schema version '{version}'. Known: {sorted(SCHEMAS)}") from exc


def _table_response(result: NormalizedReply, schema: RowSchema, raw_text: str | None = None) -> TableResponse:
    return TableResponse(
        canonical_text=result.canonical_text,
        rows=result.rows,
        row_count=result.row_count,
        schema_version=schema.version,
        raw_text=raw_text,
    )


def _error_response(exc: ExtractionError) -> JSONResponse:
    """Map an extraction failure to a JSON error body the frontend can tell apart from zero rows."""
    status = next((code for cls, code in _ERROR_STATUS.items() if isinstance(exc, cls)), 502)
    return JSONResponse(status_code=status, content={"detail": exc.message, "kind": exc.kind})


async def _read_images(files: list[UploadFile]) -> list[ImageInput]:
    """Read uploaded files into memory, rejecting anything that is not a supported image."""
    images: list[ImageInput] = []
    for upload in files:
        if not upload.filename:
            continue
        mime_type = mime_type_for(upload.filename)
        if mime_type is None:
            raise HTTPException(
                status_code=415,
                detail=f"Unsupported file '{upload.filename}'. Supported image types: {', '.join(sorted(IMAGE_EXTENSIONS))}",
            )
        data = await upload.read()
        images.append(ImageInput(name=upload.filename, data=data, mime_type=mime_type))
        logger.info("Received upload: %s (%.1f KB)", upload.filename, len(data) / 1024)
    return images


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(title="Social Media Data Extractor")


@app.get("/api/platforms")
async def list_platforms():
    """Return the platform picker options."""
    return [{"id": key, "name": name} for key, name in PLATFORMS.items()]


@app.get("/api/schemas")
async def list_schemas():
    """Return every registered row schema with its columns and column gate."""
    return [
        {
            "version": schema.version,
            "fields": list(schema.field_names),
            "min_columns": schema.min_columns,
            "default": schema.version == DEFAULT_SCHEMA_VERSION,
        }
        for schema in SCHEMAS.values()
    ]


@app.post("/api/extract", response_model=TableResponse)
async def extract(
    files: list[UploadFile] = File(default=[]),
    platform: str = Form(AUTO_DETECT),
    schema_version: str = Form(DEFAULT_SCHEMA_VERSION),
):
    """Send uploaded screenshots to the vision model and return the normalized table."""
    schema = _resolve_schema(schema_version)
    images = await _read_images(files)
    if not images:
        raise HTTPException(status_code=400, detail="At least one image is required")
    if platform not in PLATFORMS:
        raise HTTPException(status_code=422, detail=f"Unknown platform '{platform}'")

    try:
        # The SDK call is blocking; run it in the threadpool
        reply = await run_in_threadpool(extract_reply, images, platform)
    except ExtractionError as exc:
        logger.warning("Extraction failed (%s): %s", exc.kind, exc.message)
        return _error_response(exc)

    result = normalize(reply, schema)
    logger.info("Extraction complete: %d rows from %d image(s)", result.row_count, len(images))
    return _table_response(result, schema, raw_text=reply)


@app.post("/api/normalize", response_model=TableResponse)
async def normalize_reply(body: NormalizeRequest):
    """Re-parse a reply (e.g. after the user edited the raw text) without calling the model."""
    schema = _resolve_schema(body.schema_version, body.locale)
    result = normalize(body.raw_text, schema)
    return _table_response(result, schema)


@app.post("/api/export", response_class=PlainTextResponse)
async def export(body: ExportRequest):
    """Render rows as a tab-separated block for pasting into a spreadsheet."""
    schema = _resolve_schema(body.schema_version)
    try:
        tsv = export_tsv(
            body.rows,
            body.header_labels,
            include_index=body.include_index,
            index_label=body.index_label,
            schema=schema,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return PlainTextResponse(tsv, media_type="text/tab-separated-values; charset=utf-8")


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main():
    """Start the web server via uvicorn."""
    import uvicorn  # pylint: disable=import-outside-toplevel

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
