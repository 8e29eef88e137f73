import io
from typing import Optional

import pymupdf
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool
from loguru import logger
from PIL import Image, UnidentifiedImageError

from app.core.config import settings
from app.core.constants import (
    ALLOWED_DOCUMENT_TYPES,
    ALLOWED_IMAGE_TYPES,
    BINARY_FIELDS,
    IMAGE_FIELDS,
    RESEARCH_UPLOAD_FIELD,
)
from app.models.application import EmbeddedContent
from app.models.session import ApplicationSession
from app.services.form_service import set_field


class UploadRejected(ValueError):
    """File refused before it reached the record (type, size or unreadable content)."""


def upload_limit_for(field: str) -> int:
    if field == RESEARCH_UPLOAD_FIELD:
        return settings.MAX_RESEARCH_UPLOAD_BYTES
    return settings.MAX_UPLOAD_BYTES


def _limit_label(limit: int) -> str:
    return f"{limit / (1024 * 1024):g}MB"


def _verify_image(data: bytes) -> None:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise UploadRejected(f"Image could not be read: {e}")


def _verify_pdf(data: bytes) -> int:
    try:
        doc = pymupdf.open(stream=data, filetype="pdf")
    except Exception as e:
        raise UploadRejected(f"PDF could not be read: {e}")
    try:
        if doc.needs_pass:
            raise UploadRejected("Password-protected PDFs cannot be attached.")
        if doc.page_count == 0:
            raise UploadRejected("PDF has no pages.")
        return doc.page_count
    finally:
        doc.close()


def _decode(field: str, data: bytes) -> None:
    if field in IMAGE_FIELDS:
        _verify_image(data)
    else:
        _verify_pdf(data)


async def ingest_bytes(
    session: ApplicationSession,
    field: str,
    data: bytes,
    content_type: Optional[str],
    filename: Optional[str] = None,
) -> EmbeddedContent:
    """
    Size-checks, decodes and stores one upload.
    Nothing is written to the record unless every check passes; concurrent
    uploads to the same field resolve as last completion wins.
    """
    if field not in BINARY_FIELDS:
        raise ValueError(f"'{field}' does not accept uploads")

    allowed = ALLOWED_IMAGE_TYPES if field in IMAGE_FIELDS else ALLOWED_DOCUMENT_TYPES
    if content_type not in allowed:
        kind = "JPEG/PNG images" if field in IMAGE_FIELDS else "PDF documents"
        raise UploadRejected(f"Only {kind} are allowed for this field.")

    limit = upload_limit_for(field)
    if len(data) > limit:
        logger.warning(f"Upload to {field} rejected: {len(data)} bytes exceeds {limit}")
        raise UploadRejected(
            f"File size too large. Limit is {_limit_label(limit)}. "
            "Please use the Google Drive link option for larger files."
        )

    await run_in_threadpool(_decode, field, data)

    content = EmbeddedContent(mime_type=content_type, data=data, filename=filename)
    set_field(session, field, content)
    logger.info(f"Session {session.id}: stored {field} ({len(data)} bytes)")
    return content


async def ingest_upload(session: ApplicationSession, field: str, file: UploadFile) -> EmbeddedContent:
    data = await file.read()
    return await ingest_bytes(session, field, data, file.content_type, file.filename)


def clear_upload(session: ApplicationSession, field: str) -> None:
    if field not in BINARY_FIELDS:
        raise ValueError(f"'{field}' does not accept uploads")
    set_field(session, field, None)
