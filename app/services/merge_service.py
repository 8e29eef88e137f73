import base64
from typing import Optional

import pymupdf
from loguru import logger
from pydantic import BaseModel, Field

from app.models.application import EmbeddedContent
from app.models.enums import AttachmentStatus

# Caption banner drawn across the top of every attached page
BANNER_HEIGHT = 22
BANNER_FONT_SIZE = 9
BANNER_MIN_FONT_SIZE = 5


class Attachment(BaseModel):
    name: str
    content: Optional[EmbeddedContent] = None
    caption: str = ""


class AttachmentOutcome(BaseModel):
    name: str
    status: AttachmentStatus
    pages: int = 0
    error: Optional[str] = None


class MergeResult(BaseModel):
    pdf_bytes: bytes
    pdf_base64: str
    outcomes: list[AttachmentOutcome] = Field(default_factory=list)
    fell_back: bool = False

    @property
    def page_count(self) -> int:
        with pymupdf.open(stream=self.pdf_bytes, filetype="pdf") as doc:
            return doc.page_count

    @property
    def dropped(self) -> list[AttachmentOutcome]:
        return [o for o in self.outcomes if o.status == AttachmentStatus.Failed]

    @property
    def merged(self) -> list[AttachmentOutcome]:
        return [o for o in self.outcomes if o.status == AttachmentStatus.Merged]


def _stamp_caption(page: pymupdf.Page, caption: str) -> bool:
    """
    White mask across the top edge, then the caption centred on it.
    Long captions are shrunk until they fit; returns False if none did.
    """
    rect = page.rect
    banner = pymupdf.Rect(0, 0, rect.width, BANNER_HEIGHT)
    page.draw_rect(banner, color=(1, 1, 1), fill=(1, 1, 1))

    text_rect = pymupdf.Rect(10, 5, rect.width - 10, BANNER_HEIGHT)
    for fontsize in range(BANNER_FONT_SIZE, BANNER_MIN_FONT_SIZE - 1, -1):
        rc = page.insert_textbox(
            text_rect,
            caption,
            fontsize=fontsize,
            fontname="helv",
            align=1,
            color=(0, 0, 0),
        )
        # rc < 0 means overflow and nothing was written
        if rc >= 0:
            return True
    return False


def _append_attachment(merged: pymupdf.Document, attachment: Attachment) -> None:
    with pymupdf.open(stream=attachment.content.data, filetype="pdf") as src:
        if src.needs_pass:
            raise ValueError("document is password protected")
        if src.page_count == 0:
            raise ValueError("document has no pages")
        start = merged.page_count
        merged.insert_pdf(src)

    if attachment.caption:
        for index in range(start, merged.page_count):
            if not _stamp_caption(merged[index], attachment.caption):
                logger.warning(f"Caption for {attachment.name} does not fit the banner on page {index + 1}; left blank")


def _result(pdf_bytes: bytes, outcomes: list[AttachmentOutcome], fell_back: bool = False) -> MergeResult:
    return MergeResult(
        pdf_bytes=pdf_bytes,
        pdf_base64=base64.b64encode(pdf_bytes).decode("ascii"),
        outcomes=outcomes,
        fell_back=fell_back,
    )


def _fallback(base_pdf: bytes, attachments: list[Attachment], reason: str) -> MergeResult:
    outcomes = []
    for attachment in attachments:
        if attachment.content is None:
            outcomes.append(AttachmentOutcome(name=attachment.name, status=AttachmentStatus.Skipped))
        else:
            outcomes.append(AttachmentOutcome(name=attachment.name, status=AttachmentStatus.Failed, error=reason))
    return _result(base_pdf, outcomes, fell_back=True)


# ------------------------------------------------------------
# DOCUMENT ASSEMBLER
# ------------------------------------------------------------
def merge_application_documents(base_pdf: bytes, attachments: list[Attachment]) -> MergeResult:
    """
    Appends each attachment behind the rendered form, in the given order.
    A bad attachment is dropped without aborting the rest; if the base
    itself cannot be processed the base bytes are returned unchanged.
    """
    try:
        merged = pymupdf.open(stream=base_pdf, filetype="pdf")
    except Exception:
        logger.exception("Base application PDF could not be opened; submitting it without attachments")
        return _fallback(base_pdf, attachments, "base document unreadable")

    if merged.page_count == 0:
        merged.close()
        logger.error("Base application PDF has no pages; submitting it without attachments")
        return _fallback(base_pdf, attachments, "base document unreadable")

    outcomes: list[AttachmentOutcome] = []
    try:
        for attachment in attachments:
            if attachment.content is None:
                outcomes.append(AttachmentOutcome(name=attachment.name, status=AttachmentStatus.Skipped))
                continue

            before = merged.page_count
            try:
                _append_attachment(merged, attachment)
            except Exception as e:
                # Roll back any pages this attachment already added
                if merged.page_count > before:
                    merged.delete_pages(from_page=before, to_page=merged.page_count - 1)
                logger.warning(f"Attachment {attachment.name} dropped from merge: {e}")
                outcomes.append(AttachmentOutcome(name=attachment.name, status=AttachmentStatus.Failed, error=str(e)))
                continue

            outcomes.append(AttachmentOutcome(
                name=attachment.name,
                status=AttachmentStatus.Merged,
                pages=merged.page_count - before,
            ))

        pdf_bytes = merged.tobytes(garbage=3, deflate=True)
    except Exception:
        logger.exception("Document assembly failed; falling back to the base application PDF")
        return _fallback(base_pdf, attachments, "assembly failed")
    finally:
        merged.close()

    result = _result(pdf_bytes, outcomes)
    logger.info(f"Merged {len(result.merged)} attachment(s), dropped {len(result.dropped)}")
    return result
