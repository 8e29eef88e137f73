import os
from datetime import datetime
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from loguru import logger

from app.core.config import settings
from app.core.constants import ATTACHMENT_CAPTIONS, DOCUMENT_FIELDS, RECRUITMENT_EMAIL
from app.core.storage import safe_filename_part, save_download
from app.models.application import ApplicationRecord, EmbeddedContent
from app.models.enums import FINAL_STEP, EmailStatus, SubmissionStage
from app.models.session import ApplicationSession, DroppedAttachment, SubmissionState
from app.services.merge_service import Attachment, MergeResult, merge_application_documents
from app.services.pdf_service import generate_application_pdf
from app.services.submission_client import SubmissionClient
from app.services.validation_service import validate_step

PROGRESS_LABELS = {
    SubmissionStage.Generating: "Generating Application PDF...",
    SubmissionStage.Merging: "Merging Documents (This may take a moment)...",
    SubmissionStage.Sending: "Sending Email to Server...",
}
DOWNLOAD_LABEL = "Downloading Copy..."

SUCCESS_MESSAGE = "Your form and all attached documents have been merged and submitted."
SEND_FAILED_MESSAGE = (
    "Your application PDF was saved but could not be sent to the college automatically. "
    f"Please download it and email it to {RECRUITMENT_EMAIL}."
)
UNEXPECTED_MESSAGE = "An unexpected error occurred during submission."
CHECKLIST_MESSAGE = "Please complete the verification checklist."


class AlreadySubmitted(ValueError):
    pass


class SubmissionInProgress(AlreadySubmitted):
    pass


class SubmissionBlocked(ValueError):
    def __init__(self, message: str, errors: dict[str, str] | None = None):
        super().__init__(message)
        self.errors = errors or {}


# ------------------------------------------------------------
# FILE NAMES
# ------------------------------------------------------------
def _name_slug(record: ApplicationRecord) -> str:
    return safe_filename_part(record.name, "Application")


def download_filename(record: ApplicationRecord) -> str:
    return f"{_name_slug(record)}_Complete_App.pdf"


def transmission_filename(record: ApplicationRecord) -> str:
    return f"{_name_slug(record)}_Application.pdf"


def gather_attachments(record: ApplicationRecord) -> list[Attachment]:
    """Fixed merge order; the NOC only travels when the applicant said yes."""
    attachments = []
    for field in DOCUMENT_FIELDS:
        content = getattr(record, field)
        if field == "file_noc" and record.has_noc != "yes":
            content = None
        attachments.append(Attachment(name=field, content=content, caption=ATTACHMENT_CAPTIONS[field]))
    return attachments


def load_instructions_attachment() -> Optional[Attachment]:
    """The college's instructions PDF, placed right behind the form when configured."""
    path = settings.INSTRUCTIONS_PDF_PATH
    if not path:
        return None
    if not os.path.isfile(path):
        logger.warning(f"Instructions PDF not found at {path}; submitting without it")
        return None

    with open(path, "rb") as f:
        data = f.read()
    return Attachment(
        name="instructions",
        content=EmbeddedContent(mime_type="application/pdf", data=data, filename=os.path.basename(path)),
    )


def assemble_documents(form_pdf: bytes, record: ApplicationRecord) -> MergeResult:
    attachments = gather_attachments(record)
    instructions = load_instructions_attachment()
    if instructions:
        attachments.insert(0, instructions)
    return merge_application_documents(form_pdf, attachments)


# ------------------------------------------------------------
# PRECONDITIONS
# ------------------------------------------------------------
def ensure_submittable(session: ApplicationSession) -> None:
    if session.submission.in_flight:
        raise SubmissionInProgress("This application is already being submitted. Please wait for it to finish.")

    if session.submission.is_success:
        raise AlreadySubmitted("This application has already been submitted. Start a new application to apply again.")

    if session.step != FINAL_STEP:
        raise SubmissionBlocked("Complete all steps of the form before submitting.")

    result = validate_step(session.step, session.record, session.acknowledgements)
    if not result.ok:
        session.errors = dict(result.errors)
        raise SubmissionBlocked(result.alert or "Please correct the highlighted fields.", result.errors)

    if not session.checklist.is_complete:
        raise SubmissionBlocked(CHECKLIST_MESSAGE)


def _enter(state: SubmissionState, stage: SubmissionStage, session: ApplicationSession) -> None:
    state.stage = stage
    state.stages.append(stage)
    state.progress_label = PROGRESS_LABELS.get(stage, "")
    logger.info(f"Session {session.id}: submission stage -> {stage.value}")


# ------------------------------------------------------------
# SUBMISSION ORCHESTRATOR
# ------------------------------------------------------------
async def submit_application(session: ApplicationSession, client: SubmissionClient) -> SubmissionState:
    """
    generating -> merging -> (download) -> sending -> success | error.
    Exactly one transmission attempt. Any unexpected failure still ends
    in a finished state so the applicant can keep the downloaded copy.
    """
    ensure_submittable(session)

    # In flight from here on, before the first await
    record = session.record
    state = SubmissionState(stage=SubmissionStage.Generating, email_status=EmailStatus.Sending)
    session.submission = state

    try:
        # 1. Render
        _enter(state, SubmissionStage.Generating, session)
        form_pdf = await run_in_threadpool(generate_application_pdf, record)

        # 2-3. Gather & merge
        _enter(state, SubmissionStage.Merging, session)
        merge = await run_in_threadpool(assemble_documents, form_pdf, record)
        state.dropped_attachments = [DroppedAttachment(name=o.name, error=o.error) for o in merge.dropped]
        for dropped in state.dropped_attachments:
            logger.warning(f"Session {session.id}: {dropped.name} not included ({dropped.error})")

        # 4. Applicant's copy
        state.progress_label = DOWNLOAD_LABEL
        filename = download_filename(record)
        path, url = await run_in_threadpool(save_download, session.id, filename, merge.pdf_bytes)
        state.download_filename = filename
        state.download_path = path
        state.download_url = url

        # 5. Transmit
        _enter(state, SubmissionStage.Sending, session)
        result = await client.send(record, merge.pdf_base64, transmission_filename(record))

        if result.success:
            _enter(state, SubmissionStage.Success, session)
            state.email_status = EmailStatus.Sent
            state.message = SUCCESS_MESSAGE
        else:
            _enter(state, SubmissionStage.Error, session)
            state.email_status = EmailStatus.Failed
            state.message = f"{SEND_FAILED_MESSAGE} ({result.message})" if result.message else SEND_FAILED_MESSAGE

    except Exception:
        logger.exception(f"Session {session.id}: submission failed unexpectedly")
        _enter(state, SubmissionStage.Error, session)
        state.email_status = EmailStatus.Failed
        state.message = UNEXPECTED_MESSAGE

    state.progress_label = ""
    state.is_success = True
    state.submitted_at = datetime.utcnow()
    session.touch()
    return state
