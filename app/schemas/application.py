# app/schemas/application.py

from pydantic import BaseModel, Field
from typing import Any, Optional
from uuid import UUID
from datetime import datetime

from app.core.constants import BINARY_FIELDS
from app.models.application import EmbeddedContent
from app.models.enums import EmailStatus, SubmissionStage
from app.models.session import (
    Acknowledgements,
    ApplicationSession,
    DroppedAttachment,
    SubmissionState,
    VerificationChecklist,
)


# ============================================================
# UPLOAD SUMMARY (bytes are never echoed back)
# ============================================================
class UploadRead(BaseModel):
    field: str
    filename: Optional[str] = None
    mime_type: str
    size: int

    @classmethod
    def from_content(cls, field: str, content: EmbeddedContent) -> "UploadRead":
        return cls(field=field, filename=content.filename, mime_type=content.mime_type, size=content.size)


# ============================================================
# REQUEST BODIES
# ============================================================
class FieldUpdateRequest(BaseModel):
    fields: dict[str, Any]


class ResearchUpdateRequest(BaseModel):
    values: dict[str, Any]


class AcknowledgementUpdate(BaseModel):
    instructions_read: Optional[bool] = None
    final_note_confirmed: Optional[bool] = None

    def flags(self) -> dict[str, bool]:
        return self.model_dump(exclude_none=True)


class ChecklistUpdate(BaseModel):
    name: Optional[bool] = None
    father_name: Optional[bool] = None
    post: Optional[bool] = None
    dob: Optional[bool] = None
    category: Optional[bool] = None
    photo: Optional[bool] = None
    signature: Optional[bool] = None
    documents: Optional[bool] = None
    table2: Optional[bool] = None
    payment: Optional[bool] = None

    def flags(self) -> dict[str, bool]:
        return self.model_dump(exclude_none=True)


# ============================================================
# STEP RESULT (next / back)
# ============================================================
class StepResultRead(BaseModel):
    ok: bool
    step: int
    errors: dict[str, str] = Field(default_factory=dict)
    alert: Optional[str] = None
    # Client scrolls to the top on every successful move
    scroll_to_top: bool = False


# ============================================================
# SUBMISSION
# ============================================================
class SubmissionRead(BaseModel):
    stage: SubmissionStage
    stages: list[SubmissionStage]
    email_status: EmailStatus
    is_success: bool
    message: Optional[str]
    download_filename: Optional[str]
    download_url: Optional[str]
    dropped_attachments: list[DroppedAttachment]
    submitted_at: Optional[datetime]

    @classmethod
    def from_state(cls, state: SubmissionState) -> "SubmissionRead":
        return cls(**state.model_dump(exclude={"download_path", "progress_label"}))


# ============================================================
# SESSION READ
# ============================================================
class SessionRead(BaseModel):
    id: UUID
    step: int
    record: dict[str, Any]
    files: dict[str, Optional[UploadRead]]
    errors: dict[str, str]
    acknowledgements: Acknowledgements
    checklist: VerificationChecklist
    checklist_complete: bool
    submission: SubmissionRead
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_session(cls, session: ApplicationSession) -> "SessionRead":
        files = {}
        for field in BINARY_FIELDS:
            content = getattr(session.record, field)
            files[field] = UploadRead.from_content(field, content) if content else None

        return cls(
            id=session.id,
            step=int(session.step),
            record=session.record.payload(),
            files=files,
            errors=session.errors,
            acknowledgements=session.acknowledgements,
            checklist=session.checklist,
            checklist_complete=session.checklist.is_complete,
            submission=SubmissionRead.from_state(session.submission),
            created_at=session.created_at,
            updated_at=session.updated_at,
        )
