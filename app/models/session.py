# app/models/session.py

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.application import ApplicationRecord
from app.models.enums import EmailStatus, FormStep, SubmissionStage


class Acknowledgements(BaseModel):
    instructions_read: bool = False
    final_note_confirmed: bool = False


class VerificationChecklist(BaseModel):
    name: bool = False
    father_name: bool = False
    post: bool = False
    dob: bool = False
    category: bool = False
    photo: bool = False
    signature: bool = False
    documents: bool = False
    table2: bool = False
    payment: bool = False

    @property
    def is_complete(self) -> bool:
        return all(getattr(self, key) for key in type(self).model_fields)


class DroppedAttachment(BaseModel):
    name: str
    error: Optional[str] = None


class SubmissionState(BaseModel):
    stage: SubmissionStage = SubmissionStage.Idle
    progress_label: str = ""
    stages: list[SubmissionStage] = Field(default_factory=list)
    email_status: EmailStatus = EmailStatus.Idle
    is_success: bool = False
    message: Optional[str] = None
    download_filename: Optional[str] = None
    download_path: Optional[str] = None
    download_url: Optional[str] = None
    dropped_attachments: list[DroppedAttachment] = Field(default_factory=list)
    submitted_at: Optional[datetime] = None

    @property
    def in_flight(self) -> bool:
        return self.stage in (SubmissionStage.Generating, SubmissionStage.Merging, SubmissionStage.Sending)


class ApplicationSession(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    record: ApplicationRecord = Field(default_factory=ApplicationRecord)
    errors: dict[str, str] = Field(default_factory=dict)
    step: FormStep = FormStep.INSTRUCTIONS
    acknowledgements: Acknowledgements = Field(default_factory=Acknowledgements)
    checklist: VerificationChecklist = Field(default_factory=VerificationChecklist)
    submission: SubmissionState = Field(default_factory=SubmissionState)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()
