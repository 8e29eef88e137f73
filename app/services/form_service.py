import random
import string
from datetime import datetime
from typing import Any

from loguru import logger
from pydantic import ValidationError

from app.core.config import settings
from app.core.constants import BINARY_FIELDS
from app.core.score_sheets import RESEARCH_ITEMS, check_score, research_cap
from app.models.application import SCALAR_FIELDS, ApplicationRecord
from app.models.enums import FormStep
from app.models.session import (
    Acknowledgements,
    ApplicationSession,
    SubmissionState,
    VerificationChecklist,
)

# application_no is assigned by the server and never edited
EDITABLE_FIELDS = set(SCALAR_FIELDS) - {"application_no"}


def generate_application_no() -> str:
    """Generates a format like TRGC-2026-XH7B2"""
    year = datetime.now().year
    suffix = ''.join(random.choices(string.ascii_uppercase + string.digits, k=5))
    return f"{settings.APPLICATION_NO_PREFIX}-{year}-{suffix}"


def new_record() -> ApplicationRecord:
    return ApplicationRecord(application_no=generate_application_no())


def new_session() -> ApplicationSession:
    return ApplicationSession(record=new_record())


def reset_session(session: ApplicationSession) -> ApplicationSession:
    """'Start new application': everything back to defaults, same session id."""
    session.record = new_record()
    session.errors = {}
    session.step = FormStep.INSTRUCTIONS
    session.acknowledgements = Acknowledgements()
    session.checklist = VerificationChecklist()
    session.submission = SubmissionState()
    session.touch()
    logger.info(f"Session {session.id} reset to a blank application")
    return session


def _first_error(e: ValidationError) -> str:
    errors = e.errors()
    if not errors:
        return str(e)
    msg = errors[0].get("msg", "Invalid value")
    return msg.removeprefix("Value error, ")


# ------------------------------------------------------------
# SINGLE ENTRY POINT FOR ONE FIELD
# ------------------------------------------------------------
def set_field(session: ApplicationSession, field: str, value: Any) -> None:
    """
    Every mutation of a record field goes through here so that the
    field's inline error is cleared as soon as it is edited.
    """
    if field not in EDITABLE_FIELDS and field not in BINARY_FIELDS:
        raise ValueError(f"Unknown field '{field}'")

    try:
        setattr(session.record, field, value)
    except ValidationError as e:
        raise ValueError(f"{field}: {_first_error(e)}")

    session.errors.pop(field, None)
    session.touch()


def update_fields(session: ApplicationSession, updates: dict[str, Any]) -> ApplicationRecord:
    """
    Applies a batch of scalar edits all-or-nothing: any unknown field
    or capped score out of range leaves the record untouched.
    """
    unknown = sorted(k for k in updates if k not in EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown or read-only field(s): {', '.join(unknown)}")

    candidate = session.record.model_copy()
    for field, value in updates.items():
        try:
            setattr(candidate, field, value)
        except ValidationError as e:
            raise ValueError(f"{field}: {_first_error(e)}")

    if "faculty" in updates:
        _check_research_against_faculty(candidate)

    for field, value in updates.items():
        set_field(session, field, getattr(candidate, field))

    return session.record


def _check_research_against_faculty(record: ApplicationRecord) -> None:
    for key in RESEARCH_ITEMS:
        value = getattr(record.research, key)
        try:
            check_score(value, research_cap(key, record.faculty))
        except ValueError as e:
            raise ValueError(f"research.{key}: {e} for the selected faculty")


def update_research(session: ApplicationSession, values: dict[str, Any]) -> ApplicationRecord:
    unknown = sorted(k for k in values if k not in RESEARCH_ITEMS)
    if unknown:
        raise ValueError(f"Unknown research field(s): {', '.join(unknown)}")

    faculty = session.record.faculty
    candidate = session.record.research.model_copy()
    for key, value in values.items():
        try:
            check_score(str(value), research_cap(key, faculty))
            setattr(candidate, key, str(value))
        except ValidationError as e:
            raise ValueError(f"research.{key}: {_first_error(e)}")
        except ValueError as e:
            raise ValueError(f"research.{key}: {e}")

    session.record.research = candidate
    for key in values:
        session.errors.pop(f"research.{key}", None)
    session.touch()
    return session.record


# ------------------------------------------------------------
# GATE FLAGS
# ------------------------------------------------------------
def update_acknowledgements(session: ApplicationSession, flags: dict[str, bool]) -> Acknowledgements:
    _apply_flags(session.acknowledgements, flags)
    session.touch()
    return session.acknowledgements


def update_checklist(session: ApplicationSession, flags: dict[str, bool]) -> VerificationChecklist:
    _apply_flags(session.checklist, flags)
    session.touch()
    return session.checklist


def _apply_flags(target, flags: dict[str, bool]) -> None:
    unknown = sorted(k for k in flags if k not in type(target).model_fields)
    if unknown:
        raise ValueError(f"Unknown flag(s): {', '.join(unknown)}")
    for key, value in flags.items():
        setattr(target, key, bool(value))
