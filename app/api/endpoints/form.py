from fastapi import APIRouter
from pydantic import BaseModel

from app.core import form_rules
from app.core.form_rules import FormRules
from app.core.score_sheets import (
    ACADEMIC_LINES,
    ADMIN_LINES,
    ADMIN_TOTAL_CAP,
    COMMITTEE_LINES,
    RESEARCH_LINES,
    RESPONSIBILITY_LINES,
    TEACHING_LINES,
    ResearchLine,
    ScoreLine,
)
from app.models.enums import FormStep

router = APIRouter(
    prefix="/api/form",
    tags=["Form Metadata"]
)

# ----------------------------------------------------------
# SCHEMAS
# ----------------------------------------------------------
class StepOption(BaseModel):
    step: int
    name: str

class FormStepsRead(BaseModel):
    steps: list[StepOption]
    rules: FormRules

class ScoreSheetsRead(BaseModel):
    academic: list[ScoreLine]
    teaching: list[ScoreLine]
    admin: list[ScoreLine]
    admin_total_cap: float
    responsibilities: list[ScoreLine]
    committees: list[ScoreLine]
    research: list[ResearchLine]

# ----------------------------------------------------------
# 1. STEPS + ACTIVE VALIDATION TABLE
# ----------------------------------------------------------
@router.get("/steps", response_model=FormStepsRead)
async def get_form_steps():
    return FormStepsRead(
        steps=[StepOption(step=int(s), name=s.name.title()) for s in FormStep],
        rules=form_rules.active_rules,
    )

# ----------------------------------------------------------
# 2. SCORE SHEETS (labels, criteria, caps)
# ----------------------------------------------------------
@router.get("/score-sheets", response_model=ScoreSheetsRead)
async def get_score_sheets():
    return ScoreSheetsRead(
        academic=ACADEMIC_LINES,
        teaching=TEACHING_LINES,
        admin=ADMIN_LINES,
        admin_total_cap=ADMIN_TOTAL_CAP,
        responsibilities=RESPONSIBILITY_LINES,
        committees=COMMITTEE_LINES,
        research=RESEARCH_LINES,
    )
