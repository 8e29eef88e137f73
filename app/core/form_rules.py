# app/core/form_rules.py
#
# Step validation table. Kept as data so that variants of the form (different
# required sets, different ceilings) only need a JSON file, see FORM_RULES_PATH.

from typing import Optional

from loguru import logger
from pydantic import BaseModel, Field

from app.core.config import settings
from app.core.score_sheets import ADMIN_TOTAL_CAP
from app.models.enums import FormStep

DEFAULT_REQUIRED_MESSAGE = "This field is required"


class RequiredField(BaseModel):
    field: str
    message: str = DEFAULT_REQUIRED_MESSAGE


class FieldMatch(BaseModel):
    field: str
    confirm_field: str
    message: str


class SumCap(BaseModel):
    fields: list[str]
    limit: float
    message: str


class CompleteGroup(BaseModel):
    group: str
    message: str


class AcknowledgementGate(BaseModel):
    flag: str
    message: str


class ConditionalRequirement(BaseModel):
    when_field: str
    equals: str
    required: list[RequiredField] = Field(default_factory=list)


class StepRule(BaseModel):
    acknowledgement: Optional[AcknowledgementGate] = None
    required: list[RequiredField] = Field(default_factory=list)
    matches: list[FieldMatch] = Field(default_factory=list)
    sum_caps: list[SumCap] = Field(default_factory=list)
    complete_groups: list[CompleteGroup] = Field(default_factory=list)
    conditional: list[ConditionalRequirement] = Field(default_factory=list)


class FormRules(BaseModel):
    steps: dict[int, StepRule] = Field(default_factory=dict)

    def for_step(self, step: int) -> StepRule:
        return self.steps.get(int(step), StepRule())


def _required(*fields: str, **messages: str) -> list[RequiredField]:
    return [RequiredField(field=f, message=messages.get(f, DEFAULT_REQUIRED_MESSAGE)) for f in fields]


DEFAULT_RULES = FormRules(steps={
    FormStep.INSTRUCTIONS: StepRule(
        acknowledgement=AcknowledgementGate(
            flag="instructions_read",
            message="Please confirm that you have read the instructions before proceeding.",
        ),
    ),
    FormStep.PERSONAL: StepRule(
        required=_required(
            "post_applied_for", "category", "advertisement_ref", "name", "father_name", "dob",
            "email", "confirm_email", "contact_no1", "permanent_address", "correspondence_address",
            "photo",
            confirm_email="Please re-enter your email",
            photo="Photograph is required",
        ),
        matches=[
            FieldMatch(field="email", confirm_field="confirm_email", message="Email addresses do not match."),
        ],
    ),
    FormStep.ACADEMIC: StepRule(
        required=_required(
            "academic_masters", "academic_graduation", "academic_12th", "academic_matric", "file_academic",
            file_academic="Academic document is required",
        ),
    ),
    FormStep.EXPERIENCE: StepRule(
        required=_required(
            "teaching_exp_above15", "file_teaching",
            "admin_joint_director", "admin_registrar", "admin_head", "file_admin_skill",
            file_teaching="Teaching experience document is required",
            file_admin_skill="Administrative skill document is required",
        ),
        sum_caps=[
            SumCap(
                fields=["admin_joint_director", "admin_registrar", "admin_head"],
                limit=ADMIN_TOTAL_CAP,
                message=f"Total marks for Administrative Responsibilities cannot exceed {ADMIN_TOTAL_CAP}.",
            ),
        ],
    ),
    FormStep.RESPONSIBILITIES: StepRule(
        required=_required(
            "file_admin",
            file_admin="Responsibilities/Committees document is required",
        ),
    ),
    FormStep.RESEARCH: StepRule(
        acknowledgement=AcknowledgementGate(
            flag="final_note_confirmed",
            message="Please acknowledge that you have read the instructions by checking the box.",
        ),
        required=_required(
            "utr_no", "draft_date", "draft_amount", "bank_name", "file_research",
            file_research="Research document is required",
        ),
        complete_groups=[
            CompleteGroup(
                group="research",
                message="All fields in Table 2 (Research Score) are mandatory. Please enter '0' if not applicable.",
            ),
        ],
    ),
    FormStep.DECLARATION: StepRule(
        required=_required(
            "parent_name", "place", "date", "signature",
            signature="Signature is required",
        ),
        conditional=[
            ConditionalRequirement(
                when_field="has_noc",
                equals="yes",
                required=_required(
                    "emp_name", "emp_designation", "emp_dept", "file_noc",
                    file_noc="NOC Document is required",
                ),
            ),
        ],
    ),
})


def load_form_rules(path: Optional[str] = None) -> FormRules:
    """
    Loads the step table from a JSON file shaped like FormRules,
    e.g. {"steps": {"1": {"required": [{"field": "name"}]}}}.
    Falls back to the built-in table when no path is configured.
    """
    path = path or settings.FORM_RULES_PATH
    if not path:
        return DEFAULT_RULES

    with open(path, "r", encoding="utf-8") as f:
        rules = FormRules.model_validate_json(f.read())

    logger.info(f"Loaded form validation rules from {path} ({len(rules.steps)} steps)")
    return rules


active_rules = load_form_rules()
