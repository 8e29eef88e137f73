# app/models/application.py

import base64
from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from app.core.constants import BINARY_FIELDS
from app.core.score_sheets import RESEARCH_CAPS, SCORE_CAPS, check_score


# ============================================================
# EMBEDDED CONTENT (uploaded photo / signature / PDF)
# ============================================================
class EmbeddedContent(BaseModel):
    mime_type: str
    data: bytes
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


# ============================================================
# TABLE 2: ACADEMIC / RESEARCH SCORE
# ============================================================
class ResearchScoreTable(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        coerce_numbers_to_str=True,
    )

    res_papers: str = ""
    res_books_int: str = ""
    res_books_nat: str = ""
    res_chapter: str = ""
    res_editor_int: str = ""
    res_editor_nat: str = ""
    res_trans_chapter: str = ""
    res_trans_book: str = ""
    res_ict_pedagogy: str = ""
    res_ict_curricula: str = ""
    res_moocs4_quad: str = ""
    res_moocs_module: str = ""
    res_moocs_content: str = ""
    res_moocs_coord: str = ""
    res_econtent_complete: str = ""
    res_econtent_module: str = ""
    res_econtent_contrib: str = ""
    res_econtent_editor: str = ""
    res_phd: str = ""
    res_mphil: str = ""
    res_proj_more10: str = ""
    res_proj_less10: str = ""
    res_proj_ongoing_more10: str = ""
    res_proj_ongoing_less10: str = ""
    res_consultancy: str = ""
    res_patent_int: str = ""
    res_patent_nat: str = ""
    res_policy_int: str = ""
    res_policy_nat: str = ""
    res_policy_state: str = ""
    res_award_int: str = ""
    res_award_nat: str = ""
    res_invited_int_abroad: str = ""
    res_invited_int_within: str = ""
    res_invited_nat: str = ""
    res_invited_state: str = ""

    @field_validator("*")
    @classmethod
    def within_cap(cls, value: str, info: ValidationInfo) -> str:
        return check_score(value, RESEARCH_CAPS[info.field_name])


# ============================================================
# APPLICATION RECORD (one in-progress application)
# ============================================================
class ApplicationRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        coerce_numbers_to_str=True,
    )

    application_no: str = ""

    # --- Personal ---
    post_applied_for: str = ""
    category: str = ""
    advertisement_ref: str = ""
    name: str = ""
    father_name: str = ""
    dob: str = ""
    permanent_address: str = ""
    correspondence_address: str = ""
    contact_no1: str = ""
    contact_no2: str = ""
    email: str = ""
    confirm_email: str = ""
    present_employer: str = ""
    photo: Optional[EmbeddedContent] = None

    # --- I. Academic record ---
    academic_masters: str = ""
    academic_graduation: str = ""
    academic_12th: str = Field("", alias="academic12th")
    academic_matric: str = ""
    file_academic: Optional[EmbeddedContent] = None

    # --- II. Teaching experience & administrative skill ---
    teaching_exp_above15: str = ""
    file_teaching: Optional[EmbeddedContent] = None
    admin_joint_director: str = ""
    admin_registrar: str = ""
    admin_head: str = ""
    file_admin_skill: Optional[EmbeddedContent] = None

    # --- Key responsibilities ---
    resp_staff_rep: str = ""
    resp_coordinator: str = ""
    resp_bursar: str = ""
    resp_nss: str = Field("", alias="respNSS")
    resp_yrc: str = Field("", alias="respYRC")
    resp_warden: str = ""
    resp_statutory: str = ""
    resp_ncc: str = Field("", alias="respNCC")

    # --- Committees ---
    comm_iqac: str = Field("", alias="commIQAC")
    comm_editor: str = ""
    comm_advisory: str = ""
    comm_work: str = ""
    comm_cultural: str = ""
    comm_purchase: str = ""
    comm_building: str = ""
    comm_sports: str = ""
    comm_discipline: str = ""
    comm_internal: str = ""
    comm_road_safety: str = ""
    comm_red_ribbon: str = ""
    comm_eco: str = ""
    comm_placement: str = ""
    comm_women: str = ""
    comm_time_table: str = ""
    comm_scbc: str = Field("", alias="commSCBC")
    file_admin: Optional[EmbeddedContent] = None

    # --- III. Research (Table 2) ---
    faculty: Literal["", "science", "arts"] = ""
    research: ResearchScoreTable = Field(default_factory=ResearchScoreTable)
    file_research: Optional[EmbeddedContent] = None
    google_drive_link: str = ""

    # --- Payment ---
    utr_no: str = ""
    draft_date: str = ""
    draft_amount: str = ""
    bank_name: str = ""
    file_payment: Optional[EmbeddedContent] = None

    # --- Declaration ---
    parent_name: str = ""
    place: str = ""
    date: str = Field(default_factory=lambda: date.today().isoformat())
    signature: Optional[EmbeddedContent] = None

    # --- Employer / NOC ---
    has_noc: Literal["", "yes", "no"] = Field("", alias="hasNOC")
    file_noc: Optional[EmbeddedContent] = None
    emp_name: str = ""
    emp_designation: str = ""
    emp_dept: str = ""
    emp_notice_period: str = ""

    @field_validator(*SCORE_CAPS.keys())
    @classmethod
    def score_within_cap(cls, value: str, info: ValidationInfo) -> str:
        return check_score(value, SCORE_CAPS[info.field_name])

    def payload(self) -> dict:
        """
        Scalar fields + nested research record, keyed the way the
        remote script expects (camelCase). Uploads are never included.
        """
        return self.model_dump(by_alias=True, exclude=set(BINARY_FIELDS))


SCALAR_FIELDS = tuple(
    name for name in ApplicationRecord.model_fields
    if name not in BINARY_FIELDS and name != "research"
)
