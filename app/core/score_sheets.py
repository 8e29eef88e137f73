# app/core/score_sheets.py
#
# Score-sheet catalogs (as supplied from DGHE vide dated 18.04.2023).
# Shared by the field caps, the rendered PDF and the form metadata endpoint.

from typing import Literal, Optional
from pydantic import BaseModel


class ScoreLine(BaseModel):
    key: str
    sn: str
    particulars: str
    criteria: str
    cap: float


class ResearchLine(BaseModel):
    kind: Literal["header", "subheader", "item"] = "item"
    sn: str = ""
    activity: str
    key: Optional[str] = None
    cap_science: str = ""
    cap_arts: str = ""

    @property
    def cap(self) -> float:
        return max(_as_float(self.cap_science), _as_float(self.cap_arts))

    def cap_for(self, faculty: str) -> float:
        if faculty == "science":
            return _as_float(self.cap_science)
        if faculty == "arts":
            return _as_float(self.cap_arts)
        return self.cap


def _as_float(value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


# ============================================================
# I. ACADEMIC RECORD (Maximum 20 marks)
# ============================================================
ACADEMIC_LINES = [
    ScoreLine(key="academic_masters", sn="1.", particulars="Above 55% marks in Master's degree",
              criteria="0.5 marks for each percentage (max 5 marks)", cap=5),
    ScoreLine(key="academic_graduation", sn="2.", particulars="Above 55% marks in Graduation",
              criteria="0.4 marks for each percentage (max 5 marks)", cap=5),
    ScoreLine(key="academic_12th", sn="3.", particulars="Above 55% marks in 10+2/Prep.",
              criteria="0.3 marks for each percentage (max 5 marks)", cap=5),
    ScoreLine(key="academic_matric", sn="4.", particulars="Above 55% marks in Matriculation",
              criteria="0.2 marks for each percentage (max 5 marks)", cap=5),
]

# ============================================================
# II-A. TEACHING EXPERIENCE (Maximum 10 marks)
# ============================================================
TEACHING_LINES = [
    ScoreLine(key="teaching_exp_above15", sn="1.", particulars="Above 15 years teaching experience",
              criteria="1 mark for each year", cap=10),
]

# ============================================================
# II-B(i). ADMINISTRATIVE RESPONSIBILITIES (Maximum 25 marks)
# ============================================================
ADMIN_TOTAL_CAP = 25

ADMIN_LINES = [
    ScoreLine(key="admin_joint_director", sn="1.",
              particulars="Experience as Joint/Deputy/Assistant Director in Directorate of Higher Education",
              criteria="1 mark for each year", cap=25),
    ScoreLine(key="admin_registrar", sn="2.",
              particulars="Experience as Registrar or any other Administrative post in any University",
              criteria="1 mark for each year", cap=25),
    ScoreLine(key="admin_head", sn="3.",
              particulars="Experience as Head of the Higher Education Institution i.e. Principal, Officiating Principal/DDO",
              criteria="1 mark for each year", cap=25),
]

# ============================================================
# II-B(ii). KEY RESPONSIBILITIES IN COLLEGES
# ============================================================
RESPONSIBILITY_LINES = [
    ScoreLine(key="resp_staff_rep", sn="1.", particulars="Staff Representative / V.C. Nominee",
              criteria="1 mark for each year (max 3 marks)", cap=3),
    ScoreLine(key="resp_coordinator", sn="2.", particulars="Coordinator/Secretary of Conference",
              criteria="1 mark for each year (max 3 marks)", cap=3),
    ScoreLine(key="resp_bursar", sn="3.", particulars="Bursar",
              criteria="1 mark for each year (max 3 marks)", cap=3),
    ScoreLine(key="resp_nss", sn="4.", particulars="NSS Programme Officer",
              criteria="1 mark for each year (max 3 marks)", cap=3),
    ScoreLine(key="resp_yrc", sn="5.", particulars="YRC Counsellor",
              criteria="1 mark for each year (max 3 marks)", cap=3),
    ScoreLine(key="resp_warden", sn="6.", particulars="Hostel Warden",
              criteria="1 mark for each year (max 3 marks)", cap=3),
    ScoreLine(key="resp_statutory", sn="7.", particulars="Member of Statutory Body",
              criteria="1 mark for each year (max 2 marks)", cap=2),
    ScoreLine(key="resp_ncc", sn="8.", particulars="Associate NCC Officer",
              criteria="1 mark for each year (max 3 marks)", cap=3),
]

# ============================================================
# II-B(iii). COMMITTEES IN COLLEGE
# ============================================================
_COMMITTEES = [
    ("comm_iqac", "Co-ordinator IQAC"),
    ("comm_editor", "Editor in Chief, College Magazine"),
    ("comm_advisory", "Member, College Advisory Council"),
    ("comm_work", "Convener, University Work Committee"),
    ("comm_cultural", "Convener, Cultural Affairs Committee"),
    ("comm_purchase", "Convener, Purchase/Procurement Committee"),
    ("comm_building", "Convener, Building/Works Committee"),
    ("comm_sports", "Convener, Sports Committee"),
    ("comm_discipline", "Convener, Discipline Committee"),
    ("comm_internal", "Convener, Internal Complaint Committee"),
    ("comm_road_safety", "Convener, Road Safety Club"),
    ("comm_red_ribbon", "Convener, Red Ribbon Club"),
    ("comm_eco", "Convener, Eco Club"),
    ("comm_placement", "In-charge, Placement Cell"),
    ("comm_women", "In-charge, Women Cell"),
    ("comm_time_table", "In-charge, Time-table Committee"),
    ("comm_scbc", "In-charge, SC/BC Committee"),
]

COMMITTEE_LINES = [
    ScoreLine(key=key, sn=f"{i}.", particulars=label,
              criteria="1 mark for each year (max 2 marks)", cap=2)
    for i, (key, label) in enumerate(_COMMITTEES, start=1)
]

# ============================================================
# III. ACADEMIC/RESEARCH SCORE (MDU AC passed Table 2)
# ============================================================
RESEARCH_LINES = [
    ResearchLine(
        sn="1.",
        activity=(
            "For Direct Recruitment: Research Papers in Peer-reviewed / UGC Journals upto 13.06.2019 "
            "and UGC CARE Listed Journals w.e.f. 14.06.2019. "
            "For Career Advancement Scheme: Research Papers in Peer-reviewed / UGC Journals upto "
            "02.07.2023 and UGC CARE Listed Journals w.e.f. 03.07.2023"
        ),
        key="res_papers", cap_science="08", cap_arts="10",
    ),
    ResearchLine(kind="header", sn="2.", activity="Publications (other than Research papers)"),
    ResearchLine(kind="subheader", activity="(a) Books authored which are published by;"),
    ResearchLine(activity="International publishers", key="res_books_int", cap_science="12", cap_arts="12"),
    ResearchLine(activity="National Publishers", key="res_books_nat", cap_science="10", cap_arts="10"),
    ResearchLine(activity="Chapter in Edited Book", key="res_chapter", cap_science="05", cap_arts="05"),
    ResearchLine(activity="Editor of Book by International Publisher", key="res_editor_int",
                 cap_science="10", cap_arts="10"),
    ResearchLine(activity="Editor of Book by National Publisher", key="res_editor_nat",
                 cap_science="08", cap_arts="08"),
    ResearchLine(kind="subheader",
                 activity="(b) Translation works in Indian and Foreign Languages by qualified faculties"),
    ResearchLine(activity="Chapter or Research paper", key="res_trans_chapter", cap_science="03", cap_arts="03"),
    ResearchLine(activity="Book", key="res_trans_book", cap_science="08", cap_arts="08"),
    ResearchLine(
        kind="header", sn="3.",
        activity=(
            "Creation of ICT mediated Teaching Learning pedagogy and content and development of "
            "new and innovative courses and curricula"
        ),
    ),
    ResearchLine(activity="(a) Development of Innovative pedagogy", key="res_ict_pedagogy",
                 cap_science="05", cap_arts="05"),
    ResearchLine(activity="(b) Design of new curricula and courses", key="res_ict_curricula",
                 cap_science="02", cap_arts="02"),
    ResearchLine(kind="subheader", activity="(c) MOOCs"),
    ResearchLine(
        activity=(
            "Development of complete MOOCs in 4 quadrants (4 credit course) "
            "(In case of MOOCs of lesser credits 05 marks/credit)"
        ),
        key="res_moocs4_quad", cap_science="20", cap_arts="20",
    ),
    ResearchLine(activity="MOOCs (developed in 4 quadrant) per module/lecture", key="res_moocs_module",
                 cap_science="05", cap_arts="05"),
    ResearchLine(activity="Content writer/subject matter expert for each module of MOOCs (at least one quadrant)",
                 key="res_moocs_content", cap_science="02", cap_arts="02"),
    ResearchLine(
        activity=(
            "Course Coordinator for MOOCs (4 credit course) "
            "(In case of MOOCs of lesser credits 02 marks/credit)"
        ),
        key="res_moocs_coord", cap_science="08", cap_arts="08",
    ),
    ResearchLine(kind="subheader", activity="(d) E-Content"),
    ResearchLine(activity="Development of e-Content in 4 quadrants for a complete course/e-book",
                 key="res_econtent_complete", cap_science="12", cap_arts="12"),
    ResearchLine(activity="e-Content (developed in 4 quadrants) per module", key="res_econtent_module",
                 cap_science="05", cap_arts="05"),
    ResearchLine(
        activity=(
            "Contribution to development of e-content module in complete course/paper/e-book "
            "(at least one quadrant)"
        ),
        key="res_econtent_contrib", cap_science="02", cap_arts="02",
    ),
    ResearchLine(activity="Editor of e-content for complete course/ paper /e-book", key="res_econtent_editor",
                 cap_science="10", cap_arts="10"),
    ResearchLine(kind="header", sn="4.", activity="(a) Research guidance"),
    ResearchLine(activity="Ph.D. (10 per degree / 05 per thesis)", key="res_phd", cap_science="10", cap_arts="10"),
    ResearchLine(activity="M.Phil./P.G dissertation (02 per degree)", key="res_mphil",
                 cap_science="02", cap_arts="02"),
    ResearchLine(kind="subheader", activity="(b) Research Projects Completed"),
    ResearchLine(activity="More than 10 lakhs", key="res_proj_more10", cap_science="10", cap_arts="10"),
    ResearchLine(activity="Less than 10 lakhs", key="res_proj_less10", cap_science="05", cap_arts="05"),
    ResearchLine(kind="subheader", activity="(c) Research Projects Ongoing :"),
    ResearchLine(activity="More than 10 lakhs", key="res_proj_ongoing_more10", cap_science="05", cap_arts="05"),
    ResearchLine(activity="Less than 10 lakhs", key="res_proj_ongoing_less10", cap_science="02", cap_arts="02"),
    ResearchLine(activity="(d) Consultancy", key="res_consultancy", cap_science="03", cap_arts="03"),
    ResearchLine(kind="header", sn="5.", activity="(a) Patents"),
    ResearchLine(activity="International", key="res_patent_int", cap_science="10", cap_arts="0"),
    ResearchLine(activity="National", key="res_patent_nat", cap_science="07", cap_arts="0"),
    ResearchLine(
        kind="subheader",
        activity=(
            "(b) *Policy Document (Submitted to an International body/organisation like "
            "UNO/UNESCO/World Bank/International Monetary Fund etc. or Central Government or State Government)"
        ),
    ),
    ResearchLine(activity="International", key="res_policy_int", cap_science="10", cap_arts="10"),
    ResearchLine(activity="National", key="res_policy_nat", cap_science="07", cap_arts="07"),
    ResearchLine(activity="State", key="res_policy_state", cap_science="04", cap_arts="04"),
    ResearchLine(kind="subheader", activity="(c) Awards/Fellowship"),
    ResearchLine(activity="International", key="res_award_int", cap_science="07", cap_arts="07"),
    ResearchLine(activity="National", key="res_award_nat", cap_science="05", cap_arts="05"),
    ResearchLine(
        kind="header", sn="6.",
        activity=(
            "*Invited lectures / Resource Person/ paper presentation in Seminars/ Conferences/full paper "
            "in Conference Proceedings (Paper presented in Seminars/Conferences and also published as "
            "full paper in Conference Proceedings will be counted only once)"
        ),
    ),
    ResearchLine(activity="International (Abroad)", key="res_invited_int_abroad", cap_science="07", cap_arts="0"),
    ResearchLine(activity="International (within country)", key="res_invited_int_within",
                 cap_science="05", cap_arts="0"),
    ResearchLine(activity="National", key="res_invited_nat", cap_science="03", cap_arts="0"),
    ResearchLine(activity="State/University", key="res_invited_state", cap_science="02", cap_arts="0"),
]

RESEARCH_ITEMS = {line.key: line for line in RESEARCH_LINES if line.key}

SCORE_CAPS = {
    line.key: line.cap
    for line in ACADEMIC_LINES + TEACHING_LINES + ADMIN_LINES + RESPONSIBILITY_LINES + COMMITTEE_LINES
}

RESEARCH_CAPS = {key: line.cap for key, line in RESEARCH_ITEMS.items()}


def research_cap(key: str, faculty: str = "") -> float:
    return RESEARCH_ITEMS[key].cap_for(faculty)


def check_score(value: str, cap: float) -> str:
    """
    Accepts "" (not yet entered) or a non-negative number within the cap.
    Returns the trimmed value; raises ValueError otherwise.
    """
    value = (value or "").strip()
    if value == "":
        return value
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a number")
    if number != number or number < 0:
        raise ValueError("Score cannot be negative")
    if number > cap:
        raise ValueError(f"Score {value} exceeds the maximum of {cap:g}")
    return value
