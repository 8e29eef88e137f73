# app/core/constants.py

# ==========================================================
# LETTERHEAD (Printed on the first page of the form)
# ==========================================================
COLLEGE_NAME = "TIKA RAM GIRLS COLLEGE, SONEPAT"
COLLEGE_AFFILIATION = "(Affiliated to M.D., University, Rohtak)"
COLLEGE_WEBSITE = "www.trgc.edu.in"
RECRUITMENT_EMAIL = "trgcrecruitment2025@gmail.com"

ADDRESSEE_LINES = [
    "The General Secretary",
    "Tika Ram Education Society (Regd.)",
    "Add: Tika Ram Model School",
    "West Ram Nagar, Sonepat-131001",
]

# ==========================================================
# UPLOAD FIELDS
# ==========================================================
IMAGE_FIELDS = ("photo", "signature")

# Order matters: attachments are merged behind the form in this order.
DOCUMENT_FIELDS = (
    "file_academic",
    "file_teaching",
    "file_admin_skill",
    "file_admin",
    "file_research",
    "file_noc",
    "file_payment",
)

BINARY_FIELDS = IMAGE_FIELDS + DOCUMENT_FIELDS

ATTACHMENT_CAPTIONS = {
    "file_academic": "Annexure: I. Academic Record",
    "file_teaching": "Annexure: II-A. Teaching Experience",
    "file_admin_skill": "Annexure: II-B(i). Administrative Experience",
    "file_admin": "Annexure: II-B(ii)/(iii). Responsibilities & Committees",
    "file_research": "Annexure: III. Academic/Research Score (Table 2)",
    "file_noc": "Annexure: No Objection Certificate",
    "file_payment": "Annexure: Payment Proof",
}

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png"}
ALLOWED_DOCUMENT_TYPES = {"application/pdf"}

RESEARCH_UPLOAD_FIELD = "file_research"
