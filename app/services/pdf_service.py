import os
import shutil

import pdfkit
from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger

from app.core import constants
from app.core.config import settings
from app.core.score_sheets import (
    ACADEMIC_LINES,
    ADMIN_LINES,
    ADMIN_TOTAL_CAP,
    COMMITTEE_LINES,
    RESEARCH_LINES,
    RESPONSIBILITY_LINES,
    TEACHING_LINES,
)
from app.models.application import ApplicationRecord

# -----------------------------
# Setup Jinja2 Environment
# -----------------------------
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
template_dir = os.path.join(BASE_DIR, 'templates', 'pdf')

pdf_env = Environment(
    loader=FileSystemLoader(template_dir),
    autoescape=select_autoescape(['html', 'xml'])
)

# Cache the template for performance
try:
    application_template = pdf_env.get_template("application_form.html")
except Exception as e:
    raise FileNotFoundError(f"PDF template not found in {template_dir}: {e}")

# -----------------------------
# PDF Configuration
# -----------------------------
if os.name == 'nt': # Windows
    DEFAULT_WKHTMLTOPDF_PATH = r"C:\Program Files\wkhtmltopdf\bin\wkhtmltopdf.exe"
else: # Linux / Docker
    DEFAULT_WKHTMLTOPDF_PATH = '/usr/bin/wkhtmltopdf'

BASE_PDF_OPTIONS = {
    'page-size': 'A4',
    'margin-top': '15mm',
    'margin-right': '15mm',
    'margin-bottom': '18mm',
    'margin-left': '15mm',
    'encoding': "UTF-8",
    'no-outline': None,
    'disable-smart-shrinking': None,
    'footer-font-size': '8',
    'footer-font-name': 'Helvetica',
    'footer-right': 'Page [page] of [topage]',
    'quiet': None,
}

DECLARATION_PREFIXES = ("D/o", "S/o", "W/o")


def resolve_wkhtmltopdf_path() -> str:
    return settings.WKHTMLTOPDF_PATH or shutil.which("wkhtmltopdf") or DEFAULT_WKHTMLTOPDF_PATH


def get_pdf_configuration():
    path = resolve_wkhtmltopdf_path()
    if not os.path.exists(path):
        logger.warning(f"wkhtmltopdf not found at {path}. PDF generation will fail.")
    return pdfkit.configuration(wkhtmltopdf=path)


# -----------------------------
# Display helpers
# -----------------------------
def format_date(value: str) -> str:
    """YYYY-MM-DD -> DD-MM-YYYY; anything else is printed as entered."""
    parts = (value or "").split("-")
    if len(parts) == 3 and len(parts[0]) == 4:
        year, month, day = parts
        return f"{day}-{month}-{year}"
    return value or ""


def declaration_text(record: ApplicationRecord) -> str:
    parent = record.parent_name.strip()
    if not parent:
        relation = "D/o S/o W/o..."
    elif parent.startswith(DECLARATION_PREFIXES):
        relation = parent
    else:
        relation = f"D/o S/o W/o {parent}"

    return (
        f"I {record.name} {relation} hereby declare that all the entries made by me in this "
        "application form are true and correct to the best of my knowledge and I have attached "
        "related proof of documents in form of self attested copies. If anything is found false "
        "or incorrect at any stage, my candidature/appointment is liable to be cancelled."
    )


def _score_total(record: ApplicationRecord, lines) -> str:
    total = 0.0
    for line in lines:
        try:
            total += float(getattr(record, line.key) or 0)
        except ValueError:
            continue
    return f"{total:g}"


def _score_rows(record: ApplicationRecord, lines) -> list[dict]:
    return [
        {
            "sn": line.sn,
            "particulars": line.particulars,
            "criteria": line.criteria,
            "value": getattr(record, line.key),
        }
        for line in lines
    ]


def _research_rows(record: ApplicationRecord) -> list[dict]:
    rows = []
    for line in RESEARCH_LINES:
        rows.append({
            "kind": line.kind,
            "sn": line.sn,
            "activity": line.activity,
            "cap_science": line.cap_science,
            "cap_arts": line.cap_arts,
            "value": getattr(record.research, line.key) if line.key else "",
        })
    return rows


def build_form_context(record: ApplicationRecord) -> dict:
    contact = ", ".join(n for n in (record.contact_no1, record.contact_no2) if n.strip())

    return {
        "college": {
            "name": constants.COLLEGE_NAME,
            "affiliation": constants.COLLEGE_AFFILIATION,
            "website": constants.COLLEGE_WEBSITE,
            "email": constants.RECRUITMENT_EMAIL,
        },
        "addressee_lines": constants.ADDRESSEE_LINES,
        "record": record,
        "application_no": record.application_no or "N/A",
        "photo_uri": record.photo.data_uri if record.photo else None,
        "signature_uri": record.signature.data_uri if record.signature else None,
        "biodata": [
            ("Name", record.name),
            ("Father's Name", record.father_name),
            ("Date of Birth", format_date(record.dob)),
            ("Category", record.category),
            ("Permanent Address", record.permanent_address),
            ("Correspondence Address", record.correspondence_address),
            ("Contact No", contact),
            ("Email-ID", record.email),
            ("Present Employer", record.present_employer),
        ],
        "academic_rows": _score_rows(record, ACADEMIC_LINES),
        "teaching_rows": _score_rows(record, TEACHING_LINES),
        "admin_rows": _score_rows(record, ADMIN_LINES),
        "admin_total": _score_total(record, ADMIN_LINES),
        "admin_total_cap": ADMIN_TOTAL_CAP,
        "responsibility_rows": _score_rows(record, RESPONSIBILITY_LINES),
        "committee_rows": _score_rows(record, COMMITTEE_LINES),
        "research_rows": _research_rows(record),
        "payment_rows": [
            ("Amount Paid", f"Rs. {record.draft_amount}" if record.draft_amount else ""),
            ("UTR No.", record.utr_no),
            ("Date", format_date(record.draft_date)),
            ("Bank Name / UPI Provider", record.bank_name),
        ],
        "declaration": declaration_text(record),
        "declaration_date": format_date(record.date),
        "noc": record.has_noc == "yes",
    }


# -----------------------------
# Rendering
# -----------------------------
def render_application_html(record: ApplicationRecord) -> str:
    return application_template.render(build_form_context(record))


def pdf_options_for(record: ApplicationRecord) -> dict:
    options = dict(BASE_PDF_OPTIONS)
    options['footer-left'] = f"Application No: {record.application_no or 'N/A'}"
    return options


def generate_application_pdf(record: ApplicationRecord) -> bytes:
    """
    Renders the filled form. Used as-is for the preview and as the first
    stage of submission; no timestamp is embedded, so a given record always
    produces the same layout.
    """
    html_content = render_application_html(record)

    try:
        pdf_bytes = pdfkit.from_string(
            html_content,
            False,
            options=pdf_options_for(record),
            configuration=get_pdf_configuration(),
        )
    except OSError as e:
        raise ValueError(f"PDF generation failed. Ensure wkhtmltopdf is installed. Error: {e}")

    logger.info(f"Rendered application form for {record.application_no} ({len(pdf_bytes)} bytes)")
    return pdf_bytes
