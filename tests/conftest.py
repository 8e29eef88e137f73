import io
import os
from unittest.mock import patch

import pymupdf
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from PIL import Image

# ------------------------------------------------------------------
# FORCE TESTING MODE
# Must be set BEFORE importing app.main so the limiter and the
# submission client pick them up.
# ------------------------------------------------------------------
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SUBMISSION_SCRIPT_URL"] = ""
os.environ.pop("FORM_RULES_PATH", None)
os.environ.pop("INSTRUCTIONS_PDF_PATH", None)
os.environ.pop("SESSION_TTL_MINUTES", None)

from app.main import app
from app.core import storage
from app.core.session_store import session_store
from app.models.application import EmbeddedContent
from app.models.enums import FormStep
from app.models.session import Acknowledgements, VerificationChecklist
from app.core.score_sheets import RESEARCH_ITEMS
from app.services.form_service import new_session


# ------------------------------------------------------------------
# SAMPLE FILES
# ------------------------------------------------------------------
def make_pdf(pages: int = 1, text: str = "Sample document") -> bytes:
    doc = pymupdf.open()
    for i in range(pages):
        page = doc.new_page()
        page.insert_text((72, 72), f"{text} - page {i + 1}")
    data = doc.tobytes()
    doc.close()
    return data


def make_image(fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (40, 50), color=(200, 200, 200)).save(buf, format=fmt)
    return buf.getvalue()


def pdf_content(pages: int = 1, filename: str = "doc.pdf") -> EmbeddedContent:
    return EmbeddedContent(mime_type="application/pdf", data=make_pdf(pages), filename=filename)


def image_content(filename: str = "photo.png") -> EmbeddedContent:
    return EmbeddedContent(mime_type="image/png", data=make_image(), filename=filename)


def fill_record(record) -> None:
    """Every field every step asks for, with scores inside their caps."""
    record.post_applied_for = "Principal"
    record.category = "General"
    record.advertisement_ref = "TRGC/2025/01"
    record.name = "Asha Rani Sharma"
    record.father_name = "Ram Lal Sharma"
    record.dob = "1975-04-12"
    record.permanent_address = "12 Model Town, Sonepat"
    record.correspondence_address = "12 Model Town, Sonepat"
    record.contact_no1 = "9876543210"
    record.email = "asha@example.com"
    record.confirm_email = "asha@example.com"
    record.photo = image_content()

    record.academic_masters = "4.5"
    record.academic_graduation = "3"
    record.academic_12th = "2"
    record.academic_matric = "1"
    record.file_academic = pdf_content(filename="academic.pdf")

    record.teaching_exp_above15 = "8"
    record.file_teaching = pdf_content(filename="teaching.pdf")
    record.admin_joint_director = "0"
    record.admin_registrar = "5"
    record.admin_head = "10"
    record.file_admin_skill = pdf_content(filename="admin_skill.pdf")

    record.file_admin = pdf_content(filename="committees.pdf")

    record.faculty = "science"
    for key in RESEARCH_ITEMS:
        setattr(record.research, key, "0")
    record.research.res_papers = "6"
    record.file_research = pdf_content(pages=2, filename="research.pdf")
    record.utr_no = "UTR123456"
    record.draft_date = "2025-06-01"
    record.draft_amount = "1000"
    record.bank_name = "SBI"
    record.file_payment = pdf_content(filename="payment.pdf")

    record.parent_name = "Ram Lal Sharma"
    record.place = "Sonepat"
    record.date = "2025-06-02"
    record.signature = image_content("signature.png")
    record.has_noc = "no"


# ------------------------------------------------------------------
# FIXTURES
# ------------------------------------------------------------------
@pytest.fixture(autouse=True)
def isolated_state(tmp_path, monkeypatch):
    """Fresh session registry and a throwaway downloads folder per test."""
    monkeypatch.setattr(storage, "DOWNLOADS_DIR", str(tmp_path / "downloads"))
    session_store.clear()
    yield
    session_store.clear()


@pytest.fixture
def sample_pdf() -> bytes:
    return make_pdf()


@pytest.fixture
def sample_png() -> bytes:
    return make_image()


@pytest.fixture
def filled_session():
    """A stored session parked on the declaration step, ready to submit."""
    session = new_session()
    fill_record(session.record)
    session.step = FormStep.DECLARATION
    session.acknowledgements = Acknowledgements(instructions_read=True, final_note_confirmed=True)
    session.checklist = VerificationChecklist(**{k: True for k in VerificationChecklist.model_fields})
    session_store.add(session)
    return session


@pytest.fixture
def fake_pdfkit():
    """wkhtmltopdf is not needed: pdfkit hands back a real 2-page PDF."""
    with patch("app.services.pdf_service.pdfkit") as mock_pdfkit:
        mock_pdfkit.from_string.return_value = make_pdf(pages=2, text="Application form")
        yield mock_pdfkit


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
