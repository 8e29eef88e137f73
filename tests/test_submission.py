import asyncio
import base64
import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import make_pdf, pdf_content

from app.core.config import settings
from app.core import storage
from app.models.application import EmbeddedContent
from app.models.enums import EmailStatus, FormStep, SubmissionStage
from app.services.submission_client import EmailResult
from app.services.submission_service import (
    AlreadySubmitted,
    SubmissionBlocked,
    SubmissionInProgress,
    assemble_documents,
    download_filename,
    ensure_submittable,
    gather_attachments,
    submit_application,
    transmission_filename,
)


def _client(success=True, message=""):
    client = MagicMock()
    client.send = AsyncMock(return_value=EmailResult(success=success, message=message))
    return client


def test_file_names_replace_whitespace(filled_session):
    assert download_filename(filled_session.record) == "Asha_Rani_Sharma_Complete_App.pdf"
    assert transmission_filename(filled_session.record) == "Asha_Rani_Sharma_Application.pdf"


def test_noc_attachment_only_when_applicant_has_one(filled_session):
    record = filled_session.record
    record.file_noc = pdf_content(filename="noc.pdf")

    by_name = {s.name: s for s in gather_attachments(record)}
    assert by_name["file_noc"].content is None

    record.has_noc = "yes"
    by_name = {s.name: s for s in gather_attachments(record)}
    assert by_name["file_noc"].content is not None
    assert [s.name for s in gather_attachments(record)][-1] == "file_payment"


@pytest.mark.asyncio
async def test_successful_submission(filled_session, fake_pdfkit):
    client = _client(success=True)

    state = await submit_application(filled_session, client)

    assert state.stages == [
        SubmissionStage.Generating,
        SubmissionStage.Merging,
        SubmissionStage.Sending,
        SubmissionStage.Success,
    ]
    assert state.email_status == EmailStatus.Sent
    assert state.is_success
    assert state.dropped_attachments == []

    # exactly one transmission, carrying the same bytes that were saved
    client.send.assert_awaited_once()
    record, pdf_base64, filename = client.send.call_args.args
    assert filename == "Asha_Rani_Sharma_Application.pdf"
    with open(state.download_path, "rb") as f:
        assert base64.b64decode(pdf_base64) == f.read()

    assert os.path.basename(state.download_path) == "Asha_Rani_Sharma_Complete_App.pdf"
    assert state.download_url == f"/static/downloads/{filled_session.id}/Asha_Rani_Sharma_Complete_App.pdf"


@pytest.mark.asyncio
async def test_failed_transmission_keeps_download(filled_session, fake_pdfkit):
    state = await submit_application(filled_session, _client(success=False, message="Server responded with status 500."))

    assert state.stage == SubmissionStage.Error
    assert state.email_status == EmailStatus.Failed
    assert state.is_success
    assert "email it to" in state.message
    assert os.path.exists(state.download_path)


@pytest.mark.asyncio
async def test_bad_attachment_is_reported_but_submission_continues(filled_session, fake_pdfkit):
    filled_session.record.file_teaching = EmbeddedContent(mime_type="application/pdf", data=b"%PDF-broken")

    state = await submit_application(filled_session, _client())

    assert state.stage == SubmissionStage.Success
    assert [d.name for d in state.dropped_attachments] == ["file_teaching"]


@pytest.mark.asyncio
async def test_unexpected_error_settles_in_error_state(filled_session, fake_pdfkit):
    client = _client()
    with patch("app.services.submission_service.merge_application_documents", side_effect=RuntimeError("boom")):
        state = await submit_application(filled_session, client)

    assert state.stage == SubmissionStage.Error
    assert state.email_status == EmailStatus.Failed
    assert state.message == "An unexpected error occurred during submission."
    assert state.is_success
    client.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_second_submit_refused(filled_session, fake_pdfkit):
    await submit_application(filled_session, _client())

    with pytest.raises(AlreadySubmitted):
        await submit_application(filled_session, _client())


@pytest.mark.asyncio
async def test_submit_requires_declaration_step(filled_session):
    filled_session.step = FormStep.RESEARCH
    with pytest.raises(SubmissionBlocked):
        await submit_application(filled_session, _client())


@pytest.mark.asyncio
async def test_submit_requires_complete_checklist(filled_session):
    filled_session.checklist.payment = False
    with pytest.raises(SubmissionBlocked, match="verification checklist"):
        await submit_application(filled_session, _client())


@pytest.mark.asyncio
async def test_submit_revalidates_declaration(filled_session):
    filled_session.record.signature = None

    with pytest.raises(SubmissionBlocked) as exc:
        await submit_application(filled_session, _client())

    assert "signature" in exc.value.errors
    assert "signature" in filled_session.errors


def test_file_names_drop_path_separators_and_unsafe_characters(filled_session):
    record = filled_session.record

    record.name = "Asha K/O Sharma"
    assert download_filename(record) == "Asha_K_O_Sharma_Complete_App.pdf"

    record.name = "../../escaped"
    assert download_filename(record) == "escaped_Complete_App.pdf"

    record.name = "आशा"
    assert transmission_filename(record) == "Application_Application.pdf"


@pytest.mark.asyncio
async def test_name_with_slash_is_saved_and_sent(filled_session, fake_pdfkit):
    filled_session.record.name = "Asha K/O Sharma"
    client = _client()

    state = await submit_application(filled_session, client)

    assert state.stage == SubmissionStage.Success
    client.send.assert_awaited_once()
    assert os.path.basename(state.download_path) == "Asha_K_O_Sharma_Complete_App.pdf"


@pytest.mark.asyncio
async def test_download_stays_inside_session_folder(filled_session, fake_pdfkit):
    filled_session.record.name = "../../escaped"

    state = await submit_application(filled_session, _client())

    session_folder = os.path.realpath(os.path.join(storage.DOWNLOADS_DIR, str(filled_session.id)))
    assert os.path.dirname(os.path.realpath(state.download_path)) == session_folder


def test_save_download_refuses_paths_outside_session_folder(filled_session):
    with pytest.raises(ValueError):
        storage.save_download(filled_session.id, "../outside.pdf", b"%PDF")


@pytest.mark.asyncio
async def test_overlapping_submits_transmit_once(filled_session, fake_pdfkit):
    client = _client()

    results = await asyncio.gather(
        submit_application(filled_session, client),
        submit_application(filled_session, client),
        return_exceptions=True,
    )

    assert sum(isinstance(r, SubmissionInProgress) for r in results) == 1
    assert sum(not isinstance(r, Exception) for r in results) == 1
    client.send.assert_awaited_once()


def test_submit_refused_while_in_flight(filled_session):
    filled_session.submission.stage = SubmissionStage.Merging

    with pytest.raises(SubmissionInProgress):
        ensure_submittable(filled_session)


def test_instructions_pdf_follows_the_form(filled_session, tmp_path, monkeypatch):
    path = tmp_path / "instructions.pdf"
    path.write_bytes(make_pdf(pages=3, text="Instructions"))
    monkeypatch.setattr(settings, "INSTRUCTIONS_PDF_PATH", str(path))

    result = assemble_documents(make_pdf(pages=2), filled_session.record)

    first = result.outcomes[0]
    assert first.name == "instructions"
    assert first.pages == 3


def test_missing_instructions_pdf_is_skipped(filled_session, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "INSTRUCTIONS_PDF_PATH", str(tmp_path / "missing.pdf"))

    result = assemble_documents(make_pdf(pages=2), filled_session.record)

    assert "instructions" not in [o.name for o in result.outcomes]
    assert not result.dropped
