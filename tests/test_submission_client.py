import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from app.models.application import ApplicationRecord
from app.services.submission_client import SubmissionClient

URL = "https://script.example.com/exec"


def _record() -> ApplicationRecord:
    record = ApplicationRecord(application_no="TRGC-2025-AB123", name="Asha", has_noc="no")
    record.comm_scbc = "1"
    record.research.res_papers = "4"
    return record


def _mock_client(mock_cls, response=None, error=None):
    instance = MagicMock()
    instance.post = AsyncMock(return_value=response, side_effect=error)
    mock_cls.return_value.__aenter__.return_value = instance
    mock_cls.return_value.__aexit__.return_value = False
    return instance


def _response(status_code=200, json_body=None, text=""):
    request = httpx.Request("POST", URL)
    if json_body is not None:
        return httpx.Response(status_code, json=json_body, request=request)
    return httpx.Response(status_code, text=text, request=request)


def test_payload_uses_camel_case_and_omits_uploads():
    payload = SubmissionClient(url=URL).build_payload(_record(), "QUJD", "Asha_Application.pdf")

    assert payload["pdfBase64"] == "QUJD"
    assert payload["fileName"] == "Asha_Application.pdf"
    assert payload["applicationNo"] == "TRGC-2025-AB123"
    assert payload["hasNOC"] == "no"
    assert payload["commSCBC"] == "1"
    assert payload["research"]["resPapers"] == "4"
    assert "photo" not in payload and "fileAcademic" not in payload


@pytest.mark.asyncio
@patch("app.services.submission_client.httpx.AsyncClient")
async def test_success_captures_drive_url(mock_cls):
    instance = _mock_client(mock_cls, _response(json_body={"result": "success", "driveUrl": "https://drive/x"}))

    result = await SubmissionClient(url=URL, timeout=5).send(_record(), "QUJD", "Asha_Application.pdf")

    assert result.success
    assert result.drive_url == "https://drive/x"
    instance.post.assert_awaited_once()
    assert instance.post.call_args.kwargs["json"]["fileName"] == "Asha_Application.pdf"
    assert mock_cls.call_args.kwargs["timeout"] == 5


@pytest.mark.asyncio
@patch("app.services.submission_client.httpx.AsyncClient")
async def test_non_json_2xx_counts_as_sent(mock_cls):
    _mock_client(mock_cls, _response(text="<html>ok</html>"))

    result = await SubmissionClient(url=URL).send(_record(), "QUJD", "f.pdf")

    assert result.success
    assert result.drive_url is None


@pytest.mark.asyncio
@patch("app.services.submission_client.httpx.AsyncClient")
async def test_script_error_result_is_failure(mock_cls):
    _mock_client(mock_cls, _response(json_body={"result": "error", "error": "quota exceeded"}))

    result = await SubmissionClient(url=URL).send(_record(), "QUJD", "f.pdf")

    assert not result.success
    assert "quota exceeded" in result.message


@pytest.mark.asyncio
@patch("app.services.submission_client.httpx.AsyncClient")
async def test_server_error_status_is_failure(mock_cls):
    _mock_client(mock_cls, _response(status_code=500, text="boom"))

    result = await SubmissionClient(url=URL).send(_record(), "QUJD", "f.pdf")

    assert not result.success
    assert "500" in result.message


@pytest.mark.asyncio
@patch("app.services.submission_client.httpx.AsyncClient")
async def test_timeout_is_failure_not_exception(mock_cls):
    _mock_client(mock_cls, error=httpx.ReadTimeout("timed out"))

    result = await SubmissionClient(url=URL).send(_record(), "QUJD", "f.pdf")

    assert not result.success


@pytest.mark.asyncio
async def test_missing_url_is_failure():
    result = await SubmissionClient(url="").send(_record(), "QUJD", "f.pdf")

    assert not result.success
    assert "not configured" in result.message
