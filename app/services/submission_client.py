# app/services/submission_client.py
from typing import Optional

import httpx
from loguru import logger
from pydantic import BaseModel

from app.core.config import settings
from app.models.application import ApplicationRecord


class EmailResult(BaseModel):
    success: bool
    message: str = ""
    drive_url: Optional[str] = None


class SubmissionClient:
    """
    Posts the finished application to the recruitment Apps Script web app,
    which mails the PDF to the college and files it on Drive.
    Never raises; every failure comes back as EmailResult(success=False).
    """

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url if url is not None else settings.SUBMISSION_SCRIPT_URL
        self.timeout = timeout if timeout is not None else settings.SUBMISSION_TIMEOUT_SECONDS

    def build_payload(self, record: ApplicationRecord, pdf_base64: str, filename: str) -> dict:
        payload = record.payload()
        payload["pdfBase64"] = pdf_base64
        payload["fileName"] = filename
        return payload

    async def send(self, record: ApplicationRecord, pdf_base64: str, filename: str) -> EmailResult:
        if not self.url:
            logger.warning("SUBMISSION_SCRIPT_URL is not configured; application not transmitted")
            return EmailResult(success=False, message="Submission endpoint is not configured.")

        payload = self.build_payload(record, pdf_base64, filename)

        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            try:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.warning(f"Submission endpoint answered {e.response.status_code} for {record.application_no}")
                return EmailResult(success=False, message=f"Server responded with status {e.response.status_code}.")
            except httpx.HTTPError as e:
                logger.warning(f"Submission transport error for {record.application_no}: {e!r}")
                return EmailResult(success=False, message=f"Could not reach the submission server: {e}")

        try:
            data = response.json()
        except ValueError:
            # Apps Script may answer with an HTML page; a 2xx still means it ran
            data = {}

        if not isinstance(data, dict):
            data = {}

        if data.get("result") == "error":
            logger.warning(f"Submission script reported an error for {record.application_no}: {data.get('error')}")
            return EmailResult(success=False, message=str(data.get("error") or "Submission script reported an error."))

        logger.info(f"Application {record.application_no} transmitted ({response.status_code})")
        return EmailResult(
            success=True,
            message="Application sent successfully.",
            drive_url=data.get("driveUrl"),
        )


def get_submission_client() -> SubmissionClient:
    return SubmissionClient()
