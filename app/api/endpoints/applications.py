import os

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse
from loguru import logger

from app.api.deps import get_application_session, get_client, get_session_store
from app.core.config import settings
from app.core.rate_limiter import limiter
from app.core.session_store import ApplicationSessionStore
from app.core.storage import remove_downloads
from app.models.session import ApplicationSession
from app.schemas.application import (
    AcknowledgementUpdate,
    ChecklistUpdate,
    FieldUpdateRequest,
    ResearchUpdateRequest,
    SessionRead,
    StepResultRead,
    SubmissionRead,
    UploadRead,
)
from app.services.csv_service import generate_record_csv
from app.services.form_service import (
    new_session,
    reset_session,
    update_acknowledgements,
    update_checklist,
    update_fields,
    update_research,
)
from app.services.ingest_service import clear_upload, ingest_upload
from app.services.navigation_service import next_step, previous_step
from app.services.pdf_service import generate_application_pdf
from app.services.submission_client import SubmissionClient
from app.services.submission_service import AlreadySubmitted, SubmissionBlocked, submit_application

router = APIRouter(
    prefix="/api/applications",
    tags=["Applications"]
)


# ------------------------------------------------------------
# CREATE / READ / DISCARD
# ------------------------------------------------------------
@router.post("", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
async def create_application(store: ApplicationSessionStore = Depends(get_session_store)):
    session = store.add(new_session())
    return SessionRead.from_session(session)


@router.get("/{session_id}", response_model=SessionRead)
async def read_application(session: ApplicationSession = Depends(get_application_session)):
    return SessionRead.from_session(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def discard_application(
    session: ApplicationSession = Depends(get_application_session),
    store: ApplicationSessionStore = Depends(get_session_store),
):
    store.discard(session.id)
    await run_in_threadpool(remove_downloads, session.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{session_id}/reset", response_model=SessionRead)
async def start_new_application(session: ApplicationSession = Depends(get_application_session)):
    if session.submission.in_flight:
        raise HTTPException(status_code=409, detail="This application is still being submitted.")
    await run_in_threadpool(remove_downloads, session.id)
    return SessionRead.from_session(reset_session(session))


# ------------------------------------------------------------
# FIELD EDITS
# ------------------------------------------------------------
@router.patch("/{session_id}/fields", response_model=SessionRead)
async def edit_fields(
    payload: FieldUpdateRequest,
    session: ApplicationSession = Depends(get_application_session),
):
    try:
        update_fields(session, payload.fields)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return SessionRead.from_session(session)


@router.patch("/{session_id}/research", response_model=SessionRead)
async def edit_research(
    payload: ResearchUpdateRequest,
    session: ApplicationSession = Depends(get_application_session),
):
    try:
        update_research(session, payload.values)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return SessionRead.from_session(session)


@router.patch("/{session_id}/acknowledgements", response_model=SessionRead)
async def edit_acknowledgements(
    payload: AcknowledgementUpdate,
    session: ApplicationSession = Depends(get_application_session),
):
    update_acknowledgements(session, payload.flags())
    return SessionRead.from_session(session)


@router.patch("/{session_id}/checklist", response_model=SessionRead)
async def edit_checklist(
    payload: ChecklistUpdate,
    session: ApplicationSession = Depends(get_application_session),
):
    update_checklist(session, payload.flags())
    return SessionRead.from_session(session)


# ------------------------------------------------------------
# STEP NAVIGATION
# ------------------------------------------------------------
@router.post("/{session_id}/next", response_model=StepResultRead)
async def go_next(session: ApplicationSession = Depends(get_application_session)):
    result = next_step(session)
    return StepResultRead(
        ok=result.ok,
        step=int(session.step),
        errors=result.errors,
        alert=result.alert,
        scroll_to_top=True,
    )


@router.post("/{session_id}/back", response_model=StepResultRead)
async def go_back(session: ApplicationSession = Depends(get_application_session)):
    step = previous_step(session)
    return StepResultRead(ok=True, step=int(step), errors=session.errors, scroll_to_top=True)


# ------------------------------------------------------------
# UPLOADS
# ------------------------------------------------------------
@router.post("/{session_id}/files/{field}", response_model=UploadRead)
@limiter.limit(settings.UPLOAD_RATE_LIMIT)
async def upload_file(
    request: Request,
    field: str,
    file: UploadFile = File(...),
    session: ApplicationSession = Depends(get_application_session),
):
    try:
        content = await ingest_upload(session, field, file)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return UploadRead.from_content(field, content)


@router.delete("/{session_id}/files/{field}", response_model=SessionRead)
async def remove_file(field: str, session: ApplicationSession = Depends(get_application_session)):
    try:
        clear_upload(session, field)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return SessionRead.from_session(session)


# ------------------------------------------------------------
# PREVIEW
# ------------------------------------------------------------
@router.get("/{session_id}/preview")
async def preview_application(session: ApplicationSession = Depends(get_application_session)):
    try:
        pdf_bytes = await run_in_threadpool(generate_application_pdf, session.record)
    except ValueError as e:
        logger.error(f"Preview failed for session {session.id}: {e}")
        raise HTTPException(status_code=500, detail="Could not generate the application preview.")

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="Application_{session.record.application_no}.pdf"'},
    )


# ------------------------------------------------------------
# SUBMIT / DOWNLOAD
# ------------------------------------------------------------
@router.post("/{session_id}/submit", response_model=SubmissionRead)
async def submit(
    session: ApplicationSession = Depends(get_application_session),
    client: SubmissionClient = Depends(get_client),
):
    try:
        state = await submit_application(session, client)
    except AlreadySubmitted as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SubmissionBlocked as e:
        raise HTTPException(status_code=400, detail={"message": str(e), "errors": e.errors})

    return SubmissionRead.from_state(state)


@router.get("/{session_id}/download")
async def download_application(session: ApplicationSession = Depends(get_application_session)):
    path = session.submission.download_path
    if not path or not os.path.exists(path):
        raise HTTPException(status_code=404, detail="No submitted application to download")

    return FileResponse(path, media_type="application/pdf", filename=session.submission.download_filename)


@router.get("/{session_id}/export.csv")
async def export_record_csv(session: ApplicationSession = Depends(get_application_session)):
    filename, text = generate_record_csv(session.record)
    return Response(
        content=text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
