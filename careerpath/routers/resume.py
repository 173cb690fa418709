import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool

from careerpath.dependencies import get_current_user_id, get_resume_service
from careerpath.errors import ValidationError
from careerpath.models import ErrorResponse, UploadResponse
from careerpath.services.resume_service import ResumeService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/resume",
    tags=["resume"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post("/upload", response_model=UploadResponse)
async def upload_resume(
    resume: Optional[UploadFile] = File(None),
    user_id: str = Depends(get_current_user_id),
    resume_service: ResumeService = Depends(get_resume_service),
):
    """Store a PDF/DOCX resume and return the career analysis for it."""
    if resume is None or not resume.filename:
        raise ValidationError("No file uploaded")

    file_bytes = await resume.read()
    logger.info("Resume upload received", extra={"user_id": user_id, "upload_filename": resume.filename, "size": len(file_bytes)})

    # storage and analysis clients are blocking
    return await run_in_threadpool(
        resume_service.upload_and_analyze,
        resume.filename,
        resume.content_type,
        file_bytes,
    )
