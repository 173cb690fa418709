import logging
from pathlib import PurePosixPath
from typing import Optional

from careerpath.errors import UpstreamError, ValidationError
from careerpath.models import UploadResponse
from careerpath.services.analysis_service import AnalysisService
from careerpath.services.pdf_service import DOCX_TYPE, PDF_TYPE
from careerpath.services.storage_service import BlobStore, make_storage_key, staged_upload

logger = logging.getLogger(__name__)

ALLOWED_TYPES = {
    ".pdf": PDF_TYPE,
    ".docx": DOCX_TYPE,
}
INVALID_TYPE = "Invalid file type. Please use PDF or DOCX."


def check_resume_type(filename: Optional[str], content_type: Optional[str]) -> str:
    """
    Both the extension and the declared content type must name the same
    allowed format.
    Returns: the content type to store the file with
    """
    suffix = PurePosixPath((filename or "").replace("\\", "/")).suffix.lower()
    expected = ALLOWED_TYPES.get(suffix)
    declared = (content_type or "").split(";")[0].strip().lower()
    if expected is None or declared != expected:
        raise ValidationError(INVALID_TYPE)
    return expected


class ResumeService:
    def __init__(self, store: BlobStore, analyzer: AnalysisService, max_bytes: int = 5 * 1024 * 1024):
        self.store = store
        self.analyzer = analyzer
        self.max_bytes = max_bytes

    def upload_and_analyze(self, filename: str, content_type: Optional[str], file_bytes: bytes) -> UploadResponse:
        content_type = check_resume_type(filename, content_type)

        if not file_bytes:
            raise ValidationError("Uploaded file is empty")
        if len(file_bytes) > self.max_bytes:
            raise ValidationError(f"File too large (max {self.max_bytes // (1024 * 1024)}MB)")

        key = make_storage_key(filename)
        try:
            with staged_upload(self.store, file_bytes, key, content_type) as resume:
                analysis = self.analyzer.analyze(resume, file_bytes)
        except UpstreamError as e:
            logger.error("Resume upload failed", extra={"storage_key": key, "detail": e.detail})
            raise
        except Exception as e:
            logger.exception("Resume upload failed", extra={"storage_key": key})
            raise UpstreamError(f"Unexpected upload failure: {str(e)}", e)

        logger.info("Resume analysed", extra={"storage_key": key, "careers": len(analysis.suggested_careers)})
        return UploadResponse(
            msg="Resume uploaded",
            file_url=resume.download_url,
            analysis=analysis.public_analysis(),
            redirect_url=analysis.redirect_url,
        )
