import logging

from fastapi import status

from careerpath.dependencies import get_auth_service
from careerpath.errors import UpstreamError
from careerpath.main import app
from careerpath.models import AnalysisResult
from careerpath.services.pdf_service import DOCX_TYPE, PDF_TYPE


def _upload(client, headers=None, filename="resume.pdf", content=b"%PDF-1.4 fake", content_type=PDF_TYPE):
    return client.post(
        "/api/resume/upload",
        files={"resume": (filename, content, content_type)},
        headers=headers or {},
    )


def test_upload_without_token_is_rejected_before_storage(client, blob_store, analyzer):
    response = _upload(client)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"msg": "No token"}
    assert blob_store.objects == {}
    assert analyzer.calls == []


def test_upload_with_bad_token(client, blob_store):
    response = _upload(client, headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"msg": "Invalid token"}
    assert blob_store.objects == {}


def test_upload_with_non_bearer_scheme(client, blob_store):
    response = _upload(client, headers={"Authorization": "Basic abc"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"msg": "No token"}


def test_upload_pdf(client, auth_headers, blob_store):
    response = _upload(client, headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["msg"] == "Resume uploaded"
    assert isinstance(data["fileUrl"], str)
    assert data["analysis"]["suggestedCareers"]
    assert "redirectUrl" not in data["analysis"]

    (key,) = blob_store.objects
    assert key.startswith("resumes/") and key.endswith("-resume.pdf")
    assert blob_store.objects[key] == (b"%PDF-1.4 fake", PDF_TYPE)
    assert data["fileUrl"] == f"https://files.test/{key}"


def test_upload_docx(client, auth_headers):
    response = _upload(client, headers=auth_headers, filename="cv.docx", content=b"PK docx", content_type=DOCX_TYPE)
    assert response.status_code == status.HTTP_200_OK


def test_upload_passes_redirect_through(client, auth_headers, analyzer):
    analyzer.result = AnalysisResult(
        suggested_careers=["Data Scientist"],
        redirect_url="https://roadmap.example/data",
    )
    response = _upload(client, headers=auth_headers)
    assert response.json()["redirectUrl"] == "https://roadmap.example/data"


def test_upload_png_is_rejected(client, auth_headers, blob_store):
    response = _upload(client, headers=auth_headers, filename="photo.png", content=b"\x89PNG", content_type="image/png")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"msg": "Invalid file type. Please use PDF or DOCX."}
    assert blob_store.objects == {}


def test_upload_extension_and_type_must_agree(client, auth_headers, blob_store):
    response = _upload(client, headers=auth_headers, filename="resume.pdf", content_type="image/png")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    response = _upload(client, headers=auth_headers, filename="resume.exe", content_type=PDF_TYPE)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert blob_store.objects == {}


def test_upload_without_file(client, auth_headers):
    response = client.post("/api/resume/upload", headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"msg": "No file uploaded"}


def test_upload_empty_file(client, auth_headers, blob_store):
    response = _upload(client, headers=auth_headers, content=b"")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert blob_store.objects == {}


def test_upload_too_large(client, auth_headers, test_settings, blob_store):
    test_settings.max_upload_bytes = 10
    response = _upload(client, headers=auth_headers, content=b"x" * 11)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert blob_store.objects == {}


def test_analysis_failure_removes_blob(client, auth_headers, blob_store, analyzer):
    analyzer.error = UpstreamError("analysis service down")
    response = _upload(client, headers=auth_headers)
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"msg": "Server error"}
    assert blob_store.objects == {}
    assert len(blob_store.deleted) == 1


def test_unexpected_analysis_error_is_generic(client, auth_headers, blob_store, analyzer):
    analyzer.error = KeyError("analysis")
    response = _upload(client, headers=auth_headers)
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"msg": "Server error"}
    assert blob_store.objects == {}


def test_storage_failure(client, auth_headers, blob_store, analyzer):
    blob_store.fail_upload = True
    response = _upload(client, headers=auth_headers)
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"msg": "Server error"}
    assert analyzer.calls == []
    assert blob_store.deleted == []


def _user_store_down():
    raise UpstreamError("firestore credentials missing")


def test_missing_token_is_401_even_when_user_store_is_down(client, blob_store):
    app.dependency_overrides[get_auth_service] = _user_store_down
    response = _upload(client)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"msg": "No token"}
    assert blob_store.objects == {}


def test_valid_token_does_not_need_user_store(client, auth_headers, blob_store):
    app.dependency_overrides[get_auth_service] = _user_store_down
    response = _upload(client, headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert len(blob_store.objects) == 1


def test_upload_failure_is_logged_with_fields(client, auth_headers, analyzer, caplog):
    analyzer.error = UpstreamError("analysis service down")
    with caplog.at_level(logging.ERROR, logger="careerpath.services.resume_service"):
        _upload(client, headers=auth_headers)

    (record,) = [r for r in caplog.records if r.getMessage() == "Resume upload failed"]
    assert record.detail == "analysis service down"
    assert record.storage_key.startswith("resumes/")
