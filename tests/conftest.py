import itertools

import pytest
from fastapi.testclient import TestClient

from careerpath.config import Settings, get_settings
from careerpath.dependencies import get_analysis_service, get_auth_service, get_blob_store
from careerpath.errors import ConflictError, UpstreamError
from careerpath.main import app
from careerpath.models import AnalysisResult, UploadedResume, User
from careerpath.services.auth_service import AuthService
from careerpath.services.user_store import normalize_email


class InMemoryUserStore:
    def __init__(self):
        self.users = {}
        self._ids = itertools.count(1)

    def find_by_email(self, email):
        return self.users.get(normalize_email(email))

    def create(self, username, email, password_hash):
        email = normalize_email(email)
        if email in self.users:
            raise ConflictError("Email already exists")
        user = User(id=f"user-{next(self._ids)}", username=username, email=email, password_hash=password_hash)
        self.users[email] = user
        return user


class RecordingBlobStore:
    def __init__(self, fail_upload=False):
        self.objects = {}
        self.deleted = []
        self.fail_upload = fail_upload

    def upload_resume(self, file_bytes, key, content_type):
        if self.fail_upload:
            raise UpstreamError("bucket unreachable")
        self.objects[key] = (file_bytes, content_type)
        return UploadedResume(
            storage_key=key,
            content_type=content_type,
            download_url=f"https://files.test/{key}",
        )

    def delete_resume(self, key):
        self.deleted.append(key)
        self.objects.pop(key, None)


class CannedAnalysisService:
    def __init__(self, result=None, error=None):
        self.result = result or AnalysisResult(
            strengths=["Problem Solving"],
            suggested_careers=["Software Engineer", "Data Analyst"],
            next_steps=["Learn React"],
        )
        self.error = error
        self.calls = []

    def analyze(self, resume, file_bytes):
        self.calls.append(resume)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def test_settings():
    return Settings(jwt_secret="test-secret", bcrypt_rounds=4, analysis_provider="static")


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def auth_service(test_settings, user_store):
    return AuthService(test_settings, user_store)


@pytest.fixture
def blob_store():
    return RecordingBlobStore()


@pytest.fixture
def analyzer():
    return CannedAnalysisService()


@pytest.fixture
def client(test_settings, auth_service, blob_store, analyzer):
    """TestClient wired to in-memory collaborators through dependency overrides."""
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_analysis_service] = lambda: analyzer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def signed_up(client):
    """Sign up alice and return the auth response body."""
    response = client.post("/api/auth/signup", json={
        "username": "alice",
        "email": "a@x.com",
        "password": "secret123",
    })
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def auth_headers(signed_up):
    return {"Authorization": f"Bearer {signed_up['token']}"}
