from functools import lru_cache

from fastapi import Depends, Header

from careerpath.config import Settings, get_settings
from careerpath.errors import AuthError
from careerpath.firebase import get_firebase_app
from careerpath.services.analysis_service import AnalysisService, get_analysis_service as build_analysis_service
from careerpath.services.auth_service import AuthService, TokenService
from careerpath.services.resume_service import ResumeService
from careerpath.services.storage_service import BlobStore, FirebaseStorageService, S3StorageService
from careerpath.services.user_store import FirestoreUserStore, UserStore


@lru_cache()
def get_user_store() -> UserStore:
    settings = get_settings()
    return FirestoreUserStore.from_app(get_firebase_app(settings), settings.users_collection)


@lru_cache()
def get_blob_store() -> BlobStore:
    settings = get_settings()
    backend = settings.storage_backend.strip().lower()
    if backend == "s3":
        return S3StorageService.from_settings(settings)
    if backend == "firebase":
        return FirebaseStorageService.from_app(get_firebase_app(settings), settings.firebase_storage_bucket)
    raise ValueError(f"Unsupported STORAGE_BACKEND='{settings.storage_backend}'")


@lru_cache()
def get_analysis_service() -> AnalysisService:
    return build_analysis_service(get_settings())


@lru_cache()
def get_auth_service() -> AuthService:
    return AuthService(get_settings(), get_user_store())


def get_resume_service(
    store: BlobStore = Depends(get_blob_store),
    analyzer: AnalysisService = Depends(get_analysis_service),
    settings: Settings = Depends(get_settings),
) -> ResumeService:
    return ResumeService(store, analyzer, max_bytes=settings.max_upload_bytes)


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(settings)


def get_current_user_id(
    authorization: str = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """Resolve the bearer token to a user id, or reject the request with 401."""
    scheme, _, token = (authorization or "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthError("No token")
    return tokens.verify_token(token)
