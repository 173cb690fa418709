from fastapi import APIRouter, Depends

from careerpath.dependencies import get_auth_service
from careerpath.models import AuthResponse, ErrorResponse, LoginRequest, SignupRequest
from careerpath.services.auth_service import AuthService

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


@router.post("/signup", response_model=AuthResponse)
def signup(payload: SignupRequest, auth_service: AuthService = Depends(get_auth_service)):
    """Create an account and log it in straight away."""
    return auth_service.signup(payload.username, payload.email, payload.password)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    return auth_service.login(payload.email, payload.password)
