import logging
from pathlib import Path
from typing import Union

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from careerpath.config import get_settings
from careerpath.errors import AppError, UpstreamError
from careerpath.logging_config import setup_logging
from careerpath.routers import auth, careers, resume

BASE_DIR = Path(__file__).resolve().parent

# Initialize
settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="CareerPath")
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(resume.router)
app.include_router(careers.router)


# --- Error handling: every failure leaves as {"msg": ...} ---

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    # upstream failures are logged with their detail where they are raised
    if not isinstance(exc, UpstreamError):
        logger.info("Request rejected", extra={"path": request.url.path, "status": exc.status_code, "reason": exc.message})
    return JSONResponse(status_code=exc.status_code, content={"msg": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("Malformed request", extra={"path": request.url.path, "errors": len(exc.errors())})
    return JSONResponse(status_code=400, content={"msg": "Invalid request body"})


@app.exception_handler(StarletteHTTPException)
@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: Union[HTTPException, StarletteHTTPException]):
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(status_code=exc.status_code, content={"msg": detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled server error", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"msg": "Server error"})


# --- Pages ---

@app.get("/", response_class=HTMLResponse)
async def home(request: Request):
    return templates.TemplateResponse(request, "index.html", {
        "api_base": "/api",
        "career_redirect_url": settings.career_redirect_url,
    })


@app.get("/explore", response_class=HTMLResponse)
async def explore(request: Request):
    """Category picker that sends the visitor on to the career section."""
    return templates.TemplateResponse(request, "explore.html", {
        "api_base": "/api",
        "career_redirect_url": settings.career_redirect_url,
    })


@app.get("/partials/login", response_class=HTMLResponse)
async def login_partial(request: Request):
    """Markup for the login/signup modal, fetched by the page on first open."""
    return templates.TemplateResponse(request, "login.html", {})


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
