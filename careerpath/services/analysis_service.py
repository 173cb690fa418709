import json
import logging
from typing import Optional, Protocol

import httpx
from openai import OpenAI
from pydantic import ValidationError as PydanticValidationError

from careerpath.config import Settings
from careerpath.errors import UpstreamError
from careerpath.models import AnalysisResult, UploadedResume
from careerpath.services.pdf_service import ResumeTextService

logger = logging.getLogger(__name__)


class AnalysisService(Protocol):
    def analyze(self, resume: UploadedResume, file_bytes: bytes) -> AnalysisResult: ...


class StaticAnalysisService:
    """Fixed analysis, used when no analysis backend is configured."""

    def analyze(self, resume: UploadedResume, file_bytes: bytes) -> AnalysisResult:
        return AnalysisResult(
            strengths=["Problem Solving"],
            suggested_careers=["Software Engineer"],
            next_steps=["Learn React"],
        )


class HttpAnalysisService:
    """
    Remote analysis endpoint. Sends {"resumeUrl": ...} and expects
    {"analysis": {strengths, suggestedCareers, nextSteps}, "redirectUrl": ...}.
    """

    def __init__(self, url: str, timeout: float = 30.0, client: Optional[httpx.Client] = None):
        self.url = url
        self.client = client or httpx.Client(timeout=timeout)

    def analyze(self, resume: UploadedResume, file_bytes: bytes) -> AnalysisResult:
        try:
            response = self.client.post(self.url, json={"resumeUrl": resume.download_url})
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(f"Analysis request failed: {str(e)}", e)

        if not isinstance(data, dict) or not isinstance(data.get("analysis"), dict):
            raise UpstreamError("Analysis response has no analysis object")

        try:
            return AnalysisResult.model_validate({
                **data["analysis"],
                "redirectUrl": data.get("redirectUrl"),
            })
        except PydanticValidationError as e:
            raise UpstreamError(f"Malformed analysis response: {str(e)}", e)


class OpenAIAnalysisService:
    def __init__(self, api_key: Optional[str], model: str = "gpt-4.1", client=None):
        self.client = client or OpenAI(api_key=api_key)
        self.model = model

    def build_prompt(self, resume_text: str) -> str:
        return f"""You are an experienced career advisor. Read the resume below and suggest where this person's career could go.

Respond with a JSON object with exactly these keys:
- "strengths": 3 to 5 short phrases naming the candidate's strongest skills or qualities
- "suggestedCareers": 3 to 5 job titles that fit the resume, best fit first
- "nextSteps": 3 to 5 concrete actions that would move the candidate towards those careers

Use plain text inside the strings, no markdown.

Resume:
{resume_text}"""

    def analyze(self, resume: UploadedResume, file_bytes: bytes) -> AnalysisResult:
        try:
            extracted = ResumeTextService.extract_text(file_bytes, resume.content_type)
        except ValueError as e:
            raise UpstreamError(str(e), e)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "system",
                        "content": "You are a career advisor. Always answer with a single JSON object."
                    },
                    {"role": "user", "content": self.build_prompt(extracted['text'])}
                ],
                response_format={"type": "json_object"},
                temperature=0.4,
                max_tokens=800
            )
            content = response.choices[0].message.content
        except Exception as e:
            raise UpstreamError(f"AI analysis failed: {str(e)}", e)

        try:
            return AnalysisResult.model_validate(json.loads(content or ""))
        except (ValueError, PydanticValidationError) as e:
            raise UpstreamError(f"AI analysis returned malformed JSON: {str(e)}", e)


def get_analysis_service(settings: Settings) -> AnalysisService:
    provider = settings.analysis_provider.strip().lower()

    if provider == "static":
        return StaticAnalysisService()

    if provider == "http":
        if not settings.analysis_api_url:
            raise ValueError("ANALYSIS_API_URL is required when ANALYSIS_PROVIDER=http")
        return HttpAnalysisService(settings.analysis_api_url, timeout=settings.analysis_timeout)

    if provider == "openai":
        return OpenAIAnalysisService(settings.openai_api_key, model=settings.openai_model)

    raise ValueError(f"Unsupported ANALYSIS_PROVIDER='{settings.analysis_provider}'")
