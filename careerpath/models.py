from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(BaseModel):
    id: str
    username: str
    email: str
    password_hash: str
    created_at: Optional[datetime] = None


class UploadedResume(BaseModel):
    storage_key: str
    content_type: str
    download_url: str


class AnalysisResult(CamelModel):
    strengths: List[str] = []
    suggested_careers: List[str] = []
    next_steps: List[str] = []
    redirect_url: Optional[str] = None

    def public_analysis(self) -> Dict[str, Any]:
        """The `analysis` object of the upload response (redirect is reported separately)."""
        return self.model_dump(by_alias=True, exclude={"redirect_url"})


# --- Requests / responses ---

class SignupRequest(BaseModel):
    # Optional at parse time so missing fields get the API's own 400 message
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(CamelModel):
    token: str
    user_id: str


class UploadResponse(CamelModel):
    msg: str
    file_url: str
    analysis: Dict[str, Any]
    redirect_url: Optional[str] = None


class ErrorResponse(BaseModel):
    msg: str


# --- Career catalog ---

class CareerCategory(CamelModel):
    slug: str = Field(pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$")
    name: str = Field(min_length=1)
    description: str
    average_salary: str
    growth_rate: str
    top_skills: List[str] = Field(min_length=1)
    recommended_template: Literal["modern", "classic", "creative"]
    color: str

    @field_validator("top_skills")
    @classmethod
    def skills_not_blank(cls, value: List[str]) -> List[str]:
        if any(not skill.strip() for skill in value):
            raise ValueError("skills must be non-empty strings")
        return value


class CareerCatalogResponse(BaseModel):
    categories: List[CareerCategory]
