"""
Pydantic schemas for the Lightberry API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from lightberry.db import ProjectRecord


class ProjectFields(BaseModel):
    """
    Submitted project fields. Required-field checks happen in the service
    so blank and missing values are rejected the same way.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, max_length=4000)
    image_url: Optional[str] = Field(default=None, alias="imageUrl", max_length=2048)
    visit_url: Optional[str] = Field(default=None, alias="visitUrl", max_length=2048)

    def to_fields(self) -> dict:
        return self.model_dump(exclude_none=True)


class ProjectResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str
    image_url: str = Field(default="", alias="imageUrl")
    visit_url: str = Field(alias="visitUrl")
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: ProjectRecord) -> "ProjectResponse":
        return cls(
            id=record.id,
            title=record.title,
            description=record.description,
            image_url=record.image_url,
            visit_url=record.visit_url,
            created_at=record.created_at,
        )


class ListProjectsResponse(BaseModel):
    projects: list[ProjectResponse]
    is_using_fallback: bool
    error: Optional[str] = None
    mode: Literal["demo", "offline", "live"]


class ProjectCountResponse(BaseModel):
    count: Optional[int]
    is_using_fallback: bool
    error: Optional[str] = None


class DataStatusResponse(BaseModel):
    mode: Literal["demo", "offline", "live"]
    configured: bool
    message: str
    error: Optional[str] = None


class StatusResponse(BaseModel):
    status: Literal["ok"]


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=1024)


class LoginResponse(BaseModel):
    token: str
    email: str
    expires_at: float


class SessionResponse(BaseModel):
    authenticated: bool
    email: Optional[str] = None
    expires_at: Optional[float] = None


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: str = Field(..., max_length=1024)
    confirm_password: str = Field(..., alias="confirmPassword", max_length=1024)


class DiagnosticStepResponse(BaseModel):
    step: str
    status: Literal["pending", "success", "error", "skipped"]
    message: str


class DiagnosticsResponse(BaseModel):
    configured: bool
    steps: list[DiagnosticStepResponse]


class ConnectionTestResponse(BaseModel):
    status: Literal["success", "error", "not-configured"]
    message: str


class EnvCheckResponse(BaseModel):
    database_url: bool
    strapi_url: bool
    use_in_memory_backends: bool
    redis_url: bool
    auth_mode: Literal["demo", "store"]
    configured: bool
    status: Literal["ready", "not configured"]
    missing: list[str]
