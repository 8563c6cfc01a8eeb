"""
HTTP routes for the public project listing and the admin panel.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, Response

from lightberry.auth import AdminAuthService, PasswordResetError
from lightberry.config import Settings, get_settings
from lightberry.db import ProjectStore
from lightberry.dependencies import (
    get_auth_service,
    get_project_service,
    get_remote_store,
)
from lightberry.diagnostics import connection_test, env_check, run_diagnostics
from lightberry.fallback import OperationOutcome, OperationResult
from lightberry.projects import (
    DATA_MODE_MESSAGES,
    ProjectService,
    ProjectValidationError,
)
from lightberry.schemas import (
    ConnectionTestResponse,
    DataStatusResponse,
    DiagnosticsResponse,
    EnvCheckResponse,
    ListProjectsResponse,
    LoginRequest,
    LoginResponse,
    ProjectCountResponse,
    ProjectFields,
    ProjectResponse,
    ResetPasswordRequest,
    SessionResponse,
    StatusResponse,
)
from lightberry.sessions import AdminSession

logger = logging.getLogger(__name__)

ADMIN_COOKIE = "lightberry_admin_token"

router = APIRouter()
admin_router = APIRouter()


def _list_response(
    result: OperationResult, service: ProjectService
) -> ListProjectsResponse:
    return ListProjectsResponse(
        projects=[ProjectResponse.from_record(p) for p in result.data],
        is_using_fallback=result.is_using_fallback,
        error=result.error,
        mode=service.data_mode(result).value,
    )


AUTH_UNAVAILABLE = "Authentication service unavailable"


def _raise_if_auth_unavailable(result: OperationResult) -> None:
    if result.outcome in (OperationOutcome.ERRORED, OperationOutcome.TIMED_OUT):
        raise HTTPException(status_code=503, detail=AUTH_UNAVAILABLE)


def _project_or_error(result: OperationResult) -> ProjectResponse:
    if result.outcome is OperationOutcome.NOT_FOUND or (
        result.ok and result.data is None
    ):
        raise HTTPException(status_code=404, detail="Project not found")
    if not result.ok:
        raise HTTPException(status_code=502, detail=result.error)
    return ProjectResponse.from_record(result.data)


@router.get("/healthz", response_model=StatusResponse)
def healthz():
    return StatusResponse(status="ok")


@router.get("/projects", response_model=ListProjectsResponse)
def list_projects(service: ProjectService = Depends(get_project_service)):
    """
    Public listing. Always answers 200; falls back to cached or static data.
    """
    result = service.list_projects()
    return _list_response(result, service)


@router.get("/projects/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: str, service: ProjectService = Depends(get_project_service)
):
    result = service.get_project(project_id)
    if result.outcome is OperationOutcome.NOT_FOUND or result.data is None:
        raise HTTPException(
            status_code=404, detail=result.error or "Project not found"
        )
    return ProjectResponse.from_record(result.data)


@router.get("/data-status", response_model=DataStatusResponse)
def data_status(service: ProjectService = Depends(get_project_service)):
    result = service.list_projects()
    mode = service.data_mode(result)
    return DataStatusResponse(
        mode=mode.value,
        configured=service.configured,
        message=DATA_MODE_MESSAGES[mode],
        error=result.error,
    )


def get_admin_token(
    authorization: Optional[str] = Header(default=None),
    cookie_token: Optional[str] = Cookie(default=None, alias=ADMIN_COOKIE),
) -> Optional[str]:
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return cookie_token


def require_admin(
    token: Optional[str] = Depends(get_admin_token),
    auth: AdminAuthService = Depends(get_auth_service),
) -> AdminSession:
    result = auth.get_session(token)
    _raise_if_auth_unavailable(result)
    if result.data is None:
        raise HTTPException(
            status_code=401,
            detail=result.error or "Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return result.data


@admin_router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    response: Response,
    auth: AdminAuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    result = auth.login(payload.email, payload.password)
    _raise_if_auth_unavailable(result)
    session = result.data
    if session is None:
        raise HTTPException(status_code=401, detail=result.error or "Login failed")
    response.set_cookie(
        ADMIN_COOKIE,
        session.token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
    )
    return LoginResponse(
        token=session.token, email=session.email, expires_at=session.expires_at
    )


@admin_router.post("/logout", response_model=StatusResponse)
def logout(
    response: Response,
    token: Optional[str] = Depends(get_admin_token),
    auth: AdminAuthService = Depends(get_auth_service),
):
    auth.logout(token)
    response.delete_cookie(ADMIN_COOKIE)
    return StatusResponse(status="ok")


@admin_router.get("/session", response_model=SessionResponse)
def current_session(
    token: Optional[str] = Depends(get_admin_token),
    auth: AdminAuthService = Depends(get_auth_service),
):
    result = auth.get_session(token)
    _raise_if_auth_unavailable(result)
    session = result.data
    if session is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(
        authenticated=True, email=session.email, expires_at=session.expires_at
    )


@admin_router.post("/reset-password", response_model=StatusResponse)
def reset_password(
    payload: ResetPasswordRequest,
    session: AdminSession = Depends(require_admin),
    auth: AdminAuthService = Depends(get_auth_service),
):
    try:
        result = auth.reset_password(
            session, payload.password, payload.confirm_password
        )
    except PasswordResetError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not result.data:
        raise HTTPException(status_code=502, detail=result.error)
    return StatusResponse(status="ok")


@admin_router.get("/projects", response_model=ListProjectsResponse)
def admin_list_projects(
    _: AdminSession = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    result = service.list_projects()
    return _list_response(result, service)


@admin_router.get("/projects/count", response_model=ProjectCountResponse)
def admin_count_projects(
    _: AdminSession = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    result = service.count_projects()
    return ProjectCountResponse(
        count=result.data,
        is_using_fallback=result.is_using_fallback,
        error=result.error,
    )


@admin_router.post("/projects", response_model=ProjectResponse, status_code=201)
def admin_create_project(
    payload: ProjectFields,
    _: AdminSession = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    try:
        result = service.create_project(payload.to_fields())
    except ProjectValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _project_or_error(result)


@admin_router.get("/projects/{project_id}", response_model=ProjectResponse)
def admin_get_project(
    project_id: str,
    _: AdminSession = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    return _project_or_error(service.get_project(project_id))


@admin_router.put("/projects/{project_id}", response_model=ProjectResponse)
def admin_update_project(
    project_id: str,
    payload: ProjectFields,
    _: AdminSession = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    try:
        result = service.update_project(project_id, payload.to_fields())
    except ProjectValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _project_or_error(result)


@admin_router.delete("/projects/{project_id}", response_model=StatusResponse)
def admin_delete_project(
    project_id: str,
    _: AdminSession = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    result = service.delete_project(project_id)
    if result.outcome is OperationOutcome.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Project not found")
    if not result.ok:
        raise HTTPException(status_code=502, detail=result.error)
    return StatusResponse(status="ok")


@admin_router.get("/env-check", response_model=EnvCheckResponse)
def admin_env_check(
    _: AdminSession = Depends(require_admin),
    settings: Settings = Depends(get_settings),
):
    return EnvCheckResponse(**env_check(settings))


@admin_router.get("/diagnostics", response_model=DiagnosticsResponse)
def admin_diagnostics(
    _: AdminSession = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    store: Optional[ProjectStore] = Depends(get_remote_store),
):
    steps = run_diagnostics(settings, store)
    return DiagnosticsResponse(
        configured=store is not None,
        steps=[step.as_dict() for step in steps],
    )


@admin_router.get("/connection-test", response_model=ConnectionTestResponse)
def admin_connection_test(
    _: AdminSession = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    store: Optional[ProjectStore] = Depends(get_remote_store),
):
    return ConnectionTestResponse(**connection_test(settings, store))
