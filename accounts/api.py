"""HTTP API exposing account registration, login and profile lookup."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from .errors import AuthenticationError, ConflictError, InfrastructureError, ValidationError
from .models import User
from .service import AccountService

logger = logging.getLogger("accounts.api")

SERVER_ERROR = "Server error"


class RegisterRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=1024)


class RegisterResponse(BaseModel):
    message: str


class LoginRequest(BaseModel):
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=1024)


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_at: datetime


class ProfileResponse(BaseModel):
    id: str
    name: str
    email: str
    created_at: datetime


def _server_error() -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=SERVER_ERROR)


def _build_user_dependency(service: AccountService):
    bearer_security = HTTPBearer(auto_error=False)

    async def dependency(
        bearer: HTTPAuthorizationCredentials | None = Depends(bearer_security),
    ) -> User:
        token = bearer.credentials if bearer is not None else None
        try:
            return await service.authenticate_async(token)
        except AuthenticationError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=exc.message,
                headers={"WWW-Authenticate": "Bearer"},
            ) from exc
        except InfrastructureError as exc:
            raise _server_error() from exc

    return dependency


def build_router(service: AccountService) -> APIRouter:
    """Return the ``/api/users`` routes bound to ``service``."""

    router = APIRouter(prefix="/api/users", tags=["users"])
    current_user = _build_user_dependency(service)

    @router.post(
        "/register",
        status_code=status.HTTP_201_CREATED,
        response_model=RegisterResponse,
    )
    async def register(request: RegisterRequest) -> RegisterResponse:
        try:
            await service.register_async(request.name, request.email, request.password)
        except ValidationError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
        except ConflictError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc
        except InfrastructureError as exc:
            raise _server_error() from exc
        return RegisterResponse(message="User registered successfully")

    @router.post("/login", response_model=LoginResponse)
    async def login(request: LoginRequest) -> LoginResponse:
        try:
            issued = await service.login_async(request.email, request.password)
        except ValidationError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
        except AuthenticationError as exc:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message) from exc
        except InfrastructureError as exc:
            raise _server_error() from exc
        return LoginResponse(token=issued.token, expires_at=issued.expires_at)

    @router.get("/profile", response_model=ProfileResponse)
    async def profile(user: User = Depends(current_user)) -> ProfileResponse:
        return ProfileResponse(
            id=user.id,
            name=user.name,
            email=user.email,
            created_at=user.created_at,
        )

    return router


def create_app(*, service: AccountService) -> FastAPI:
    """Instantiate the FastAPI application for the account service."""

    app = FastAPI(
        title="Account Service",
        version="0.1.0",
        description="User registration and session token issuance.",
    )
    app.state.service = service

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    app.include_router(build_router(service))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": SERVER_ERROR},
        )

    return app


__all__ = ["create_app", "build_router"]
