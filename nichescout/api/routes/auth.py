"""Mock sign-in endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from nichescout.api.deps import ServiceDep, UserDep
from nichescout.api.schemas import LoginRequest, MessageResponse, UserResponse
from nichescout.auth import InvalidCredentialsError

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=UserResponse)
def login(request: LoginRequest, service: ServiceDep) -> UserResponse:
    try:
        user = service.auth.login(request.email, request.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    return UserResponse(id=user.id, email=user.email, name=user.name)


@router.post("/logout", response_model=MessageResponse)
def logout(service: ServiceDep) -> MessageResponse:
    service.auth.logout()
    return MessageResponse(message="Signed out")


@router.get("/me", response_model=UserResponse)
def me(user: UserDep) -> UserResponse:
    return UserResponse(id=user.id, email=user.email, name=user.name)
