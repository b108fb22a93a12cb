"""Niche exclusion list endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from nichescout.api.deps import ServiceDep
from nichescout.api.schemas import AddNicheRequest, NicheListResponse

router = APIRouter(prefix="/niches", tags=["niches"])


@router.get("", response_model=NicheListResponse)
def list_niches(service: ServiceDep) -> NicheListResponse:
    """Everything the next run will be asked to avoid."""
    niches = sorted(service.excluded_niches())
    return NicheListResponse(niches=niches, total=len(niches))


@router.post("", response_model=NicheListResponse, status_code=201)
def add_niche(request: AddNicheRequest, service: ServiceDep) -> NicheListResponse:
    niche = request.niche.strip()
    if not niche:
        raise ValueError("Niche must not be blank")
    service.exclusions.add(niche)
    niches = sorted(service.excluded_niches())
    return NicheListResponse(niches=niches, total=len(niches))
