"""Idea bank endpoints, scoped to the signed-in user."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException

from nichescout.api.deps import ServiceDep, UserDep
from nichescout.api.schemas import IdeaListResponse, IdeaResponse, SaveIdeaRequest
from nichescout.service import NoLastResultError

if TYPE_CHECKING:
    from nichescout.models.idea import SavedIdea

router = APIRouter(prefix="/ideas", tags=["ideas"])


def _to_response(ideas: list[SavedIdea]) -> IdeaListResponse:
    return IdeaListResponse(
        ideas=[IdeaResponse(name=i.name, content=i.content) for i in ideas],
        total=len(ideas),
    )


@router.get("", response_model=IdeaListResponse)
def list_ideas(service: ServiceDep) -> IdeaListResponse:
    # Signed-out callers get an empty bank rather than an error.
    return _to_response(service.list_ideas())


@router.post("", response_model=IdeaListResponse, status_code=201)
def save_idea(
    request: SaveIdeaRequest,
    service: ServiceDep,
    _user: UserDep,
) -> IdeaListResponse:
    try:
        if request.content:
            ideas = service.save_idea(request.content)
        else:
            ideas = service.save_last_result()
    except NoLastResultError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _to_response(ideas)


@router.delete("/{name}", response_model=IdeaListResponse)
def remove_idea(
    name: str,
    service: ServiceDep,
    _user: UserDep,
) -> IdeaListResponse:
    return _to_response(service.remove_idea(name))
