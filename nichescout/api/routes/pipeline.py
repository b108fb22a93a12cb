"""Pipeline run and result endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from nichescout.api.deps import ServiceDep
from nichescout.api.schemas import RunPipelineRequest
from nichescout.export import export_filename

router = APIRouter(prefix="/pipeline", tags=["pipeline"])


@router.post("/runs")
async def run_pipeline(
    request: RunPipelineRequest,
    service: ServiceDep,
) -> dict[str, Any]:
    """Run all four stages and return the result.

    Blocks until the run finishes; the analysis and strategy stages can take
    a minute or more each.
    """
    result = await service.run(collect_errors=request.collect_errors)
    return result.to_dict()


@router.get("/last")
def get_last_result(service: ServiceDep) -> dict[str, Any]:
    result = service.last_result()
    if result is None:
        raise HTTPException(status_code=404, detail="No pipeline result yet")
    return result.to_dict()


@router.get("/last/export")
def export_last_result(service: ServiceDep) -> JSONResponse:
    """The most recent result as a downloadable JSON attachment."""
    result = service.last_result()
    if result is None:
        raise HTTPException(status_code=404, detail="No pipeline result yet")
    return JSONResponse(
        content=result.to_dict(),
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )
