"""Report run endpoints - generation, retrieval and delivery."""

from fastapi import APIRouter, Query, status
from fastapi.responses import HTMLResponse

from sprintlens.api.dependencies import OrchestratorDep
from sprintlens.api.models import (
    APIResponse,
    DeliveryRequest,
    DeliveryResponse,
    GenerateReportRequest,
    RunResponse,
    RunSummaryResponse,
    delivery_to_response,
    run_to_response,
    run_to_summary,
)
from sprintlens.orchestrator import RunNotReadyError
from sprintlens.state_store import ReportRunNotFoundError

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/runs", response_model=APIResponse[list[RunSummaryResponse]])
def list_runs(
    orchestrator: OrchestratorDep,
    org_id: str = Query(..., min_length=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> APIResponse[list[RunSummaryResponse]]:
    """List READY report runs, most recent first."""
    runs = orchestrator.list_runs(org_id, limit=limit)
    return APIResponse(data=[run_to_summary(r) for r in runs])


@router.get("/runs/{run_id}", response_model=APIResponse[RunResponse])
def get_run(
    run_id: str,
    orchestrator: OrchestratorDep,
    org_id: str = Query(..., min_length=1),
) -> APIResponse[RunResponse]:
    """Get a report run with its payload."""
    run = orchestrator.get_run(org_id, run_id)
    return APIResponse(data=run_to_response(run))


@router.get("/runs/{run_id}/html", response_class=HTMLResponse)
def get_run_html(
    run_id: str,
    orchestrator: OrchestratorDep,
    org_id: str = Query(..., min_length=1),
) -> HTMLResponse:
    """Serve the rendered HTML of a READY run."""
    try:
        run = orchestrator.get_ready_run(org_id, run_id)
    except (ReportRunNotFoundError, RunNotReadyError):
        return HTMLResponse(
            content="Report not found or not ready",
            status_code=status.HTTP_404_NOT_FOUND,
        )
    return HTMLResponse(content=run.html or "")


@router.get(
    "/sprints/{sprint_id}/latest",
    response_model=APIResponse[RunResponse | None],
)
def get_latest_sprint_run(
    sprint_id: str,
    orchestrator: OrchestratorDep,
    org_id: str = Query(..., min_length=1),
) -> APIResponse[RunResponse | None]:
    """Get the latest READY run of a sprint (null when none exists)."""
    run = orchestrator.get_latest_sprint_run(org_id, sprint_id)
    return APIResponse(data=run_to_response(run) if run is not None else None)


@router.post(
    "/sprints/{sprint_id}/generate",
    response_model=APIResponse[RunResponse],
    status_code=status.HTTP_201_CREATED,
)
def generate_sprint_report(
    sprint_id: str,
    request: GenerateReportRequest,
    orchestrator: OrchestratorDep,
) -> APIResponse[RunResponse]:
    """Generate a sprint summary report."""
    run = orchestrator.generate_sprint_report(
        request.org_id, sprint_id, template_id=request.template_id
    )
    return APIResponse(data=run_to_response(run))


@router.post("/runs/{run_id}/deliveries", response_model=APIResponse[DeliveryResponse])
def deliver_run(
    run_id: str,
    request: DeliveryRequest,
    orchestrator: OrchestratorDep,
) -> APIResponse[DeliveryResponse]:
    """Email a READY run to the given recipients."""
    result = orchestrator.deliver_run_email(
        request.org_id, run_id, request.recipients(), subject=request.subject
    )
    return APIResponse(data=delivery_to_response(result))
