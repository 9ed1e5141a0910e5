"""Report template endpoints."""

from fastapi import APIRouter, Query, status

from sprintlens.api.dependencies import OrchestratorDep
from sprintlens.api.models import (
    APIResponse,
    TemplateResponse,
    TemplateUpsert,
    template_to_response,
)

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("", response_model=APIResponse[list[TemplateResponse]])
def list_templates(
    orchestrator: OrchestratorDep,
    org_id: str = Query(..., min_length=1),
) -> APIResponse[list[TemplateResponse]]:
    """List active templates of an organization (seeds the default template)."""
    templates = orchestrator.list_templates(org_id)
    return APIResponse(data=[template_to_response(t) for t in templates])


@router.post(
    "",
    response_model=APIResponse[TemplateResponse],
    status_code=status.HTTP_201_CREATED,
)
def upsert_template(
    template: TemplateUpsert, orchestrator: OrchestratorDep
) -> APIResponse[TemplateResponse]:
    """Create a template, or update it when an id is given."""
    saved = orchestrator.upsert_template(
        org_id=template.org_id,
        name=template.name,
        config=template.config.to_config(),
        template_id=template.id,
        kind=template.kind,
        description=template.description,
        report_format=template.format,
        active=template.active,
    )
    return APIResponse(data=template_to_response(saved))
