from fastapi import APIRouter

from minibi.calculations.template import extract_variables, render_text, validate_template
from minibi.schemas.requests import TemplateRenderRequest, TemplateValidationResponse

router = APIRouter()


@router.post("/render")
def render_template(body: TemplateRenderRequest) -> dict[str, str]:
    """Render {{variable}} placeholders. Unknown names are left as written."""
    text = render_text(body.template, body.variables, body.dashboard_variables, body.now)
    return {"text": text}


@router.post("/validate", response_model=TemplateValidationResponse)
def check_template(body: TemplateRenderRequest) -> TemplateValidationResponse:
    """Report template warnings without blocking rendering."""
    result = validate_template(body.template)
    return TemplateValidationResponse(
        is_valid=result.is_valid,
        warnings=result.warnings,
        variables=extract_variables(body.template),
    )
