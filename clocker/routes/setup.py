"""
Setup endpoints: store credentials and look up the employee directory.
"""
import logging
from fastapi import APIRouter, Request
from clocker.models import ApiResponse, CredentialsRequest, EmployeeSearchRequest
from clocker.bamboohr.client import BambooHRError
from clocker.bamboohr.directory import search_employees
from clocker.credentials import load_config
from clocker.setup_form import SetupForm
from clocker.routes.clock import snapshot_payload, snapshot_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/setup")


@router.put("/credentials")
async def save_credentials(request: Request, body: CredentialsRequest):
    """Validate, store and start using new credentials, then refresh once."""
    req_id = request.state.request_id
    form = SetupForm(
        api_key=body.apiKey,
        company_domain=body.companyDomain,
        selected_id=body.employeeId.strip(),
    )
    if not form.next():
        return ApiResponse.failure(code="validation_error", message=form.error, request_id=req_id)
    try:
        config = form.to_config()
    except ValueError as e:
        return ApiResponse.failure(code="validation_error", message=str(e), request_id=req_id)

    service = request.app.state.service
    service.reconfigure_credentials(config)
    snapshot = await service.refresh()
    return snapshot_response(snapshot, req_id)


@router.delete("/credentials")
async def delete_credentials(request: Request):
    req_id = request.state.request_id
    service = request.app.state.service
    service.clear_credentials()
    return ApiResponse.success(data=snapshot_payload(service.snapshot()), request_id=req_id)


@router.post("/employees")
async def employees(request: Request, body: EmployeeSearchRequest):
    """
    Directory lookup with not-yet-saved credentials.
    The stored employee is preselected when the company matches.
    """
    req_id = request.state.request_id
    stored = load_config(request.app.state.secret_store)
    form = SetupForm.from_config(stored)
    form.api_key = body.apiKey
    form.company_domain = body.companyDomain
    form.query = body.query
    if not form.next():
        return ApiResponse.failure(code="validation_error", message=form.error, request_id=req_id)
    if stored is None or stored.company_domain != form.company_domain:
        form.selected_id = None

    try:
        found = await search_employees(form.api_key, form.company_domain)
    except BambooHRError as e:
        logger.warning(f"Employee directory lookup failed: {e.message}")
        return ApiResponse.from_error(e, request_id=req_id)

    form.load_employees(found)
    return ApiResponse.success(
        data={
            "employees": [{"id": e.id, "displayName": e.display_name} for e in form.filtered],
            "selectedId": form.selected_id,
        },
        request_id=req_id,
    )
