
from fastapi import APIRouter, Request
from clocker.models import ApiResponse
from clocker.errors import ClockerError
from clocker.service import ClockerService, ServiceSnapshot, local_now
from clocker.view import build_view

router = APIRouter()


def _service(request: Request) -> ClockerService:
    return request.app.state.service


def snapshot_payload(snapshot: ServiceSnapshot) -> dict:
    return {**snapshot.to_dict(), "view": build_view(snapshot, local_now()).to_dict()}


def snapshot_response(snapshot: ServiceSnapshot, req_id: str) -> ApiResponse:
    if snapshot.last_error is not None:
        return ApiResponse.from_error(snapshot.last_error, data=snapshot_payload(snapshot), request_id=req_id)
    return ApiResponse.success(data=snapshot_payload(snapshot), request_id=req_id)


@router.get("/status")
async def status(request: Request):
    """Last known status, without contacting BambooHR."""
    req_id = request.state.request_id
    return snapshot_response(_service(request).snapshot(), req_id)


@router.post("/refresh")
async def refresh(request: Request):
    """Fetch and reconcile today's entries now."""
    req_id = request.state.request_id
    snapshot = await _service(request).refresh()
    return snapshot_response(snapshot, req_id)


@router.post("/toggle")
async def toggle(request: Request):
    """Clock in or out depending on a freshly fetched status."""
    req_id = request.state.request_id
    service = _service(request)
    try:
        result = await service.toggle()
    except ClockerError as e:
        return ApiResponse.from_error(e, data=snapshot_payload(service.snapshot()), request_id=req_id)
    return ApiResponse.success(
        data={"action": result.action.value, **snapshot_payload(result.snapshot)},
        request_id=req_id,
    )


@router.post("/clock-in")
async def clock_in(request: Request):
    req_id = request.state.request_id
    service = _service(request)
    try:
        snapshot = await service.clock_in()
    except ClockerError as e:
        return ApiResponse.from_error(e, data=snapshot_payload(service.snapshot()), request_id=req_id)
    return ApiResponse.success(data=snapshot_payload(snapshot), request_id=req_id)


@router.post("/clock-out")
async def clock_out(request: Request):
    req_id = request.state.request_id
    service = _service(request)
    try:
        snapshot = await service.clock_out()
    except ClockerError as e:
        return ApiResponse.from_error(e, data=snapshot_payload(service.snapshot()), request_id=req_id)
    return ApiResponse.success(data=snapshot_payload(snapshot), request_id=req_id)
