
from pydantic import BaseModel
from typing import Any, Dict, Optional


class CredentialsRequest(BaseModel):
    apiKey: str
    companyDomain: str
    employeeId: str


class EmployeeSearchRequest(BaseModel):
    apiKey: str
    companyDomain: str
    query: str = ""


# API Response Envelopes
class ErrorBody(BaseModel):
    """Structured error response."""
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class ApiResponse(BaseModel):
    """
    Standard API response envelope.
    Failures may still carry data: the last known status is shown next to the error.
    """
    ok: bool
    data: Optional[Any] = None
    error: Optional[ErrorBody] = None
    requestId: str = ""

    @classmethod
    def success(cls, data: Any = None, request_id: str = "") -> "ApiResponse":
        return cls(ok=True, data=data, requestId=request_id)

    @classmethod
    def failure(
        cls,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        data: Any = None,
        request_id: str = "",
    ) -> "ApiResponse":
        return cls(
            ok=False,
            data=data,
            error=ErrorBody(code=code, message=message, details=details),
            requestId=request_id,
        )

    @classmethod
    def from_error(cls, error: Any, data: Any = None, request_id: str = "") -> "ApiResponse":
        """Wrap a ClockerError or BambooHRError, keeping its status code in details."""
        body = error.to_dict()
        details = {"status_code": body["status_code"]} if "status_code" in body else None
        return cls.failure(body["code"], body["message"], details=details, data=data, request_id=request_id)
