"""
Async BambooHR time-tracking client with typed error mapping.

The client never retries. Whether a failed clock in/out may be attempted
again is decided by the caller after re-reading the timesheet.
"""
import base64
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

import httpx
from pydantic import TypeAdapter, ValidationError

from clocker.config import settings
from clocker.utils.http import create_http_client
from clocker.bamboohr.types import (
    BambooHRConfig,
    Employee,
    EmployeeDirectory,
    TimesheetEntry,
)

logger = logging.getLogger(__name__)

_entries_adapter = TypeAdapter(List[TimesheetEntry])
_entry_adapter = TypeAdapter(TimesheetEntry)
_directory_adapter = TypeAdapter(EmployeeDirectory)


class BambooHRError(Exception):
    """Base exception for BambooHR API errors."""
    code = "bamboohr_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class NetworkError(BambooHRError):
    """The request never produced a response."""
    code = "network_error"

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Network error: {str(cause) or type(cause).__name__}")


class HttpError(BambooHRError):
    """The service answered with a status outside 200-299."""
    code = "http_error"

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"HTTP {status}: {body[:200] or 'Unknown error'}")

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "status_code": self.status}


class DecodingError(BambooHRError):
    """The response body does not have the expected shape."""
    code = "decoding_error"

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Decoding error: {cause}")


def basic_auth_header(api_key: str) -> str:
    """BambooHR takes the API key as the username with a throwaway password."""
    token = base64.b64encode(f"{api_key}:x".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def _format_date(value: Union[date, str]) -> str:
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return value


class BambooHRClient:
    """Async BambooHR client bound to one credentials snapshot."""

    def __init__(
        self,
        config: BambooHRConfig,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._config = config
        template = base_url or settings.BAMBOOHR_BASE_URL
        self.base_url = template.format(company_domain=config.company_domain).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT
        self._http_client = http_client

    @property
    def config(self) -> BambooHRConfig:
        return self._config

    def _headers(self, method: str) -> Dict[str, str]:
        headers = {
            "Authorization": basic_auth_header(self._config.api_key),
            "Accept": "application/json",
        }
        if method == "POST":
            headers["Content-Type"] = "application/json"
        return headers

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> httpx.Response:
        """
        Issue a single request.
        Transport failures become NetworkError, non-2xx statuses HttpError.
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"BambooHR request: {method} {path}")

        try:
            if self._http_client is not None:
                response = await self._http_client.request(
                    method, url, headers=self._headers(method), params=params, json=json_body
                )
            else:
                async with create_http_client(timeout=self.timeout) as client:
                    response = await client.request(
                        method, url, headers=self._headers(method), params=params, json=json_body
                    )
        except httpx.TransportError as e:
            logger.warning(f"BambooHR {method} {path} failed: {e!r}")
            raise NetworkError(e) from e

        if not 200 <= response.status_code <= 299:
            logger.warning(f"BambooHR {method} {path} returned {response.status_code}")
            raise HttpError(response.status_code, response.text)

        return response

    @staticmethod
    def _decode(response: httpx.Response, adapter: TypeAdapter) -> Any:
        try:
            return adapter.validate_json(response.content)
        except ValidationError as e:
            logger.warning(f"BambooHR response could not be decoded: {e.error_count()} error(s)")
            raise DecodingError(e) from e

    async def fetch_entries(
        self, start_date: Union[date, str], end_date: Union[date, str]
    ) -> List[TimesheetEntry]:
        """Timesheet entries of the configured employee for an inclusive date range."""
        response = await self._send(
            "GET",
            "/time_tracking/timesheet_entries",
            params={
                "start": _format_date(start_date),
                "end": _format_date(end_date),
                "employeeIds": self._config.employee_id,
            },
        )
        return self._decode(response, _entries_adapter)

    async def clock_in(self) -> TimesheetEntry:
        """Open a new clock entry. "Already clocked in" surfaces as an HttpError."""
        response = await self._send(
            "POST",
            f"/time_tracking/employees/{self._config.employee_id}/clock_in",
            json_body={},
        )
        return self._decode(response, _entry_adapter)

    async def clock_out(self) -> TimesheetEntry:
        """Close the open clock entry."""
        response = await self._send(
            "POST",
            f"/time_tracking/employees/{self._config.employee_id}/clock_out",
            json_body={},
        )
        return self._decode(response, _entry_adapter)

    async def list_employees(self) -> List[Employee]:
        """Employee directory, used during setup to pick the employee id."""
        response = await self._send("GET", "/employees/directory")
        directory = self._decode(response, _directory_adapter)
        employees = []
        for row in directory.employees:
            name = row.name.strip()
            if not name:
                continue
            employees.append(Employee(id=str(row.id), display_name=name))
        return employees
