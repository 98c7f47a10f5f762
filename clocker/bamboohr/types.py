"""
Pydantic models for BambooHR time-tracking API types.
Field names follow the wire format.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict

CLOCK_ENTRY_TYPE = "clock"


@dataclass(frozen=True)
class BambooHRConfig:
    """Credentials snapshot a client is built from."""
    api_key: str = field(repr=False)
    company_domain: str
    employee_id: str


class ProjectInfo(BaseModel):
    """Project an entry was recorded against."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str


class TimesheetEntry(BaseModel):
    """One recorded segment of work or leave for a single day."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    employeeId: int
    type: str
    date: str  # YYYY-MM-DD
    start: Optional[str] = None  # ISO 8601, null when not a clock entry
    end: Optional[str] = None  # ISO 8601, null while clocked in
    timezone: Optional[str] = None
    hours: Optional[float] = None
    note: Optional[str] = None
    projectInfo: Optional[ProjectInfo] = None
    approved: bool = False  # omitted by clock in/out responses
    approvedAt: Optional[str] = None

    @property
    def is_active_clock_entry(self) -> bool:
        return self.type == CLOCK_ENTRY_TYPE and self.start is not None and self.end is None


class DirectoryEmployee(BaseModel):
    """Row of the employee directory."""
    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    displayName: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None

    @property
    def name(self) -> str:
        if self.displayName:
            return self.displayName
        return " ".join(part for part in (self.firstName, self.lastName) if part)


class EmployeeDirectory(BaseModel):
    """Response of GET /employees/directory."""
    model_config = ConfigDict(extra="ignore")

    employees: List[DirectoryEmployee] = []


@dataclass(frozen=True)
class Employee:
    """Employee choice offered during setup."""
    id: str
    display_name: str
