"""
State of the two-step setup flow: credentials first, then the employee.

Plain data for whatever UI drives it; nothing here performs I/O.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from clocker.bamboohr.directory import filter_employees
from clocker.bamboohr.types import BambooHRConfig, Employee


class SetupStep(str, Enum):
    CREDENTIALS = "credentials"
    EMPLOYEE = "employee"


@dataclass
class SetupForm:
    api_key: str = ""
    company_domain: str = ""
    step: SetupStep = SetupStep.CREDENTIALS
    employees: List[Employee] = field(default_factory=list)
    query: str = ""
    selected_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_config(cls, config: Optional[BambooHRConfig]) -> "SetupForm":
        """Prefill from stored credentials so settings can be edited."""
        if config is None:
            return cls()
        return cls(
            api_key=config.api_key,
            company_domain=config.company_domain,
            selected_id=config.employee_id,
        )

    @property
    def filtered(self) -> List[Employee]:
        return filter_employees(self.employees, self.query)

    @property
    def selected(self) -> Optional[Employee]:
        for employee in self.employees:
            if employee.id == self.selected_id:
                return employee
        return None

    def next(self) -> bool:
        """Leave the credentials step once both fields are filled in."""
        self.api_key = self.api_key.strip()
        self.company_domain = self.company_domain.strip()
        if not self.api_key or not self.company_domain:
            self.error = "API key and company domain are required"
            return False
        self.error = None
        self.step = SetupStep.EMPLOYEE
        return True

    def load_employees(self, employees: List[Employee]) -> None:
        """Replace the directory; a previous selection is kept only if still listed."""
        self.employees = list(employees)
        if self.selected is None:
            self.selected_id = None

    def to_config(self) -> BambooHRConfig:
        if not self.api_key or not self.company_domain:
            raise ValueError("API key and company domain are required")
        if not self.selected_id:
            raise ValueError("Select an employee")
        return BambooHRConfig(
            api_key=self.api_key,
            company_domain=self.company_domain,
            employee_id=self.selected_id,
        )
