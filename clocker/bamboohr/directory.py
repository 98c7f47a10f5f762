"""
Employee directory lookup used while setting up credentials.
"""
from typing import Iterable, List, Optional

import httpx

from clocker.bamboohr.client import BambooHRClient
from clocker.bamboohr.types import BambooHRConfig, Employee


async def search_employees(
    api_key: str,
    company_domain: str,
    query: str = "",
    http_client: Optional[httpx.AsyncClient] = None,
) -> List[Employee]:
    """
    Fetch the directory with not-yet-saved credentials and filter it.
    The employee id is unknown at this point, so the snapshot carries none.
    """
    client = BambooHRClient(
        BambooHRConfig(api_key=api_key, company_domain=company_domain, employee_id=""),
        http_client=http_client,
    )
    employees = await client.list_employees()
    return filter_employees(employees, query)


def filter_employees(employees: Iterable[Employee], query: str) -> List[Employee]:
    """Case-insensitive substring match on the display name; blank query keeps all."""
    needle = query.strip().lower()
    if not needle:
        return list(employees)
    return [e for e in employees if needle in e.display_name.lower()]
