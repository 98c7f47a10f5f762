"""
Shared fixtures: an in-memory stand-in for the BambooHR time-tracking API.
"""
import asyncio
from datetime import datetime, timezone
from typing import List, Optional

import pytest
from clocker.bamboohr.client import BambooHRError, HttpError
from clocker.bamboohr.types import BambooHRConfig, TimesheetEntry
from clocker.credentials import MemorySecretStore, save_config
from clocker.service import ClockerService

NOW = datetime(2026, 10, 18, 14, 0, 0, tzinfo=timezone.utc)
CONFIG = BambooHRConfig(api_key="test_key", company_domain="acme", employee_id="42")


class FakeServer:
    """Keeps today's entries and records every call made against it."""

    def __init__(self):
        self.entries: List[TimesheetEntry] = []
        self.calls: List[str] = []
        self.api_keys: List[str] = []
        self.fetch_dates: List[tuple] = []
        self.fetch_error: Optional[BambooHRError] = None
        self.clock_error: Optional[BambooHRError] = None
        self.gate: Optional[asyncio.Event] = None
        self._next_id = 1

    def add(self, **fields) -> TimesheetEntry:
        data = {"id": self._next_id, "employeeId": 42, "type": "clock", "date": "2026-10-18"}
        data.update(fields)
        self._next_id += 1
        entry = TimesheetEntry(**data)
        self.entries.append(entry)
        return entry

    def count(self, call: str) -> int:
        return self.calls.count(call)

    async def fetch(self, config, start, end):
        self.calls.append("fetch")
        self.api_keys.append(config.api_key)
        self.fetch_dates.append((start, end))
        if self.gate is not None:
            await self.gate.wait()
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.entries)

    async def clock_in(self, config):
        self.calls.append("clock_in")
        self.api_keys.append(config.api_key)
        await asyncio.sleep(0)
        if self.clock_error is not None:
            raise self.clock_error
        if any(e.is_active_clock_entry for e in self.entries):
            raise HttpError(409, "Employee is already clocked in")
        return self.add(start="2026-10-18T14:00:00Z")

    async def clock_out(self, config):
        self.calls.append("clock_out")
        self.api_keys.append(config.api_key)
        await asyncio.sleep(0)
        if self.clock_error is not None:
            raise self.clock_error
        for index, entry in enumerate(self.entries):
            if entry.is_active_clock_entry:
                closed = entry.model_copy(update={"end": "2026-10-18T14:00:00Z", "hours": 0.0})
                self.entries[index] = closed
                return closed
        raise HttpError(409, "Employee is not clocked in")


class FakeClient:
    """Same surface as BambooHRClient, backed by a FakeServer."""

    def __init__(self, config: BambooHRConfig, server: FakeServer):
        self.config = config
        self.server = server

    async def fetch_entries(self, start_date, end_date):
        return await self.server.fetch(self.config, start_date, end_date)

    async def clock_in(self):
        return await self.server.clock_in(self.config)

    async def clock_out(self):
        return await self.server.clock_out(self.config)


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def store():
    s = MemorySecretStore()
    save_config(s, CONFIG)
    return s


@pytest.fixture
def built_clients():
    return []


@pytest.fixture
def service(store, server, built_clients):
    def factory(config):
        client = FakeClient(config, server)
        built_clients.append(client)
        return client

    return ClockerService(store, client_factory=factory, clock=lambda: NOW)
