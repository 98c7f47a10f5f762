"""
Synchronization service: fetch today's entries, reconcile, act.

The service owns the last known ClockStatus. Every operation runs under a
single asyncio.Lock, so a second caller queues behind the first and then
works from its own freshly fetched snapshot. That is what keeps a
periodic refresh and a double-clicked toggle from both deciding to clock
in.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

from clocker.bamboohr.client import BambooHRClient, BambooHRError
from clocker.bamboohr.types import BambooHRConfig
from clocker.credentials import SecretStore, delete_config, load_config, save_config
from clocker.errors import ApiError, ClockerError, MissingCredentials
from clocker.observability import metrics
from clocker.reconciler import ClockStatus, compute

logger = logging.getLogger(__name__)

ClientFactory = Callable[[BambooHRConfig], BambooHRClient]


def local_now() -> datetime:
    return datetime.now().astimezone()


class ServiceState(str, Enum):
    UNCONFIGURED = "unconfigured"
    SYNCED = "synced"
    DEGRADED = "degraded"


class ToggleAction(str, Enum):
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"


@dataclass(frozen=True)
class ServiceSnapshot:
    """What the presentation layer renders: last known status next to the last error."""
    state: ServiceState
    status: Optional[ClockStatus] = None
    last_error: Optional[ClockerError] = None
    last_synced_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "status": self.status.to_dict() if self.status else None,
            "error": self.last_error.to_dict() if self.last_error else None,
            "lastSyncedAt": self.last_synced_at.isoformat() if self.last_synced_at else None,
        }


@dataclass(frozen=True)
class ToggleResult:
    action: ToggleAction
    snapshot: ServiceSnapshot


class ClockerService:
    def __init__(
        self,
        secret_store: SecretStore,
        client_factory: ClientFactory = BambooHRClient,
        clock: Callable[[], datetime] = local_now,
    ):
        self._store = secret_store
        self._client_factory = client_factory
        self._clock = clock
        self._client: Optional[BambooHRClient] = None
        self._lock = asyncio.Lock()

        self._state = ServiceState.UNCONFIGURED
        self._status: Optional[ClockStatus] = None
        self._last_error: Optional[ClockerError] = None
        self._last_synced_at: Optional[datetime] = None

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    def snapshot(self) -> ServiceSnapshot:
        return ServiceSnapshot(
            state=self._state,
            status=self._status,
            last_error=self._last_error,
            last_synced_at=self._last_synced_at,
        )

    # Credentials

    def reconfigure_credentials(self, config: BambooHRConfig) -> None:
        """
        Store new credentials and swap the client in one assignment.
        Operations already running keep the client they started with.
        """
        save_config(self._store, config)
        self._client = self._client_factory(config)
        logger.info("BambooHR client rebuilt with new credentials")

    def clear_credentials(self) -> None:
        delete_config(self._store)
        self._client = None
        self._become_unconfigured(MissingCredentials())

    def _current_client(self) -> BambooHRClient:
        """
        Re-read the secret store and return a client matching it.
        Raises MissingCredentials when any of the three values is absent.
        """
        config = load_config(self._store)
        if config is None:
            self._client = None
            error = MissingCredentials()
            self._become_unconfigured(error)
            raise error
        if self._client is None:
            self._client = self._client_factory(config)
        elif self._client.config != config:
            logger.info("Stored credentials changed, rebuilding BambooHR client")
            self._client = self._client_factory(config)
        return self._client

    def _superseded(self, client: BambooHRClient) -> bool:
        """True when the credentials were cleared or replaced while `client` was in use."""
        if client is self._client:
            return False
        logger.info("Credentials changed during the request, discarding its result")
        return True

    # State transitions

    def _become_unconfigured(self, error: ClockerError) -> None:
        if self._state is not ServiceState.UNCONFIGURED:
            logger.warning("Credentials missing, service unconfigured", extra={"state": "unconfigured"})
        self._state = ServiceState.UNCONFIGURED
        self._status = None
        self._last_error = error

    def _synced(self, status: ClockStatus) -> None:
        if self._state is not ServiceState.SYNCED:
            logger.info(f"Service synced (was {self._state.value})", extra={"state": "synced"})
        self._state = ServiceState.SYNCED
        self._status = status
        self._last_error = None
        self._last_synced_at = self._clock()
        for anomaly in status.anomalies:
            metrics.reconcile_anomalies_total.labels(anomaly=anomaly.value).inc()

    def _degraded(self, error: ClockerError) -> None:
        # The last known status stays for display
        logger.warning(f"Service degraded: {error.message}", extra={"state": "degraded"})
        self._state = ServiceState.DEGRADED
        self._last_error = error

    # Operations

    async def _fetch_status(self, client: BambooHRClient) -> ClockStatus:
        now = self._clock()
        today = now.date()
        entries = await client.fetch_entries(today, today)
        return compute(entries, now)

    async def _refresh_locked(self) -> ServiceSnapshot:
        try:
            client = self._current_client()
        except MissingCredentials:
            metrics.refreshes_total.labels(outcome="unconfigured").inc()
            return self.snapshot()

        try:
            status = await self._fetch_status(client)
        except BambooHRError as e:
            if self._superseded(client):
                return self.snapshot()
            metrics.refreshes_total.labels(outcome="error").inc()
            self._degraded(ApiError(e))
            return self.snapshot()

        if self._superseded(client):
            return self.snapshot()
        metrics.refreshes_total.labels(outcome="ok").inc()
        self._synced(status)
        return self.snapshot()

    async def refresh(self) -> ServiceSnapshot:
        """Fetch and reconcile today's entries. Failures are reported on the snapshot."""
        async with self._lock:
            return await self._refresh_locked()

    async def _act(self, client: BambooHRClient, action: ToggleAction) -> None:
        try:
            if action is ToggleAction.CLOCK_IN:
                entry = await client.clock_in()
            else:
                entry = await client.clock_out()
        except BambooHRError as e:
            metrics.clock_actions_total.labels(action=action.value, outcome="error").inc()
            error = ApiError(e)
            if not self._superseded(client):
                self._degraded(error)
            raise error from e
        metrics.clock_actions_total.labels(action=action.value, outcome="ok").inc()
        logger.info(f"{action.value} accepted, entry {entry.id}")

    async def _act_and_confirm(self, action: ToggleAction) -> ServiceSnapshot:
        client = self._current_client()
        await self._act(client, action)
        return await self._refresh_locked()

    async def toggle(self) -> ToggleResult:
        """
        Clock in when clocked out and the reverse.
        The decision is taken from a snapshot fetched inside this call, never
        from the cached status. Failures are raised and never retried.
        """
        async with self._lock:
            client = self._current_client()
            try:
                status = await self._fetch_status(client)
            except BambooHRError as e:
                if self._client is None:
                    raise MissingCredentials() from e
                error = ApiError(e)
                self._degraded(error)
                raise error from e
            if self._client is None:
                raise MissingCredentials()
            self._synced(status)

            action = ToggleAction.CLOCK_OUT if status.is_clocked_in else ToggleAction.CLOCK_IN
            await self._act(client, action)
            return ToggleResult(action=action, snapshot=await self._refresh_locked())

    async def clock_in(self) -> ServiceSnapshot:
        async with self._lock:
            return await self._act_and_confirm(ToggleAction.CLOCK_IN)

    async def clock_out(self) -> ServiceSnapshot:
        async with self._lock:
            return await self._act_and_confirm(ToggleAction.CLOCK_OUT)
