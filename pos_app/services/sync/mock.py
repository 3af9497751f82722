"""
Mock Sync Collaborators

In-memory stand-ins for the PocketBase backend, used in development mode
(ENV_MODE=development) to:
    - Exercise the offline/online sync flow without a server
    - Simulate flaky networks with a configurable failure rate
    - Run the terminal fully offline

Version: 1.0.0
"""

import asyncio
import logging
import random
import uuid
from typing import Any, Optional

from pos_app.core.exceptions import RemoteNotFoundError, SyncError
from pos_app.services.sync.base import (
    AuthUser,
    BaseAuthService,
    BaseConnectivityMonitor,
    BaseRemoteOrderStore,
    RemoteRecord,
)

logger = logging.getLogger(__name__)


class MockRemoteOrderStore(BaseRemoteOrderStore):
    """
    Dict-backed remote order mirror.

    Attributes:
        failure_rate: Probability that a call raises SyncError (0.0-1.0)
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds
        records: Stored records by remote id

    Example:
        >>> remote = MockRemoteOrderStore(failure_rate=1.0)
        >>> await remote.create({"order_id": "x"})  # raises SyncError
    """

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.records: dict[str, dict[str, Any]] = {}
        self.calls: list[str] = []

        logger.info(
            f"MockRemoteOrderStore initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"latency={min_latency}-{max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _simulate_call(self, name: str) -> None:
        self.calls.append(name)
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))
        if random.random() < self.failure_rate:
            logger.debug(f"Mock: simulated failure in {name}")
            raise SyncError(f"Simulated network failure during {name}", status_code=503)

    def _generate_record_id(self) -> str:
        """PocketBase-like 15 character id."""
        return uuid.uuid4().hex[:15]

    async def find_by_order_id(self, order_id: str) -> RemoteRecord:
        await self._simulate_call("find")
        for record_id, data in self.records.items():
            if data.get("order_id") == order_id:
                return RemoteRecord(id=record_id, data=dict(data))
        raise RemoteNotFoundError(f"No remote record for order {order_id}")

    async def create(self, payload: dict[str, Any]) -> RemoteRecord:
        await self._simulate_call("create")
        record_id = self._generate_record_id()
        self.records[record_id] = dict(payload)
        return RemoteRecord(id=record_id, data=dict(payload))

    async def update(self, record_id: str, payload: dict[str, Any]) -> RemoteRecord:
        await self._simulate_call("update")
        if record_id not in self.records:
            raise RemoteNotFoundError(f"No remote record {record_id}")
        self.records[record_id].update(payload)
        return RemoteRecord(id=record_id, data=dict(self.records[record_id]))

    async def list_for_user(self, user_id: str) -> list[RemoteRecord]:
        await self._simulate_call("list")
        matches = [
            RemoteRecord(id=record_id, data=dict(data))
            for record_id, data in self.records.items()
            if data.get("user") == user_id
        ]
        return sorted(matches, key=lambda r: r.data.get("date", ""), reverse=True)


class MockAuthService(BaseAuthService):
    """Accepts any provider; ``reject_logins`` makes every login fail."""

    def __init__(self, user: Optional[AuthUser] = None, reject_logins: bool = False):
        super().__init__()
        self._user = user
        self.reject_logins = reject_logins

    @property
    def provider_name(self) -> str:
        return "mock"

    def is_authenticated(self) -> bool:
        return self._user is not None

    def current_user(self) -> Optional[AuthUser]:
        return self._user

    async def login(self, provider: str, **credentials: Any) -> AuthUser:
        if self.reject_logins:
            raise SyncError(f"Mock login rejected ({provider})", status_code=400)

        email = credentials.get("identity") or f"staff@{provider}.mock"
        self._user = AuthUser(id=f"user_mock_{uuid.uuid4().hex[:8]}", email=email, name="Mock Staff")
        logger.info(f"Mock: authenticated {email} via {provider}")
        self._emit_auth_change()
        return self._user

    def logout(self) -> None:
        self._user = None
        self._emit_auth_change()


class MockConnectivityMonitor(BaseConnectivityMonitor):
    """Connectivity toggled by hand."""

    def set_online(self, online: bool) -> None:
        self._set_state(online)

    async def check(self) -> bool:
        return self.is_online()
