"""
Cloud Sync Abstract Base Classes

Interface contracts for the three collaborators of the sync bridge:

    - BaseRemoteOrderStore: record-oriented remote API keyed by ``order_id``
    - BaseAuthService: session/login state
    - BaseConnectivityMonitor: online/offline state and transitions

Mock implementations run in development mode; PocketBase implementations
run in staging/production.

Version: 1.0.0
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from pos_app.schemas import ConfirmedOrder

logger = logging.getLogger(__name__)


class SyncOutcome(str, Enum):
    """Result of one sync attempt."""
    SYNCED = "synced"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class SyncReport:
    """
    Counts for a ``sync_all`` batch.

    Attributes:
        outcomes: Outcome per local order id, in batch order
    """
    outcomes: dict[str, SyncOutcome] = field(default_factory=dict)

    def count(self, outcome: SyncOutcome) -> int:
        return sum(1 for o in self.outcomes.values() if o == outcome)

    @property
    def synced(self) -> int:
        return self.count(SyncOutcome.SYNCED)

    @property
    def failed(self) -> int:
        return self.count(SyncOutcome.FAILED)

    @property
    def skipped(self) -> int:
        return self.count(SyncOutcome.SKIPPED)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total": len(self.outcomes),
            "synced": self.synced,
            "failed": self.failed,
            "skipped": self.skipped,
        }


@dataclass
class RemoteRecord:
    """A record as returned by the remote store."""
    id: str
    data: dict[str, Any]


@dataclass
class AuthUser:
    """Authenticated identity."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


# =============================================================================
# PAYLOAD MAPPING
# =============================================================================

def order_to_payload(order: ConfirmedOrder, user_id: Optional[str]) -> dict[str, Any]:
    """Remote record fields for ``order``. Items travel as a JSON string."""
    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "items": json.dumps([item.model_dump(mode="json") for item in order.items], ensure_ascii=False),
        "total": float(order.total),
        "date": order.created_at.isoformat(),
        "status": order.status.value,
        "payment_method": order.payment_method.value if order.payment_method else None,
        "user": user_id,
    }


def payload_to_order(data: dict[str, Any]) -> ConfirmedOrder:
    """Rebuild a ConfirmedOrder from remote record fields."""
    items = data.get("items") or "[]"
    if isinstance(items, str):
        items = json.loads(items)
    return ConfirmedOrder.model_validate(
        {
            "id": data["order_id"],
            "order_number": data["order_number"],
            "items": items,
            "total": str(data["total"]),
            "created_at": data["date"],
            "status": data.get("status") or "completed",
            "payment_method": data.get("payment_method") or None,
        }
    )


# =============================================================================
# REMOTE STORE
# =============================================================================

class BaseRemoteOrderStore(ABC):
    """
    Abstract base class for the remote order mirror.

    Implementations raise ``RemoteNotFoundError`` when a lookup has no
    match and ``SyncError`` for every other failure.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., "mock", "pocketbase")."""
        pass

    @abstractmethod
    async def find_by_order_id(self, order_id: str) -> RemoteRecord:
        """
        Find the remote record whose ``order_id`` field equals ``order_id``.

        Raises:
            RemoteNotFoundError: no such record
            SyncError: any other failure
        """
        pass

    @abstractmethod
    async def create(self, payload: dict[str, Any]) -> RemoteRecord:
        """Create a record from ``payload``."""
        pass

    @abstractmethod
    async def update(self, record_id: str, payload: dict[str, Any]) -> RemoteRecord:
        """Replace fields of record ``record_id`` with ``payload``."""
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[RemoteRecord]:
        """All records owned by ``user_id``, newest first."""
        pass


# =============================================================================
# AUTH
# =============================================================================

AuthListener = Callable[[bool], None]


class BaseAuthService(ABC):
    """Session state for the sync backend."""

    def __init__(self):
        self._auth_listeners: list[AuthListener] = []

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @abstractmethod
    def is_authenticated(self) -> bool:
        pass

    @abstractmethod
    def current_user(self) -> Optional[AuthUser]:
        pass

    @abstractmethod
    async def login(self, provider: str, **credentials: Any) -> AuthUser:
        """
        Authenticate against the backend.

        Args:
            provider: "password" or an OAuth2 provider name ("google", ...)
            credentials: Provider-specific fields

        Raises:
            SyncError: login rejected or backend unreachable
        """
        pass

    @abstractmethod
    def logout(self) -> None:
        pass

    def on_change(self, callback: AuthListener) -> Callable[[], None]:
        """Call ``callback(is_authenticated)`` on every login/logout."""
        self._auth_listeners.append(callback)
        return lambda: self._auth_listeners.remove(callback)

    def _emit_auth_change(self) -> None:
        state = self.is_authenticated()
        for callback in list(self._auth_listeners):
            callback(state)


# =============================================================================
# CONNECTIVITY
# =============================================================================

ConnectivityListener = Callable[[bool], None]


class BaseConnectivityMonitor(ABC):
    """
    Online/offline state with transition notifications.

    Listeners only fire when the state actually changes.
    """

    def __init__(self, online: bool = True):
        self._online = online
        self._listeners: list[ConnectivityListener] = []

    def is_online(self) -> bool:
        return self._online

    def subscribe(self, callback: ConnectivityListener) -> Callable[[], None]:
        self._listeners.append(callback)
        return lambda: self._listeners.remove(callback)

    def _set_state(self, online: bool) -> None:
        if online == self._online:
            return
        self._online = online
        logger.info(f"Connectivity changed: {'online' if online else 'offline'}")
        for callback in list(self._listeners):
            callback(online)

    @abstractmethod
    async def check(self) -> bool:
        """Probe connectivity, update state and return it."""
        pass
