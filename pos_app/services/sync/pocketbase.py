"""
PocketBase Sync Collaborators

Production implementation of the remote order mirror, auth and
connectivity checks against a PocketBase server's REST API:

    GET   /api/health
    POST  /api/collections/{users}/auth-with-password
    POST  /api/collections/{users}/auth-with-oauth2
    GET   /api/collections/{orders}/records?filter=...
    POST  /api/collections/{orders}/records
    PATCH /api/collections/{orders}/records/{id}

Configuration:
    Requires POCKETBASE_URL.

Version: 1.0.0
"""

import logging
from typing import Any, Optional

import httpx

from pos_app.core.config import get_settings
from pos_app.core.exceptions import RemoteNotFoundError, SyncError
from pos_app.services.sync.base import (
    AuthUser,
    BaseAuthService,
    BaseConnectivityMonitor,
    BaseRemoteOrderStore,
    RemoteRecord,
)

logger = logging.getLogger(__name__)

PAGE_SIZE = 200


def _quote(value: str) -> str:
    """Quote a string literal for a PocketBase filter expression."""
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


class PocketBaseClient:
    """
    Thin async HTTP client holding the auth token.

    Args:
        base_url: PocketBase server URL
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        base_url = base_url or settings.pocketbase_url

        if not base_url:
            raise ValueError(
                "POCKETBASE_URL is required outside development mode. "
                "Set it in your .env file or environment variables."
            )

        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout or settings.sync_timeout_seconds,
            transport=transport,
        )
        self.token: Optional[str] = None
        self.user: Optional[AuthUser] = None

        logger.info(f"PocketBaseClient initialized ({base_url})")

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Send a request and decode the JSON body.

        Raises:
            RemoteNotFoundError: HTTP 404
            SyncError: any other HTTP or transport failure
        """
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = self.token

        try:
            response = await self._http.request(method, path, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise RemoteNotFoundError(f"{method} {path} → 404") from e
            logger.error(f"PocketBase: {method} {path} failed with HTTP {status}")
            raise SyncError(f"{method} {path} failed with HTTP {status}", status_code=status) from e
        except httpx.HTTPError as e:
            logger.error(f"PocketBase: transport error on {method} {path} - {e}")
            raise SyncError(f"Unable to reach PocketBase: {e}") from e

        if not response.content:
            return None
        return response.json()

    async def aclose(self) -> None:
        await self._http.aclose()


class PocketBaseOrderStore(BaseRemoteOrderStore):
    """Orders collection on a PocketBase server."""

    def __init__(self, client: PocketBaseClient, collection: Optional[str] = None):
        self.client = client
        self.collection = collection or get_settings().pocketbase_orders_collection

    @property
    def provider_name(self) -> str:
        return "pocketbase"

    @property
    def _records_path(self) -> str:
        return f"/api/collections/{self.collection}/records"

    async def find_by_order_id(self, order_id: str) -> RemoteRecord:
        body = await self.client.request(
            "GET",
            self._records_path,
            params={"filter": f"order_id={_quote(order_id)}", "perPage": 1, "skipTotal": 1},
        )
        items = (body or {}).get("items") or []
        if not items:
            raise RemoteNotFoundError(f"No remote record for order {order_id}")
        return RemoteRecord(id=items[0]["id"], data=items[0])

    async def create(self, payload: dict[str, Any]) -> RemoteRecord:
        body = await self.client.request("POST", self._records_path, json=payload)
        return RemoteRecord(id=body["id"], data=body)

    async def update(self, record_id: str, payload: dict[str, Any]) -> RemoteRecord:
        body = await self.client.request("PATCH", f"{self._records_path}/{record_id}", json=payload)
        return RemoteRecord(id=body["id"], data=body)

    async def list_for_user(self, user_id: str) -> list[RemoteRecord]:
        records: list[RemoteRecord] = []
        page = 1
        while True:
            body = await self.client.request(
                "GET",
                self._records_path,
                params={
                    "filter": f"user={_quote(user_id)}",
                    "sort": "-created",
                    "page": page,
                    "perPage": PAGE_SIZE,
                },
            )
            body = body or {}
            records.extend(RemoteRecord(id=item["id"], data=item) for item in body.get("items") or [])
            if page >= int(body.get("totalPages") or 1):
                return records
            page += 1


class PocketBaseAuthService(BaseAuthService):
    """
    Auth against a PocketBase auth collection.

    Providers:
        - "password": credentials ``identity`` and ``password``
        - any OAuth2 provider name: credentials ``code``, ``code_verifier``
          and ``redirect_url`` from the completed browser flow
    """

    def __init__(self, client: PocketBaseClient, collection: Optional[str] = None):
        super().__init__()
        self.client = client
        self.collection = collection or get_settings().pocketbase_users_collection

    @property
    def provider_name(self) -> str:
        return "pocketbase"

    def is_authenticated(self) -> bool:
        return bool(self.client.token)

    def current_user(self) -> Optional[AuthUser]:
        return self.client.user

    async def login(self, provider: str, **credentials: Any) -> AuthUser:
        """
        Raises:
            SyncError: request failed, or the server answered without a token
        """
        base = f"/api/collections/{self.collection}"

        if provider == "password":
            path = f"{base}/auth-with-password"
            payload = {
                "identity": credentials.get("identity"),
                "password": credentials.get("password"),
            }
        else:
            path = f"{base}/auth-with-oauth2"
            payload = {
                "provider": provider,
                "code": credentials.get("code"),
                "codeVerifier": credentials.get("code_verifier"),
                "redirectURL": credentials.get("redirect_url"),
            }

        body = await self.client.request("POST", path, json=payload) or {}
        if not body.get("token"):
            logger.error(f"PocketBase: {provider} login returned no token")
            raise SyncError(f"Login via {provider} returned no auth token")
        record = body.get("record") or {}

        self.client.token = body["token"]
        self.client.user = AuthUser(
            id=record.get("id", ""),
            email=record.get("email"),
            name=record.get("name"),
        )
        logger.info(f"PocketBase: authenticated {self.client.user.email} via {provider}")
        self._emit_auth_change()
        return self.client.user

    def logout(self) -> None:
        self.client.token = None
        self.client.user = None
        self._emit_auth_change()


class HttpConnectivityMonitor(BaseConnectivityMonitor):
    """Online means the PocketBase health endpoint answers."""

    def __init__(self, client: PocketBaseClient, online: bool = False):
        super().__init__(online=online)
        self.client = client

    async def check(self) -> bool:
        try:
            await self.client.request("GET", "/api/health")
            self._set_state(True)
        except SyncError as e:
            logger.debug(f"Health check failed - {e}")
            self._set_state(False)
        return self.is_online()
