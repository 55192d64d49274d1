"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Remote Procedure Gateway                                      ║
║                                                                              ║
║  Named serverless functions invoked with a JSON body:                        ║
║    POST {FUNCTIONS_URL}/{name}                                               ║
║                                                                              ║
║  Every call returns a RemoteResult (never raises for remote failures):       ║
║  - ok=True  + data                                                           ║
║  - ok=False + error_kind (NOT_FOUND, UNAUTHORIZED, RATE_LIMITED,             ║
║                           UPSTREAM, VALIDATION) + message                    ║
║                                                                              ║
║  Fire-and-forget calls run as tracked asyncio tasks; their failures are      ║
║  logged and dropped.                                                         ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Set

import httpx

logger = logging.getLogger("remote_procedures")


# Function names
AUTO_ENRICH_TRIGGER = "auto-enrich-trigger"
ENRICH_LOOKUP = "pdl-enrich"
GENERATE_MAGIC_LINK = "generate-magic-link"
GENERATE_PAYMENT_LINK = "generate-payment-link"
CREATE_CLIENT_ADMIN = "create-client-admin"
RESEARCH_LEAD = "research-lead"
GENERATE_PACKAGE_ACCESS_TOKEN = "generate-package-access-token"
ZAPIER_EXPORT = "zapier-export"


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    UPSTREAM = "upstream"
    VALIDATION = "validation"


# HTTP status returned by our routes for each kind
ERROR_KIND_HTTP_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.UPSTREAM: 502,
    ErrorKind.VALIDATION: 400,
}


def error_kind_for_status(status_code: int) -> ErrorKind:
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code in (401, 403):
        return ErrorKind.UNAUTHORIZED
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code in (400, 422):
        return ErrorKind.VALIDATION
    return ErrorKind.UPSTREAM


@dataclass
class RemoteResult:
    ok: bool
    data: Any = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def success(cls, data: Any) -> "RemoteResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "RemoteResult":
        return cls(ok=False, error_kind=kind, message=message)

    @property
    def http_status(self) -> int:
        if self.ok:
            return 200
        return ERROR_KIND_HTTP_STATUS[self.error_kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.ok,
            "data": self.data,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "message": self.message,
        }


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or f"HTTP {response.status_code}")
    return f"HTTP {response.status_code}"


class RemoteProcedureGateway:

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport
        self._background: Set[asyncio.Task] = set()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def invoke(self, name: str, body: Optional[Dict[str, Any]] = None) -> RemoteResult:
        """Call one named procedure and return its tagged result"""
        url = f"{self.base_url}/{name}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, json=body or {}, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"[RPC] {name} unreachable: {e}")
            return RemoteResult.failure(ErrorKind.UPSTREAM, f"{name} unreachable")

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error(f"[RPC] {name} -> {response.status_code}: {message}")
            return RemoteResult.failure(error_kind_for_status(response.status_code), message)

        try:
            data = response.json()
        except ValueError:
            data = response.text
        logger.info(f"[RPC] {name} -> {response.status_code}")
        return RemoteResult.success(data)

    def fire_and_forget(self, name: str, body: Optional[Dict[str, Any]] = None) -> asyncio.Task:
        """
        Schedule `name` without awaiting it.
        The caller returns immediately; failures never reach the caller.
        """
        task = asyncio.create_task(self._invoke_quietly(name, body))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _invoke_quietly(self, name: str, body: Optional[Dict[str, Any]]) -> None:
        try:
            result = await self.invoke(name, body)
        except Exception as e:
            logger.warning(f"[RPC] background {name} crashed: {e}")
            return
        if not result.ok:
            logger.warning(f"[RPC] background {name} failed ({result.error_kind.value}): {result.message}")

    async def drain(self) -> None:
        """Wait for pending fire-and-forget calls (shutdown, tests)"""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    @property
    def pending_count(self) -> int:
        return len(self._background)


# ==================== SHARED INSTANCE ====================

_gateway: Optional[RemoteProcedureGateway] = None


def get_gateway() -> RemoteProcedureGateway:
    global _gateway
    if _gateway is None:
        from config import FUNCTIONS_URL, FUNCTIONS_API_KEY, FUNCTIONS_TIMEOUT

        _gateway = RemoteProcedureGateway(FUNCTIONS_URL, FUNCTIONS_API_KEY, FUNCTIONS_TIMEOUT)
    return _gateway


def set_gateway(gateway: Optional[RemoteProcedureGateway]) -> None:
    global _gateway
    _gateway = gateway
