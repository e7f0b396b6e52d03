"""
Delete executor: performs the destructive call once and classifies the outcome.
"""

import asyncio
import functools
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from ..core.enums import DeleteOutcomeKind, DeleteScope, DEFAULT_FAILURE_MESSAGE, REFRESH_EVENT
from ..core.exceptions import NetworkError
from ..core.interfaces import DeleteEndpoint, EndpointResponse
from ..utils.logger import get_logger
from .event_service import RefreshBus

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeleteOutcome:
    """Result of one delete invocation."""
    kind: DeleteOutcomeKind
    message: str = ""
    status_code: Optional[int] = None
    
    @classmethod
    def success(cls, status_code: Optional[int] = None) -> "DeleteOutcome":
        return cls(DeleteOutcomeKind.SUCCESS, status_code=status_code)
    
    @classmethod
    def already_gone(cls) -> "DeleteOutcome":
        return cls(DeleteOutcomeKind.ALREADY_GONE, status_code=404)
    
    @classmethod
    def failure(cls, message: str, status_code: Optional[int] = None) -> "DeleteOutcome":
        return cls(DeleteOutcomeKind.FAILURE, message or DEFAULT_FAILURE_MESSAGE, status_code)
    
    @property
    def succeeded(self) -> bool:
        """Success and already-gone settle the countdown the same way."""
        return self.kind in (DeleteOutcomeKind.SUCCESS, DeleteOutcomeKind.ALREADY_GONE)


class HttpDeleteEndpoint(DeleteEndpoint):
    """Delete endpoint reached over HTTP with ``requests``.

    The blocking request runs on the event loop's default executor.
    """
    
    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 60.0,
                 session: Optional[requests.Session] = None):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._session = session or requests.Session()
    
    async def delete_class(self, target_id: str, scope: DeleteScope) -> EndpointResponse:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, functools.partial(self.delete_class_sync, target_id, scope)
        )
    
    def delete_class_sync(self, target_id: str, scope: DeleteScope) -> EndpointResponse:
        url = f"{self._base_url}/classes/{quote(str(target_id), safe='')}"
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        
        try:
            response = self._session.delete(
                url, params={"scope": scope.value}, headers=headers, timeout=self._timeout
            )
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Delete request failed: {str(e)}", details={'url': url})
        
        body: Optional[Dict[str, Any]] = None
        try:
            payload = response.json()
            if isinstance(payload, dict):
                body = payload
        except ValueError:
            pass
        
        message = None
        if body:
            candidate = body.get("message") or body.get("detail")
            if isinstance(candidate, str):
                message = candidate
        return EndpointResponse(status_code=response.status_code, message=message, body=body)
    
    def close(self) -> None:
        self._session.close()


class DeleteExecutor:
    """Issues exactly one delete call per invocation and reports the outcome.

    It never touches the countdown record; the controller owns transitions.
    On success or already-gone it publishes the refresh signal once.
    """
    
    def __init__(self, endpoint: DeleteEndpoint, refresh_bus: Optional[RefreshBus] = None):
        self._endpoint = endpoint
        self._refresh_bus = refresh_bus
        self._statistics = {kind: 0 for kind in DeleteOutcomeKind}
    
    @staticmethod
    def classify(response: EndpointResponse) -> DeleteOutcome:
        """Map an endpoint response to an outcome."""
        if 200 <= response.status_code < 300:
            return DeleteOutcome.success(response.status_code)
        if response.status_code == 404:
            return DeleteOutcome.already_gone()
        return DeleteOutcome.failure(response.message or DEFAULT_FAILURE_MESSAGE, response.status_code)
    
    async def execute(self, target_id: str, scope: DeleteScope) -> DeleteOutcome:
        """Delete ``target_id`` with the given scope. Never raises for endpoint errors."""
        logger.info("Deleting class %s (scope=%s)", target_id, scope.value)
        try:
            response = await self._endpoint.delete_class(target_id, scope)
            outcome = self.classify(response)
        except NetworkError as e:
            logger.warning("Delete of class %s failed: %s", target_id, e.message)
            outcome = DeleteOutcome.failure(DEFAULT_FAILURE_MESSAGE)
        except Exception:
            logger.exception("Unexpected error deleting class %s", target_id)
            outcome = DeleteOutcome.failure(DEFAULT_FAILURE_MESSAGE)
        
        self._statistics[outcome.kind] += 1
        if outcome.kind is DeleteOutcomeKind.ALREADY_GONE:
            logger.info("Class %s was already deleted", target_id)
        elif outcome.kind is DeleteOutcomeKind.FAILURE:
            logger.warning("Delete of class %s failed: %s", target_id, outcome.message)
        
        if outcome.succeeded and self._refresh_bus is not None:
            self._refresh_bus.publish(REFRESH_EVENT)
        return outcome
    
    def get_statistics(self) -> Dict[str, int]:
        """Invocation counts per outcome kind."""
        return {kind.value: count for kind, count in self._statistics.items()}
