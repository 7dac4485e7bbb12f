"""Exception hierarchy for the lifecycle orchestrator."""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from helpdesk_core.config import ConfigError

__all__ = ["DemoDataError", "ApiError", "TransportError", "ProvisioningAborted", "ConfigError"]


class DemoDataError(Exception):
    """Base class for lifecycle errors."""


class ApiError(DemoDataError):
    """A non-2xx response from the helpdesk API."""

    def __init__(
        self,
        status: int,
        reason: str = "",
        error: Any = None,
        description: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        context: str = "",
    ):
        self.status = status
        self.reason = reason
        self.error = error
        self.description = description
        self.details = details or {}
        self.context = context
        super().__init__(self._message())

    def _message(self) -> str:
        if self.error:
            return self.error if isinstance(self.error, str) else json.dumps(self.error)
        if self.description:
            return self.description
        return json.dumps(self.details)

    @classmethod
    def from_response(cls, response, context: str = "") -> "ApiError":
        body = response.safe_json()
        if not isinstance(body, dict):
            body = {"body": body}
        return cls(
            status=response.status,
            reason=response.reason,
            error=body.get("error"),
            description=body.get("description"),
            details=body,
            context=context,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "context": self.context,
            "status": self.status,
            "statusText": self.reason,
            "error": self.error,
            "description": self.description,
            "details": self.details,
        }


class TransportError(DemoDataError):
    """The request never produced an HTTP response (connection error, timeout)."""

    def __init__(self, method: str, url: str, cause: BaseException):
        self.method = method
        self.url = url
        self.cause = cause
        super().__init__(f"{method} {url} failed: {cause!r}")


class ProvisioningAborted(DemoDataError):
    """Fail-fast stop of a provisioning run; carries what was created before the failure."""

    def __init__(self, stage: str, index: int, cause: BaseException, report):
        self.stage = stage
        self.index = index
        self.cause = cause
        self.report = report
        super().__init__(f"{stage} #{index} failed: {cause}")
