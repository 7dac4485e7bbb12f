"""Best-effort deletion of classified entities."""
from __future__ import annotations

import logging
from typing import Optional

from helpdesk_core.endpoints import get_entity_endpoints

from .api_client import Transport
from .errors import ApiError, DemoDataError
from .models import DeleteResult, RemoteEntity

logger = logging.getLogger("demo_lifecycle.deleter")


class Deleter:
    def __init__(self, transport: Transport):
        self.transport = transport
        self.endpoints = get_entity_endpoints()

    def url_for(self, entity: RemoteEntity) -> str:
        definition = self.endpoints[entity.collection]
        path = definition["detail"].format(id=entity.remote_id)
        if definition.get("force_delete"):
            return self.transport.url_for(path, force="true")
        return self.transport.url_for(path)

    async def delete(self, entity: RemoteEntity, label: Optional[str] = None) -> DeleteResult:
        """Issue one delete. Never raises for remote or network failures."""
        label = label or f"{entity.collection} #{entity.remote_id}"
        try:
            response = await self.transport.request("DELETE", self.url_for(entity))
        except DemoDataError as exc:
            logger.warning("FAIL: Failed to delete %s (ID: %s): %s", label, entity.remote_id, exc)
            return DeleteResult(entity.collection, entity.remote_id, label, ok=False, error=str(exc))

        if response.ok:
            logger.info("DELETE: Deleted %s (ID: %s)", label, entity.remote_id)
            return DeleteResult(entity.collection, entity.remote_id, label, ok=True, status=response.status)

        error = ApiError.from_response(response, context=f"{entity.collection} deletion")
        message = error.error or response.reason or str(error)
        if not isinstance(message, str):
            message = str(error)
        logger.warning("FAIL: Failed to delete %s (ID: %s): %s", label, entity.remote_id, message)
        return DeleteResult(
            entity.collection, entity.remote_id, label, ok=False, status=response.status, error=message,
        )
