"""Parser to normalize raw API payloads into entity values."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .models import Organization, RemoteEntity, Ticket, User
from .resources import RESOURCE_DEFINITIONS


class Parser:
    def __init__(self):
        self.definitions = RESOURCE_DEFINITIONS

    def parse_object(self, collection: str, raw: Dict[str, Any]) -> RemoteEntity:
        definition = self.definitions[collection]
        return RemoteEntity(
            collection=collection,
            remote_id=definition["external_id"](raw),
            visible_value=definition["visible_value"](raw),
            data=raw,
        )

    def parse_many(self, collection: str, payload: List[Dict[str, Any]]) -> List[RemoteEntity]:
        return [self.parse_object(collection, item) for item in payload if isinstance(item, dict)]

    def label_for(self, entity: RemoteEntity) -> str:
        return self.definitions[entity.collection]["label"](entity.data)

    @staticmethod
    def organization(payload: Dict[str, Any], tag: Optional[str] = None) -> Organization:
        org = payload[RESOURCE_DEFINITIONS["organizations"]["envelope"]]
        return Organization(remote_id=org["id"], display_name=org.get("name", ""), tag=tag)

    @staticmethod
    def user(
        payload: Dict[str, Any],
        primary_email: str,
        secondary_email: str,
        organization_id: int,
        tag: Optional[str] = None,
    ) -> User:
        user = payload[RESOURCE_DEFINITIONS["users"]["envelope"]]
        return User(
            remote_id=user["id"],
            display_name=user.get("name", ""),
            primary_email=primary_email,
            secondary_email=secondary_email,
            organization_id=user.get("organization_id") or organization_id,
            tag=tag,
        )

    @staticmethod
    def ticket(payload: Dict[str, Any], requester_id: int, collaborator_email: str) -> Ticket:
        ticket = payload[RESOURCE_DEFINITIONS["tickets"]["envelope"]]
        return Ticket(
            remote_id=ticket["id"],
            subject=ticket.get("subject", ""),
            requester_id=requester_id,
            collaborator_email=collaborator_email,
        )
