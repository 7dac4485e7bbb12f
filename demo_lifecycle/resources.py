"""Field blueprints for the remote collections the orchestrator touches."""
from __future__ import annotations

from typing import Any, Dict

from helpdesk_core.endpoints import get_entity_endpoints


ResourceDefinition = Dict[str, Any]

_NOUNS = {"organizations": "Organization", "users": "User", "tickets": "Ticket"}


def _text(obj, key):
    value = obj.get(key)
    return value if isinstance(value, str) else ""


def _definition(collection: str, endpoint: Dict[str, Any]) -> ResourceDefinition:
    field = endpoint["visible_field"]
    noun = _NOUNS.get(collection, collection)
    return {
        "envelope": endpoint["envelope"],
        "external_id": lambda obj: obj.get("id"),
        "visible_value": lambda obj: _text(obj, field),
        "label": lambda obj: f'{noun} "{_text(obj, field)}"',
    }


RESOURCE_DEFINITIONS: Dict[str, ResourceDefinition] = {
    collection: _definition(collection, endpoint)
    for collection, endpoint in get_entity_endpoints().items()
}
