"""Endpoint utilities bridging reclaim config with static collection definitions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from helpdesk_core.endpoints import RECLAIM_ORDER, get_entity_endpoints

from .config import ReclaimSettings


@dataclass
class EndpointSpec:
    name: str
    definition: Dict
    enabled: bool = True


class EndpointResolver:
    """Resolves the reclaim stages in dependency order (children first)."""

    def __init__(self, settings: ReclaimSettings):
        self.settings = settings
        self.definitions = get_entity_endpoints()

    def reclaim_order(self) -> List[EndpointSpec]:
        return [
            EndpointSpec(name=name, definition=self.definitions[name], enabled=self.settings.enabled(name))
            for name in RECLAIM_ORDER
        ]
