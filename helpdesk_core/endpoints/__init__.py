"""
Endpoint definitions for the helpdesk REST API.
"""

from .entity_endpoints import RECLAIM_ORDER, get_entity_endpoints

__all__ = ["RECLAIM_ORDER", "get_entity_endpoints"]
