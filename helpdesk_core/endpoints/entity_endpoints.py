"""
Entity endpoint definitions for the helpdesk REST API.
Collections are listed in creation order; reclaim walks them in reverse.
"""

from typing import Dict, Any

# Children before parents.
RECLAIM_ORDER = ("tickets", "users", "organizations")


def get_entity_endpoints() -> Dict[str, Any]:
    """Get entity collection endpoints configuration."""
    return {
        # 1. Organizations
        "organizations": {
            "list": "/api/v2/organizations.json",
            "detail": "/api/v2/organizations/{id}.json",
            "envelope": "organization",
            "visible_field": "name",
            "supports_pagination": True,
            "force_delete": False,
        },

        # 2. Users
        "users": {
            "list": "/api/v2/users.json",
            "detail": "/api/v2/users/{id}.json",
            "identities": "/api/v2/users/{id}/identities.json",
            "envelope": "user",
            "visible_field": "email",
            "supports_pagination": True,
            # Users are archived on plain delete; force removes them so the email can be reused.
            "force_delete": True,
        },

        # 3. Tickets
        "tickets": {
            "list": "/api/v2/tickets.json",
            "detail": "/api/v2/tickets/{id}.json",
            "envelope": "ticket",
            "visible_field": "subject",
            "supports_pagination": True,
            "force_delete": False,
        },
    }
