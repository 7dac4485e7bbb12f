"""
Authentication helpers for the helpdesk REST API.
"""

from .authentication import HelpdeskAuthenticator
from .credential_provider import CredentialProvider, EnvCredentialProvider, JsonCredentialProvider

__all__ = ["HelpdeskAuthenticator", "CredentialProvider", "EnvCredentialProvider", "JsonCredentialProvider"]
