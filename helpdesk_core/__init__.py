"""
Helpdesk core - configuration, authentication and endpoint definitions
shared by the demo-data lifecycle tooling.
"""
__version__ = "1.0.0"
__author__ = "Helpdesk Demo Data Tools"
from .auth import HelpdeskAuthenticator
from .config import ConfigLoader

__all__ = ["HelpdeskAuthenticator", "ConfigLoader"]
