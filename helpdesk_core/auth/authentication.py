"""
Authentication handling for the helpdesk REST API.
Supports agent email + API token (HTTP Basic) and pre-issued OAuth bearer tokens.
"""

import base64
import logging
from typing import Dict, Optional

logger = logging.getLogger("helpdesk_core.auth")


class HelpdeskAuthenticator:
    """Builds authentication headers for helpdesk API requests."""

    def __init__(self, base_url: str):
        self.base_url = base_url

        # Credentials
        self.agent_email: Optional[str] = None
        self.api_token: Optional[str] = None
        self.oauth_token: Optional[str] = None

        # Headers will be set after authentication setup
        self.headers: Optional[Dict[str, str]] = None

    def set_api_token(self, agent_email: str, api_token: str):
        """Set agent email and API token for Basic authentication."""
        self.agent_email = agent_email
        self.api_token = api_token

    def set_oauth_token(self, oauth_token: str):
        """Set an OAuth access token; it takes precedence over the API token."""
        self.oauth_token = oauth_token

    def setup_authentication(self) -> Dict[str, str]:
        """Setup authentication headers based on available credentials."""
        # Priority: OAuth first, then API token
        if self.oauth_token:
            self.headers = {
                "Authorization": f"Bearer {self.oauth_token}",
                "Content-Type": "application/json",
                "Accept": "application/json"
            }
            logger.debug("[OK] Using OAuth bearer token authentication")

        elif self.agent_email and self.api_token:
            raw = f"{self.agent_email}/token:{self.api_token}".encode()
            self.headers = {
                "Authorization": f"Basic {base64.b64encode(raw).decode()}",
                "Content-Type": "application/json",
                "Accept": "application/json"
            }
            logger.debug("[OK] Using API token authentication for %s", self.agent_email)

        else:
            raise RuntimeError("No authentication credentials available (neither OAuth token nor agent email + API token)")

        return self.headers

    def get_headers(self) -> Dict[str, str]:
        """Get current authentication headers."""
        if self.headers is None:
            return self.setup_authentication()
        return dict(self.headers)
