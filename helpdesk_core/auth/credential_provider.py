from typing import Protocol, Dict, Any, List, Optional
import json
import os


class CredentialProvider(Protocol):
    """Abstraction for fetching tenant credentials."""

    def get_tenant_credentials(self, tenant_id: int) -> Dict[str, Any]:
        ...


class JsonCredentialProvider:
    """
    Credential provider that reads tenant credentials from a JSON file
    like configs/credential.json ({"tenants": [{"id": 1, "subdomain": ...}]}).

    A missing file or an unknown tenant yields no credentials, so a chain of
    providers can fill the gaps from the environment or a prompt.
    """

    def __init__(self, credentials_file: str = "configs/credential.json"):
        self.credentials_file = credentials_file

    def _tenants(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.credentials_file):
            return []
        with open(self.credentials_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [t for t in data.get("tenants", []) if isinstance(t, dict)]

    def find_tenant(self, tenant_id: int) -> Optional[Dict[str, Any]]:
        for tenant in self._tenants():
            if tenant.get("id") == tenant_id:
                return tenant
        return None

    def get_tenant_credentials(self, tenant_id: int) -> Dict[str, Any]:
        return self.find_tenant(tenant_id) or {}


class EnvCredentialProvider:
    """Credential provider backed by HELPDESK_* environment variables."""

    variables = {
        "subdomain": "HELPDESK_SUBDOMAIN",
        "agent_email": "HELPDESK_EMAIL",
        "api_token": "HELPDESK_API_TOKEN",
        "oauth_token": "HELPDESK_OAUTH_TOKEN",
    }

    def get_tenant_credentials(self, tenant_id: int) -> Dict[str, Any]:
        found = {key: os.getenv(var, "") for key, var in self.variables.items()}
        return {"id": tenant_id, **{k: v for k, v in found.items() if v}}
