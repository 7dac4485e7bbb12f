"""Configuration helpers for the lifecycle orchestrator."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from helpdesk_core.auth import CredentialProvider, EnvCredentialProvider, JsonCredentialProvider
from helpdesk_core.config import ConfigLoader

from .naming import NamingScheme

STRATEGIES = ("run", "heuristic", "manifest")

Prompt = Callable[[str], str]


@dataclass
class TenantConfig:
    tenant_id: int
    subdomain: str
    agent_email: str = ""
    api_token: str = ""
    oauth_token: str = ""

    @property
    def base_url(self) -> str:
        if self.subdomain.startswith(("http://", "https://")):
            return self.subdomain.rstrip("/")
        return f"https://{self.subdomain}.zendesk.com"


@dataclass
class ProvisionSettings:
    count: int = 10
    label: str = "Demo"
    run_prefix: str = "nodegen"
    email_prefix: str = "user"
    email_domain: str = "example.com"
    ticket_prefix: str = "Issue"
    ticket_body: str = "Created by demo data generator"
    priority: str = "normal"
    tag_entities: bool = False
    max_concurrent_creates: int = 1

    @property
    def naming(self) -> NamingScheme:
        return NamingScheme(
            label=self.label,
            email_prefix=self.email_prefix,
            email_domain=self.email_domain,
            ticket_prefix=self.ticket_prefix,
        )


@dataclass
class ReclaimSettings:
    strategy: Optional[str] = None
    page_size: int = 100
    min_token_digits: int = 13
    max_concurrent_deletes: int = 1
    collections: Dict[str, bool] = field(
        default_factory=lambda: {"tickets": True, "users": True, "organizations": True}
    )

    def enabled(self, collection: str) -> bool:
        return bool(self.collections.get(collection, True))


@dataclass
class PipelineSettings:
    config_loader: Optional[ConfigLoader]
    tenant: TenantConfig
    provisioning: ProvisionSettings
    reclaim: ReclaimSettings
    manifest_dir: str = "manifests"


def _provision_settings(loader: ConfigLoader) -> ProvisionSettings:
    section = loader.get_provisioning_config()
    defaults = ProvisionSettings()
    return ProvisionSettings(
        count=int(section.get("count", defaults.count)),
        label=section.get("label", defaults.label),
        run_prefix=section.get("run_prefix", defaults.run_prefix),
        email_prefix=section.get("email_prefix", defaults.email_prefix),
        email_domain=section.get("email_domain", defaults.email_domain),
        ticket_prefix=section.get("ticket_prefix", defaults.ticket_prefix),
        ticket_body=section.get("ticket_body", defaults.ticket_body),
        priority=section.get("priority", defaults.priority),
        tag_entities=bool(section.get("tag_entities", defaults.tag_entities)),
        max_concurrent_creates=int(loader.get("async_config.concurrency.max_concurrent_creates", 1)),
    )


def _reclaim_settings(loader: ConfigLoader) -> ReclaimSettings:
    section = loader.get_reclaim_config()
    strategy = section.get("strategy")
    if strategy is not None and strategy not in STRATEGIES:
        raise ValueError(f"Unknown reclaim strategy {strategy!r}; expected one of {', '.join(STRATEGIES)}")
    collections = {
        name: bool(entry.get("enabled", True))
        for name, entry in section.get("collections", {}).items()
    }
    settings = ReclaimSettings(
        strategy=strategy,
        page_size=int(section.get("page_size", 100)),
        min_token_digits=int(section.get("min_token_digits", 13)),
        max_concurrent_deletes=int(loader.get("async_config.concurrency.max_concurrent_deletes", 1)),
    )
    settings.collections.update(collections)
    return settings


def _resolve_credentials(tenant_id: int, providers: Sequence[CredentialProvider]) -> Dict[str, Any]:
    """Merge credentials; later providers override earlier ones."""
    data: Dict[str, Any] = {}
    for provider in providers:
        data.update(provider.get_tenant_credentials(tenant_id))
    return data


_PROMPTS: Tuple[Tuple[str, str], ...] = (
    ("subdomain", "Enter your support platform subdomain: "),
    ("agent_email", "Enter your agent email: "),
    ("api_token", "Enter your API token: "),
)


def load_pipeline_settings(
    tenant_id: int = 1,
    config_file: str = "configs/config.json",
    credentials_file: str = "configs/credential.json",
    prompt: Optional[Prompt] = None,
    load_env_files: bool = True,
) -> PipelineSettings:
    """Load pipeline settings with env-var overrides.

    ``prompt`` is called for any credential still missing after the
    credentials file and the environment have been consulted.
    """

    config_loader = ConfigLoader(config_file=config_file, load_env_files=load_env_files)
    providers = [JsonCredentialProvider(credentials_file), EnvCredentialProvider()]
    data = _resolve_credentials(tenant_id, providers)

    if prompt is not None:
        for key, question in _PROMPTS:
            if key == "api_token" and data.get("oauth_token"):
                continue
            if not data.get(key):
                data[key] = prompt(question).strip()

    tenant = TenantConfig(
        tenant_id=tenant_id,
        subdomain=str(data.get("subdomain") or ""),
        agent_email=str(data.get("agent_email") or ""),
        api_token=str(data.get("api_token") or ""),
        oauth_token=str(data.get("oauth_token") or ""),
    )

    if not tenant.subdomain:
        raise ValueError("subdomain is required via credentials file or HELPDESK_SUBDOMAIN env var")
    if not tenant.oauth_token and not (tenant.agent_email and tenant.api_token):
        raise ValueError(
            "agent_email and api_token (or oauth_token) are required via credentials file or HELPDESK_* env vars"
        )

    return PipelineSettings(
        config_loader=config_loader,
        tenant=tenant,
        provisioning=_provision_settings(config_loader),
        reclaim=_reclaim_settings(config_loader),
        manifest_dir=config_loader.get_manifest_directory(),
    )
