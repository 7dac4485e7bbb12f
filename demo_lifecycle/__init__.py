"""Demo-data lifecycle orchestrator: provisions and reclaims helpdesk test entities."""

__all__ = [
    "config",
    "api_client",
    "errors",
    "naming",
    "models",
    "parser",
    "resources",
    "endpoints",
    "concurrency",
    "provisioner",
    "lister",
    "classifier",
    "deleter",
    "reclaimer",
    "pipeline",
    "report",
]
