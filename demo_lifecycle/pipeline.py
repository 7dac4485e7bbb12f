"""High-level entry points wiring settings, transport, provisioner and reclaimer."""
from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

from .api_client import ApiClient
from .classifier import build_strategy
from .config import PipelineSettings
from .models import ProvisionReport, ReclaimReport
from .naming import RunIdentity
from .provisioner import Provisioner
from .reclaimer import Reclaimer
from .sinks.manifest_sink import FileManifestSink, LoggingSink, load_manifest

ApiClientFactory = Callable[[PipelineSettings], Any]


def _default_client_factory(settings: PipelineSettings):
    return ApiClient(settings.tenant, settings.config_loader)


def _manifest_sink(settings: PipelineSettings, output_mode: str):
    if output_mode == "log":
        return LoggingSink()
    return FileManifestSink(settings.manifest_dir)


async def _provision_async(
    settings: PipelineSettings,
    count: Optional[int] = None,
    run: Optional[RunIdentity] = None,
    output_mode: str = "file",
    api_client_factory: ApiClientFactory = _default_client_factory,
) -> ProvisionReport:
    sink = _manifest_sink(settings, output_mode)
    async with api_client_factory(settings) as client:
        provisioner = Provisioner(client, settings.provisioning, sink=sink)
        return await provisioner.run(count=count, run=run)


async def _reclaim_async(
    settings: PipelineSettings,
    strategy_name: str,
    run: Optional[RunIdentity] = None,
    api_client_factory: ApiClientFactory = _default_client_factory,
) -> ReclaimReport:
    manifest = None
    if strategy_name == "manifest" and run is not None:
        manifest = load_manifest(settings.manifest_dir, str(run))
    strategy = build_strategy(
        strategy_name,
        settings.provisioning.naming,
        run=run,
        manifest=manifest,
        min_token_digits=settings.reclaim.min_token_digits,
    )
    async with api_client_factory(settings) as client:
        reclaimer = Reclaimer(client, strategy, settings.reclaim, run_id=str(run) if run else None)
        return await reclaimer.run()


def run_provision(
    settings: PipelineSettings,
    count: Optional[int] = None,
    run_label: Optional[str] = None,
    output_mode: str = "file",
    api_client_factory: ApiClientFactory = _default_client_factory,
) -> ProvisionReport:
    """Create ``count`` organizations, users and tickets. Raises ProvisioningAborted on the first create failure."""
    run = RunIdentity(run_label) if run_label else None
    return asyncio.run(
        _provision_async(
            settings,
            count=count,
            run=run,
            output_mode=output_mode,
            api_client_factory=api_client_factory,
        )
    )


def run_reclaim(
    settings: PipelineSettings,
    strategy: Optional[str] = None,
    run_label: Optional[str] = None,
    api_client_factory: ApiClientFactory = _default_client_factory,
) -> ReclaimReport:
    """Delete previously provisioned entities. ``strategy`` falls back to ``reclaim.strategy`` in config."""
    strategy_name = strategy or settings.reclaim.strategy
    if not strategy_name:
        raise ValueError("A reclaim strategy is required (run, heuristic or manifest)")
    run = RunIdentity(run_label) if run_label else None
    return asyncio.run(
        _reclaim_async(
            settings,
            strategy_name,
            run=run,
            api_client_factory=api_client_factory,
        )
    )
