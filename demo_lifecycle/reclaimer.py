"""Reclaim: list, classify and delete tickets, then users, then organizations."""
from __future__ import annotations

import logging
from typing import AsyncIterator, List, Optional

from .api_client import Transport
from .classifier import ClassificationStrategy, PatternClassifier
from .concurrency import run_bounded
from .config import ReclaimSettings
from .deleter import Deleter
from .endpoints import EndpointResolver
from .lister import RemoteLister
from .models import DeleteResult, ReclaimReport, RemoteEntity, StageReport
from .parser import Parser

logger = logging.getLogger("demo_lifecycle.reclaimer")


class Reclaimer:
    """Best-effort cleanup. A failing stage or delete is recorded and skipped.

    The classification strategy has no default: callers pick it and it is
    echoed in the logs and in the returned report.
    """

    def __init__(
        self,
        transport: Transport,
        strategy: ClassificationStrategy,
        settings: ReclaimSettings,
        run_id: Optional[str] = None,
    ):
        self.strategy = strategy
        self.settings = settings
        self.run_id = run_id
        self.parser = Parser()
        self.lister = RemoteLister(transport, page_size=settings.page_size, parser=self.parser)
        self.classifier = PatternClassifier(strategy)
        self.deleter = Deleter(transport)
        self.resolver = EndpointResolver(settings)

    async def run(self) -> ReclaimReport:
        report = ReclaimReport(strategy=self.strategy.name, run_id=self.run_id)
        logger.info("START: bulk cleanup (tickets -> users -> organizations) using %s", self.strategy.describe())

        for spec in self.resolver.reclaim_order():
            stage = StageReport(collection=spec.name)
            report.stages.append(stage)
            if not spec.enabled:
                stage.skipped = True
                logger.info("SKIP: %s (disabled in config)", spec.name)
                continue
            try:
                await self.reclaim_collection(stage)
            except Exception as exc:
                stage.error = str(exc) or exc.__class__.__name__
                logger.warning("FAIL: Could not fetch or delete %s: %s", spec.name, stage.error)

        logger.info("DONE: bulk cleanup finished, %s entities deleted", report.total_deleted)
        return report

    async def _counted(self, stage: StageReport) -> AsyncIterator[RemoteEntity]:
        async for entity in self.lister.iter_items(stage.collection):
            stage.listed += 1
            yield entity

    async def reclaim_collection(self, stage: StageReport):
        # Enumerate fully before deleting so deletes cannot shift the pages.
        matched: List[RemoteEntity] = []
        listing_error: Optional[Exception] = None
        try:
            async for entity in self.classifier.classify_stream(self._counted(stage)):
                matched.append(entity)
        except Exception as exc:
            listing_error = exc

        stage.matched = len(matched)
        # Entities matched before a listing failure are still deleted.
        if matched:
            stage.results = await self.delete_all(matched)
        if listing_error is not None:
            raise listing_error

    async def delete_all(self, entities: List[RemoteEntity]) -> List[DeleteResult]:
        outcome = await run_bounded(
            entities,
            lambda _, entity: self.deleter.delete(entity, self.parser.label_for(entity)),
            limit=self.settings.max_concurrent_deletes,
            fail_fast=False,
        )
        results = []
        for index, entity in enumerate(entities):
            if index in outcome.completed:
                results.append(outcome.completed[index])
            else:
                error = outcome.failures.get(index)
                results.append(
                    DeleteResult(entity.collection, entity.remote_id, self.parser.label_for(entity), ok=False,
                                 error=str(error))
                )
        return results
