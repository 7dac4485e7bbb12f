"""Decides which listed remote entities were produced by the provisioner.

Three strategies are available and one must be chosen explicitly per reclaim:

* ``run`` - names must embed one exact run identity; never matches other runs.
* ``heuristic`` - names must follow the generated structure and embed a token
  with a long run of digits (a millisecond timestamp); recovers runs whose
  identity was lost, at the price of possible false positives.
* ``manifest`` - remote ids recorded by the provisioner for one run; no
  pattern matching at all.
"""
from __future__ import annotations

import re
from typing import AsyncIterator, Dict, Iterable, List, Optional, Pattern, Protocol

from .models import RemoteEntity
from .naming import NamingScheme, RunIdentity


class ClassificationStrategy(Protocol):
    name: str

    def describe(self) -> str:
        ...

    def matches(self, entity: RemoteEntity) -> bool:
        ...


class _PatternStrategy:
    name = ""

    def __init__(self, naming: NamingScheme, token: str):
        label = re.escape(naming.label)
        prefix = re.escape(naming.email_prefix)
        domain = re.escape(naming.email_domain)
        ticket = re.escape(naming.ticket_prefix)
        self.patterns: Dict[str, Pattern[str]] = {
            "organizations": re.compile(rf"^{label} Org \d+ \({token}\)$"),
            "users": re.compile(rf"^{prefix}\d+(?:-alt)?-{token}@{domain}$", re.IGNORECASE),
            "tickets": re.compile(rf"^{ticket} \d+ \({token}\)$"),
        }

    def matches(self, entity: RemoteEntity) -> bool:
        pattern = self.patterns.get(entity.collection)
        if pattern is None or not entity.visible_value:
            return False
        return pattern.match(entity.visible_value) is not None


class RunScopedStrategy(_PatternStrategy):
    name = "run"

    def __init__(self, naming: NamingScheme, run: RunIdentity):
        super().__init__(naming, re.escape(str(run)))
        self.run = run

    def describe(self) -> str:
        return f"run-scoped match on {self.run}"


class HeuristicStrategy(_PatternStrategy):
    name = "heuristic"

    def __init__(self, naming: NamingScheme, min_token_digits: int = 13):
        if min_token_digits < 1:
            raise ValueError("min_token_digits must be positive")
        super().__init__(naming, rf"[A-Za-z0-9._-]*\d{{{min_token_digits},}}[A-Za-z0-9._-]*")
        self.min_token_digits = min_token_digits

    def describe(self) -> str:
        return f"heuristic match on any run token with {self.min_token_digits}+ digits"


class ManifestStrategy:
    name = "manifest"

    def __init__(self, run_id: str, created: Dict[str, List[int]]):
        self.run_id = run_id
        self.created = {name: set(ids) for name, ids in created.items()}

    def describe(self) -> str:
        counts = ", ".join(f"{name}={len(ids)}" for name, ids in self.created.items())
        return f"manifest of {self.run_id} ({counts})"

    def matches(self, entity: RemoteEntity) -> bool:
        return entity.remote_id in self.created.get(entity.collection, set())


def build_strategy(
    name: str,
    naming: NamingScheme,
    run: Optional[RunIdentity] = None,
    manifest: Optional[Dict[str, List[int]]] = None,
    min_token_digits: int = 13,
) -> ClassificationStrategy:
    if name == "run":
        if run is None:
            raise ValueError("The 'run' strategy needs a run identity")
        return RunScopedStrategy(naming, run)
    if name == "heuristic":
        return HeuristicStrategy(naming, min_token_digits)
    if name == "manifest":
        if run is None or manifest is None:
            raise ValueError("The 'manifest' strategy needs a run identity and its manifest")
        return ManifestStrategy(str(run), manifest)
    raise ValueError(f"Unknown classification strategy: {name!r}")


class PatternClassifier:
    def __init__(self, strategy: ClassificationStrategy):
        self.strategy = strategy

    def classify(self, entities: Iterable[RemoteEntity]) -> List[RemoteEntity]:
        return [entity for entity in entities if self.strategy.matches(entity)]

    async def classify_stream(self, entities: AsyncIterator[RemoteEntity]) -> AsyncIterator[RemoteEntity]:
        async for entity in entities:
            if self.strategy.matches(entity):
                yield entity
