"""Run identity and the deterministic naming scheme for generated entities."""
from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Callable, Optional

_RUN_TOKEN = re.compile(r"^[A-Za-z0-9._-]+$")


@dataclass(frozen=True)
class RunIdentity:
    """Token scoping one provisioning run. Embedded in every generated name."""

    value: str

    def __post_init__(self):
        if not self.value or not _RUN_TOKEN.match(self.value):
            raise ValueError(
                f"Invalid run identity {self.value!r}: use letters, digits, '.', '_' or '-'"
            )

    @classmethod
    def generate(cls, prefix: str = "nodegen", clock: Optional[Callable[[], float]] = None) -> "RunIdentity":
        now = (clock or time.time)()
        return cls(f"{prefix}-{int(now * 1000)}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class NamingScheme:
    label: str = "Demo"
    email_prefix: str = "user"
    email_domain: str = "example.com"
    ticket_prefix: str = "Issue"

    @property
    def tag_label(self) -> str:
        return re.sub(r"[^a-z0-9]+", "-", self.label.lower()).strip("-") or "demo"

    def organization_name(self, index: int, run: RunIdentity) -> str:
        return f"{self.label} Org {index} ({run})"

    def organization_tag(self, run: RunIdentity) -> str:
        return f"{self.tag_label}-org-{run}"

    def user_name(self, index: int, run: RunIdentity) -> str:
        return f"{self.label} User {index} - {run}"

    def primary_email(self, index: int, run: RunIdentity) -> str:
        return f"{self.email_prefix}{index}-{run}@{self.email_domain}"

    def secondary_email(self, index: int, run: RunIdentity) -> str:
        return f"{self.email_prefix}{index}-alt-{run}@{self.email_domain}"

    def user_tag(self, run: RunIdentity) -> str:
        return f"{self.tag_label}-user-{run}"

    def ticket_subject(self, index: int, run: RunIdentity) -> str:
        return f"{self.ticket_prefix} {index} ({run})"
