"""Entity and result values shared by the provisioner and the reclaimer."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Organization:
    remote_id: int
    display_name: str
    tag: Optional[str] = None


@dataclass
class User:
    remote_id: int
    display_name: str
    primary_email: str
    secondary_email: str
    organization_id: int
    tag: Optional[str] = None
    # False when attaching the secondary identity failed (non-fatal).
    secondary_attached: bool = True


@dataclass
class Ticket:
    remote_id: int
    subject: str
    requester_id: int
    collaborator_email: str


@dataclass
class ProvisionWarning:
    stage: str
    index: int
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ProvisionReport:
    run_id: str
    organizations: List[Organization] = field(default_factory=list)
    users: List[User] = field(default_factory=list)
    tickets: List[Ticket] = field(default_factory=list)
    warnings: List[ProvisionWarning] = field(default_factory=list)
    error: Optional[Dict[str, Any]] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def created_ids(self) -> Dict[str, List[int]]:
        return {
            "organizations": [o.remote_id for o in self.organizations],
            "users": [u.remote_id for u in self.users],
            "tickets": [t.remote_id for t in self.tickets],
        }


@dataclass
class RemoteEntity:
    """A listed remote record reduced to what the reclaimer needs."""

    collection: str
    remote_id: int
    visible_value: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DeleteResult:
    collection: str
    remote_id: int
    label: str
    ok: bool
    status: Optional[int] = None
    error: Optional[str] = None


@dataclass
class StageReport:
    collection: str
    listed: int = 0
    matched: int = 0
    results: List[DeleteResult] = field(default_factory=list)
    error: Optional[str] = None
    skipped: bool = False

    @property
    def deleted(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)


@dataclass
class ReclaimReport:
    strategy: str
    run_id: Optional[str]
    stages: List[StageReport] = field(default_factory=list)

    def stage(self, collection: str) -> Optional[StageReport]:
        for item in self.stages:
            if item.collection == collection:
                return item
        return None

    @property
    def total_deleted(self) -> int:
        return sum(s.deleted for s in self.stages)
