"""Provisioning: organizations, then users, then tickets, each stage feeding the next."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from helpdesk_core.endpoints import get_entity_endpoints

from .api_client import Transport
from .concurrency import run_bounded
from .config import ProvisionSettings
from .errors import ApiError, DemoDataError, ProvisioningAborted
from .models import Organization, ProvisionReport, ProvisionWarning, Ticket, User
from .naming import RunIdentity
from .parser import Parser

logger = logging.getLogger("demo_lifecycle.provisioner")


async def _post(transport: Transport, path: str, body: Dict[str, Any], context: str) -> Dict[str, Any]:
    response = await transport.request("POST", transport.url_for(path), body=body)
    if not response.ok:
        error = ApiError.from_response(response, context=context)
        logger.error("FAIL: API error during %s: %s", context, error.as_dict())
        raise error
    return response.json()


class OrganizationCreator:
    def __init__(self, transport: Transport, settings: ProvisionSettings, parser: Optional[Parser] = None):
        self.transport = transport
        self.settings = settings
        self.naming = settings.naming
        self.parser = parser or Parser()
        endpoints = get_entity_endpoints()["organizations"]
        self.path = endpoints["list"]
        self.envelope = endpoints["envelope"]

    async def create(self, index: int, run: RunIdentity) -> Organization:
        name = self.naming.organization_name(index, run)
        organization: Dict[str, Any] = {"name": name}
        tag = None
        if self.settings.tag_entities:
            tag = self.naming.organization_tag(run)
            organization["tags"] = [tag]

        payload = await _post(self.transport, self.path, {self.envelope: organization}, "organization creation")
        created = self.parser.organization(payload, tag=tag)
        logger.info("CREATE: Organization %s (ID: %s)", created.display_name, created.remote_id)
        return created


class UserCreator:
    def __init__(self, transport: Transport, settings: ProvisionSettings, parser: Optional[Parser] = None):
        self.transport = transport
        self.settings = settings
        self.naming = settings.naming
        self.parser = parser or Parser()
        endpoints = get_entity_endpoints()["users"]
        self.path = endpoints["list"]
        self.envelope = endpoints["envelope"]
        self.identities_path = endpoints["identities"]

    async def create(
        self, index: int, organization: Organization, run: RunIdentity
    ) -> Tuple[User, Optional[ProvisionWarning]]:
        email = self.naming.primary_email(index, run)
        alt_email = self.naming.secondary_email(index, run)
        user: Dict[str, Any] = {
            "name": self.naming.user_name(index, run),
            "email": email,
            "organization_id": organization.remote_id,
        }
        tag = None
        if self.settings.tag_entities:
            tag = self.naming.user_tag(run)
            user["tags"] = [tag]

        payload = await _post(self.transport, self.path, {self.envelope: user}, "user creation")
        created = self.parser.user(payload, email, alt_email, organization.remote_id, tag=tag)

        warning = await self.attach_secondary_identity(index, created)
        logger.info(
            "CREATE: User %s (%s, alt: %s) [ID: %s]",
            created.display_name, created.primary_email, created.secondary_email, created.remote_id,
        )
        return created, warning

    async def attach_secondary_identity(self, index: int, user: User) -> Optional[ProvisionWarning]:
        """Add the alternate email; a failure is reported, never raised."""
        path = self.identities_path.format(id=user.remote_id)
        body = {"identity": {"type": "email", "value": user.secondary_email}}
        try:
            response = await self.transport.request("POST", self.transport.url_for(path), body=body)
        except DemoDataError as exc:
            details: Dict[str, Any] = {"error": str(exc)}
        else:
            if response.ok:
                return None
            details = ApiError.from_response(response, context="identity attachment").as_dict()

        user.secondary_attached = False
        logger.warning("WARN: Could not add alt email for %s: %s", user.primary_email, details)
        return ProvisionWarning(
            stage="identities",
            index=index,
            message=f"Could not add alt email {user.secondary_email} for {user.primary_email}",
            details=details,
        )


class TicketCreator:
    def __init__(self, transport: Transport, settings: ProvisionSettings, parser: Optional[Parser] = None):
        self.transport = transport
        self.settings = settings
        self.naming = settings.naming
        self.parser = parser or Parser()
        endpoints = get_entity_endpoints()["tickets"]
        self.path = endpoints["list"]
        self.envelope = endpoints["envelope"]

    async def create(self, position: int, users: Sequence[User], run: RunIdentity) -> Ticket:
        """Create ticket ``position`` (0-based): requester is users[position], cc is the next user."""
        requester = users[position]
        collaborator = users[(position + 1) % len(users)]
        ticket = {
            "subject": self.naming.ticket_subject(position + 1, run),
            "comment": {"body": self.settings.ticket_body},
            "priority": self.settings.priority,
            "requester_id": requester.remote_id,
            "collaborators": [collaborator.primary_email],
        }
        payload = await _post(self.transport, self.path, {self.envelope: ticket}, "ticket creation")
        created = self.parser.ticket(payload, requester.remote_id, collaborator.primary_email)
        logger.info(
            'CREATE: Ticket "%s" | requester: #%s, cc: %s (ID: %s)',
            created.subject, requester.remote_id, collaborator.primary_email, created.remote_id,
        )
        return created


class Provisioner:
    """Runs the three creation stages behind barriers, fail-fast on any create error.

    Entities created before a failure are kept remotely and reported through
    ``ProvisioningAborted.report``; cleanup is the reclaimer's job.
    """

    def __init__(self, transport: Transport, settings: ProvisionSettings, sink=None):
        self.settings = settings
        self.sink = sink
        parser = Parser()
        self.organizations = OrganizationCreator(transport, settings, parser)
        self.users = UserCreator(transport, settings, parser)
        self.tickets = TicketCreator(transport, settings, parser)

    def new_run(self) -> RunIdentity:
        return RunIdentity.generate(self.settings.run_prefix)

    async def run(self, count: Optional[int] = None, run: Optional[RunIdentity] = None) -> ProvisionReport:
        count = self.settings.count if count is None else count
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        run = run or self.new_run()
        report = ProvisionReport(run_id=str(run))
        limit = self.settings.max_concurrent_creates
        logger.info("START: provisioning %s entities per type with run ID %s", count, run)

        try:
            outcome = await run_bounded(
                range(1, count + 1),
                lambda _, index: self.organizations.create(index, run),
                limit=limit,
            )
            report.organizations = outcome.ordered()
            self._check("organizations", outcome, report)
            self._record(report)

            outcome = await run_bounded(
                report.organizations,
                lambda pos, org: self.users.create(pos + 1, org, run),
                limit=limit,
            )
            for user, warning in outcome.ordered():
                report.users.append(user)
                if warning:
                    report.warnings.append(warning)
            self._check("users", outcome, report)
            self._record(report)

            users: List[User] = list(report.users)
            outcome = await run_bounded(
                range(len(users)),
                lambda _, pos: self.tickets.create(pos, users, run),
                limit=limit,
            )
            report.tickets = outcome.ordered()
            self._check("tickets", outcome, report)
        finally:
            self._record(report)

        logger.info(
            "DONE: created %s organizations, %s users, %s tickets with run ID %s",
            len(report.organizations), len(report.users), len(report.tickets), run,
        )
        return report

    def _check(self, stage: str, outcome, report: ProvisionReport):
        failure = outcome.first_failure()
        if failure is None:
            return
        position, exc = failure
        if isinstance(exc, ApiError):
            report.error = exc.as_dict()
        else:
            report.error = {"context": stage, "error": str(exc)}
        raise ProvisioningAborted(stage, position + 1, exc, report) from exc

    def _record(self, report: ProvisionReport):
        if self.sink is None:
            return
        path = self.sink.write(report.run_id, report.created_ids())
        if path:
            logger.info("Manifest written to %s", path)
