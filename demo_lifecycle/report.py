"""Console rendering of provisioning and reclaim reports."""
from __future__ import annotations

from typing import List

from .errors import ProvisioningAborted
from .models import ProvisionReport, ReclaimReport


def format_provision_report(report: ProvisionReport) -> List[str]:
    lines = [f"Run ID: {report.run_id}"]
    for org in report.organizations:
        lines.append(f"  Organization: {org.display_name} (ID: {org.remote_id})")
    for user in report.users:
        alt = user.secondary_email if user.secondary_attached else f"{user.secondary_email} (not attached)"
        lines.append(f"  User: {user.display_name} ({user.primary_email}, alt: {alt}) [ID: {user.remote_id}]")
    for ticket in report.tickets:
        lines.append(
            f'  Ticket: "{ticket.subject}" | requester: #{ticket.requester_id}, '
            f"cc: {ticket.collaborator_email} (ID: {ticket.remote_id})"
        )
    for warning in report.warnings:
        lines.append(f"  Warning: {warning.message}")
    status = "Done!" if report.succeeded else "Aborted."
    lines.append(
        f"{status} {len(report.organizations)} orgs, {len(report.users)} users, "
        f"{len(report.tickets)} tickets created with run ID: {report.run_id}"
    )
    return lines


def format_abort(exc: ProvisioningAborted) -> List[str]:
    lines = [f"Error occurred during {exc.stage} #{exc.index}: {exc.cause}"]
    error = exc.report.error or {}
    for key in ("status", "statusText", "error", "description", "details"):
        if error.get(key) not in (None, "", {}):
            lines.append(f"  {key}: {error[key]}")
    lines.append("  Created entities were kept; run `reclaim` to remove them.")
    return lines + format_provision_report(exc.report)


def format_reclaim_report(report: ReclaimReport) -> List[str]:
    scope = f" for run {report.run_id}" if report.run_id else ""
    lines = [f"Cleanup strategy: {report.strategy}{scope}"]
    for stage in report.stages:
        if stage.skipped:
            lines.append(f"  {stage.collection}: skipped")
            continue
        line = (
            f"  {stage.collection}: listed={stage.listed} matched={stage.matched} "
            f"deleted={stage.deleted} failed={stage.failed}"
        )
        if stage.error:
            line += f" error={stage.error}"
        lines.append(line)
        for result in stage.results:
            if not result.ok:
                lines.append(f"    Failed to delete {result.label} (ID: {result.remote_id}): {result.error}")
    lines.append(f"Bulk delete finished: {report.total_deleted} entities deleted.")
    return lines
