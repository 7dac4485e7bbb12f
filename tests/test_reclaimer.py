import asyncio

from demo_lifecycle.classifier import HeuristicStrategy, ManifestStrategy, RunScopedStrategy
from demo_lifecycle.config import ProvisionSettings, ReclaimSettings
from demo_lifecycle.deleter import Deleter
from demo_lifecycle.errors import TransportError
from demo_lifecycle.models import RemoteEntity
from demo_lifecycle.naming import NamingScheme, RunIdentity
from demo_lifecycle.provisioner import Provisioner
from demo_lifecycle.reclaimer import Reclaimer

from conftest import FakeHelpdesk

NAMING = NamingScheme()
RUN = RunIdentity("nodegen-1700000000000")


def _seed_run(helpdesk, run=RUN, count=2):
    for i in range(1, count + 1):
        helpdesk.seed("organizations", name=NAMING.organization_name(i, run))
        helpdesk.seed("users", email=NAMING.primary_email(i, run))
        helpdesk.seed("tickets", subject=NAMING.ticket_subject(i, run))


def _reclaim(helpdesk, strategy, settings=None):
    reclaimer = Reclaimer(helpdesk, strategy, settings or ReclaimSettings(page_size=2))
    return asyncio.run(reclaimer.run())


def test_deletes_children_before_parents():
    helpdesk = FakeHelpdesk()
    _seed_run(helpdesk)

    report = _reclaim(helpdesk, RunScopedStrategy(NAMING, RUN))

    deletes = [c.path.split("/")[3] for c in helpdesk.calls_for("DELETE")]
    assert deletes == ["tickets", "tickets", "users", "users", "organizations", "organizations"]
    assert report.total_deleted == 6
    assert report.strategy == "run"
    assert all(not records for records in helpdesk.records.values())


def test_only_the_matching_run_is_removed():
    helpdesk = FakeHelpdesk()
    _seed_run(helpdesk)
    other = RunIdentity("nodegen-1699999999999")
    _seed_run(helpdesk, run=other)
    customer = helpdesk.seed("organizations", name="Real Customer Inc")

    report = _reclaim(helpdesk, RunScopedStrategy(NAMING, RUN))

    assert report.stage("organizations").listed == 5
    assert report.stage("organizations").matched == 2
    remaining = {r["name"] for r in helpdesk.records["organizations"].values()}
    assert remaining == {"Demo Org 1 (nodegen-1699999999999)", "Demo Org 2 (nodegen-1699999999999)",
                         "Real Customer Inc"}
    assert customer in helpdesk.records["organizations"]


def test_heuristic_recovers_every_run_but_keeps_unrelated_data():
    helpdesk = FakeHelpdesk()
    _seed_run(helpdesk)
    _seed_run(helpdesk, run=RunIdentity("nodegen-1699999999999"))
    helpdesk.seed("users", email="agent@example.com")
    helpdesk.seed("tickets", subject="Issue 12 (follow-up)")

    report = _reclaim(helpdesk, HeuristicStrategy(NAMING))

    assert report.total_deleted == 12
    assert [r["email"] for r in helpdesk.records["users"].values()] == ["agent@example.com"]
    assert [r["subject"] for r in helpdesk.records["tickets"].values()] == ["Issue 12 (follow-up)"]


def test_users_are_force_deleted():
    helpdesk = FakeHelpdesk()
    _seed_run(helpdesk, count=1)

    _reclaim(helpdesk, RunScopedStrategy(NAMING, RUN))

    user_delete, = helpdesk.calls_for("DELETE", "/api/v2/users/")
    assert user_delete.query == {"force": ["true"]}
    ticket_delete, = helpdesk.calls_for("DELETE", "/api/v2/tickets/")
    assert ticket_delete.query == {}


def test_failed_delete_does_not_stop_the_rest():
    helpdesk = FakeHelpdesk()
    _seed_run(helpdesk, count=5)
    helpdesk.fail("DELETE", "/api/v2/tickets/", status=500, body={"error": "InternalError"}, on_call=2)

    report = _reclaim(helpdesk, RunScopedStrategy(NAMING, RUN))

    tickets = report.stage("tickets")
    assert tickets.matched == 5
    assert [r.ok for r in tickets.results] == [True, False, True, True, True]
    assert tickets.results[1].error == "InternalError"
    assert tickets.results[1].status == 500
    assert len(helpdesk.records["tickets"]) == 1
    assert report.stage("users").deleted == 5
    assert report.stage("organizations").deleted == 5


def test_listing_failure_is_isolated_to_its_stage():
    helpdesk = FakeHelpdesk()
    _seed_run(helpdesk)
    helpdesk.fail("GET", "/api/v2/tickets.json", status=503, body={"error": "ServiceUnavailable"})

    report = _reclaim(helpdesk, RunScopedStrategy(NAMING, RUN))

    assert report.stage("tickets").error == "ServiceUnavailable"
    assert report.stage("tickets").results == []
    assert report.stage("users").deleted == 2
    assert report.stage("organizations").deleted == 2


def test_matches_before_a_mid_listing_failure_are_still_deleted():
    helpdesk = FakeHelpdesk()
    _seed_run(helpdesk, count=3)
    # Second page of tickets fails.
    helpdesk.fail("GET", "tickets.json?page%5Bsize%5D=2&page%5Bafter%5D=2", status=500, body={"error": "Boom"})

    report = _reclaim(helpdesk, RunScopedStrategy(NAMING, RUN))

    tickets = report.stage("tickets")
    assert tickets.listed == 2
    assert tickets.deleted == 2
    assert tickets.error == "Boom"


def test_network_error_on_delete_is_recorded():
    helpdesk = FakeHelpdesk()
    _seed_run(helpdesk, count=1)
    helpdesk.fail("DELETE", "/api/v2/organizations/",
                  exception=TransportError("DELETE", "https://acme.zendesk.com/x", OSError("reset")))

    report = _reclaim(helpdesk, RunScopedStrategy(NAMING, RUN))

    result, = report.stage("organizations").results
    assert not result.ok
    assert "reset" in result.error


def test_disabled_collections_are_skipped():
    helpdesk = FakeHelpdesk()
    _seed_run(helpdesk)
    settings = ReclaimSettings(page_size=2)
    settings.collections["organizations"] = False

    report = _reclaim(helpdesk, RunScopedStrategy(NAMING, RUN), settings)

    assert report.stage("organizations").skipped
    assert len(helpdesk.records["organizations"]) == 2
    assert helpdesk.calls_for("GET", "organizations") == []


def test_manifest_strategy_removes_exactly_what_was_created():
    helpdesk = FakeHelpdesk()
    provisioner = Provisioner(helpdesk, ProvisionSettings(count=3))
    created = asyncio.run(provisioner.run(run=RunIdentity("r1")))
    # Same names, not in the manifest.
    _seed_run(helpdesk, run=RunIdentity("r1"), count=1)

    report = _reclaim(helpdesk, ManifestStrategy("r1", created.created_ids()))

    assert report.total_deleted == 9
    assert len(helpdesk.records["organizations"]) == 1
    assert len(helpdesk.records["users"]) == 1
    assert len(helpdesk.records["tickets"]) == 1


def test_deleter_labels_default_to_collection_and_id():
    helpdesk = FakeHelpdesk()
    result = asyncio.run(Deleter(helpdesk).delete(RemoteEntity("tickets", 404, "gone")))

    assert not result.ok
    assert result.label == "tickets #404"
    assert result.error == "RecordNotFound"
