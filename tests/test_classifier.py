import asyncio

import pytest

from demo_lifecycle.classifier import (
    HeuristicStrategy,
    ManifestStrategy,
    PatternClassifier,
    RunScopedStrategy,
    build_strategy,
)
from demo_lifecycle.models import RemoteEntity
from demo_lifecycle.naming import NamingScheme, RunIdentity

NAMING = NamingScheme(label="Demo")
RUN = RunIdentity("nodegen-1700000000000")


def org(name, remote_id=1):
    return RemoteEntity("organizations", remote_id, name)


def user(email, remote_id=1):
    return RemoteEntity("users", remote_id, email)


def ticket(subject, remote_id=1):
    return RemoteEntity("tickets", remote_id, subject)


def test_run_scoped_includes_same_run():
    strategy = RunScopedStrategy(NAMING, RUN)
    assert strategy.matches(org("Demo Org 3 (nodegen-1700000000000)"))


def test_run_scoped_excludes_other_run_but_heuristic_includes_it():
    other = org("Demo Org 3 (nodegen-1699999999999)")
    assert not RunScopedStrategy(NAMING, RUN).matches(other)
    assert HeuristicStrategy(NAMING).matches(other)


@pytest.mark.parametrize(
    "name",
    [
        "Demo Org 3 (nodegen-170000000000)",  # 12 digits only
        "Demo Org (nodegen-1700000000000)",
        "Demo Org 3 (nodegen-1700000000000) copy",
        "Customer Org 3 (nodegen-1700000000000)",
        "",
    ],
)
def test_heuristic_rejects_non_generated_names(name):
    assert not HeuristicStrategy(NAMING).matches(org(name))


def test_user_patterns_cover_primary_and_alternate_emails():
    run_scoped = RunScopedStrategy(NAMING, RUN)
    assert run_scoped.matches(user("user4-nodegen-1700000000000@example.com"))
    assert run_scoped.matches(user("user4-alt-nodegen-1700000000000@example.com"))
    assert run_scoped.matches(user("USER4-nodegen-1700000000000@EXAMPLE.COM"))
    assert not run_scoped.matches(user("user4-nodegen-1700000000001@example.com"))
    assert not run_scoped.matches(user("user4-nodegen-1700000000000@example.org"))
    assert not run_scoped.matches(user("alice@example.com"))

    heuristic = HeuristicStrategy(NAMING)
    assert heuristic.matches(user("user4-nodegen-1600000000000@example.com"))
    assert not heuristic.matches(user("user4@example.com"))


def test_ticket_patterns():
    assert RunScopedStrategy(NAMING, RUN).matches(ticket("Issue 7 (nodegen-1700000000000)"))
    assert not RunScopedStrategy(NAMING, RUN).matches(ticket("Issue 7 (nodegen-1600000000000)"))
    assert HeuristicStrategy(NAMING).matches(ticket("Issue 7 (nodegen-1600000000000)"))
    assert not HeuristicStrategy(NAMING).matches(ticket("Printer on fire"))


def test_run_scoped_escapes_regex_characters():
    run = RunIdentity("r.1")
    strategy = RunScopedStrategy(NAMING, run)
    assert strategy.matches(org("Demo Org 1 (r.1)"))
    assert not strategy.matches(org("Demo Org 1 (rx1)"))


def test_collection_patterns_do_not_leak_across_types():
    strategy = RunScopedStrategy(NAMING, RUN)
    assert not strategy.matches(user("Demo Org 3 (nodegen-1700000000000)"))


def test_manifest_strategy_matches_only_recorded_ids():
    strategy = ManifestStrategy("r1", {"organizations": [10, 11], "users": [20], "tickets": []})
    assert strategy.matches(org("anything", remote_id=10))
    assert not strategy.matches(org("Demo Org 1 (r1)", remote_id=12))
    assert not strategy.matches(ticket("Issue 1 (r1)", remote_id=10))
    assert "manifest of r1" in strategy.describe()


def test_classifier_filters_listing():
    listing = [
        org("Demo Org 1 (nodegen-1700000000000)", 1),
        org("Real Customer", 2),
        org("Demo Org 2 (nodegen-1700000000000)", 3),
    ]
    classifier = PatternClassifier(RunScopedStrategy(NAMING, RUN))
    assert [e.remote_id for e in classifier.classify(listing)] == [1, 3]


def test_classify_stream():
    async def source():
        yield org("Demo Org 1 (nodegen-1700000000000)", 1)
        yield org("Other", 2)

    async def collect():
        classifier = PatternClassifier(HeuristicStrategy(NAMING))
        return [e.remote_id async for e in classifier.classify_stream(source())]

    assert asyncio.run(collect()) == [1]


def test_build_strategy_requires_explicit_inputs():
    assert build_strategy("run", NAMING, run=RUN).name == "run"
    assert build_strategy("heuristic", NAMING, min_token_digits=10).min_token_digits == 10
    assert build_strategy("manifest", NAMING, run=RUN, manifest={"users": [1]}).name == "manifest"
    with pytest.raises(ValueError):
        build_strategy("run", NAMING)
    with pytest.raises(ValueError):
        build_strategy("manifest", NAMING, run=RUN)
    with pytest.raises(ValueError):
        build_strategy("everything", NAMING)
