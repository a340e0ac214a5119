# File: tests/test_dedup.py
import pytest

from a11y_scout.audit.auditor import audit_failed_violation
from a11y_scout.issues.dedup import (
    CLEAN,
    CREATED,
    DRY_RUN,
    FAILED,
    MAX_BODY_CHARS,
    SKIPPED,
    IssueDeduplicator,
    build_issue,
    dedup_marker,
    issue_title,
)
from a11y_scout.models import PageReport
from conftest import InMemoryTracker, make_violation, url


def report_for(path, violations=None):
    return PageReport(url(path), [make_violation()] if violations is None else violations)


def test_issue_title_is_derived_from_path_only():
    assert issue_title(url("/contact")) == "Accessibility issues on /contact"
    assert issue_title(url("/contact?ref=nav#form")) == "Accessibility issues on /contact"
    assert issue_title("https://site.test") == "Accessibility issues on /"


def test_build_issue_embeds_report_and_marker():
    issue = build_issue(report_for("/contact"), ["accessibility", "a11y"])
    assert issue.title == "Accessibility issues on /contact"
    assert issue.labels == ("accessibility", "a11y")
    assert "## image-alt (critical)" in issue.body
    assert issue.body.rstrip().endswith(dedup_marker(url("/contact")))


def test_build_issue_truncates_huge_bodies():
    nodes = [f'<div id="n{i}">{"x" * 200}</div>' for i in range(1000)]
    issue = build_issue(report_for("/big", [make_violation(nodes=nodes)]), [])
    assert len(issue.body) <= MAX_BODY_CHARS
    assert "Report truncated" in issue.body
    assert dedup_marker(url("/big")) in issue.body


@pytest.mark.asyncio()
async def test_creates_issue_after_checking_tracker(tracker):
    dedup = IssueDeduplicator(tracker, ["accessibility"])
    outcome = await dedup.file(report_for("/contact"))

    assert outcome.status == CREATED
    assert outcome.issue_url == "https://tracker.test/issues/1"
    title = "Accessibility issues on /contact"
    assert tracker.calls == [f"find:{title}", f"create:{title}"]
    assert tracker.issues[0]["labels"] == ["accessibility"]


@pytest.mark.asyncio()
async def test_existing_open_issue_is_skipped(tracker):
    tracker.issues.append(
        {"title": "Accessibility issues on /contact", "body": "", "labels": [], "state": "open"}
    )
    dedup = IssueDeduplicator(tracker, ["accessibility"])
    outcome = await dedup.file(report_for("/contact"))
    assert outcome.status == SKIPPED
    assert len(tracker.issues) == 1


@pytest.mark.asyncio()
async def test_closed_issue_does_not_block_new_one(tracker):
    tracker.issues.append(
        {"title": "Accessibility issues on /contact", "body": "", "labels": [], "state": "closed"}
    )
    outcome = await IssueDeduplicator(tracker, []).file(report_for("/contact"))
    assert outcome.status == CREATED
    assert tracker.open_titles() == ["Accessibility issues on /contact"]


@pytest.mark.asyncio()
async def test_similar_titles_do_not_match(tracker):
    tracker.issues.append(
        {"title": "Accessibility issues on /contact/form", "body": "", "labels": [], "state": "open"}
    )
    outcome = await IssueDeduplicator(tracker, []).file(report_for("/contact"))
    assert outcome.status == CREATED


@pytest.mark.asyncio()
async def test_creation_failure_is_recorded_and_processing_continues():
    tracker = InMemoryTracker(fail_create={"Accessibility issues on /a"})
    dedup = IssueDeduplicator(tracker, [])

    first = await dedup.file(report_for("/a"))
    second = await dedup.file(report_for("/b"))

    assert first.status == FAILED
    assert "403" in first.error
    assert second.status == CREATED
    assert [o.status for o in dedup.outcomes] == [FAILED, CREATED]


@pytest.mark.asyncio()
async def test_failed_lookup_never_creates():
    tracker = InMemoryTracker(fail_find=True)
    outcome = await IssueDeduplicator(tracker, []).file(report_for("/a"))
    assert outcome.status == FAILED
    assert not any(c.startswith("create:") for c in tracker.calls)


@pytest.mark.asyncio()
async def test_clean_and_failed_audits_are_not_filed(tracker):
    dedup = IssueDeduplicator(tracker, [])
    clean = await dedup.file(report_for("/ok", []))
    broken = await dedup.file(report_for("/broken", [audit_failed_violation("HTTP 500")]))
    assert clean.status == CLEAN
    assert broken.status == CLEAN
    assert tracker.calls == []


@pytest.mark.asyncio()
async def test_audit_failures_can_be_filed_on_request(tracker):
    dedup = IssueDeduplicator(tracker, [], file_audit_failures=True)
    outcome = await dedup.file(report_for("/broken", [audit_failed_violation("HTTP 500")]))
    assert outcome.status == CREATED


@pytest.mark.asyncio()
async def test_dry_run_checks_but_never_creates(tracker):
    outcome = await IssueDeduplicator(tracker, [], dry_run=True).file(report_for("/a"))
    assert outcome.status == DRY_RUN
    assert tracker.calls == ["find:Accessibility issues on /a"]
    assert tracker.issues == []


@pytest.mark.asyncio()
async def test_same_path_with_different_query_is_filed_once(tracker):
    dedup = IssueDeduplicator(tracker, [])
    first = await dedup.file(report_for("/search?q=a"))
    second = await dedup.file(report_for("/search?q=b"))
    assert (first.status, second.status) == (CREATED, SKIPPED)
    assert len(tracker.issues) == 1
