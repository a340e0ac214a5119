"""a11y_scout.issues: issue trackers and idempotent issue filing."""
from a11y_scout.issues.dedup import IssueDeduplicator, issue_title
from a11y_scout.issues.tracker import build_tracker

__all__ = ["IssueDeduplicator", "issue_title", "build_tracker"]
