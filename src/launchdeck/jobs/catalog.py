"""In-memory job catalog with search/source filtering."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final, Literal

from launchdeck.jobs.models import JobSource, JobSummary

ALL_SOURCES: Final = "all"

SourceFilter = JobSource | Literal["all"]


def label_matches(*, search: str, summary: JobSummary) -> bool:
    """Check case-insensitive label substring match.

    Args:
        search: Search text; empty matches everything.
        summary: Candidate job summary.

    Returns:
        ``True`` when the label contains the search text.
    """
    if not search:
        return True
    return search.lower() in summary.label.lower()


def source_matches(*, source_filter: SourceFilter, summary: JobSummary) -> bool:
    """Check exact source match or the all-sources wildcard.

    Args:
        source_filter: Required source or ``"all"``.
        summary: Candidate job summary.

    Returns:
        ``True`` when the source constraint is satisfied.
    """
    if source_filter == ALL_SOURCES:
        return True
    return summary.source == source_filter


class JobCatalog:
    """Latest full job list plus independent search and source filters.

    The held list is an immutable tuple replaced whole on refresh; readers
    never observe a partially updated list.
    """

    def __init__(self) -> None:
        """Create an empty catalog with no filters applied."""
        self._jobs: tuple[JobSummary, ...] = ()
        self.search = ""
        self.source_filter: SourceFilter = ALL_SOURCES

    @property
    def jobs(self) -> tuple[JobSummary, ...]:
        """Return the full unfiltered snapshot."""
        return self._jobs

    def replace(self, summaries: Iterable[JobSummary]) -> None:
        """Swap in a new snapshot ordered by label.

        Args:
            summaries: Fresh job summaries from the boundary.
        """
        self._jobs = tuple(sorted(summaries, key=lambda item: item.label))

    def visible(self) -> tuple[JobSummary, ...]:
        """Return summaries passing both filters, recomputed on each call.

        Returns:
            Filtered snapshot subsequence.
        """
        search = self.search
        source_filter = self.source_filter
        return tuple(
            summary
            for summary in self._jobs
            if label_matches(search=search, summary=summary)
            and source_matches(source_filter=source_filter, summary=summary)
        )

    def find(self, label: str) -> JobSummary | None:
        """Look up one job by exact label in the full snapshot.

        Args:
            label: Job label.

        Returns:
            Matching summary, or ``None``.
        """
        for summary in self._jobs:
            if summary.label == label:
                return summary
        return None
