"""
Sync outcome models.

This module defines Pydantic models describing what happened to each
document during a run, so commands can report and exit consistently.
"""

from enum import Enum

from pydantic import BaseModel, Field, computed_field


class OutcomeStatus(str, Enum):
    """What a sync run did with one document."""

    SYNCED = "synced"
    CACHED = "cached"
    PENDING = "pending"
    FAILED = "failed"
    SKIPPED = "skipped"


class DocumentOutcome(BaseModel):
    """Result of syncing a single document."""

    path: str = Field(description="Path of the document, as given on the command line")
    status: OutcomeStatus = Field(description="What happened to the document")
    identifier: str | None = Field(
        default=None,
        description="Store identifier of the record, if one was committed or cached",
    )
    error: str | None = Field(
        default=None,
        description="Error message for failed or skipped documents",
    )
    code: str | None = Field(
        default=None,
        description="Stable error code (e.g. 'missing_guid')",
    )


class SyncReport(BaseModel):
    """
    Outcomes of one run, in the order documents were processed.

    Example:
        >>> report = SyncReport()
        >>> report.add(DocumentOutcome(path="a.md", status=OutcomeStatus.SYNCED, identifier="1"))
        >>> report.synced, report.failed
        (1, 0)
    """

    outcomes: list[DocumentOutcome] = Field(default_factory=list)
    followup_errors: list[str] = Field(
        default_factory=list,
        description="Messages of deferred follow-ups (links, option mirrors) that failed",
    )

    def add(self, outcome: DocumentOutcome) -> None:
        """Append an outcome."""
        self.outcomes.append(outcome)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @computed_field
    @property
    def synced(self) -> int:
        """Documents committed during this run."""
        return self._count(OutcomeStatus.SYNCED)

    @computed_field
    @property
    def cached(self) -> int:
        """Documents skipped because their state was already stored."""
        return self._count(OutcomeStatus.CACHED)

    @computed_field
    @property
    def failed(self) -> int:
        """Documents that could not be synced."""
        return self._count(OutcomeStatus.FAILED)

    @property
    def ok(self) -> bool:
        """True if no document and no follow-up failed."""
        return self.failed == 0 and not self.followup_errors
