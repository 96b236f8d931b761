#!/usr/bin/env python3
"""Repository and outcome dataclasses for github-gitlab-sync."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List


@dataclass(frozen=True)
class SourceRepository:
    """Snapshot of one GitHub repository, fetched once per run."""
    name: str
    clone_url: str
    is_fork: bool = False
    is_archived: bool = False
    is_private: bool = False
    description: str = ""


class OutcomeStatus(Enum):
    SYNCED = "synced"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncOutcome:
    """Result of processing one repository."""
    name: str
    status: OutcomeStatus
    reason: str = ""

    @classmethod
    def synced(cls, name: str) -> "SyncOutcome":
        return cls(name, OutcomeStatus.SYNCED)

    @classmethod
    def skipped(cls, name: str, reason: str) -> "SyncOutcome":
        return cls(name, OutcomeStatus.SKIPPED, reason)

    @classmethod
    def failed(cls, name: str, reason: str) -> "SyncOutcome":
        return cls(name, OutcomeStatus.FAILED, reason)


@dataclass
class SyncSummary:
    """Counts for one run. total == synced + skipped + failed."""
    total: int = 0
    synced: int = 0
    skipped: int = 0
    failed: int = 0
    outcomes: List[SyncOutcome] = field(default_factory=list)

    def record(self, outcome: SyncOutcome) -> None:
        self.total += 1
        if outcome.status is OutcomeStatus.SYNCED:
            self.synced += 1
        elif outcome.status is OutcomeStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
        self.outcomes.append(outcome)

    @property
    def failures(self) -> List[SyncOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.FAILED]
