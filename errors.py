#!/usr/bin/env python3
"""Exception types raised by github-gitlab-sync components."""

from __future__ import annotations

from typing import Optional


class SyncError(Exception):
    """Base class for all sync errors.

    ``hint`` carries an operator-facing remediation message, printed
    alongside the error when the failure is fatal.
    """

    def __init__(self, message: str, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.hint = hint


class MissingDependencyError(SyncError):
    """A required external tool is not installed."""


class AuthenticationError(SyncError):
    """Credentials for a hosting service are missing or rejected."""


class SourceUnavailableError(SyncError):
    """The GitHub API could not be reached or returned an error."""


class DestinationUnavailableError(SyncError):
    """The GitLab API returned an error other than "not found"."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message, hint)
        self.status_code = status_code


class NamespaceError(SyncError):
    """The destination group does not exist and could not be created."""


class CreationError(SyncError):
    """A destination project could not be created."""


class MirrorError(SyncError):
    """A git clone, fetch or push failed."""
