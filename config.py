#!/usr/bin/env python3
"""Configuration dataclasses for github-gitlab-sync."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CloneMethod(Enum):
    """Enumeration for git clone/push methods."""
    HTTPS = "https"
    SSH = "ssh"


class Visibility(Enum):
    """Enumeration for GitLab visibility levels."""
    PRIVATE = "private"
    PUBLIC = "public"

    @classmethod
    def from_private_flag(cls, is_private: bool) -> "Visibility":
        return cls.PRIVATE if is_private else cls.PUBLIC


@dataclass(frozen=True)
class GitHubConfig:
    """GitHub (source) configuration."""
    api_url: str
    token: str
    user: Optional[str] = None


@dataclass(frozen=True)
class GitLabConfig:
    """GitLab (destination) configuration."""
    host: str
    token: str
    group: str

    @property
    def url(self) -> str:
        return f"https://{self.host}"


@dataclass(frozen=True)
class FilterConfig:
    """Repository inclusion filters."""
    include_forks: bool = False
    include_archived: bool = False


@dataclass(frozen=True)
class GitOperationConfig:
    """Git operation configuration."""
    work_dir: str
    clone_method: CloneMethod = CloneMethod.SSH
    push_method: CloneMethod = CloneMethod.SSH
    creation_delay_s: float = 1.0
    git_timeout_s: Optional[float] = None


@dataclass(frozen=True)
class SyncBehaviorConfig:
    """Sync behavior configuration."""
    dry_run: bool = False
    fail_on_error: bool = False


@dataclass(frozen=True)
class Config:
    """Main configuration for GitHub-to-GitLab sync."""
    github: GitHubConfig
    gitlab: GitLabConfig
    filters: FilterConfig
    git: GitOperationConfig
    behavior: SyncBehaviorConfig
