#!/usr/bin/env python3
"""Main orchestrator for synchronizing GitHub repositories to a GitLab group."""

from __future__ import annotations

import shutil
import time
from typing import Dict, Iterable, Optional

from config import Config
from errors import MissingDependencyError, SyncError
from github_source import GitHubSource
from gitlab_api import GitLabApi
from gitlab_target import GitLabTarget
from logging_utils import Logger
from mirror_engine import GitCredentials, MirrorEngine
from models import SourceRepository, SyncOutcome, SyncSummary
from security import SecurityValidator
from utils import project_path

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1
EXIT_PARTIAL_FAILURE = 3

REQUIRED_TOOLS = ("git",)
BANNER = "=" * 41


class SyncOrchestrator:
    """Runs the filter -> ensure destination -> mirror pipeline per repository.

    Collaborators may be injected; by default they are built from ``cfg``.
    """

    def __init__(
        self,
        cfg: Config,
        source: Optional[GitHubSource] = None,
        target: Optional[GitLabTarget] = None,
        mirror: Optional[MirrorEngine] = None,
    ) -> None:
        self.cfg = cfg
        dry_run = cfg.behavior.dry_run
        self.gh = source or GitHubSource(cfg.github, cfg.git.clone_method)
        self.gl = target or GitLabTarget(
            cfg.gitlab,
            GitLabApi(cfg.gitlab),
            dry_run=dry_run,
            push_method=cfg.git.push_method,
        )
        self.mirror = mirror or MirrorEngine(
            cfg.git.work_dir,
            dry_run=dry_run,
            source_credentials=GitCredentials("x-access-token", cfg.github.token),
            destination_credentials=GitCredentials("oauth2", cfg.gitlab.token),
            timeout_s=cfg.git.git_timeout_s,
        )

    def run(self) -> int:
        self._log_configuration()
        try:
            self._check_dependencies()
            self.gh.connect()
            self.gl.connect()
            self.gl.ensure_namespace()
            repos = self.gh.list_repositories(self.cfg.github.user)
        except SyncError as e:
            Logger.error(f"fatal: {e}")
            if e.hint:
                Logger.error(f"hint: {e.hint}")
            return EXIT_EXECUTION_ERROR

        summary = self.sync_repositories(repos)
        self._log_summary(summary)

        if summary.failed and self.cfg.behavior.fail_on_error:
            return EXIT_PARTIAL_FAILURE
        Logger.success("sync complete!")
        return EXIT_SUCCESS

    def sync_repositories(self, repos: Iterable[SourceRepository]) -> SyncSummary:
        """Process every repository in order; never aborts on one failure."""
        summary = SyncSummary()
        claimed: Dict[str, str] = {}
        for repo in repos:
            outcome = self._process_repository(repo, claimed)
            summary.record(outcome)
        return summary

    def _skip_reason(self, repo: SourceRepository) -> Optional[str]:
        if repo.is_fork and not self.cfg.filters.include_forks:
            return "fork"
        if repo.is_archived and not self.cfg.filters.include_archived:
            return "archived"
        return None

    def _process_repository(
        self, repo: SourceRepository, claimed: Dict[str, str]
    ) -> SyncOutcome:
        reason = self._skip_reason(repo)
        if reason:
            Logger.warn(f"skipping {reason}: {repo.name}")
            return SyncOutcome.skipped(repo.name, reason)

        Logger.info(
            f"processing: {repo.name} (fork: {repo.is_fork}, "
            f"archived: {repo.is_archived}, private: {repo.is_private})"
        )
        try:
            SecurityValidator.validate_repo_name(repo.name)
        except ValueError as e:
            Logger.error(f"invalid repository name '{repo.name}': {e}")
            return SyncOutcome.failed(repo.name, str(e))

        # Distinct names such as "dotfiles" and ".dotfiles" share one GitLab path
        path = project_path(repo.name)
        owner = claimed.get(path)
        if owner is not None:
            reason = f"GitLab path '{path}' already used by '{owner}'"
            Logger.error(f"not mirroring {repo.name}: {reason}")
            return SyncOutcome.failed(repo.name, reason)
        claimed[path] = repo.name

        try:
            exists = self.gl.repo_exists(repo.name)
        except SyncError as e:
            Logger.error(f"failed to check GitLab repo '{repo.name}': {e}")
            return SyncOutcome.failed(repo.name, str(e))

        if exists:
            Logger.info(f"GitLab repo already exists: {self.cfg.gitlab.group}/{path}")
        else:
            try:
                self.gl.create_repo(repo.name, repo.description, repo.is_private)
            except SyncError as e:
                Logger.error(f"failed to create GitLab repo: {repo.name}: {e}")
                return SyncOutcome.failed(repo.name, str(e))
            if not self.cfg.behavior.dry_run and self.cfg.git.creation_delay_s > 0:
                # GitLab may not accept a push right after creation
                time.sleep(self.cfg.git.creation_delay_s)

        try:
            self.mirror.mirror(repo.name, repo.clone_url, self.gl.push_url(repo.name))
        except SyncError as e:
            Logger.error(f"failed to push {repo.name} to GitLab: {e}")
            return SyncOutcome.failed(repo.name, str(e))
        return SyncOutcome.synced(repo.name)

    def _check_dependencies(self) -> None:
        missing = [tool for tool in REQUIRED_TOOLS if shutil.which(tool) is None]
        if missing:
            raise MissingDependencyError(
                f"missing dependencies: {' '.join(missing)}",
                hint="install git and make sure it is on PATH",
            )

    def _log_configuration(self) -> None:
        Logger.info(BANNER)
        Logger.info("  GitHub -> GitLab Repository Sync")
        Logger.info(BANNER)
        if self.cfg.behavior.dry_run:
            Logger.warn("running in DRY RUN mode - no changes will be made")
        Logger.info("configuration:")
        Logger.info(f"  GitLab host: {self.cfg.gitlab.host}")
        Logger.info(f"  GitLab group: {self.cfg.gitlab.group}")
        Logger.info(f"  GitHub user: {self.cfg.github.user or '(authenticated user)'}")
        Logger.info(f"  include forks: {self.cfg.filters.include_forks}")
        Logger.info(f"  include archived: {self.cfg.filters.include_archived}")
        Logger.info(f"  work directory: {self.cfg.git.work_dir}")

    def _log_summary(self, summary: SyncSummary) -> None:
        Logger.info(BANNER)
        Logger.info("sync summary:")
        Logger.info(f"  Total repositories: {summary.total}")
        Logger.info(f"  Successfully synced: {summary.synced}")
        Logger.info(f"  Skipped: {summary.skipped}")
        Logger.info(f"  Failed: {summary.failed}")
        for outcome in summary.failures:
            Logger.error(f"  failed: {outcome.name}: {outcome.reason}")
        Logger.info(BANNER)
