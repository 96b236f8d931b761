#!/usr/bin/env python3
"""Local mirror cache and git clone/fetch/push for one repository at a time."""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from typing import Dict, List, Optional

from errors import MirrorError
from logging_utils import Logger
from security import SecurityValidator

REMOTE_NAME = "gitlab"
SOURCE_REMOTE = "origin"


@dataclass(frozen=True)
class GitCredentials:
    """Username/token pair handed to git through GIT_ASKPASS for HTTPS URLs."""
    username: str
    token: str


class MirrorEngine:
    """Keeps ``<work_dir>/<name>.git`` bare mirrors and pushes them to GitLab.

    The mirror directories are a cache: they survive across runs so repeat
    syncs only transfer new objects, and an interrupted clone is simply
    cloned again.
    """

    def __init__(
        self,
        work_dir: str,
        *,
        dry_run: bool = False,
        source_credentials: Optional[GitCredentials] = None,
        destination_credentials: Optional[GitCredentials] = None,
        timeout_s: Optional[float] = None,
    ) -> None:
        self.work_dir = work_dir
        self.dry_run = dry_run
        self.source_credentials = source_credentials
        self.destination_credentials = destination_credentials
        self.timeout_s = timeout_s

    def repo_dir(self, name: str) -> str:
        return os.path.join(self.work_dir, f"{name}.git")

    def mirror(self, name: str, source_url: str, destination_url: str) -> None:
        """Refresh the local mirror of ``name`` and push every ref to GitLab."""
        Logger.info(f"mirroring: {name}")
        if self.dry_run:
            Logger.info(f"[DRY RUN] would mirror {source_url} -> {destination_url}")
            return

        repo_dir = self.repo_dir(name)
        try:
            os.makedirs(self.work_dir, exist_ok=True)
            self._acquire(name, source_url, repo_dir)
            self._bind_remote(repo_dir, destination_url)
            Logger.info(f"pushing to GitLab: {name}")
            self._git(
                ["push", "--mirror", REMOTE_NAME],
                cwd=repo_dir,
                credentials=self._credentials_for(
                    destination_url, self.destination_credentials
                ),
            )
        except OSError as e:
            raise MirrorError(f"failed to prepare mirror for '{name}': {e}") from e
        Logger.success(f"successfully mirrored {name}")

    def _acquire(self, name: str, source_url: str, repo_dir: str) -> None:
        credentials = self._credentials_for(source_url, self.source_credentials)
        if os.path.isdir(repo_dir) and not self._is_git_dir(repo_dir):
            Logger.warn(f"removing incomplete mirror for {name}")
            shutil.rmtree(repo_dir)

        if os.path.isdir(repo_dir):
            Logger.info(f"updating existing mirror for {name}...")
            self._bind_source(repo_dir, source_url)
            self._git(["fetch", "--all", "--prune"], cwd=repo_dir, credentials=credentials)
        else:
            Logger.info(f"creating new mirror for {name}...")
            self._git(
                ["clone", "--mirror", source_url, repo_dir],
                cwd=self.work_dir,
                credentials=credentials,
            )

    def _bind_source(self, repo_dir: str, source_url: str) -> None:
        # Clone method or account may have changed since the mirror was cloned
        current = self._git_output(["remote", "get-url", SOURCE_REMOTE], cwd=repo_dir)
        if current is None:
            self._git(
                ["remote", "add", "--mirror=fetch", SOURCE_REMOTE, source_url],
                cwd=repo_dir,
            )
        elif current != source_url:
            Logger.info(f"updating {SOURCE_REMOTE} remote URL")
            self._git(["remote", "set-url", SOURCE_REMOTE, source_url], cwd=repo_dir)

    def _bind_remote(self, repo_dir: str, destination_url: str) -> None:
        current = self._git_output(["remote", "get-url", REMOTE_NAME], cwd=repo_dir)
        if current is None:
            self._git(["remote", "add", REMOTE_NAME, destination_url], cwd=repo_dir)
        elif current != destination_url:
            Logger.info(f"updating {REMOTE_NAME} remote URL")
            self._git(["remote", "set-url", REMOTE_NAME, destination_url], cwd=repo_dir)
        # Refreshes only fetch from the source
        self._git(
            ["config", f"remote.{REMOTE_NAME}.skipFetchAll", "true"], cwd=repo_dir
        )

    def _is_git_dir(self, repo_dir: str) -> bool:
        git_dir = self._git_output(["rev-parse", "--absolute-git-dir"], cwd=repo_dir)
        if git_dir is None:
            return False
        # A parent checkout enclosing the work dir does not count
        return os.path.realpath(git_dir) == os.path.realpath(repo_dir)

    @staticmethod
    def _credentials_for(
        url: str, credentials: Optional[GitCredentials]
    ) -> Optional[GitCredentials]:
        if credentials and url.startswith("https://"):
            return credentials
        return None

    def _git_output(self, args: List[str], cwd: str) -> Optional[str]:
        """Run a local git query; return stripped stdout or None on failure."""
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            env=self._base_env(),
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def _git(
        self,
        args: List[str],
        cwd: str,
        credentials: Optional[GitCredentials] = None,
    ) -> None:
        env = self._base_env()
        askpass_script: Optional[str] = None
        command = "git " + args[0]
        try:
            if credentials:
                askpass_script = _create_askpass_script(
                    credentials.username, credentials.token
                )
                env["GIT_ASKPASS"] = askpass_script
            subprocess.run(
                ["git", *args],
                cwd=cwd,
                check=True,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
                env=env,
            )
        except subprocess.TimeoutExpired as e:
            Logger.security_event("GIT_TIMEOUT", f"{command} timed out in {cwd}")
            raise MirrorError(f"{command} timed out after {self.timeout_s}s") from e
        except subprocess.CalledProcessError as e:
            safe_stderr = SecurityValidator.sanitize_for_logging(
                (e.stderr or e.stdout or "").strip()
            )
            raise MirrorError(
                f"{command} failed (exit {e.returncode}): {safe_stderr}"
            ) from e
        finally:
            _cleanup_askpass_script(askpass_script)

    @staticmethod
    def _base_env() -> Dict[str, str]:
        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"
        return env


def _create_askpass_script(username: str, password: str) -> str:
    """Create a temporary askpass script for secure credential injection."""
    fd, path = tempfile.mkstemp(prefix="ggs_askpass_", text=True)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as script:
            script.write("#!/bin/sh\n")
            script.write("case \"$1\" in\n")
            script.write(f"  *Username*) echo '{username}' ;;\n")
            script.write(f"  *Password*) echo '{password}' ;;\n")
            script.write("  *) exit 1 ;;\n")
            script.write("esac\n")
        os.chmod(path, 0o700)
    except OSError:
        os.unlink(path)
        raise
    return path


def _cleanup_askpass_script(path: Optional[str]) -> None:
    """Remove temporary askpass script if it exists."""
    if not path:
        return
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError as error:
        Logger.warn(f"failed to clean up temporary credential helper: {error}")
