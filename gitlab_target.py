#!/usr/bin/env python3
"""GitLab destination: group, project existence and project creation."""

from __future__ import annotations

from typing import Any, Dict, Optional

from config import CloneMethod, GitLabConfig, Visibility
from errors import CreationError, DestinationUnavailableError, NamespaceError
from gitlab_api import DestinationApi
from logging_utils import Logger
from utils import encode_path, project_path


class GitLabTarget:
    """Ensures the destination group and projects exist before mirroring."""

    def __init__(
        self,
        config: GitLabConfig,
        api: DestinationApi,
        *,
        dry_run: bool = False,
        push_method: CloneMethod = CloneMethod.SSH,
    ) -> None:
        self.config = config
        self.api = api
        self.dry_run = dry_run
        self.push_method = push_method
        self._namespace_id: Optional[int] = None

    def connect(self) -> None:
        self.api.check_auth()

    def _group_resource(self) -> str:
        return f"groups/{encode_path(self.config.group)}"

    def ensure_namespace(self) -> None:
        """Make sure the destination group exists; raise NamespaceError if not."""
        group = self.config.group
        Logger.info(f"checking if GitLab group '{group}' exists...")
        try:
            lookup = self.api.get_resource(self._group_resource())
        except DestinationUnavailableError as e:
            raise NamespaceError(
                f"failed to look up GitLab group '{group}': {e}",
                hint="check GITLAB_HOST and network access to the GitLab API",
            ) from e

        if lookup.found:
            self._namespace_id = lookup.data.get("id")
            Logger.success(f"GitLab group '{group}' exists")
            return

        Logger.warn(f"GitLab group '{group}' not found")
        if self.dry_run:
            Logger.info(f"[DRY RUN] would create GitLab group '{group}'")
            return

        Logger.info(f"creating GitLab group '{group}'...")
        try:
            created = self.api.post_resource(
                "groups",
                {"name": group, "path": group, "visibility": Visibility.PRIVATE.value},
            )
        except DestinationUnavailableError as e:
            raise NamespaceError(
                f"failed to create GitLab group '{group}': {e}",
                hint=(
                    "create the group manually, or use a token allowed to "
                    "create groups on this instance"
                ),
            ) from e
        self._namespace_id = created.get("id")
        Logger.success(f"created GitLab group '{group}'")

    def namespace_id(self) -> int:
        """Return the numeric id of the destination group, looking it up once."""
        if self._namespace_id is None:
            lookup = self.api.get_resource(self._group_resource())
            if not lookup.found or lookup.data.get("id") is None:
                raise CreationError(f"GitLab group '{self.config.group}' not found")
            self._namespace_id = lookup.data["id"]
        return self._namespace_id

    def repo_exists(self, name: str) -> bool:
        """Return whether ``<group>/<path>`` exists.

        Raises DestinationUnavailableError for anything but a clean 404.
        """
        resource = f"projects/{encode_path(self.config.group, project_path(name))}"
        return self.api.get_resource(resource).found

    def create_repo(self, name: str, description: str, is_private: bool) -> None:
        visibility = Visibility.from_private_flag(is_private)
        full_name = f"{self.config.group}/{project_path(name)}"
        Logger.info(f"creating GitLab repository: {full_name} ({visibility.value})")

        if self.dry_run:
            Logger.info(f"[DRY RUN] would create GitLab repo '{full_name}'")
            return

        try:
            fields: Dict[str, Any] = {
                "name": name,
                "path": project_path(name),
                "namespace_id": self.namespace_id(),
                "visibility": visibility.value,
                "description": description or "",
                # Mirror push needs an empty project
                "initialize_with_readme": False,
            }
            self.api.post_resource("projects", fields)
        except DestinationUnavailableError as e:
            raise CreationError(f"failed to create GitLab repo '{full_name}': {e}") from e
        Logger.success(f"created GitLab repo: {full_name}")

    def push_url(self, name: str) -> str:
        """Get GitLab remote URL based on push method."""
        path = f"{self.config.group}/{project_path(name)}.git"
        if self.push_method == CloneMethod.SSH:
            host = self.config.host.split(":", 1)[0]
            return f"git@{host}:{path}"
        return f"https://{self.config.host}/{path}"
