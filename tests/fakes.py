"""In-memory stand-ins for GitHub, the GitLab API and the mirror engine."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from errors import DestinationUnavailableError, MirrorError
from gitlab_api import Lookup
from models import SourceRepository


class FakeGitHubSource:
    def __init__(self, repos: Optional[List[SourceRepository]] = None) -> None:
        self.repos = list(repos or [])
        self.connect_error: Optional[Exception] = None
        self.connected = False
        self.listed_for: List[Optional[str]] = []

    def connect(self) -> None:
        if self.connect_error:
            raise self.connect_error
        self.connected = True

    def list_repositories(self, user: Optional[str] = None) -> List[SourceRepository]:
        self.listed_for.append(user)
        return list(self.repos)


class FakeGitLabApi:
    """Keeps resources in a dict keyed by API path; records every POST."""

    def __init__(self) -> None:
        self.resources: Dict[str, Dict[str, Any]] = {}
        self.get_errors: Dict[str, int] = {}
        self.post_errors: Dict[str, int] = {}
        self.gets: List[str] = []
        self.posts: List[Tuple[str, Dict[str, Any]]] = []
        self.auth_error: Optional[Exception] = None
        self._next_id = 100

    def add_group(self, path: str, group_id: int = 7) -> None:
        self.resources[f"groups/{path.replace('/', '%2F')}"] = {
            "id": group_id,
            "full_path": path,
        }

    def add_project(self, group: str, path: str) -> None:
        self.resources[f"projects/{group}%2F{path}"] = {"path": path}

    def check_auth(self) -> None:
        if self.auth_error:
            raise self.auth_error

    def get_resource(self, path: str) -> Lookup:
        self.gets.append(path)
        if path in self.get_errors:
            raise DestinationUnavailableError(
                f"GET {path} failed", status_code=self.get_errors[path]
            )
        if path in self.resources:
            return Lookup.of(self.resources[path])
        return Lookup.not_found()

    def post_resource(self, path: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        if path in self.post_errors:
            raise DestinationUnavailableError(
                f"POST {path} failed", status_code=self.post_errors[path]
            )
        self.posts.append((path, dict(fields)))
        self._next_id += 1
        created = dict(fields, id=self._next_id)
        if path == "groups":
            self.add_group(fields["path"], self._next_id)
        elif path == "projects":
            group = next(
                data["full_path"]
                for data in self.resources.values()
                if data.get("id") == fields["namespace_id"]
            )
            self.add_project(group, fields["path"])
        return created


class FakeMirrorEngine:
    def __init__(self, failing: Optional[Set[str]] = None) -> None:
        self.failing = set(failing or ())
        self.calls: List[Tuple[str, str, str]] = []

    def mirror(self, name: str, source_url: str, destination_url: str) -> None:
        self.calls.append((name, source_url, destination_url))
        if name in self.failing:
            raise MirrorError(f"git push failed for {name}")

    @property
    def mirrored(self) -> List[str]:
        return [name for name, _src, _dst in self.calls]
