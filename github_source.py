#!/usr/bin/env python3
"""GitHub API wrapper for listing the repositories to mirror."""

from __future__ import annotations

from itertools import islice
from typing import TYPE_CHECKING, Iterable, List, Optional

import github
import requests

if TYPE_CHECKING:
    from github.Repository import Repository

from config import CloneMethod, GitHubConfig
from errors import AuthenticationError, SourceUnavailableError
from logging_utils import Logger
from models import SourceRepository
from utils import RateLimiter

DEFAULT_API_URL = "https://api.github.com"

# Upper bound on repositories listed per run; deeper pagination is not needed
MAX_REPOSITORIES = 1000
PAGE_SIZE = 100

AUTH_HINT = (
    "export a GitHub personal access token with 'repo' scope as GITHUB_TOKEN "
    "(e.g. GITHUB_TOKEN=$(gh auth token) after 'gh auth login')"
)


class GitHubSource:
    """Wrapper around the GitHub API to enumerate source repositories."""

    def __init__(
        self, config: GitHubConfig, clone_method: CloneMethod = CloneMethod.SSH
    ) -> None:
        self.config = config
        self.clone_method = clone_method
        self.api: Optional[github.Github] = None
        self.login: Optional[str] = None
        self.rate_limiter = RateLimiter(max_requests_per_minute=60)

    def connect(self) -> None:
        """Create the API client and verify the token."""
        Logger.info(f"checking GitHub authentication: {self.config.api_url}")
        auth = github.Auth.Token(self.config.token)
        if self.config.api_url.rstrip("/") != DEFAULT_API_URL:
            self.api = github.Github(
                base_url=self.config.api_url, auth=auth, per_page=PAGE_SIZE
            )
        else:
            self.api = github.Github(auth=auth, per_page=PAGE_SIZE)

        try:
            self.rate_limiter.wait_if_needed("GitHub API")
            self.login = self.api.get_user().login
        except github.BadCredentialsException as e:
            raise AuthenticationError(
                "not authenticated with GitHub: token rejected", hint=AUTH_HINT
            ) from e
        except (github.GithubException, requests.RequestException) as e:
            raise SourceUnavailableError(f"failed to contact GitHub API: {e}") from e

        Logger.success(f"authenticated with GitHub as {self.login}")

    def list_repositories(self, user: Optional[str] = None) -> List[SourceRepository]:
        """Return repositories owned by ``user`` (default: authenticated user)."""
        if self.api is None:
            raise SourceUnavailableError("GitHub API not initialized")

        owner = user or self.login
        Logger.info(f"fetching GitHub repositories for: {owner}")
        try:
            repos = [
                self._to_source_repository(repo)
                for repo in islice(self._iter_repositories(user), MAX_REPOSITORIES)
            ]
        except github.BadCredentialsException as e:
            raise AuthenticationError(
                "not authenticated with GitHub: token rejected", hint=AUTH_HINT
            ) from e
        except github.UnknownObjectException as e:
            raise SourceUnavailableError(f"GitHub account '{owner}' not found") from e
        except (github.GithubException, requests.RequestException) as e:
            raise SourceUnavailableError(
                f"failed to list repositories for '{owner}': {e}"
            ) from e

        if len(repos) == MAX_REPOSITORIES:
            Logger.warn(
                f"listing capped at {MAX_REPOSITORIES} repositories; "
                "remaining repositories are not synced"
            )
        Logger.info(f"found {len(repos)} repositories")
        return repos

    def _iter_repositories(self, user: Optional[str]) -> Iterable["Repository"]:
        self.rate_limiter.wait_if_needed("GitHub API")
        if user is None or (self.login and user.lower() == self.login.lower()):
            # Authenticated listing includes private repositories
            return self.api.get_user().get_repos(affiliation="owner")

        account = self.api.get_user(user)
        if account.type == "Organization":
            self.rate_limiter.wait_if_needed("GitHub API")
            return self.api.get_organization(user).get_repos(type="all")
        return account.get_repos(type="owner")

    def _to_source_repository(self, repo: "Repository") -> SourceRepository:
        if self.clone_method == CloneMethod.SSH:
            clone_url = repo.ssh_url
        else:
            clone_url = repo.clone_url
        return SourceRepository(
            name=repo.name,
            clone_url=clone_url,
            is_fork=bool(repo.fork),
            is_archived=bool(repo.archived),
            is_private=bool(repo.private),
            description=repo.description or "",
        )
