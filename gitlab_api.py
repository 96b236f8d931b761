#!/usr/bin/env python3
"""Thin GitLab REST wrapper used by the destination components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol

import gitlab
import requests

from config import GitLabConfig
from errors import AuthenticationError, DestinationUnavailableError
from logging_utils import Logger
from utils import RateLimiter

HTTP_NOT_FOUND = 404


class LookupStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Lookup:
    """Tagged result of a GET: found with a payload, or not found.

    Errors other than "not found" are raised, never folded into this type.
    """
    status: LookupStatus
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @classmethod
    def of(cls, data: Dict[str, Any]) -> "Lookup":
        return cls(LookupStatus.FOUND, dict(data))

    @classmethod
    def not_found(cls) -> "Lookup":
        return cls(LookupStatus.NOT_FOUND)


class DestinationApi(Protocol):
    """Capabilities the destination components need from GitLab."""

    def check_auth(self) -> None: ...

    def get_resource(self, path: str) -> Lookup: ...

    def post_resource(self, path: str, fields: Mapping[str, Any]) -> Dict[str, Any]: ...


class GitLabApi:
    """python-gitlab backed implementation of :class:`DestinationApi`."""

    def __init__(self, config: GitLabConfig) -> None:
        self.config = config
        self.api: Optional[gitlab.Gitlab] = None
        self.rate_limiter = RateLimiter(max_requests_per_minute=300)

    def _auth_hint(self) -> str:
        return (
            "export a GitLab personal access token with 'api' and "
            f"'write_repository' scopes for {self.config.host} as GITLAB_TOKEN "
            f"(e.g. after 'glab auth login -h {self.config.host}')"
        )

    def connect(self) -> None:
        if self.api is None:
            self.api = gitlab.Gitlab(
                url=self.config.url, private_token=self.config.token
            )

    def check_auth(self) -> None:
        Logger.info(f"checking GitLab authentication: {self.config.host}")
        self.connect()
        try:
            self.rate_limiter.wait_if_needed("GitLab API")
            self.api.auth()
        except gitlab.exceptions.GitlabAuthenticationError as e:
            raise AuthenticationError(
                f"not authenticated with GitLab ({self.config.host}): {e}",
                hint=self._auth_hint(),
            ) from e
        except (gitlab.exceptions.GitlabError, requests.RequestException) as e:
            raise DestinationUnavailableError(
                f"failed to contact GitLab API at {self.config.host}: {e}",
                status_code=getattr(e, "response_code", None),
            ) from e

        user = getattr(self.api, "user", None)
        username = getattr(user, "username", "?")
        Logger.success(f"authenticated with GitLab ({self.config.host}) as {username}")

    def get_resource(self, path: str) -> Lookup:
        self.connect()
        try:
            self.rate_limiter.wait_if_needed("GitLab API")
            data = self.api.http_get(f"/{path}")
        except gitlab.exceptions.GitlabError as e:
            if e.response_code == HTTP_NOT_FOUND:
                return Lookup.not_found()
            raise DestinationUnavailableError(
                f"GET {path} failed: {e}", status_code=e.response_code
            ) from e
        except requests.RequestException as e:
            raise DestinationUnavailableError(f"GET {path} failed: {e}") from e
        return Lookup.of(data if isinstance(data, dict) else {})

    def post_resource(self, path: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        self.connect()
        try:
            self.rate_limiter.wait_if_needed("GitLab API")
            data = self.api.http_post(f"/{path}", post_data=dict(fields))
        except gitlab.exceptions.GitlabError as e:
            raise DestinationUnavailableError(
                f"POST {path} failed: {e}", status_code=e.response_code
            ) from e
        except requests.RequestException as e:
            raise DestinationUnavailableError(f"POST {path} failed: {e}") from e
        return data if isinstance(data, dict) else {}
