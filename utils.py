#!/usr/bin/env python3
"""Utility functions for github-gitlab-sync."""

import re
import threading
import time
from typing import List
from urllib.parse import quote

from logging_utils import Logger


class RateLimiter:
    """Rate limiter to prevent abuse and respect API limits."""

    def __init__(self, max_requests_per_minute: int = 60):
        self.max_requests = max_requests_per_minute
        self.requests: List[float] = []
        self.lock = threading.Lock()

    def wait_if_needed(self, operation_type: str = "API") -> None:
        """Wait if necessary to respect rate limits."""
        current_time = time.time()

        with self.lock:
            self._clean_old_requests(current_time)
            if len(self.requests) >= self.max_requests:
                wait_time = 60 - (current_time - self.requests[0])
                if wait_time > 0:
                    Logger.security_event(
                        "RATE_LIMIT_HIT",
                        f"rate limit reached for {operation_type}, "
                        f"waiting {wait_time:.2f}s",
                    )
                    time.sleep(wait_time)
                    current_time = time.time()
                    self._clean_old_requests(current_time)
            self.requests.append(current_time)

    def _clean_old_requests(self, current_time: float) -> None:
        """Remove requests older than 1 minute."""
        cutoff_time = current_time - 60
        self.requests = [
            req_time for req_time in self.requests if req_time > cutoff_time
        ]


def project_path(name: str) -> str:
    """Map a GitHub repository name to a GitLab project path.

    GitLab paths may not start or end with '.' or '-', nor end in '.git'
    or '.atom'. Valid GitHub names pass through unchanged.
    """
    path = re.sub(r"[^A-Za-z0-9._-]+", "-", name)
    path = re.sub(r"-+", "-", path)
    for suffix in (".git", ".atom"):
        if path.lower().endswith(suffix):
            path = path[: -len(suffix)]
    path = path.strip("-.")
    return path or "repo"


def encode_path(*segments: str) -> str:
    """Join path segments with '/' and percent-encode the result as one id.

    Example: ('github', 'demo') -> 'github%2Fdemo'
    """
    return quote("/".join(segments), safe="")
