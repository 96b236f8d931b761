#!/usr/bin/env python3
"""Security validation utilities for github-gitlab-sync."""

import os
import re
from typing import List, Optional


class SecurityValidator:
    """Security validation utilities for input sanitization and validation."""

    MAX_REPO_NAME_LENGTH = 100
    MAX_URL_LENGTH = 2048
    MAX_USERNAME_LENGTH = 39
    MAX_HOSTNAME_LENGTH = 253
    MAX_NAMESPACE_LENGTH = 255
    MAX_PATH_LENGTH = 500

    SAFE_REPO_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
    # GitHub logins: alphanumerics and single hyphens, no leading hyphen
    SAFE_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?$")
    SAFE_NAMESPACE_PATTERN = re.compile(r"^[A-Za-z0-9._/-]+$")
    SAFE_HOSTNAME_PATTERN = re.compile(
        r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?"
        r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)*(?::\d{1,5})?$"
    )

    @staticmethod
    def _has_control_chars(value: str) -> bool:
        return "\x00" in value or any(ord(c) < 32 for c in value)

    @classmethod
    def validate_repo_name(cls, name: str) -> str:
        """Validate a GitHub repository name before it is used as a path."""
        if not name or not isinstance(name, str):
            raise ValueError("Repository name must be a non-empty string")

        if len(name) > cls.MAX_REPO_NAME_LENGTH:
            raise ValueError(
                f"Repository name exceeds maximum length of {cls.MAX_REPO_NAME_LENGTH}"
            )

        # The name becomes a directory under the work dir
        if name in (".", "..") or "/" in name or "\\" in name:
            raise ValueError("Repository name contains invalid path characters")

        if cls._has_control_chars(name):
            raise ValueError(
                "Repository name contains null bytes or control characters"
            )

        if not cls.SAFE_REPO_NAME_PATTERN.match(name):
            raise ValueError("Repository name contains invalid characters")

        return name

    @classmethod
    def validate_url(cls, url: str, allowed_schemes: Optional[List[str]] = None) -> str:
        """Validate URL for security."""
        if not url or not isinstance(url, str):
            raise ValueError("URL must be a non-empty string")

        if len(url) > cls.MAX_URL_LENGTH:
            raise ValueError(f"URL exceeds maximum length of {cls.MAX_URL_LENGTH}")

        if "\x00" in url or any(ord(c) < 32 for c in url if c not in "\t\n\r"):
            raise ValueError("URL contains null bytes or control characters")

        if not (url.startswith(("http://", "https://")) or url.startswith("git@")):
            raise ValueError("URL must use http, https, or SSH (git@) scheme")

        if allowed_schemes:
            if url.startswith("git@"):
                scheme = "ssh"
            else:
                scheme = url.split("://")[0].lower()
            if scheme not in allowed_schemes:
                raise ValueError(
                    f"URL scheme '{scheme}' not in allowed schemes: {allowed_schemes}"
                )

        return url

    @classmethod
    def validate_hostname(cls, host: str) -> str:
        """Validate a bare host name (optionally with port), e.g. gitlab.com."""
        if not host or not isinstance(host, str):
            raise ValueError("Host must be a non-empty string")

        if len(host) > cls.MAX_HOSTNAME_LENGTH:
            raise ValueError(
                f"Host exceeds maximum length of {cls.MAX_HOSTNAME_LENGTH}"
            )

        if "://" in host:
            raise ValueError("Host must not include a scheme (use e.g. gitlab.com)")

        if not cls.SAFE_HOSTNAME_PATTERN.match(host):
            raise ValueError("Host contains invalid characters")

        return host.lower()

    @classmethod
    def validate_username(cls, username: str) -> str:
        """Validate a GitHub user or organization login."""
        if not username or not isinstance(username, str):
            raise ValueError("Username must be a non-empty string")

        if len(username) > cls.MAX_USERNAME_LENGTH:
            raise ValueError(
                f"Username exceeds maximum length of {cls.MAX_USERNAME_LENGTH}"
            )

        if cls._has_control_chars(username):
            raise ValueError("Username contains null bytes or control characters")

        if not cls.SAFE_USERNAME_PATTERN.match(username):
            raise ValueError("Username contains invalid characters")

        return username

    @classmethod
    def validate_namespace(cls, namespace: str) -> str:
        """Validate a GitLab group path."""
        if not namespace or not isinstance(namespace, str):
            raise ValueError("Namespace must be a non-empty string")

        if len(namespace) > cls.MAX_NAMESPACE_LENGTH:
            raise ValueError(
                f"Namespace exceeds maximum length of {cls.MAX_NAMESPACE_LENGTH}"
            )

        if cls._has_control_chars(namespace):
            raise ValueError("Namespace contains null bytes or control characters")

        if ".." in namespace:
            raise ValueError("Namespace contains path traversal sequences")

        if namespace.startswith("/") or namespace.endswith("/"):
            raise ValueError("Namespace must not start or end with '/'")

        if not cls.SAFE_NAMESPACE_PATTERN.match(namespace):
            raise ValueError("Namespace contains invalid characters")

        return namespace

    @classmethod
    def validate_file_path(cls, path: str) -> str:
        """Validate file path for security."""
        if not path or not isinstance(path, str):
            raise ValueError("File path must be a non-empty string")

        if len(path) > cls.MAX_PATH_LENGTH:
            raise ValueError(
                f"File path exceeds maximum length of {cls.MAX_PATH_LENGTH}"
            )

        if "\x00" in path:
            raise ValueError("File path contains null bytes")

        if ".." in path.split(os.sep):
            raise ValueError("File path contains path traversal sequences")

        return os.path.normpath(path)

    @classmethod
    def sanitize_for_logging(cls, message: str) -> str:
        """Sanitize message for safe logging by removing potential credentials."""
        if not message:
            return message

        patterns = [
            (r"https://[^:/@\s]+:[^@\s]+@", "https://[REDACTED]@"),  # URLs with credentials
            # Assignments only, so prose such as "access token for" survives
            (r"(token|password)\s*[=:]\s*[A-Za-z0-9._~+/-]{4,}", r"\1=[REDACTED]"),
            (r"glpat-[A-Za-z0-9_-]+", "[GITLAB_TOKEN_REDACTED]"),
            (r"github_pat_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # fine-grained
            (r"gh[pousr]_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),
        ]

        sanitized = message
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized
