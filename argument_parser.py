#!/usr/bin/env python3
"""Command line argument parsing and configuration building."""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from config import (CloneMethod, Config, FilterConfig, GitHubConfig,
                    GitLabConfig, GitOperationConfig, SyncBehaviorConfig)
from github_source import DEFAULT_API_URL
from logging_utils import Logger
from security import SecurityValidator

# Exit codes
EXIT_AUTH_ERROR = 1
EXIT_INVALID_ARGUMENTS = 2

DEFAULT_GROUP = "github"
DEFAULT_HOST = "gitlab.com"
DEFAULT_WORK_DIR = "/tmp/github-mirror"

TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in TRUE_VALUES


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    # -h is taken by --gitlab-host, so help is --help only
    parser = argparse.ArgumentParser(
        description="Sync all GitHub repositories to a GitLab instance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog="""
Environment variables:
  GITHUB_TOKEN, GITLAB_TOKEN, GITLAB_GROUP, GITLAB_HOST, GITHUB_USER,
  WORK_DIR, INCLUDE_FORKS, INCLUDE_ARCHIVED, DRY_RUN, FAIL_ON_ERROR

Examples:
  %(prog)s -g github -h gitlab.example.com
  %(prog)s --include-forks --include-archived
  DRY_RUN=true %(prog)s
        """,
    )
    parser.add_argument(
        "--help",
        action="help",
        default=argparse.SUPPRESS,
        help="Show this help message and exit",
    )
    return parser


def _add_gitlab_arguments(parser: argparse.ArgumentParser) -> None:
    """Add GitLab-related arguments to parser."""
    parser.add_argument(
        "-g",
        "--gitlab-group",
        dest="gitlab_group",
        default=os.getenv("GITLAB_GROUP", DEFAULT_GROUP),
        help=f"GitLab group/namespace to sync to (default: {DEFAULT_GROUP})",
    )
    parser.add_argument(
        "-h",
        "--gitlab-host",
        dest="gitlab_host",
        default=os.getenv("GITLAB_HOST", DEFAULT_HOST),
        help=f"GitLab host (default: {DEFAULT_HOST})",
    )
    parser.add_argument(
        "--gitlab-token",
        dest="gitlab_token",
        help="GitLab API token (or set GITLAB_TOKEN env var)",
    )
    parser.add_argument(
        "--push-method",
        dest="push_method",
        choices=[method.value for method in CloneMethod],
        default=os.getenv("PUSH_METHOD", CloneMethod.SSH.value),
        help="Push method for the GitLab remote: https or ssh (default: ssh)",
    )


def _add_github_arguments(parser: argparse.ArgumentParser) -> None:
    """Add GitHub-related arguments to parser."""
    parser.add_argument(
        "-u",
        "--github-user",
        dest="github_user",
        default=os.getenv("GITHUB_USER") or None,
        help="GitHub user or organization (default: authenticated user)",
    )
    parser.add_argument(
        "--github-token",
        dest="github_token",
        help="GitHub API token (or set GITHUB_TOKEN env var)",
    )
    parser.add_argument(
        "--github-api",
        dest="github_api_url",
        default=os.getenv("GITHUB_API_URL", DEFAULT_API_URL),
        help=f"Base URL of the GitHub API (default: {DEFAULT_API_URL})",
    )
    parser.add_argument(
        "--clone-method",
        dest="clone_method",
        choices=[method.value for method in CloneMethod],
        default=os.getenv("CLONE_METHOD", CloneMethod.SSH.value),
        help="Clone method for GitHub sources: https or ssh (default: ssh)",
    )


def _add_behavior_arguments(parser: argparse.ArgumentParser) -> None:
    """Add behavior and configuration arguments to parser."""
    parser.add_argument(
        "-w",
        "--work-dir",
        dest="work_dir",
        default=os.getenv("WORK_DIR", DEFAULT_WORK_DIR),
        help=f"Working directory for mirror clones (default: {DEFAULT_WORK_DIR})",
    )
    parser.add_argument(
        "-f",
        "--include-forks",
        action="store_true",
        dest="include_forks",
        default=_env_flag("INCLUDE_FORKS"),
        help="Include forked repositories",
    )
    parser.add_argument(
        "-a",
        "--include-archived",
        action="store_true",
        dest="include_archived",
        default=_env_flag("INCLUDE_ARCHIVED"),
        help="Include archived repositories",
    )
    parser.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        dest="dry_run",
        default=_env_flag("DRY_RUN"),
        help="Show what would be done without doing it",
    )
    parser.add_argument(
        "--fail-on-error",
        action="store_true",
        dest="fail_on_error",
        default=_env_flag("FAIL_ON_ERROR"),
        help="Exit with status 3 when any repository failed to sync",
    )
    parser.add_argument(
        "--creation-delay",
        dest="creation_delay_s",
        type=float,
        default=os.getenv("CREATION_DELAY", "1.0"),
        help="Seconds to wait after creating a GitLab repo (default: 1.0)",
    )
    parser.add_argument(
        "--git-timeout",
        dest="git_timeout_s",
        type=float,
        default=os.getenv("GIT_TIMEOUT") or None,
        help="Timeout in seconds for each git command (default: none)",
    )


def _validate_parsed_arguments(args) -> None:
    """Validate and sanitize parsed arguments in place."""
    try:
        args.github_api_url = SecurityValidator.validate_url(
            args.github_api_url, ["https", "http"]
        ).rstrip("/")
        args.gitlab_host = SecurityValidator.validate_hostname(args.gitlab_host)
        args.gitlab_group = SecurityValidator.validate_namespace(args.gitlab_group)
        if args.github_user:
            args.github_user = SecurityValidator.validate_username(args.github_user)
        args.work_dir = SecurityValidator.validate_file_path(args.work_dir)

        if args.creation_delay_s < 0 or args.creation_delay_s > 300:
            raise ValueError("creation delay must be between 0 and 300 seconds")
        if args.git_timeout_s is not None and args.git_timeout_s <= 0:
            raise ValueError("git timeout must be a positive number of seconds")
        if args.clone_method not in [m.value for m in CloneMethod]:
            raise ValueError(f"unknown clone method: {args.clone_method}")
        if args.push_method not in [m.value for m in CloneMethod]:
            raise ValueError(f"unknown push method: {args.push_method}")

        Logger.security_event(
            "CONFIG_VALIDATION", "successfully validated all configuration inputs"
        )
    except ValueError as e:
        Logger.security_event(
            "CONFIG_VALIDATION_FAILED", f"configuration validation failed: {e}"
        )
        Logger.error(f"configuration validation error: {e}")
        sys.exit(EXIT_INVALID_ARGUMENTS)


def _get_tokens(args) -> tuple[str, str]:
    """Get authentication tokens from flags or the environment."""
    gh_token = args.github_token or os.getenv("GITHUB_TOKEN")
    gl_token = args.gitlab_token or os.getenv("GITLAB_TOKEN")
    if not gh_token:
        Logger.error(
            "not authenticated with GitHub: set GITHUB_TOKEN or --github-token "
            "(e.g. GITHUB_TOKEN=$(gh auth token) after 'gh auth login')"
        )
        sys.exit(EXIT_AUTH_ERROR)
    if not gl_token:
        Logger.error(
            f"not authenticated with GitLab ({args.gitlab_host}): set GITLAB_TOKEN "
            "or --gitlab-token with a personal access token for that host"
        )
        sys.exit(EXIT_AUTH_ERROR)
    return gh_token, gl_token


def parse_arguments(argv: Optional[List[str]] = None) -> Config:
    """Parse command line arguments and return configuration object."""
    parser = _create_argument_parser()
    _add_gitlab_arguments(parser)
    _add_github_arguments(parser)
    _add_behavior_arguments(parser)

    args = parser.parse_args(argv)
    _validate_parsed_arguments(args)
    gh_token, gl_token = _get_tokens(args)

    return Config(
        github=GitHubConfig(
            api_url=args.github_api_url,
            token=gh_token,
            user=args.github_user,
        ),
        gitlab=GitLabConfig(
            host=args.gitlab_host,
            token=gl_token,
            group=args.gitlab_group,
        ),
        filters=FilterConfig(
            include_forks=args.include_forks,
            include_archived=args.include_archived,
        ),
        git=GitOperationConfig(
            work_dir=args.work_dir,
            clone_method=CloneMethod(args.clone_method),
            push_method=CloneMethod(args.push_method),
            creation_delay_s=args.creation_delay_s,
            git_timeout_s=args.git_timeout_s,
        ),
        behavior=SyncBehaviorConfig(
            dry_run=args.dry_run,
            fail_on_error=args.fail_on_error,
        ),
    )
