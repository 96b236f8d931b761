#!/usr/bin/env python3
"""
GitHub GitLab Sync - Mirror all repositories of a GitHub account into a
GitLab group.

Every repository owned by the GitHub user (or organization) is cloned as a
bare mirror into a local work directory, the matching GitLab project is
created if needed, and all refs are pushed with `git push --mirror`. Local
mirrors are kept between runs so repeated syncs only fetch new objects.
It is a one-way sync meant to run from cron or a scheduled container.

Copyright (c) 2025 Michele Tavella <meeghele@proton.me>
Licensed under the MIT License. See LICENSE file for details.

Author: Michele Tavella <meeghele@proton.me>
License: MIT
"""

from __future__ import annotations

import sys
from typing import NoReturn

from argument_parser import parse_arguments
from sync_orchestrator import SyncOrchestrator


def main() -> NoReturn:
    cfg = parse_arguments()
    orchestrator = SyncOrchestrator(cfg)
    sys.exit(orchestrator.run())


if __name__ == "__main__":
    main()
