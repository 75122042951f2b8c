#!/usr/bin/env python3
"""Run the rss_pipeline CLI from a source checkout without installing it."""
from __future__ import annotations

import sys

from rss_pipeline.cli.main import main as cli_main


if __name__ == "__main__":
    sys.exit(cli_main())
