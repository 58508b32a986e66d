#!/usr/bin/env python3
"""Run the shvss server."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from shvss.cli import main


if __name__ == "__main__":
    sys.exit(main())
