"""Package entry point.

This module enables running the project with:

    python -m ourpkgversion --dist-version 1.02 [files...]
"""

from __future__ import annotations

import sys

from ourpkgversion.cli import main

if __name__ == "__main__":
    sys.exit(main())
