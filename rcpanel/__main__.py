"""
RCPanel - Module Entry Point

Allows running the panel with `python -m rcpanel`.
"""

import sys

from rcpanel.cli import main

if __name__ == "__main__":
    sys.exit(main())
