"""Entry point for running the expvar proxy from a checkout."""

from __future__ import annotations

import sys

from expvar_proxy.cli import main


if __name__ == "__main__":
    if len(sys.argv) == 1:
        sys.argv.append("serve")
    main()
