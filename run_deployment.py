#!/usr/bin/env python3
"""Thin wrapper to run the token factory deployment and log outputs.

Parsing, configuration and execution live in the ``deployment_runner``
package.
"""

from __future__ import annotations

import sys

from deployment_runner.cli import main


if __name__ == "__main__":
    sys.exit(main())
