"""
CLI entry point for volume-bot.

This module enables running the CLI via ``python -m volume_bot.cli``.

Usage::

    volume-bot run --token 0xabc... --seed 7 --burst
    volume-bot patterns --format json

Exit Codes
----------
- 0: Success (including risk-limit emergency stops)
- 1: Runtime error
- 2: Configuration or startup error
"""

from __future__ import annotations

import sys

from . import main

if __name__ == "__main__":
    sys.exit(main())
