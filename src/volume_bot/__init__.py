"""
volume-bot - pattern-driven trading volume generator

Runs weighted buy/sell patterns against a single asset until a volume target is reached,
tracking exposure, gas and P&L, and halting when risk limits are breached.
"""

from __future__ import annotations

__version__ = "1.0.0"

__all__ = ["__version__"]
