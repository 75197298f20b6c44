"""Pattern orchestration and the volume generation loop."""

from .engine import EngineState, RunSummary, StopReason, VolumeBot
from .orchestrator import PatternOutcome, TradeOrchestrator

__all__ = [
    "EngineState",
    "PatternOutcome",
    "RunSummary",
    "StopReason",
    "TradeOrchestrator",
    "VolumeBot",
]
