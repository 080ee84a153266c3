"""Remote analysis package.

The console never inspects frames itself. `RemoteAnalysisClient` sends a
JPEG frame to a hosted Gemini model for a structured hazard assessment and
asks the same model for a short safety directive. `AnalysisScheduler`
captures the frame, runs both requests and publishes an `AnalysisReport`
for the console to fold into its state.
"""

from .gemini_client import AnalysisResult, RemoteAnalysisClient, parse_analysis
from .scheduler import (
    AnalysisReport,
    AnalysisScheduler,
    CycleGuard,
    CycleOutcome,
    CycleState,
    fold_report,
)

__all__ = [
    "AnalysisResult",
    "RemoteAnalysisClient",
    "parse_analysis",
    "AnalysisReport",
    "AnalysisScheduler",
    "CycleGuard",
    "CycleOutcome",
    "CycleState",
    "fold_report",
]
