"""Interactive terminal dashboard for the xint command line."""

from .actions import ACTIONS, Action, best_match, normalize, score
from .dashboard import Dashboard
from .models import RunPhase, SessionState, Tab, UiState

__all__ = [
    "ACTIONS",
    "Action",
    "Dashboard",
    "RunPhase",
    "SessionState",
    "Tab",
    "UiState",
    "best_match",
    "normalize",
    "score",
]
