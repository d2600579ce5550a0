"""Application exception classes."""


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class TerminalStateError(Exception):
    """Raised when raw terminal mode is entered twice or released while inactive."""


class DashboardError(Exception):
    """Base for conditions the dashboard loop reports and recovers from."""


class InputRequiredError(DashboardError):
    """Raised when a required prompt is left blank."""

    def __init__(self, label: str) -> None:
        super().__init__(f"{label} is required.")
        self.label = label


class InputCancelledError(DashboardError):
    """Raised when the operator escapes out of an action's prompt."""

    def __init__(self, label: str) -> None:
        super().__init__(f"{label} cancelled.")
        self.label = label


class PlanBuildError(DashboardError):
    """Raised when an action and its argument cannot become a command line."""


class RunnerError(DashboardError):
    """Raised when the child process cannot be spawned."""
