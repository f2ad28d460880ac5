"""Error taxonomy shared by the analytics services.

Only ``DataUnavailable`` and the ``*NotFound`` errors are meant to leave the
service layer; ``InsufficientData`` and ``DegenerateInput`` are raised by the
numeric helpers and handled by their callers, which degrade the result
instead of propagating NaN or Infinity.
"""


class AnalyticsError(Exception):
    """Base class for analytics errors."""


class DataUnavailable(AnalyticsError):
    """The data store was unreachable or a query failed."""


class InsufficientData(AnalyticsError):
    """Fewer data points than a computation needs."""

    def __init__(self, required: int, available: int, what: str = "points"):
        self.required = required
        self.available = available
        super().__init__(f"needs at least {required} {what}, got {available}")


class DegenerateInput(AnalyticsError):
    """Zero-variance, zero-total or zero-count input that has no defined ratio."""


class ABTestNotFound(AnalyticsError):
    def __init__(self, test_id: int):
        self.test_id = test_id
        super().__init__(f"A/B test {test_id} not found")


class GoalNotFound(AnalyticsError):
    def __init__(self, goal_id: int):
        self.goal_id = goal_id
        super().__init__(f"Donation goal {goal_id} not found")


class ABTestClosed(AnalyticsError):
    """Events can only be recorded against an active test."""

    def __init__(self, test_id: int, status: str):
        self.test_id = test_id
        self.status = status
        super().__init__(f"A/B test {test_id} is {status}; events are not accepted")
