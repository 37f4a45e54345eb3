from typing import Optional


class TimelineError(Exception):
    """Base class for errors raised by the timeline engine and its tools."""


class MappingError(TimelineError):
    """A raw work item could not be normalized into a Task.

    Raised per item; callers skip the item and keep going.
    """

    def __init__(self, message: str, item_ref: Optional[str] = None):
        super().__init__(message)
        self.item_ref = item_ref


class ScopeError(TimelineError):
    """A request does not name a usable project (blank id, malformed issue key)."""


class YouTrackAPIError(TimelineError):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"YouTrack API Error ({status_code}): {message}")
        self.status_code = status_code
