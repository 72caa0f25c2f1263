"""Root of the tracker error hierarchy."""


class TrackerError(Exception):
    """Base class for every rule violation the tracker core reports.

    Subclasses set ``code``, the stable name callers branch on
    ("NotAMember", "Conflict", ...). The API maps codes to HTTP statuses in
    one place, so a new subclass needs a code and nothing else.

    Attributes:
        code: Machine-readable error code.
        retryable: True when the same call may succeed if repeated later.
    """

    code: str = "tracker_error"
    retryable: bool = False

    def __init__(self, message: str = "") -> None:
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={str(self)!r})"
