"""Exceptions raised at the orchestration seam.

Pure engine functions never raise for malformed request data; they report
problems as errors/warnings in their results instead.
"""


class ProcurementEngineError(Exception):
    """Base class for engine errors."""


class RequestNotFoundError(ProcurementEngineError, LookupError):
    """One or more requested ids could not be resolved by the repository."""

    def __init__(self, missing_ids: list):
        self.missing_ids = list(missing_ids)
        super().__init__(f"Requests not found: {', '.join(str(i) for i in self.missing_ids)}")


class CombinationBlockedError(ProcurementEngineError, ValueError):
    """A combination plan with blocking reasons was submitted."""

    def __init__(self, reasons: list[str]):
        self.reasons = list(reasons)
        super().__init__("; ".join(self.reasons) or "Combination is blocked")
