"""Custom exceptions for centralized error handling."""

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class LottoError(Exception):
    """Base application error."""

    code: str
    message: str
    status_code: int
    details: Any | None = None

    def __str__(self) -> str:
        return self.message


class DataUnavailable(LottoError):
    """Draw store is empty or unreachable."""

    def __init__(self, message: str = "No draw data available", details: Any | None = None) -> None:
        super().__init__(code="data_unavailable", message=message, status_code=404, details=details)


class DrawNotFound(LottoError):
    """A specific draw number does not exist."""

    def __init__(self, draw_no: int) -> None:
        super().__init__(
            code="draw_not_found",
            message=f"Draw {draw_no} not found",
            status_code=404,
            details={"draw_no": draw_no},
        )


class PersistenceFailure(LottoError):
    """A batch of statistic rows could not be written."""

    def __init__(self, message: str = "Failed to persist rows", details: Any | None = None) -> None:
        super().__init__(code="persistence_failure", message=message, status_code=500, details=details)


class InvalidRequest(LottoError):
    """Structurally invalid request."""

    def __init__(self, message: str = "Invalid request", details: Any | None = None) -> None:
        super().__init__(code="invalid_request", message=message, status_code=400, details=details)
