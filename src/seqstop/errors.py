"""Exceptions raised by the sequential testing engine."""

from __future__ import annotations


class SequentialTestError(ValueError):
    """Base class for all seqstop errors."""

    error_code = "SEQ_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(f"{self.error_code}: {message}")


class InvalidConfigError(SequentialTestError):
    """Raised when a TestConfig holds values outside their valid domain."""

    error_code = "SEQ_INVALID_CONFIG"


class InvalidLookNumberError(SequentialTestError):
    """Raised when an interim look falls outside [1, max_looks]."""

    error_code = "SEQ_INVALID_LOOK"


class InvalidInputError(SequentialTestError):
    """Raised for degenerate sample statistics or planning inputs."""

    error_code = "SEQ_INVALID_INPUT"


class LookOrderError(SequentialTestError):
    """Raised in strict mode when look numbers do not strictly increase."""

    error_code = "SEQ_LOOK_ORDER"


class ExperimentStoppedError(SequentialTestError):
    """Raised in strict mode when a look is recorded after a stop decision."""

    error_code = "SEQ_STOPPED"
