"""Exception hierarchy for the solver.

Two families exist:
- malformed input that the caller can recover from (bad matrices, bad
  sequences typed at the console, bad configuration)
- precondition violations, which are programming errors. They subclass
  AssertionError so that they read as failed contracts, and nothing in the
  package catches them.

Replaying a move sequence with ``BoardPosition.play`` never raises: it reports
how many moves it managed to apply.
"""

from typing import Any, Dict, Optional

__all__ = [
    "OracleError",
    "PreconditionError",
    "InvalidPositionError",
    "InvalidSequenceError",
    "ConfigurationError",
]


class OracleError(Exception):
    """Base exception for all solver errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable description
        context: Extra values useful when debugging
    """
    code: str = "ORACLE_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"


class PreconditionError(OracleError, AssertionError):
    """A core operation was called outside of its contract.

    Examples: a column index outside the board, dropping a stone in a full
    column, searching with an empty alpha-beta window.
    """
    code: str = "PRECONDITION_FAILED"


class InvalidPositionError(OracleError, ValueError):
    """A board given from outside cannot be reached by legal play."""
    code: str = "INVALID_POSITION"


class InvalidSequenceError(OracleError, ValueError):
    """A move sequence could not be replayed up to its end."""
    code: str = "INVALID_SEQUENCE"

    def __init__(self, sequence: str, played: int):
        super().__init__(
            f"Move {played + 1} of '{sequence}' cannot be played",
            context={"sequence": sequence, "played": played},
        )
        self.sequence = sequence
        self.played = played


class ConfigurationError(OracleError):
    """Solver settings could not be loaded or validated."""
    code: str = "CONFIGURATION_ERROR"
