from __future__ import annotations


class FlockError(Exception):
    """Base class for every error raised by the flock simulation."""


class UnknownAgentId(FlockError, KeyError):
    def __init__(self, agent_id: int) -> None:
        super().__init__(agent_id)
        self.agent_id = agent_id

    def __str__(self) -> str:
        return f"unknown agent id: {self.agent_id!r}"


class DegenerateVelocity(FlockError, ArithmeticError):
    """Raised when a velocity update collapses to a zero-length vector."""

    def __init__(self, message: str, agent_id: int | None = None) -> None:
        super().__init__(message)
        self.agent_id = agent_id


class InvalidParameter(FlockError, ValueError):
    pass
