from __future__ import annotations


class ValidationError(ValueError):
    """Recoverable user error: the operation is aborted and reported."""


class RoleCountMismatch(ValidationError):
    def __init__(self, expected: int, got: int) -> None:
        super().__init__(f"The number of roles must match the number of players (expected {expected}, got {got})")
        self.expected = expected
        self.got = got


class LookupMiss(LookupError):
    """Stale reference to a player that no longer exists. Absorbed silently."""
