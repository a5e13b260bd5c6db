"""Advisor errors."""

from __future__ import annotations


class AdvisorError(Exception):
    """Base exception for credential advisor errors."""

    pass


class InvalidInputError(AdvisorError, ValueError):
    """Input failed validation before reaching the policy functions."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Invalid {field}: {message}")


class PolicyConflictError(AdvisorError):
    """Organization constraints cannot all be satisfied by one method."""

    def __init__(self, conflict):
        self.conflict = conflict
        super().__init__(conflict.description)


class HostRebindError(AdvisorError):
    """A workspace tried to change the host it is bound to."""

    pass
