"""Error taxonomy for the objective/evaluation lifecycle.

Every error carries a single human-readable ``detail`` that is returned to the
caller verbatim. None of them is retried by the core.
"""
from typing import Optional


class LifecycleError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(LifecycleError):
    """A required field or a score bound is violated."""
    status_code = 400

    def __init__(self, detail: str, objective_ids: Optional[list[str]] = None):
        super().__init__(detail)
        self.objective_ids = objective_ids or []


class DuplicateSkillError(LifecycleError):
    """A catalog skill is already referenced by the objective set."""
    status_code = 409

    def __init__(self, skill_id: str):
        super().__init__(f"Skill {skill_id} is already part of this objective set")
        self.skill_id = skill_id


class AuthorizationError(LifecycleError):
    status_code = 403


class NotFoundError(LifecycleError):
    status_code = 404


class StaleStateError(LifecycleError):
    """The record's current state does not permit the operation."""
    status_code = 409


class UnauthorizedException(Exception):
    """Missing or invalid credentials (HTTP layer only)."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(detail)
        self.detail = detail
