"""Audit logging helper functions for key lifecycle events.

Standard single-line logs so they are easy to index.
"""
from __future__ import annotations
import logging
from typing import Optional, Any

from app.utils.datetime import utc_now

_logger = logging.getLogger("app.audit")


def _emit(event: str, user_id: Optional[str] = None, **data: Any):
    payload = {"ts": utc_now().isoformat(), "event": event}
    if user_id:
        payload["user_id"] = user_id
    payload.update(data)
    parts = [f"{k}={repr(v)}" for k, v in payload.items()]
    _logger.info("AUDIT " + " ".join(parts))

# Public convenience wrappers

def log_objectives_save(user_id: str, objective_set_id: str, assignment_id: str, status: str, objective_count: int):
    _emit("objectives.save", user_id=user_id, objective_set_id=objective_set_id,
          assignment_id=assignment_id, status=status, objective_count=objective_count)

def log_self_evaluation_submit(user_id: str, evaluation_id: str, objective_set_id: str, status: str, created: bool):
    _emit("self_evaluation.submit", user_id=user_id, evaluation_id=evaluation_id,
          objective_set_id=objective_set_id, status=status, created=created)

def log_referent_evaluation_submit(user_id: str, evaluation_id: str, amended: bool):
    _emit("referent_evaluation.submit", user_id=user_id, evaluation_id=evaluation_id, amended=amended)

def log_evaluation_close(user_id: str, evaluation_id: str, status: str):
    _emit("evaluation.close", user_id=user_id, evaluation_id=evaluation_id, status=status)

def log_project_finish(user_id: str, project_id: str, notified: int):
    _emit("project.finish", user_id=user_id, project_id=project_id, notified=notified)

def log_coaching_view(user_id: str, row_count: int, employee_id: str | None):
    _emit("coaching.view", user_id=user_id, row_count=row_count, target_user_id=employee_id)
