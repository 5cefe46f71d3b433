"""Framework-neutral outcomes returned by controllers.

The HTTP layer turns an ActionResult into a response (see
`api/responses.py`); nothing in here knows about FastAPI.
"""
import enum
from dataclasses import dataclass
from typing import Any, Optional

from .permissions import PermissionResult


class Outcome(str, enum.Enum):
    """Classification of a controller result."""

    CREATED = "created"
    OK = "ok"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    VALIDATION_FAILED = "validation_failed"
    WORK_IN_PROGRESS = "work_in_progress"
    BULK_PARTIAL = "bulk_partial"
    BAD_REQUEST = "bad_request"
    SERVER_ERROR = "server_error"


@dataclass(frozen=True)
class ActionResult:
    outcome: Outcome
    status_code: int
    body: Any = None
    location: Optional[str] = None


def ok(body: Any) -> ActionResult:
    return ActionResult(Outcome.OK, 200, body)


def created(location: str, body: Any) -> ActionResult:
    return ActionResult(Outcome.CREATED, 201, body, location=location)


def not_found() -> ActionResult:
    return ActionResult(Outcome.NOT_FOUND, 404)


def permission_denied(permission: PermissionResult) -> ActionResult:
    """
    Result for a failed permission check.

    A not-found denial carries no body so it cannot be told apart from a
    missing entity.
    """
    if permission.is_not_found or not permission.message:
        return ActionResult(Outcome.PERMISSION_DENIED, permission.status_code)

    body = {"id": permission.id, "message": permission.message}
    return ActionResult(Outcome.PERMISSION_DENIED, permission.status_code, body)


def validation_failed(errors: dict[str, str]) -> ActionResult:
    return ActionResult(Outcome.VALIDATION_FAILED, 400, {"errors": errors})


def work_in_progress(workers: list[str]) -> ActionResult:
    return ActionResult(Outcome.WORK_IN_PROGRESS, 202, {"workers": list(workers)})


def bulk_partial(results: Any) -> ActionResult:
    return ActionResult(Outcome.BULK_PARTIAL, 400, results)


def bad_request() -> ActionResult:
    return ActionResult(Outcome.BAD_REQUEST, 400)


def server_error() -> ActionResult:
    return ActionResult(Outcome.SERVER_ERROR, 500)
