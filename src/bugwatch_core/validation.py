"""Entity validation run by repositories before every write."""
import logging
from typing import Any, Callable

from . import models
from .patching import ChangeSet

logger = logging.getLogger("bugwatch-core.validation")


class EntityValidationError(ValueError):
    """Raised when an entity fails validation. errors maps field name to message."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))
        self.errors = errors


def _required(errors: dict[str, str], entity: Any, field: str, message: str) -> None:
    value = getattr(entity, field, None)
    if value is None or (isinstance(value, str) and not value.strip()):
        errors[field] = message


def _validate_organization_scoped(entity: Any, errors: dict[str, str]) -> None:
    if entity.is_organization_scoped:
        _required(errors, entity, "organization_id", "Please specify a valid organization id.")


def _validate_organization(entity: models.Organization, errors: dict[str, str]) -> None:
    _required(errors, entity, "name", "Please specify a valid name.")
    if entity.name and len(entity.name) > 255:
        errors["name"] = "Name must be 255 characters or less."


def _validate_project(entity: models.Project, errors: dict[str, str]) -> None:
    _required(errors, entity, "name", "Please specify a valid name.")
    if entity.name and len(entity.name) > 255:
        errors["name"] = "Name must be 255 characters or less."


def _validate_token(entity: models.Token, errors: dict[str, str]) -> None:
    _required(errors, entity, "id", "Please specify a valid token.")
    if entity.id and len(entity.id) < 10:
        errors["id"] = "Token must be at least 10 characters long."
    if not entity.project_id and not entity.user_id:
        errors["project_id"] = "Please specify a valid project id or user id."


def _validate_user(entity: models.User, errors: dict[str, str]) -> None:
    _required(errors, entity, "email_address", "Please specify a valid email address.")
    if entity.email_address and "@" not in entity.email_address:
        errors["email_address"] = "Please specify a valid email address."


VALIDATORS: dict[type, Callable[[Any, dict[str, str]], None]] = {
    models.Organization: _validate_organization,
    models.Project: _validate_project,
    models.Token: _validate_token,
    models.User: _validate_user,
}


def validate_entity(entity: Any) -> None:
    """
    Validate an entity before it is written.

    Raises:
        EntityValidationError: If any field is invalid
    """
    errors: dict[str, str] = {}
    _validate_organization_scoped(entity, errors)

    validator = VALIDATORS.get(type(entity))
    if validator is not None:
        validator(entity, errors)

    if errors:
        logger.warning(f"Validation failed for {type(entity).__name__} {getattr(entity, 'id', None)}: {errors}")
        raise EntityValidationError(errors)


def validate_changes(model: type, changes: ChangeSet) -> None:
    """
    Reject explicit nulls for non-nullable columns before a change set is applied.

    Raises:
        EntityValidationError: If a change would null a required column
    """
    columns = model.__table__.columns
    errors: dict[str, str] = {}
    for name in changes.changed_field_names():
        column = columns.get(name)
        if column is not None and not column.nullable and changes.get(name) is None:
            errors[name] = f"Please specify a valid {name.replace('_', ' ')}."

    if errors:
        logger.warning(f"Rejected changes to {model.__name__}: {errors}")
        raise EntityValidationError(errors)
