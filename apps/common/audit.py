"""
Audit trail helpers for model signals.
Change records are written to the ``apps.audit`` logger with old/new values.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from django.db import models

audit_logger = logging.getLogger("apps.audit")


def _serialize_value(value: Any) -> Any:
    """Serialize a value for JSON-friendly audit records."""
    if value is None:
        return None
    if isinstance(value, date | datetime):
        return value.isoformat()
    if isinstance(value, Decimal | UUID):
        return str(value)
    if hasattr(value, "pk"):
        return str(value.pk)
    return value


def store_old_values(instance: models.Model, fields: list[str]) -> None:
    """Remember the persisted values of ``fields`` on the instance as ``_old_<field>``."""
    if not instance.pk:
        return
    old = type(instance)._default_manager.filter(pk=instance.pk).values(*fields).first()
    if old is None:
        return
    for field_name, value in old.items():
        setattr(instance, f"_old_{field_name}", value)


def get_model_changes(instance: Any, fields: list[str]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Get old and new values for specified fields."""
    old_values = {}
    new_values = {}

    for field_name in fields:
        old_value = getattr(instance, f"_old_{field_name}", None)
        new_value = getattr(instance, field_name, None)

        if old_value != new_value:
            old_values[field_name] = _serialize_value(old_value)
            new_values[field_name] = _serialize_value(new_value)

    return old_values, new_values


def log_audit_event(
    action: str,
    instance: models.Model,
    description: str = "",
    old_values: dict[str, Any] | None = None,
    new_values: dict[str, Any] | None = None,
) -> None:
    """Write one audit record for a model change."""
    audit_logger.info(
        "📝 [Audit] %s: %s",
        action,
        description,
        extra={
            "audit_action": action,
            "object_type": instance._meta.label,
            "object_id": str(instance.pk),
            "old_values": old_values or {},
            "new_values": new_values or {},
        },
    )
