"""Field-by-field diff of two PatientStatus snapshots."""
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any

from .status import PatientStatus


@dataclass(frozen=True)
class StatusChange:
    property: str
    old_value: Any
    new_value: Any


def detect_changes(old: PatientStatus, new: PatientStatus) -> list[StatusChange]:
    """Return one StatusChange per differing field, in declaration order."""
    changes = []
    for f in fields(PatientStatus):
        before, after = getattr(old, f.name), getattr(new, f.name)
        if before != after:
            changes.append(StatusChange(f.name, before, after))
    return changes


def _show(value: Any) -> str:
    if value is None:
        return "none"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    return str(value)


def format_change(change: StatusChange) -> str:
    return f"{change.property}: {_show(change.old_value)} -> {_show(change.new_value)}"
