"""Watch a patient's surgical status on a hospital patient-tracking portal."""
from __future__ import annotations

from .changes import StatusChange, detect_changes
from .errors import FormatError, NetworkError, NotFoundError, ParseError, WatcherError
from .legend import Legend, LegendEntry, resolve_legend
from .status import PatientStatus, fetch_status
from .watch import watch

__all__ = [
    "FormatError",
    "Legend",
    "LegendEntry",
    "NetworkError",
    "NotFoundError",
    "ParseError",
    "PatientStatus",
    "StatusChange",
    "WatcherError",
    "detect_changes",
    "fetch_status",
    "resolve_legend",
    "watch",
]
