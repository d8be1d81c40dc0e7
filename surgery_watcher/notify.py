"""Console output and audible alerts."""
from __future__ import annotations

import sys
from datetime import datetime

from .changes import StatusChange, format_change


def log(msg: str) -> None:
    """Console logger with local ISO-8601 timestamp."""
    ts = datetime.now().astimezone().isoformat(timespec="seconds")
    print(f"[{ts}] {msg}")


def bell() -> None:
    sys.stdout.write("\a")
    sys.stdout.flush()


def format_elapsed(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


class Notifier:
    """Watch callbacks for an interactive session: log changes, ring the bell."""

    def __init__(self, patient_id: str, ring: bool = True):
        self.patient_id = patient_id
        self.ring = ring

    def on_change(self, change: StatusChange) -> None:
        log(f"{self.patient_id}: ⚠️  {format_change(change)}")

    def alert(self) -> None:
        if self.ring:
            bell()

    def on_exit(self, status, elapsed: float) -> None:
        log(f"{self.patient_id}: reached '{status.status}' after ~{format_elapsed(elapsed)} of polling.")
        self.alert()
