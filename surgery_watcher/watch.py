"""
Poll loop for a single patient.

Each tick fetches the patient's status, reports what changed since the
previous tick, then checks whether the new status is one we stop on.

Elapsed time is the configured interval times the number of completed
sleeps, not wall-clock time; request latency is not counted.
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Iterable

from .changes import StatusChange, detect_changes
from .errors import NetworkError, NotFoundError
from .legend import Legend, resolve_legend
from .notify import log
from .status import PatientStatus, fetch_status

DEFAULT_EXIT_STATUSES = frozenset({"Case Complete"})


class _Cancelled(Exception):
    """Raised out of a retry backoff when the watch was cancelled."""


def select_patient(statuses: list[PatientStatus], facility_id: str,
                   patient_id: str) -> PatientStatus:
    """Pick the watched patient's record; never substitute someone else's.

    A lone record without a PatientID is taken as the requested patient.
    """
    for s in statuses:
        if s.patient_id == str(patient_id):
            return s
    if len(statuses) == 1 and not statuses[0].patient_id:
        return statuses[0]
    raise NotFoundError(
        f"no status for facility {facility_id!r}, patient {patient_id!r} "
        f"(got {', '.join(repr(s.patient_id) for s in statuses)})")


def _fetch_with_retry(fetch, retries: int, backoff: float, sleep,
                      cancelled=lambda: False) -> list[PatientStatus]:
    attempt = 0
    while True:
        try:
            return fetch()
        except NetworkError as exc:
            if attempt >= retries:
                raise
            delay = backoff * (2 ** attempt)
            attempt += 1
            log(f"fetch failed ({exc}); retry {attempt}/{retries} in {delay:g}s")
            sleep(delay)
            if cancelled():
                raise _Cancelled from exc


def report(previous: PatientStatus,
           current: PatientStatus,
           on_change: Callable[[StatusChange], None] | None,
           alert: Callable[[], None] | None) -> list[StatusChange]:
    """Diff-then-notify stage."""
    changes = detect_changes(previous, current)
    if on_change is not None:
        for change in changes:
            on_change(change)
    if changes and alert is not None:
        alert()
    return changes


def should_exit(current: PatientStatus, exit_statuses: Iterable[str]) -> bool:
    """Exit-check stage. A status the legend could not decode never exits."""
    return current.status is not None and current.status in exit_statuses


def watch(facility_id: str,
          patient_id: str,
          poll_interval: float = 30,
          exit_statuses: Iterable[str] = DEFAULT_EXIT_STATUSES,
          on_change: Callable[[StatusChange], None] | None = None,
          on_exit: Callable[[PatientStatus, float], None] | None = None,
          *,
          alert: Callable[[], None] | None = None,
          report_changes: bool = True,
          fetch: Callable[[str, str, Legend], list[PatientStatus]] | None = None,
          resolve: Callable[[], Legend] | None = None,
          sleep: Callable[[float], None] | None = None,
          cancel: threading.Event | None = None,
          retries: int = 0,
          retry_backoff: float = 2.0) -> PatientStatus:
    """Poll until the patient reaches one of `exit_statuses`.

    `fetch(facility_id, patient_id, legend)` and `resolve()` default to the
    live portal calls. If `cancel` is set the loop stops at the next check
    and returns the last status seen, without calling `on_exit`.
    """
    if isinstance(exit_statuses, str):
        exit_statuses = [exit_statuses]
    exit_statuses = frozenset(exit_statuses)
    fetch = fetch or (lambda f, p, lg: fetch_status(f, p, legend=lg))
    resolve = resolve or resolve_legend
    if sleep is None:
        sleep = cancel.wait if cancel is not None else time.sleep

    def cancelled() -> bool:
        return cancel is not None and cancel.is_set()

    def poll() -> PatientStatus:
        statuses = _fetch_with_retry(lambda: fetch(facility_id, patient_id, legend),
                                     retries, retry_backoff, sleep, cancelled)
        return select_patient(statuses, facility_id, patient_id)

    legend = resolve()
    log(f"legend loaded: {len(legend)} status color(s).")

    # the first tick has nothing to diff against
    previous: PatientStatus | None = None
    try:
        current = poll()
    except _Cancelled as exc:
        # nothing seen yet; surface the failure that was being retried
        raise exc.__cause__
    elapsed = 0.0

    while True:
        if report_changes and previous is not None:
            report(previous, current, on_change, alert)

        if should_exit(current, exit_statuses):
            if on_exit is not None:
                on_exit(current, elapsed)
            return current

        log(f"{patient_id}: {current.status or 'unknown'}; next check in {poll_interval:g}s.")
        if cancelled():
            break
        sleep(poll_interval)
        if cancelled():
            break
        elapsed += poll_interval
        try:
            previous, current = current, poll()
        except _Cancelled:
            break

    log(f"{patient_id}: watch cancelled.")
    return current
