#!/usr/bin/env python3
"""
Surgery status watcher.

Polls the hospital's patient-tracking portal and reports a patient's
surgical status until it reaches an exit status ("Case Complete" by
default). Facility and patient are picked interactively unless given.

Usage
-----
    surgery-watcher                         # uses ./config.yml if present
    surgery-watcher -c other.yml
    surgery-watcher -f 12 -p 345 -i 60 -x "Case Complete" -x "In Recovery"

Dependencies
------------
    pip install requests beautifulsoup4 pyyaml
"""
from __future__ import annotations

import argparse
import pathlib
import sys
from typing import Callable, Sequence, TypeVar

import requests

from .config import load_config
from .errors import WatcherError
from .facilities import discover_facilities
from .legend import Legend, resolve_legend
from .notify import Notifier, log
from .status import PatientStatus, fetch_status
from .watch import watch

T = TypeVar("T")


# ──── interactive selection ───────────────────────────────────────────
def choose(items: Sequence[T], label: str, describe: Callable[[T], str],
           prompt: Callable[[str], str] = input) -> T:
    """Numbered single-choice console picker; asks again on bad input."""
    if not items:
        raise WatcherError(f"no {label}s to choose from")
    if len(items) == 1:
        log(f"Only one {label}: {describe(items[0])}")
        return items[0]

    for n, item in enumerate(items, 1):
        print(f"  {n:>3}. {describe(item)}")
    while True:
        answer = prompt(f"Select {label} [1-{len(items)}]: ").strip()
        if answer.isdigit() and 1 <= int(answer) <= len(items):
            return items[int(answer) - 1]
        print(f"  '{answer}' is not a number between 1 and {len(items)}.")


def describe_patient(s: PatientStatus) -> str:
    return f"{s.patient_id}  {s.location_id}  {s.status or 'unknown'}"


# ──── entrypoint ──────────────────────────────────────────────────────
def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Surgery status watcher")
    ap.add_argument(
        "-c", "--config",
        type=pathlib.Path,
        default=pathlib.Path("config.yml"),
        help="Path to YAML config (default: ./config.yml)",
    )
    ap.add_argument("-f", "--facility", help="Facility id (skips the picker)")
    ap.add_argument("-p", "--patient", help="Patient id (skips the picker)")
    ap.add_argument("-i", "--interval", type=float, help="Seconds between checks")
    ap.add_argument("-x", "--exit-status", action="append", dest="exit_statuses",
                    help="Status that ends the watch (repeatable)")
    ap.add_argument("--no-changes", action="store_true", help="Do not report field changes")
    ap.add_argument("--no-bell", action="store_true", help="Silence the terminal bell")
    return ap.parse_args(argv)


def run(cfg: dict, session: requests.Session) -> PatientStatus:
    timeout = cfg["timeout_sec"]

    facility_id = cfg["facility_id"]
    if facility_id is None:
        facilities = discover_facilities(cfg["portal_url"], cfg["facility_param"],
                                         session=session, timeout=timeout)
        facility_id = choose(facilities, "facility", lambda f: f"{f.name} ({f.id})").id

    legend = resolve_legend(cfg["legend_url"], cfg["legend_table_id"],
                            session=session, timeout=timeout)

    def fetch(fid: str, pid: str, lg: Legend) -> list[PatientStatus]:
        return fetch_status(fid, pid, legend=lg, url=cfg["status_url"],
                            session=session, timeout=timeout)

    patient_id = cfg["patient_id"]
    if patient_id is None:
        patient_id = choose(fetch(facility_id, "0", legend), "patient", describe_patient).patient_id

    notifier = Notifier(patient_id, ring=cfg["bell"])
    log(f"Watching patient {patient_id} at facility {facility_id} every "
        f"{cfg['check_every_sec']:g} s until {', '.join(cfg['exit_statuses'])} – Ctrl-C to stop.\n")
    return watch(
        facility_id,
        patient_id,
        poll_interval=cfg["check_every_sec"],
        exit_statuses=cfg["exit_statuses"],
        on_change=notifier.on_change,
        on_exit=notifier.on_exit,
        alert=notifier.alert,
        report_changes=cfg["report_changes"],
        fetch=fetch,
        resolve=lambda: legend,
        retries=cfg["retries"],
    )


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    cfg = load_config(args.config)

    if args.facility:
        cfg["facility_id"] = args.facility
    if args.patient:
        cfg["patient_id"] = args.patient
    if args.interval is not None:
        if args.interval <= 0:
            sys.exit("[FATAL] --interval must be positive")
        cfg["check_every_sec"] = args.interval
    if args.exit_statuses:
        cfg["exit_statuses"] = args.exit_statuses
    if args.no_changes:
        cfg["report_changes"] = False
    if args.no_bell:
        cfg["bell"] = False

    try:
        with requests.Session() as session:
            run(cfg, session)
    except WatcherError as exc:
        sys.exit(f"[FATAL] {exc}")
    except KeyboardInterrupt:
        log("Stopped by user")


if __name__ == "__main__":
    main()
