"""YAML configuration. Every key is optional; see config.yml for the layout."""
from __future__ import annotations

import pathlib
import sys

import yaml                       # PyYAML

from .facilities import FACILITY_PARAM, PORTAL_URL
from .legend import LEGEND_TABLE_ID, LEGEND_URL
from .status import STATUS_URL

DEFAULTS = {
    "portal_url": PORTAL_URL,
    "legend_url": LEGEND_URL,
    "legend_table_id": LEGEND_TABLE_ID,
    "status_url": STATUS_URL,
    "facility_param": FACILITY_PARAM,
    "check_every_sec": 30,
    "exit_statuses": ["Case Complete"],
    "report_changes": True,
    "bell": True,
    "timeout_sec": 30,
    "retries": 0,
    "facility_id": None,
    "patient_id": None,
}


def load_yaml(path: pathlib.Path) -> dict:
    """Missing file is fine (defaults apply); broken YAML is fatal."""
    try:
        with path.open(encoding="utf-8") as fp:
            data = yaml.safe_load(fp) or {}
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as exc:
        sys.exit(f"[FATAL] Invalid YAML in {path}: {exc}")
    if not isinstance(data, dict):
        sys.exit(f"[FATAL] {path} must contain a mapping at top level")
    return data


def load_config(path: pathlib.Path) -> dict:
    cfg = dict(DEFAULTS)
    raw = load_yaml(path)

    unknown = sorted(set(raw) - set(DEFAULTS))
    if unknown:
        sys.exit(f"[FATAL] Unknown key(s) in {path}: {', '.join(unknown)}")
    cfg.update(raw)

    try:
        cfg["check_every_sec"] = float(cfg["check_every_sec"])
        cfg["timeout_sec"] = float(cfg["timeout_sec"])
        cfg["retries"] = int(cfg["retries"])
    except (TypeError, ValueError) as exc:
        sys.exit(f"[FATAL] Bad number in {path}: {exc}")
    if cfg["check_every_sec"] <= 0:
        sys.exit("[FATAL] `check_every_sec` must be positive")
    if cfg["retries"] < 0:
        sys.exit("[FATAL] `retries` cannot be negative")
    for key in ("report_changes", "bell"):
        if not isinstance(cfg[key], bool):
            sys.exit(f"[FATAL] `{key}` must be true or false, got {cfg[key]!r}")

    statuses = cfg["exit_statuses"]
    if isinstance(statuses, str):
        statuses = [statuses]
    if not statuses:
        sys.exit("[FATAL] `exit_statuses` is empty")
    cfg["exit_statuses"] = [str(s) for s in statuses]

    for key in ("facility_id", "patient_id"):
        if cfg[key] is not None:
            cfg[key] = str(cfg[key])
    return cfg
