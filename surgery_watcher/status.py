"""
Status API client.

POSTs ``{"facilityID": ..., "patientID": ...}`` to the portal's page method
and maps every returned record through the color legend. ``patientID``
"0" asks for every patient at the facility.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime

import requests

from .errors import FormatError, NetworkError, NotFoundError, ParseError
from .legend import Legend

STATUS_URL = "https://surgerystatus.example.org/Status.aspx/GetPatientStatus"
PAYLOAD_KEY = "d"

# US forms the portal uses besides ISO-8601
TIME_FORMATS = (
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
)


@dataclass(frozen=True)
class PatientStatus:
    patient_id: str
    location_id: str
    time_in_or: datetime | None = None
    status: str | None = None
    surgeon: str | None = None
    ready_for_family: bool = False


def parse_time(raw: str | None) -> datetime | None:
    if raw is None or not str(raw).strip():
        return None
    text = str(raw).strip()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise FormatError(f"unparseable TimeInOR: {text!r}")


def parse_record(raw: dict, legend: Legend) -> PatientStatus:
    """One API record -> PatientStatus. Unknown colors give ``status=None``."""
    surgeon = raw.get("Surgeon")
    if isinstance(surgeon, str):
        surgeon = surgeon.strip() or None
    return PatientStatus(
        patient_id=str(raw.get("PatientID", "")),
        location_id=str(raw.get("Location", "")),
        time_in_or=parse_time(raw.get("TimeInOR")),
        status=legend.lookup(raw.get("ForegroundColor"), raw.get("BackgroundColor")),
        surgeon=surgeon,
        ready_for_family=raw.get("ReadyForFamily") == "Yes",
    )


def unwrap(body, facility_id: str, patient_id: str) -> list[dict]:
    """Pull the record(s) out of the response envelope.

    The backend does not wrap single results in a list, and page methods
    sometimes double-encode the payload as a JSON string.
    """
    payload = body.get(PAYLOAD_KEY) if isinstance(body, dict) else body
    if isinstance(payload, str) and payload.strip():
        try:
            payload = json.loads(payload)
        except ValueError as exc:
            raise ParseError(f"status payload is not JSON: {exc}") from exc
    if not payload:
        raise NotFoundError(
            f"no status for facility {facility_id!r}, patient {patient_id!r}")
    if isinstance(payload, dict):
        return [payload]
    if isinstance(payload, list) and all(isinstance(r, dict) for r in payload):
        return payload
    raise ParseError(f"unexpected status payload type {type(payload).__name__}")


def fetch_status(facility_id: str,
                 patient_id: str = "0",
                 *,
                 legend: Legend,
                 url: str = STATUS_URL,
                 session=None,
                 timeout: float = 30) -> list[PatientStatus]:
    http = session or requests
    try:
        resp = http.post(url,
                         json={"facilityID": str(facility_id), "patientID": str(patient_id)},
                         timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise NetworkError(f"status endpoint {url} unreachable: {exc}") from exc

    try:
        body = resp.json()
    except ValueError as exc:
        raise ParseError(f"status endpoint returned non-JSON: {exc}") from exc

    return [parse_record(raw, legend) for raw in unwrap(body, facility_id, patient_id)]
