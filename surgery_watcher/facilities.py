"""Facility list scraped from the portal's landing page."""
from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import parse_qs, urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from .errors import NetworkError, ParseError

PORTAL_URL = "https://surgerystatus.example.org/"
FACILITY_PARAM = "facilityID"


@dataclass(frozen=True)
class Facility:
    name: str
    id: str


def facility_id_from_href(href: str, param: str = FACILITY_PARAM) -> str | None:
    query = parse_qs(urlparse(href).query)
    for key, values in query.items():
        if key.lower() == param.lower() and values and values[0].strip():
            return values[0].strip()
    return None


def parse_facilities(html: str, base_url: str = PORTAL_URL,
                     param: str = FACILITY_PARAM) -> list[Facility]:
    soup = BeautifulSoup(html, "html.parser")
    found: dict[str, Facility] = {}
    for a in soup.find_all("a", href=True):
        fid = facility_id_from_href(urljoin(base_url, a["href"]), param)
        if fid and fid not in found:
            found[fid] = Facility(a.get_text(" ", strip=True) or fid, fid)
    if not found:
        raise ParseError(f"no links carrying '{param}' on {base_url}")
    return list(found.values())


def discover_facilities(url: str = PORTAL_URL,
                        param: str = FACILITY_PARAM,
                        session=None,
                        timeout: float = 30) -> list[Facility]:
    http = session or requests
    try:
        resp = http.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise NetworkError(f"portal {url} unreachable: {exc}") from exc
    return parse_facilities(resp.text, url, param)
