"""
Color legend scraper.

The status API only hands out a (foreground, background) color pair per
patient. The portal's info page carries a table whose rows are painted in
those colors and labelled with the human-readable status, e.g.

    <table id="tblLegend">
      <tr style="color: #ffffff; background-color: #008000"><td>In OR</td></tr>
      ...

This module turns that table into a `Legend`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

import requests
from bs4 import BeautifulSoup

from .errors import NetworkError, ParseError

LEGEND_URL = "https://surgerystatus.example.org/Info.aspx"
LEGEND_TABLE_ID = "tblLegend"

_HEX = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6})$")


def normalize_color(value: str | None) -> str:
    """Canonical spelling of a CSS color so HTML and JSON values compare equal.

    ``#FFF``, ``#ffffff`` and ``rgb(255, 255, 255)`` all become
    ``rgb(255,255,255)``; named colors are only lower-cased.
    """
    if not value:
        return ""
    color = value.strip().lower().replace(" ", "")
    m = _HEX.match(color)
    if m:
        digits = m.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
        return f"rgb({r},{g},{b})"
    return color


@dataclass(frozen=True)
class LegendEntry:
    foreground_color: str
    background_color: str
    status: str

    @property
    def key(self) -> tuple[str, str]:
        return normalize_color(self.foreground_color), normalize_color(self.background_color)


class Legend:
    """Set of legend entries with a lookup keyed by (foreground, background).

    A color pair matched by more than one entry is ambiguous and looks up
    as ``None``, exactly like a pair that is not in the legend at all. That
    includes two spellings of the same colors, even under the same label.
    """

    def __init__(self, entries):
        self.entries = frozenset(entries)
        by_key: dict[tuple[str, str], list[LegendEntry]] = {}
        for entry in self.entries:
            by_key.setdefault(entry.key, []).append(entry)
        self._labels = {key: matches[0].status if len(matches) == 1 else None
                        for key, matches in by_key.items()}

    def lookup(self, foreground: str | None, background: str | None) -> str | None:
        return self._labels.get((normalize_color(foreground), normalize_color(background)))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __repr__(self) -> str:
        return f"Legend({len(self.entries)} entries)"


def parse_style(style: str | None) -> dict[str, str]:
    """``"color: red; background-color: white"`` -> ``{"color": "red", ...}``."""
    declarations = {}
    for part in (style or "").split(";"):
        name, sep, value = part.partition(":")
        if sep:
            declarations[name.strip().lower()] = value.strip()
    return declarations


def _row_colors(row) -> tuple[str, str]:
    styles = parse_style(row.get("style"))
    if "color" not in styles and "background-color" not in styles:
        cell = row.find(["td", "th"], style=True)
        if cell is not None:
            styles = parse_style(cell.get("style"))
    return styles.get("color", ""), styles.get("background-color", "")


def parse_legend(html: str, table_id: str = LEGEND_TABLE_ID) -> Legend:
    soup = BeautifulSoup(html, "html.parser")
    table = soup.find("table", id=table_id)
    if table is None:
        raise ParseError(f"legend table #{table_id} not found")

    entries = []
    for row in table.find_all("tr"):
        fg, bg = _row_colors(row)
        label = row.get_text(" ", strip=True)
        if not label or not (fg or bg):
            continue  # header / spacer rows
        entries.append(LegendEntry(fg, bg, label))

    if not entries:
        raise ParseError(f"legend table #{table_id} has no colored rows")
    return Legend(entries)


def resolve_legend(url: str = LEGEND_URL,
                   table_id: str = LEGEND_TABLE_ID,
                   session=None,
                   timeout: float = 30) -> Legend:
    """Download the info page and scrape its legend. Call once per session."""
    http = session or requests
    try:
        resp = http.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise NetworkError(f"legend page {url} unreachable: {exc}") from exc
    return parse_legend(resp.text, table_id)
