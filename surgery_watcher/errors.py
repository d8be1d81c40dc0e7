"""Errors raised while talking to the patient-tracking portal."""
from __future__ import annotations


class WatcherError(Exception):
    """Base class for everything the watcher raises on purpose."""


class NetworkError(WatcherError):
    """Portal unreachable, timed out, or answered with a non-2xx status."""


class ParseError(WatcherError):
    """Markup or JSON did not have the structure we scrape."""


class NotFoundError(WatcherError):
    """Status endpoint returned an empty payload for a facility/patient."""


class FormatError(WatcherError):
    """A field was present but could not be parsed (e.g. TimeInOR)."""
