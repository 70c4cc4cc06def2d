"""Ordered, append-only collection of extracted mail events.

A store is filled by ``ingest`` passes and read through immutable tuple
views. Per-line failures are kept as diagnostics instead of aborting the
pass; only an unreadable source raises :class:`IngestError`.
"""

from __future__ import annotations

import codecs
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from maillog.dispatcher import dispatch_line
from maillog.errors import IngestError, LineError
from maillog.models import AnyMailEvent, Component
from maillog.reader import read_lines
from maillog.timestamps import current_year

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineDiagnostic:
    line_number: int
    line: str
    error: LineError
    source: str = ""

    @property
    def component(self) -> str | None:
        return self.error.component


@dataclass(frozen=True)
class IngestReport:
    source: str
    reference_year: int
    lines_read: int = 0
    events: int = 0
    skipped: int = 0
    errors: int = 0


class EventStore:
    """Holds events in log-line order plus the diagnostics of failed lines."""

    def __init__(self, tz: tzinfo | None = None,
                 table: Mapping[str, Component] | None = None):
        self._tz = tz
        self._table = table
        self._events: list[AnyMailEvent] = []
        self._diagnostics: list[LineDiagnostic] = []

    def __len__(self) -> int:
        return len(self._events)

    @property
    def diagnostics(self) -> tuple[LineDiagnostic, ...]:
        return tuple(self._diagnostics)

    def ingest(self, source: str | os.PathLike | Iterable[str],
               reference_year: int | None = None,
               encoding: str = "utf-8") -> IngestReport:
        """Run one full pass over *source* (a file path or an iterable of lines).

        ``reference_year`` fills in the year missing from syslog timestamps;
        it defaults to the current calendar year.

        Raises:
            IngestError: If the source cannot be opened or read. Nothing from
                a failed pass is added to the store.
        """
        year = reference_year if reference_year is not None else current_year()
        if isinstance(source, (str, os.PathLike)):
            name = os.fspath(source)
            try:
                codecs.lookup(encoding)
            except LookupError as exc:
                raise IngestError(f"Unknown encoding {encoding!r} for {name}", source=name) from exc
            lines = read_lines(name, encoding=encoding)
        else:
            name = getattr(source, "name", "<lines>")
            lines = source

        logger.info("Ingesting %s (reference year %d)", name, year)
        events: list[AnyMailEvent] = []
        diagnostics: list[LineDiagnostic] = []
        lines_read = 0
        skipped = 0

        try:
            for lineno, line in enumerate(lines, start=1):
                lines_read += 1
                try:
                    event = dispatch_line(line, year, self._tz, self._table)
                except LineError as exc:
                    logger.debug("%s:%d: %s", name, lineno, exc)
                    diagnostics.append(
                        LineDiagnostic(line_number=lineno, line=line.rstrip("\r\n"),
                                       error=exc, source=name)
                    )
                    continue
                if event is None:
                    skipped += 1
                else:
                    events.append(event)
        except (OSError, UnicodeDecodeError) as exc:
            raise IngestError(f"Unable to read log source {name}: {exc}", source=name) from exc

        self._events.extend(events)
        self._diagnostics.extend(diagnostics)

        report = IngestReport(
            source=name,
            reference_year=year,
            lines_read=lines_read,
            events=len(events),
            skipped=skipped,
            errors=len(diagnostics),
        )
        logger.info(
            "Ingested %s: %d lines, %d events, %d skipped, %d errors",
            name, report.lines_read, report.events, report.skipped, report.errors,
        )
        return report

    def all_events(self) -> tuple[AnyMailEvent, ...]:
        return tuple(self._events)

    def events_within(self, window: timedelta | float,
                      now: datetime | None = None) -> tuple[AnyMailEvent, ...]:
        """Events timestamped less than *window* before *now* (default: the wall clock).

        The reference point is the time of this call, not of ingest.
        """
        if not isinstance(window, timedelta):
            window = timedelta(seconds=window)
        now = (now or datetime.now()).astimezone()
        return tuple(e for e in self._events if now - e.event_time < window)
