"""CSV export of registrants.

Format (kept byte-for-byte stable for spreadsheet imports):

    Nome,WhatsApp,Data de Inscrição
    "<name>","<phone>","<DD/MM/YYYY>"

Lines are joined with a single newline and the last row has no trailing
newline. Dates use the display timezone (DISPLAY_TIMEZONE, default
America/Sao_Paulo) so the day matches what the organizers see locally.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Iterable
from zoneinfo import ZoneInfo

from .domain import Registrant

CSV_HEADER = "Nome,WhatsApp,Data de Inscrição"
EXPORT_FILENAME = "inscricoes-mulheres-conectadas.csv"
EXPORT_MEDIA_TYPE = "text/csv;charset=utf-8;"
DEFAULT_DISPLAY_TIMEZONE = "America/Sao_Paulo"


def display_timezone() -> tzinfo:
    name = (os.getenv("DISPLAY_TIMEZONE") or DEFAULT_DISPLAY_TIMEZONE).strip()
    return ZoneInfo(name)


def format_date_br(value: datetime, tz: tzinfo | None = None) -> str:
    """Render a timestamp as DD/MM/YYYY in the display timezone.

    Naive timestamps are taken as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz or display_timezone()).strftime("%d/%m/%Y")


def _quote(value: str) -> str:
    return '"' + str(value).replace('"', '""') + '"'


def render_csv(registrants: Iterable[Registrant], *, tz: tzinfo | None = None) -> str:
    zone = tz or display_timezone()
    rows = [
        ",".join((_quote(r.name), _quote(r.phone), _quote(format_date_br(r.created_at, zone))))
        for r in registrants
    ]
    return CSV_HEADER + "\n" + "\n".join(rows)


@dataclass(frozen=True)
class CsvExport:
    content: str
    row_count: int
    filename: str = EXPORT_FILENAME
    media_type: str = EXPORT_MEDIA_TYPE


def render_export(registrants: Iterable[Registrant], *, tz: tzinfo | None = None) -> CsvExport:
    items = list(registrants)
    return CsvExport(content=render_csv(items, tz=tz), row_count=len(items))


__all__ = [
    "CSV_HEADER",
    "EXPORT_FILENAME",
    "EXPORT_MEDIA_TYPE",
    "CsvExport",
    "format_date_br",
    "render_csv",
    "render_export",
    "display_timezone",
]
