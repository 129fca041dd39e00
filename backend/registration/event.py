"""
Event facts shown on the landing and confirmation pages.

Kept as data so the date, time and contact number are defined once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class EventDetail:
    label: str
    value: str


@dataclass(frozen=True)
class EventInfo:
    presenter: str = "Mulheres Conectadas"
    title_lead: str = "Aprendendo a"
    title_highlight: str = "Despertar"
    date_label: str = "07 de Março"
    time_label: str = "16H"
    speaker: str = "Miss. Kezia Souto"
    highlights: Tuple[str, ...] = ("SPA", "Bazar", "Dinâmicas")
    contact_phone: str = "(22) 98851-6911"
    contact_link: str = "https://wa.me/5522988516911"
    details: Tuple[EventDetail, ...] = field(default=())

    @property
    def title(self) -> str:
        return f"{self.title_lead} {self.title_highlight}"

    @property
    def when(self) -> str:
        return f"{self.date_label} — {self.time_label}"

    def detail_cards(self) -> Tuple[EventDetail, ...]:
        if self.details:
            return self.details
        return (
            EventDetail("Data", self.date_label),
            EventDetail("Horário", self.time_label),
            EventDetail("Palavra", self.speaker),
        )


EVENT = EventInfo()

__all__ = ["EventInfo", "EventDetail", "EVENT"]
