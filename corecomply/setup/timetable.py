"""
Statutory timetable - SG, BAS, STP finalisation and payroll tax due dates.
"""

import calendar
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.schema import Footprint
from ..core.store import PersistentStore

COMMONWEALTH = "Commonwealth"

# (month, day, quarter label); January falls in the following calendar year
QUARTERLY_DUE_DATES = [(4, 28, "Q3"), (7, 28, "Q4"), (10, 28, "Q1"), (1, 28, "Q2")]


class BasCycle(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class PaygRemitterType(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class EventType(str, Enum):
    BAS = "BAS"
    PAYG = "PAYG"
    SG = "SG"
    STP = "STP"
    PAYROLL_TAX = "PayrollTax"
    WORKERS_COMP = "WorkersComp"
    LSL = "LSL"


class StatutoryEvent(BaseModel):
    id: str
    title: str
    type: EventType
    due_date: date
    jurisdiction: str
    obligation_ref: Optional[str] = None


class TimetableState(BaseModel):
    events: List[StatutoryEvent] = Field(default_factory=list)
    bas_cycle: Optional[BasCycle] = None
    payg_remitter_type: Optional[PaygRemitterType] = None
    sg_schedule: str = "quarterly"


def _following_month(year: int, month: int, day: int) -> date:
    """Given day of the month after (year, month)."""
    if month == 12:
        return date(year + 1, 1, day)
    return date(year, month + 1, day)


def _quarterly_events(year: int, prefix: str, label: str, event_type: EventType, obligation_ref: str):
    events = []
    for month, day, quarter in QUARTERLY_DUE_DATES:
        due_year = year + 1 if month == 1 else year
        events.append(StatutoryEvent(
            id=f"{prefix}-{quarter}-{year}",
            title=f"{label} {quarter}",
            type=event_type,
            due_date=date(due_year, month, day),
            jurisdiction=COMMONWEALTH,
            obligation_ref=obligation_ref,
        ))
    return events


def build_events(footprint: Footprint, bas_cycle: Optional[BasCycle], today: Optional[date] = None) -> List[StatutoryEvent]:
    """Statutory calendar for the current year."""
    year = (today or date.today()).year
    events = _quarterly_events(year, "sg", "Superannuation Guarantee", EventType.SG, "SG-001")

    if bas_cycle == BasCycle.QUARTERLY:
        events.extend(_quarterly_events(year, "bas", "BAS", EventType.BAS, "BAS-001"))
    elif bas_cycle == BasCycle.MONTHLY:
        for month in range(1, 13):
            events.append(StatutoryEvent(
                id=f"bas-{year}-{month}",
                title=f"BAS {calendar.month_name[month]}",
                type=EventType.BAS,
                due_date=_following_month(year, month, 21),
                jurisdiction=COMMONWEALTH,
                obligation_ref="BAS-001",
            ))

    events.append(StatutoryEvent(
        id=f"stp-finalisation-{year}",
        title="STP Phase 2 Finalisation",
        type=EventType.STP,
        due_date=date(year, 7, 14),
        jurisdiction=COMMONWEALTH,
        obligation_ref="STP-001",
    ))

    for state in footprint.states:
        for month in range(1, 13):
            events.append(StatutoryEvent(
                id=f"payroll-tax-{state}-{year}-{month}",
                title=f"Payroll Tax - {state}",
                type=EventType.PAYROLL_TAX,
                due_date=_following_month(year, month, 7),
                jurisdiction=state,
                obligation_ref=f"PT-{state}-001",
            ))

    return events


class TimetableStore(PersistentStore):
    name = "corecomply-timetable"
    state_model = TimetableState

    def set_bas_cycle(self, cycle) -> None:
        cycle = BasCycle(cycle)
        self._mutate(lambda s: s.model_copy(update={"bas_cycle": cycle}))

    def set_payg_remitter_type(self, remitter_type) -> None:
        remitter_type = PaygRemitterType(remitter_type)
        self._mutate(lambda s: s.model_copy(update={"payg_remitter_type": remitter_type}))

    def generate_events(self, footprint: Footprint, today: Optional[date] = None) -> List[StatutoryEvent]:
        """Replace the event list with a freshly generated calendar."""
        new_state = self._mutate(lambda s: s.model_copy(update={
            "events": build_events(footprint, s.bas_cycle, today)
        }))
        return list(new_state.events)

    def add_event(self, event: StatutoryEvent) -> None:
        self._mutate(lambda s: s.model_copy(update={"events": [*s.events, event]}))

    def remove_event(self, event_id: str) -> None:
        self._mutate(lambda s: s.model_copy(update={
            "events": [e for e in s.events if e.id != event_id]
        }))

    def is_configured(self) -> bool:
        state = self.state
        return bool(state.bas_cycle) and bool(state.payg_remitter_type) and bool(state.events)
