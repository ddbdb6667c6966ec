"""
Tests for statutory timetable generation.
"""

import pytest
from datetime import date

from corecomply.core.schema import Footprint
from corecomply.setup.timetable import BasCycle, EventType, StatutoryEvent, TimetableStore, build_events

TODAY = date(2025, 3, 1)


def events_of(events, event_type):
    return [e for e in events if e.type == event_type]


class TestBuildEvents:
    def test_superannuation_guarantee_quarters(self):
        events = events_of(build_events(Footprint(states=[]), None, today=TODAY), EventType.SG)

        assert [e.due_date for e in events] == [
            date(2025, 4, 28), date(2025, 7, 28), date(2025, 10, 28), date(2026, 1, 28),
        ]
        assert all(e.obligation_ref == "SG-001" for e in events)
        assert all(e.jurisdiction == "Commonwealth" for e in events)

    def test_quarterly_bas(self):
        events = events_of(build_events(Footprint(states=[]), BasCycle.QUARTERLY, today=TODAY), EventType.BAS)
        assert len(events) == 4
        assert events[-1].id == "bas-Q2-2025"
        assert events[-1].due_date == date(2026, 1, 28)

    def test_monthly_bas_due_on_21st_of_following_month(self):
        events = events_of(build_events(Footprint(states=[]), BasCycle.MONTHLY, today=TODAY), EventType.BAS)

        assert len(events) == 12
        assert events[0].due_date == date(2025, 2, 21)
        assert events[-1].due_date == date(2026, 1, 21)
        assert events[0].title == "BAS January"

    def test_no_bas_without_cycle(self):
        assert events_of(build_events(Footprint(states=[]), None, today=TODAY), EventType.BAS) == []

    def test_stp_finalisation(self):
        events = events_of(build_events(Footprint(states=[]), None, today=TODAY), EventType.STP)
        assert [e.due_date for e in events] == [date(2025, 7, 14)]

    def test_payroll_tax_per_state(self):
        events = events_of(build_events(Footprint(states=["NSW", "QLD"]), None, today=TODAY),
                           EventType.PAYROLL_TAX)

        assert len(events) == 24
        assert {e.jurisdiction for e in events} == {"NSW", "QLD"}
        assert events[0].due_date == date(2025, 2, 7)
        assert events[0].obligation_ref == "PT-NSW-001"
        assert events[11].due_date == date(2026, 1, 7)


class TestTimetableStore:
    @pytest.fixture
    def store(self):
        return TimetableStore()

    def test_not_configured_initially(self, store):
        assert store.is_configured() is False

    def test_configured_after_generation(self, store):
        store.set_bas_cycle("quarterly")
        store.set_payg_remitter_type("medium")
        events = store.generate_events(Footprint(states=["VIC"]), today=TODAY)

        assert len(events) == 4 + 4 + 1 + 12
        assert store.is_configured() is True

    def test_generation_replaces_events(self, store):
        store.set_bas_cycle(BasCycle.MONTHLY)
        store.generate_events(Footprint(states=["VIC"]), today=TODAY)
        store.generate_events(Footprint(states=[]), today=TODAY)

        assert len(store.state.events) == 4 + 12 + 1

    def test_invalid_cycle_rejected(self, store):
        with pytest.raises(ValueError):
            store.set_bas_cycle("fortnightly")

    def test_add_and_remove_event(self, store):
        event = StatutoryEvent(id="lsl-nsw", title="LSL levy", type=EventType.LSL,
                               due_date=date(2025, 6, 30), jurisdiction="NSW")
        store.add_event(event)
        assert store.state.events == [event]

        store.remove_event("lsl-nsw")
        assert store.state.events == []
