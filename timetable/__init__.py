"""Stundenplan-Kern: Stammplan, Wochenstunden, Abgleich und Slot-Suche."""

from timetable.reconciliation import ReconciliationEngine, compute_changes, merge_week
from timetable.slots import ScheduleSlotResolver
from timetable.stable import StableTimetable
from timetable.week import WeekOverrideStore

__all__ = [
    "ReconciliationEngine",
    "compute_changes",
    "merge_week",
    "ScheduleSlotResolver",
    "StableTimetable",
    "WeekOverrideStore",
]
