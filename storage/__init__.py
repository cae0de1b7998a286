"""Persistenz-Schnittstelle (abstrakte Stores) und Implementierungen."""

from storage.base import ClassStore, StableLessonStore, SubjectStore, WeekLessonStore
from storage.errors import (
    DuplicateOverrideError,
    LessonValidationError,
    NotFoundError,
    SlotConflictError,
    StoreUnavailableError,
    TimetableError,
)
from storage.json_store import JsonFileStore
from storage.memory import InMemoryStore
from storage.updates import UNSET, collect_changes

__all__ = [
    "ClassStore",
    "SubjectStore",
    "StableLessonStore",
    "WeekLessonStore",
    "TimetableError",
    "NotFoundError",
    "SlotConflictError",
    "LessonValidationError",
    "StoreUnavailableError",
    "DuplicateOverrideError",
    "InMemoryStore",
    "JsonFileStore",
    "UNSET",
    "collect_changes",
]
