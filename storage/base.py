"""Persistenz-Schnittstelle des Stundenplan-Kerns.

Der Kern implementiert keinen Speicher selbst, sondern spricht ausschließlich
über diese abstrakten Stores. Jeder Store ist für die Atomarität eines
einzelnen Schreibvorgangs verantwortlich und meldet Ausfälle als
StoreUnavailableError.
"""

from abc import ABC, abstractmethod
from datetime import date, time
from typing import Any, Optional

from models.lesson import StableLesson, WeekLesson
from models.school_class import SchoolClass
from models.subject import Subject


class ClassStore(ABC):
    @abstractmethod
    def get_class(self, class_id: str) -> SchoolClass:
        """Gibt die Klasse zurück oder wirft NotFoundError."""

    @abstractmethod
    def list_classes(self) -> list[SchoolClass]:
        ...


class SubjectStore(ABC):
    @abstractmethod
    def get_subject(self, subject_id: str) -> Subject:
        """Gibt das Fach zurück oder wirft NotFoundError."""

    @abstractmethod
    def list_subjects(self) -> list[Subject]:
        ...


class StableLessonStore(ABC):
    @abstractmethod
    def list_stable(self, class_id: str) -> list[StableLesson]:
        """Alle Stammstunden einer Klasse (alle Wochentage)."""

    @abstractmethod
    def get_stable(self, lesson_id: str) -> Optional[StableLesson]:
        """Stammstunde oder None, falls sie (nicht mehr) existiert."""

    @abstractmethod
    def create_stable(
        self,
        class_id: str,
        subject_id: str,
        day_of_week: int,
        start_time: time,
        end_time: time,
        room: Optional[str] = None,
    ) -> StableLesson:
        ...

    @abstractmethod
    def update_stable(self, lesson_id: str, changes: dict[str, Any]) -> StableLesson:
        """Ändert nur die in ``changes`` enthaltenen Felder."""

    @abstractmethod
    def delete_stable(self, lesson_id: str) -> None:
        ...


class WeekLessonStore(ABC):
    @abstractmethod
    def list_week(self, class_id: str, week_start_date: date) -> list[WeekLesson]:
        """Alle Wochenstunden einer Klasse für den (bereits normalisierten) Montag."""

    @abstractmethod
    def get_week(self, lesson_id: str) -> Optional[WeekLesson]:
        ...

    @abstractmethod
    def create_week(
        self,
        class_id: str,
        week_start_date: date,
        subject_id: str,
        day_of_week: int,
        start_time: time,
        end_time: time,
        room: Optional[str] = None,
        stable_lesson_id: Optional[str] = None,
        **extra: Any,
    ) -> WeekLesson:
        """Legt eine Wochenstunde an.

        Eindeutigkeit: höchstens eine Wochenstunde pro
        (class_id, week_start_date, stable_lesson_id), sonst DuplicateOverrideError.
        """

    @abstractmethod
    def update_week(self, lesson_id: str, changes: dict[str, Any]) -> WeekLesson:
        ...

    @abstractmethod
    def delete_week(self, lesson_id: str) -> None:
        ...

    @abstractmethod
    def copy_from_stable(self, class_id: str, week_start_date: date) -> list[WeekLesson]:
        """Kopiert den Stammplan in die Woche. Idempotent: keine Duplikate."""
