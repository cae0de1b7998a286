from models.subject import Subject
from models.school_class import SchoolClass
from models.lesson import LessonStatus, StableLesson, WeekLesson
from models.effective import ChangeSet, EffectiveLesson
from models.timeslot import TimeSlot
from models.timetable_data import TimetableData

__all__ = [
    "Subject",
    "SchoolClass",
    "LessonStatus",
    "StableLesson",
    "WeekLesson",
    "ChangeSet",
    "EffectiveLesson",
    "TimeSlot",
    "TimetableData",
]
