from config.schema import (
    AppConfig,
    LessonSlot,
    LoggingConfig,
    StorageConfig,
    TimeGridConfig,
)


def default_time_grid() -> TimeGridConfig:
    """Standard-Stundenraster (45-Minuten-Stunden, Mo–Fr).

    Stundenraster:
     1. Stunde  08:00 - 08:45
     2. Stunde  08:50 - 09:35
        ── Pause (10 min) ──
     3. Stunde  09:45 - 10:30
     4. Stunde  10:35 - 11:20
        ── Große Pause (20 min) ──
     5. Stunde  11:40 - 12:25
     6. Stunde  12:30 - 13:15
        ── Mittagspause (15 min) ──
     7. Stunde  13:30 - 14:15
     8. Stunde  14:20 - 15:05
     9. Stunde  15:10 - 15:55
    10. Stunde  16:00 - 16:45
    """
    return TimeGridConfig(
        school_days=[1, 2, 3, 4, 5],
        lesson_slots=[
            LessonSlot(slot_number=1, start_time="08:00", end_time="08:45"),
            LessonSlot(slot_number=2, start_time="08:50", end_time="09:35"),
            LessonSlot(slot_number=3, start_time="09:45", end_time="10:30"),
            LessonSlot(slot_number=4, start_time="10:35", end_time="11:20"),
            LessonSlot(slot_number=5, start_time="11:40", end_time="12:25"),
            LessonSlot(slot_number=6, start_time="12:30", end_time="13:15"),
            LessonSlot(slot_number=7, start_time="13:30", end_time="14:15"),
            LessonSlot(slot_number=8, start_time="14:20", end_time="15:05"),
            LessonSlot(slot_number=9, start_time="15:10", end_time="15:55"),
            LessonSlot(slot_number=10, start_time="16:00", end_time="16:45"),
        ],
        lesson_duration_minutes=45,
    )


def default_app_config() -> AppConfig:
    """Komplette Default-Konfiguration."""
    return AppConfig(
        school_name="Muster-Schule",
        time_grid=default_time_grid(),
        storage=StorageConfig(),
        logging=LoggingConfig(),
    )


# ─── FÄCHER FÜR DEMO-DATEN ───
# Name → Farbe (ARGB) und Wochenstunden pro Klasse

SUBJECT_METADATA: dict[str, dict] = {
    "Mathematik": {"short": "Ma", "color": 0xFF2196F3, "hours": 4},
    "Deutsch":    {"short": "De", "color": 0xFFF44336, "hours": 4},
    "Englisch":   {"short": "En", "color": 0xFFFFC107, "hours": 4},
    "Physik":     {"short": "Ph", "color": 0xFF4CAF50, "hours": 2},
    "Biologie":   {"short": "Bi", "color": 0xFF8BC34A, "hours": 2},
    "Geschichte": {"short": "Ge", "color": 0xFF795548, "hours": 2},
    "Erdkunde":   {"short": "Ek", "color": 0xFF009688, "hours": 2},
    "Kunst":      {"short": "Ku", "color": 0xFFE91E63, "hours": 2},
    "Musik":      {"short": "Mu", "color": 0xFF9C27B0, "hours": 2},
    "Sport":      {"short": "Sp", "color": 0xFFFF9800, "hours": 3},
}
