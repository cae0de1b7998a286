"""Teil-Updates mit expliziter Unterscheidung "nicht angegeben" / "leeren".

``UNSET`` bedeutet: Feld nicht angegeben, bleibt unverändert.
``room=""`` bedeutet: Raum ausdrücklich leeren (wird als None gespeichert).
"""

from typing import Any


class _Unset:
    """Sentinel-Typ für nicht angegebene Felder."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

# Felder, bei denen "" das Leeren des Wertes bedeutet
CLEARABLE_FIELDS = frozenset({"room", "note", "substitute_teacher_name"})


def collect_changes(**fields: Any) -> dict[str, Any]:
    """Sammelt alle angegebenen Felder; UNSET-Felder werden ausgelassen.

    Texte in CLEARABLE_FIELDS werden wie beim Anlegen getrimmt, leere
    Strings werden zu None (= leeren).
    """
    changes: dict[str, Any] = {}
    for name, value in fields.items():
        if value is UNSET:
            continue
        if name in CLEARABLE_FIELDS and isinstance(value, str):
            value = value.strip() or None
        changes[name] = value
    return changes
