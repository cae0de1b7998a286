"""Datenmodell für ein Unterrichtsfach (Pydantic v2)."""

from typing import Optional
from pydantic import BaseModel


class Subject(BaseModel):
    """Repräsentiert ein Unterrichtsfach einer Klasse."""

    id: str
    name: str
    color: int = 0xFF9E9E9E             # ARGB, für die Anzeige undurchsichtig
    teacher_name: Optional[str] = None
    teacher_id: Optional[str] = None

    @property
    def color_hex(self) -> str:
        """Farbe als RRGGBB-String (Alphakanal verworfen)."""
        return f"{self.color & 0xFFFFFF:06X}"
