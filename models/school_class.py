"""Datenmodell für eine Schulklasse (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel


class SchoolClass(BaseModel):
    """Repräsentiert eine einzelne Klasse (z.B. 7b), Eigentümerin des Stammplans."""

    id: str                          # "7b" oder UUID aus dem Backend
    name: str                        # Anzeigename, z.B. "7b"
    school_id: Optional[str] = None
