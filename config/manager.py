"""Konfigurationsmanager: AppConfig als kommentierte YAML-Datei laden und speichern.

Nutzt ruamel.yaml, damit die Abschnittskommentare beim Schreiben erhalten bleiben.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import AppConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTARE ───

_HEADER = """\
# ============================================
# Stundenplan-Abgleich: Konfiguration
# Erstellt: {created}
# Wochentage überall ISO: 1=Mo .. 7=So
# ============================================
"""

# Abschnitt → (Überschrift, Erläuterung oder None)
_SECTION_COMMENTS = {
    "time_grid": (
        "Stundenraster",
        "Vorlage für Eingabe und Export; Stunden dürfen auch außerhalb liegen.",
    ),
    "storage": (
        "Datenablage",
        "sunday_zero_days: true legt Wochentage als 0=So ab (externe Backends).",
    ),
    "logging": ("Logging", None),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "app_config.yaml"

    def first_run_check(self) -> bool:
        """True solange noch keine app_config.yaml angelegt wurde."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> AppConfig:
        """Liest die YAML-Datei und validiert sie gegen AppConfig."""
        source = Path(path or self.DEFAULT_CONFIG)
        if not source.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {source}\n"
                f"Mit 'python main.py setup' wird eine Standard-Konfiguration angelegt."
            )
        with open(source, "r", encoding="utf-8") as f:
            raw = yaml.load(f) or {}
        try:
            return AppConfig.model_validate(dict(raw))
        except ValidationError as e:
            raise ValueError(f"Konfigurationsdatei ungültig: {source}\n{e}") from e

    def load_or_default(self, path: Optional[Path] = None) -> AppConfig:
        """Wie load(), aber Default-Konfiguration wenn die Datei fehlt."""
        from config.defaults import default_app_config
        source = Path(path or self.DEFAULT_CONFIG)
        return self.load(source) if source.exists() else default_app_config()

    # ─── Speichern ───

    def save(self, config: AppConfig, path: Optional[Path] = None) -> None:
        """Schreibt die Konfiguration mit Kopfzeilen und Abschnittskommentaren."""
        target = Path(path or self.DEFAULT_CONFIG)
        target.parent.mkdir(parents=True, exist_ok=True)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_HEADER.format(created=date.today().isoformat()) + "\n")
            yaml.dump(self._commented(config), f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _commented(self, config: AppConfig) -> CommentedMap:
        doc = CommentedMap(json.loads(config.model_dump_json()))

        log_section = CommentedMap(doc["logging"])
        log_section.yaml_add_eol_comment("DEBUG / INFO / WARNING / ERROR", "level")
        doc["logging"] = log_section

        for key, (title, note) in _SECTION_COMMENTS.items():
            lines = ["", f"─── {title} ───"] + ([note] if note else [])
            doc.yaml_set_comment_before_after_key(key, before="\n".join(lines))
        return doc
