from __future__ import annotations

import logging
import sys
from configparser import ConfigParser
from pathlib import Path

from course_designer.preview.symbol_scale import SymbolScales, clamp_multiplier

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "course_designer.ini"


def default_settings_path() -> Path:
    """INI location: beside the executable for frozen builds, else beside this package."""
    if getattr(sys, "frozen", False):
        base = Path(sys.executable).resolve().parent
    else:
        base = Path(__file__).resolve().parent
    return base / SETTINGS_FILE_NAME


class FileHistory:
    """Recently used course files and the symbol scale multipliers, kept in one INI file."""

    MAX_RECENT = 10
    RECENT_SECTION = "recent"
    SYMBOLS_SECTION = "symbols"
    SYMBOL_KEYS = ("start", "control", "finish")

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path) if path is not None else default_settings_path()
        self._config = ConfigParser(strict=False, delimiters=("=",), interpolation=None)
        self._config.optionxform = str
        if self.path.exists():
            self._config.read(self.path, encoding="utf-8")

    # ------------------------------------------------------------------
    # Symbol scales
    # ------------------------------------------------------------------
    def get_symbol_scales(self) -> SymbolScales:
        stored = self._section(self.SYMBOLS_SECTION, create=False)
        if stored is None:
            return SymbolScales()
        # SymbolScales clamps; unparsable entries fall back to the default multiplier.
        return SymbolScales(**{key: clamp_multiplier(stored.get(key, "").strip()) for key in self.SYMBOL_KEYS})

    def set_symbol_scales(self, scales: SymbolScales) -> None:
        section = self._section(self.SYMBOLS_SECTION, create=True)
        wanted = {key: str(getattr(scales, key)) for key in self.SYMBOL_KEYS}
        if dict(section) == wanted:
            return
        section.clear()
        section.update(wanted)
        self._write()

    # ------------------------------------------------------------------
    # Recent course files
    # ------------------------------------------------------------------
    def record_open(self, course_path: Path) -> None:
        self._remember(course_path)

    def record_save(self, course_path: Path) -> None:
        self._remember(course_path)

    def get_recent_paths(self) -> list[Path]:
        section = self._section(self.RECENT_SECTION, create=False)
        if section is None:
            return []
        return [Path(line) for line in section.get("files", "").splitlines() if line.strip()]

    def _remember(self, course_path: Path) -> None:
        resolved = Path(course_path).resolve()
        recent = [resolved] + [p for p in self.get_recent_paths() if p != resolved]
        section = self._section(self.RECENT_SECTION, create=True)
        section["files"] = "\n".join(str(p) for p in recent[: self.MAX_RECENT])
        self._write()

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------
    def _section(self, name: str, *, create: bool):
        if not self._config.has_section(name):
            if not create:
                return None
            self._config.add_section(name)
        return self._config[name]

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as fp:
            self._config.write(fp)
        logger.debug("Saved settings to %s", self.path)
