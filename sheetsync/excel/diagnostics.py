"""Out-of-band messages collected during one push or read."""

from __future__ import annotations

import logging

logger = logging.getLogger("sheetsync.excel")


class Diagnostics:
    """Collects errors, warnings and notes and mirrors them to logging."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.notes: list[str] = []

    def error(self, message: str) -> None:
        logger.error("%s", message)
        self.errors.append(message)

    def warning(self, message: str) -> None:
        logger.warning("%s", message)
        self.warnings.append(message)

    def note(self, message: str) -> None:
        logger.info("%s", message)
        self.notes.append(message)

    @property
    def failed(self) -> bool:
        return bool(self.errors)

    def as_dict(self) -> dict[str, list[str]]:
        return {
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "notes": list(self.notes),
        }
