"""Persisted player scalars: best score, progression and preferences."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Union


logger = logging.getLogger(__name__)

THEMES = ("dark", "light")
LANGUAGES = ("en", "uk")


def _count(value: Any, minimum: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= minimum


_CHECKS = {
    "best": lambda v: _count(v, 0),
    "experience": lambda v: _count(v, 0),
    "level": lambda v: _count(v, 1),
    "theme": lambda v: v in THEMES,
    "language": lambda v: v in LANGUAGES,
    "muted": lambda v: isinstance(v, bool),
}


@dataclass
class Profile:
    """Every field is checked on assignment, so a profile is always saveable."""

    best: int = 0
    experience: int = 0
    level: int = 1
    theme: str = "dark"
    language: str = "en"
    muted: bool = False

    def __setattr__(self, name: str, value: Any) -> None:
        check = _CHECKS.get(name)
        if check is not None and not check(value):
            raise ValueError(f"invalid {name} {value!r}")
        super().__setattr__(name, value)


class ProfileStore:
    """Reads and writes a `Profile` as a small JSON document.

    Keys are read one by one: an unreadable value falls back to its default
    without costing the others.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load(self) -> Profile:
        profile = Profile()
        if not self.path.exists():
            return profile
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError as exc:
            logger.warning("ignoring unreadable profile %s: %s", self.path, exc)
            return profile
        if not isinstance(data, dict):
            logger.warning("ignoring profile %s: expected an object", self.path)
            return profile
        for key, value in data.items():
            if key not in _CHECKS:
                continue
            try:
                setattr(profile, key, value)
            except ValueError as exc:
                logger.warning("profile %s: %s, keeping default", self.path, exc)
        return profile

    def save(self, profile: Profile) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(asdict(profile), indent=2), encoding="utf-8")
