"""JSON file persistence for a simulated launchpad world."""

import json
from pathlib import Path
from typing import Optional, Protocol

from .app import Launchpad
from .config import LaunchpadConfig


class WorldStore(Protocol):
    def exists(self) -> bool:
        ...

    def load(self) -> Launchpad:
        ...

    def save(self, launchpad: Launchpad) -> None:
        ...


class FileWorldStore:
    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def create(self, config: Optional[LaunchpadConfig] = None) -> Launchpad:
        if self.exists():
            raise FileExistsError(f"World file already exists: {self._path}")
        launchpad = Launchpad(config=config)
        self.save(launchpad)
        return launchpad

    def load(self) -> Launchpad:
        if not self.exists():
            raise FileNotFoundError(f"World file not found: {self._path}")
        return Launchpad.from_dict(json.loads(self._path.read_text()))

    def save(self, launchpad: Launchpad) -> None:
        self._path.write_text(json.dumps(launchpad.to_dict(), indent=2, sort_keys=True))
