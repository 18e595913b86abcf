from .app import Launchpad
from .config import ConfigError, LaunchpadConfig
from .persistence import FileWorldStore, WorldStore

__all__ = [
    "ConfigError",
    "FileWorldStore",
    "Launchpad",
    "LaunchpadConfig",
    "WorldStore",
]
