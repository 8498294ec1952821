"""Record and settings stores."""

from mux_console.infrastructure.storage.memory import InMemorySessionStore, InMemoryStore
from mux_console.infrastructure.storage.settings_file import JsonSettingsStore

__all__ = ["InMemorySessionStore", "InMemoryStore", "JsonSettingsStore"]
