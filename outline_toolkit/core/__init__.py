"""Core, UI-free layers of the outline toolkit (models, lookups, services)."""
