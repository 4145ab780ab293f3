"""Client-side task synchronization for the kanban board."""

__version__ = "0.1.0"
