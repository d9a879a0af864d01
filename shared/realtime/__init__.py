from shared.realtime.tracker import StatusChangeTracker

__all__ = ["StatusChangeTracker"]
