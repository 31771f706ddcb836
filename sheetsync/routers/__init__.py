from sheetsync.routers import sync

__all__ = ["sync"]
