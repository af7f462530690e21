from clubfeed.models.seen_activity import SeenActivity

__all__ = [
    "SeenActivity",
]
