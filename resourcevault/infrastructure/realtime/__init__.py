from .pg_change_feed import PgChangeFeed, decode_notification
from .registry import CallbackRegistry, RegisteredSubscription

__all__ = [
    "CallbackRegistry",
    "PgChangeFeed",
    "RegisteredSubscription",
    "decode_notification",
]
