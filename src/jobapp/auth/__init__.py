from .session import SessionContext
from .token_store import InMemoryTokenStore, SqliteTokenStore, TokenStore

__all__ = ["SessionContext", "InMemoryTokenStore", "SqliteTokenStore", "TokenStore"]
