"""
Message history: the chat.db adapter and the provider that computes recency.
"""

from .repository import MessageStoreRepository, MessageStoreUnavailable
from .service import HistoryProvider

__all__ = ["HistoryProvider", "MessageStoreRepository", "MessageStoreUnavailable"]
