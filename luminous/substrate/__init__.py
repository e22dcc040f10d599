"""External store clients and health monitoring.

- Document store (Firebase Realtime Database) - logs and identity snapshots
- List cache (Upstash REST or Redis) - rolling context window
- Vector index (Pinecone) - liveness only
"""

from .base import ListStore, StoreNotConfiguredError, StoreRequestError
from .document_store import FirebaseDocumentStore, get_document_store, reset_document_store
from .health import StoreHealthMonitor
from .list_cache import RedisListStore, UpstashListStore, create_list_store
from .vector_index import PineconeIndexClient

__all__ = [
    "ListStore",
    "StoreNotConfiguredError",
    "StoreRequestError",
    "FirebaseDocumentStore",
    "get_document_store",
    "reset_document_store",
    "StoreHealthMonitor",
    "RedisListStore",
    "UpstashListStore",
    "create_list_store",
    "PineconeIndexClient",
]
