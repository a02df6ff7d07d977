"""Persistence gateway: the store contract and its implementations."""

from .base import DuplicateKeyError, EventStore, StoreError
from .local import LocalStore

__all__ = ["DuplicateKeyError", "EventStore", "StoreError", "LocalStore"]
