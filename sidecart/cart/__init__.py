"""Cart package: models, identity storage, and the remote repository."""
from .models import CartLine, CartLineInput, CartSnapshot
from .repository import CartRepository
from .storage import (
    CART_ID_KEY,
    CartIdentityStore,
    FileIdentityStore,
    MemoryIdentityStore,
    RedisIdentityStore,
)

__all__ = [
    "CartLine",
    "CartLineInput",
    "CartSnapshot",
    "CartRepository",
    "CART_ID_KEY",
    "CartIdentityStore",
    "FileIdentityStore",
    "MemoryIdentityStore",
    "RedisIdentityStore",
]
