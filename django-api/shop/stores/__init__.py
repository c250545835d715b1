from shop.stores.interfaces import (
    AuditStore,
    CatalogStore,
    CouponStore,
    MessageStore,
    OrderStore,
    SettingsStore,
    TokenStore,
)

__all__ = [
    "AuditStore",
    "CatalogStore",
    "CouponStore",
    "MessageStore",
    "OrderStore",
    "SettingsStore",
    "TokenStore",
]
