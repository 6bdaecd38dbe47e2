"""
Session — catalog, profile and the per-shopper wiring.

    from cartflow import session as Ss

    async with await Ss.open_session(profiles=Ss.StaticProfileProvider(profile)) as shop:
        await shop.add_product(1)
        await shop.checkout_with_profile("card")
"""

from cartflow.session._catalog import (
    Catalog,
    InMemoryCatalog,
    DEMO_PRODUCTS,
    ProfileProvider,
    StaticProfileProvider,
)
from cartflow.session._session import CartSession, open_session

__all__ = (
    "Catalog",
    "InMemoryCatalog",
    "DEMO_PRODUCTS",
    "ProfileProvider",
    "StaticProfileProvider",
    "CartSession",
    "open_session",
)
