"""
Session wiring: one shopper, one cart, one checkout machine.
"""

from __future__ import annotations

from types import TracebackType

import structlog
from kungfu import Result, Ok, Error
from sqlalchemy.ext.asyncio import AsyncEngine

from cartflow._types import ProductId
from cartflow.cart import CartStore
from cartflow.checkout import (
    CheckoutError,
    CheckoutMachine,
    CheckoutResult,
    PaymentProcessor,
    SimulatedPaymentProcessor,
)
from cartflow.config import Settings, settings as default_settings
from cartflow.domain import CartError, LineItem
from cartflow.events import EventChannel
from cartflow.session._catalog import DEMO_PRODUCTS, Catalog, InMemoryCatalog, ProfileProvider
from cartflow.store import SQLAlchemyLineItemStore, create_database

logger = structlog.get_logger(__name__)


class CartSession:
    """
    Everything one shopper needs, owned together.

    Each session has its own cart, event channel and checkout machine;
    nothing is shared through module globals.

    Example:
        async with await open_session(profiles=StaticProfileProvider(profile)) as session:
            await session.add_product(1, quantity=2)
            await session.checkout_with_profile("card")
    """

    def __init__(
        self,
        cart: CartStore,
        checkout: CheckoutMachine,
        catalog: Catalog,
        profiles: ProfileProvider,
        *,
        engine: AsyncEngine | None = None,
    ) -> None:
        self._cart = cart
        self._checkout = checkout
        self._catalog = catalog
        self._profiles = profiles
        self._engine = engine

    @property
    def cart(self) -> CartStore:
        return self._cart

    @property
    def checkout(self) -> CheckoutMachine:
        return self._checkout

    @property
    def events(self) -> EventChannel:
        return self._cart.events

    async def add_product(self, product_id: ProductId, quantity: int = 1) -> Result[LineItem, CartError]:
        """Look the product up in the catalog and add it to the cart."""
        match await self._catalog.get_product(product_id):
            case Error(e):
                logger.info("Unknown product", product_id=product_id)
                return Error(CartError.not_found(e.message))
            case Ok(product):
                return await self._cart.add_or_increment(product, quantity)

    async def checkout_with_profile(
        self,
        payment_method: str,
        *,
        customer_name: str | None = None,
        shipping_address: str | None = None,
    ) -> Result[CheckoutResult, CheckoutError]:
        """
        Check out with the shopper's profile.

        Name and address can be overridden (edited on the checkout form);
        discount eligibility always comes from the profile.
        """
        profile = await self._profiles.current_profile()
        return await self._checkout.checkout(
            customer_name if customer_name is not None else profile.customer_name,
            shipping_address if shipping_address is not None else profile.shipping_address,
            payment_method,
            profile.discount_eligible,
        )

    async def close(self) -> None:
        """Wait for an in-flight checkout, then release the database."""
        await self._checkout.wait_idle()
        if self._engine is not None:
            await self._engine.dispose()

    async def __aenter__(self) -> CartSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


async def open_session(
    *,
    profiles: ProfileProvider,
    settings: Settings | None = None,
    catalog: Catalog | None = None,
    payments: PaymentProcessor | None = None,
) -> CartSession:
    """
    Build a SQLAlchemy-backed session from settings.

    Defaults: the demo catalog and a simulated payment processor with the
    configured delay.
    """
    cfg = settings or default_settings
    session_factory, engine = await create_database(cfg.database_url)

    channel = EventChannel(capacity=cfg.event_buffer_size)
    cart = CartStore(SQLAlchemyLineItemStore(session_factory), channel)
    machine = CheckoutMachine(
        cart,
        channel,
        payments or SimulatedPaymentProcessor(delay=cfg.payment_delay_seconds),
        discount_rate=cfg.discount_rate,
        min_customer_name_length=cfg.min_customer_name_length,
        min_shipping_address_length=cfg.min_shipping_address_length,
    )
    logger.info("Session opened", database=cfg.database_url)
    return CartSession(
        cart,
        machine,
        catalog or InMemoryCatalog(DEMO_PRODUCTS),
        profiles,
        engine=engine,
    )


__all__ = ("CartSession", "open_session")
