"""
Shop — every service wired over one backend.

    shop = Shop.memory()
    await shop.put_product(Product("p-1", "Mug", Decimal("10.00"), stock=3))

    await shop.cart.add_item("user-1", "p-1")
    order = (await shop.orders.checkout(request)).unwrap()
    await shop.orders.set_status(order.id, OrderStatus.CANCELLED)

    shop = await Shop.sqlalchemy(ShopConfig.from_env())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from kungfu import Result

from storecore._errors import ShopError
from storecore.cart import CartService, CartStore
from storecore.catalog import CatalogStore, Product
from storecore.config import ShopConfig
from storecore.inventory import InventoryLedger, StockStore
from storecore.orders import OrderService, OrderStore
from storecore.reviews import ReviewGate, ReviewStore
from storecore.settings import SettingsStore, StoredSettings
from storecore.storage import MemoryBackend, SQLAlchemyBackend
from storecore.wishlist import WishlistService, WishlistStore

logger = logging.getLogger(__name__)


class SeedableCatalog(CatalogStore, Protocol):
    async def put_product(self, product: Product) -> Result[None, ShopError]: ...


class Backend(Protocol):
    @property
    def catalog(self) -> SeedableCatalog: ...
    @property
    def stock(self) -> StockStore: ...
    @property
    def carts(self) -> CartStore: ...
    @property
    def orders(self) -> OrderStore: ...
    @property
    def reviews(self) -> ReviewStore: ...
    @property
    def settings(self) -> SettingsStore: ...
    @property
    def wishlist(self) -> WishlistStore: ...


@dataclass(frozen=True, slots=True)
class Shop:
    config: ShopConfig
    backend: Backend
    settings: StoredSettings
    inventory: InventoryLedger
    cart: CartService
    orders: OrderService
    reviews: ReviewGate
    wishlist: WishlistService

    @classmethod
    def from_backend(cls, backend: Backend, config: ShopConfig | None = None) -> Shop:
        config = config or ShopConfig()
        settings = StoredSettings(
            backend.settings,
            ttl=config.settings_ttl,
            defaults=config.default_settings,
        )
        inventory = InventoryLedger(
            stock=backend.stock,
            catalog=backend.catalog,
            low_stock_threshold=config.low_stock_threshold,
        )
        cart = CartService(backend.carts, backend.catalog, settings)
        orders = OrderService(
            orders=backend.orders,
            carts=cart,
            cart_store=backend.carts,
            catalog=backend.catalog,
            ledger=inventory,
            settings=settings,
            reinstate_policy=config.reinstate_policy,
        )
        return cls(
            config=config,
            backend=backend,
            settings=settings,
            inventory=inventory,
            cart=cart,
            orders=orders,
            reviews=ReviewGate(backend.reviews, backend.orders, backend.catalog),
            wishlist=WishlistService(backend.wishlist, backend.catalog),
        )

    @classmethod
    def memory(cls, config: ShopConfig | None = None) -> Shop:
        return cls.from_backend(MemoryBackend(), config)

    @classmethod
    async def sqlalchemy(cls, config: ShopConfig | None = None) -> Shop:
        """Connect to `config.database_url` and create missing tables."""
        config = config or ShopConfig()
        backend = SQLAlchemyBackend.create(config.database_url, echo=config.echo_sql)
        await backend.create_all()
        logger.info("Shop storage ready at %s", backend.engine.url.render_as_string(hide_password=True))
        return cls.from_backend(backend, config)

    async def put_product(self, product: Product) -> Result[None, ShopError]:
        """Seed or replace a catalog product."""
        return await self.backend.catalog.put_product(product)

    async def close(self) -> None:
        if isinstance(self.backend, SQLAlchemyBackend):
            await self.backend.dispose()


__all__ = ("Backend", "SeedableCatalog", "Shop")
