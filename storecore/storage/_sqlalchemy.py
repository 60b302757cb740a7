"""
SQLAlchemy backend — async stores over one session factory.

    backend = SQLAlchemyBackend.create("sqlite+aiosqlite:///shop.db")
    await backend.create_all()

Every store call opens its own session and commits before returning,
so each call is one transaction. Writing calls issue their write
statement first (UPDATE/DELETE ... RETURNING), never read-then-write,
so concurrent writers queue on the database lock instead of deadlocking.
Driver errors come back as Error(PERSISTENCE) carrying the cause.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime

from kungfu import Result, Ok, Error
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from storecore._errors import ShopError, ShopErrors
from storecore._types import OrderId, OwnerId, ProductId
from storecore.cart import CartLine, Totals
from storecore.catalog import Product, ProductStatus
from storecore.inventory import StockChange
from storecore.orders import (
    DeliveryType,
    Order,
    OrderLine,
    OrderStatus,
    PaymentMethod,
    ShippingInfo,
)
from storecore.reviews import Review
from storecore.storage._tables import (
    Base,
    CartItemRow,
    OrderItemRow,
    OrderRow,
    ProductRow,
    ReviewRow,
    SettingRow,
    WishlistRow,
)
from storecore.wishlist import WishlistEntry

logger = logging.getLogger(__name__)

type Sessions = async_sessionmaker[AsyncSession]

# ═══════════════════════════════════════════════════════════════════════════════
# Session Runner
# ═══════════════════════════════════════════════════════════════════════════════


class _SessionStore:
    def __init__(self, sessions: Sessions) -> None:
        self._sessions = sessions

    async def _run[T](
        self,
        what: str,
        work: Callable[[AsyncSession], Awaitable[Result[T, ShopError]]],
    ) -> Result[T, ShopError]:
        try:
            async with self._sessions() as session:
                return await work(session)
        except SQLAlchemyError as e:
            logger.error("Failed to %s: %s", what, e)
            return Error(ShopErrors.persistence(f"Failed to {what}: {e}", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog + Stock
# ═══════════════════════════════════════════════════════════════════════════════


def _product(row: ProductRow) -> Product:
    return Product(
        id=row.id,
        title=row.title,
        price=row.price,
        stock=row.stock,
        category=row.category,
        sale_price=row.sale_price,
        rating=row.rating,
        status=ProductStatus(row.status),
    )


class SQLAlchemyCatalog(_SessionStore):
    """CatalogStore and StockStore over the products table."""

    _CLAMP_ATTEMPTS = 8

    async def put_product(self, product: Product) -> Result[None, ShopError]:
        """Seed or replace a product. Read-then-write, so not for concurrent use."""

        async def work(session: AsyncSession) -> Result[None, ShopError]:
            await session.merge(ProductRow(
                id=product.id,
                title=product.title,
                price=product.price,
                sale_price=product.sale_price,
                stock=product.stock,
                category=product.category,
                rating=product.rating,
                status=product.status.value,
            ))
            await session.commit()
            return Ok(None)

        return await self._run(f"put product {product.id}", work)

    async def get_product(self, product_id: ProductId) -> Result[Product | None, ShopError]:
        async def work(session: AsyncSession) -> Result[Product | None, ShopError]:
            row = await session.get(ProductRow, product_id)
            return Ok(None if row is None else _product(row))

        return await self._run(f"get product {product_id}", work)

    async def list_products(self) -> Result[list[Product], ShopError]:
        async def work(session: AsyncSession) -> Result[list[Product], ShopError]:
            rows = await session.scalars(select(ProductRow).order_by(ProductRow.id))
            return Ok([_product(row) for row in rows])

        return await self._run("list products", work)

    async def get_stock(self, product_id: ProductId) -> Result[int | None, ShopError]:
        async def work(session: AsyncSession) -> Result[int | None, ShopError]:
            return Ok(await _level(session, product_id))

        return await self._run(f"read stock of {product_id}", work)

    async def increment(self, product_id: ProductId, quantity: int) -> Result[StockChange | None, ShopError]:
        async def work(session: AsyncSession) -> Result[StockChange | None, ShopError]:
            after = await session.scalar(
                update(ProductRow)
                .where(ProductRow.id == product_id)
                .values(stock=ProductRow.stock + quantity)
                .returning(ProductRow.stock)
            )
            await session.commit()
            if after is None:
                return Ok(None)
            return Ok(StockChange(product_id, quantity, after - quantity, after))

        return await self._run(f"increment stock of {product_id}", work)

    async def reserve(self, product_id: ProductId, quantity: int) -> Result[StockChange | None, ShopError]:
        async def work(session: AsyncSession) -> Result[StockChange | None, ShopError]:
            after = await _take(session, product_id, quantity)
            if after is not None:
                await session.commit()
                return Ok(StockChange(product_id, quantity, after + quantity, after))

            level = await _level(session, product_id)
            if level is None:
                return Ok(None)
            return Error(ShopErrors.insufficient_stock(product_id, quantity, level))

        return await self._run(f"reserve stock of {product_id}", work)

    async def decrement(self, product_id: ProductId, quantity: int) -> Result[StockChange | None, ShopError]:
        async def work(session: AsyncSession) -> Result[StockChange | None, ShopError]:
            for _ in range(self._CLAMP_ATTEMPTS):
                after = await _take(session, product_id, quantity)
                if after is not None:
                    await session.commit()
                    return Ok(StockChange(product_id, quantity, after + quantity, after))

                # Not enough stock: zero it, but only from the level just read.
                level = await _level(session, product_id)
                if level is None:
                    return Ok(None)
                if level >= quantity:
                    continue
                zeroed = await session.scalar(
                    update(ProductRow)
                    .where(ProductRow.id == product_id, ProductRow.stock == level)
                    .values(stock=0)
                    .returning(ProductRow.stock)
                )
                if zeroed is not None:
                    await session.commit()
                    return Ok(StockChange(product_id, quantity, level, 0))

            return Error(ShopErrors.persistence(
                f"Stock of {product_id} kept changing during a clamped decrement",
                product_id=product_id,
            ))

        return await self._run(f"decrement stock of {product_id}", work)


async def _level(session: AsyncSession, product_id: ProductId) -> int | None:
    return await session.scalar(select(ProductRow.stock).where(ProductRow.id == product_id))


async def _take(session: AsyncSession, product_id: ProductId, quantity: int) -> int | None:
    """Conditional decrement. Returns the new level, or None if it did not apply."""
    return await session.scalar(
        update(ProductRow)
        .where(ProductRow.id == product_id, ProductRow.stock >= quantity)
        .values(stock=ProductRow.stock - quantity)
        .returning(ProductRow.stock)
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Carts
# ═══════════════════════════════════════════════════════════════════════════════


def _line(row: CartItemRow) -> CartLine:
    return CartLine(row.product_id, row.quantity, row.unit_price)


class SQLAlchemyCarts(_SessionStore):
    async def get_lines(self, owner_id: OwnerId) -> Result[list[CartLine], ShopError]:
        async def work(session: AsyncSession) -> Result[list[CartLine], ShopError]:
            rows = await session.scalars(
                select(CartItemRow).where(CartItemRow.owner_id == owner_id).order_by(CartItemRow.id)
            )
            return Ok([_line(row) for row in rows])

        return await self._run(f"read cart of {owner_id}", work)

    async def put_line(self, owner_id: OwnerId, line: CartLine) -> Result[None, ShopError]:
        async def work(session: AsyncSession) -> Result[None, ShopError]:
            updated = await session.scalar(
                update(CartItemRow)
                .where(CartItemRow.owner_id == owner_id, CartItemRow.product_id == line.product_id)
                .values(quantity=line.quantity, unit_price=line.unit_price)
                .returning(CartItemRow.id)
            )
            if updated is None:
                session.add(CartItemRow(
                    owner_id=owner_id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                ))
            await session.commit()
            return Ok(None)

        return await self._run(f"save cart line {line.product_id} of {owner_id}", work)

    async def delete_line(self, owner_id: OwnerId, product_id: ProductId) -> Result[bool, ShopError]:
        async def work(session: AsyncSession) -> Result[bool, ShopError]:
            removed = await session.scalar(
                delete(CartItemRow)
                .where(CartItemRow.owner_id == owner_id, CartItemRow.product_id == product_id)
                .returning(CartItemRow.id)
            )
            await session.commit()
            return Ok(removed is not None)

        return await self._run(f"delete cart line {product_id} of {owner_id}", work)

    async def clear(self, owner_id: OwnerId) -> Result[list[CartLine], ShopError]:
        async def work(session: AsyncSession) -> Result[list[CartLine], ShopError]:
            removed = await session.execute(
                delete(CartItemRow)
                .where(CartItemRow.owner_id == owner_id)
                .returning(
                    CartItemRow.id,
                    CartItemRow.product_id,
                    CartItemRow.quantity,
                    CartItemRow.unit_price,
                )
            )
            rows = sorted(removed.all(), key=lambda row: row.id)
            await session.commit()
            return Ok([CartLine(row.product_id, row.quantity, row.unit_price) for row in rows])

        return await self._run(f"clear cart of {owner_id}", work)


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


def _order_row(order: Order) -> OrderRow:
    return OrderRow(
        id=order.id,
        owner_id=order.owner_id,
        status=order.status.value,
        payment_method=order.payment_method.value,
        delivery_type=order.delivery_type.value,
        shipping_name=order.shipping.name,
        shipping_email=order.shipping.email,
        shipping_phone=order.shipping.phone,
        shipping_address=order.shipping.address,
        shipping_city=order.shipping.city,
        shipping_postal_code=order.shipping.postal_code,
        shipping_country=order.shipping.country,
        notes=order.notes,
        subtotal=order.totals.subtotal,
        taxes=order.totals.taxes,
        shipping=order.totals.shipping,
        total=order.totals.total,
        currency=order.totals.currency,
        idempotency_key=order.idempotency_key,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[
            OrderItemRow(
                position=position,
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
            )
            for position, line in enumerate(order.lines)
        ],
    )


def _order(row: OrderRow) -> Order:
    return Order(
        id=row.id,
        owner_id=row.owner_id,
        lines=tuple(OrderLine(i.product_id, i.quantity, i.unit_price) for i in row.items),
        totals=Totals(
            subtotal=row.subtotal,
            taxes=row.taxes,
            shipping=row.shipping,
            total=row.total,
            currency=row.currency,
        ),
        payment_method=PaymentMethod(row.payment_method),
        delivery_type=DeliveryType(row.delivery_type),
        shipping=ShippingInfo(
            name=row.shipping_name,
            email=row.shipping_email,
            phone=row.shipping_phone,
            address=row.shipping_address,
            city=row.shipping_city,
            postal_code=row.shipping_postal_code,
            country=row.shipping_country,
        ),
        notes=row.notes,
        status=OrderStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
        idempotency_key=row.idempotency_key,
    )


class SQLAlchemyOrders(_SessionStore):
    async def insert(self, order: Order) -> Result[bool, ShopError]:
        async def work(session: AsyncSession) -> Result[bool, ShopError]:
            session.add(_order_row(order))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return Ok(False)
            return Ok(True)

        return await self._run(f"insert order {order.id}", work)

    async def delete(self, order_id: OrderId) -> Result[bool, ShopError]:
        async def work(session: AsyncSession) -> Result[bool, ShopError]:
            await session.execute(delete(OrderItemRow).where(OrderItemRow.order_id == order_id))
            removed = await session.scalar(
                delete(OrderRow).where(OrderRow.id == order_id).returning(OrderRow.id)
            )
            await session.commit()
            return Ok(removed is not None)

        return await self._run(f"delete order {order_id}", work)

    async def get(self, order_id: OrderId) -> Result[Order | None, ShopError]:
        async def work(session: AsyncSession) -> Result[Order | None, ShopError]:
            row = await session.get(OrderRow, order_id)
            return Ok(None if row is None else _order(row))

        return await self._run(f"get order {order_id}", work)

    async def find_by_idempotency_key(self, owner_id: OwnerId, key: str) -> Result[Order | None, ShopError]:
        async def work(session: AsyncSession) -> Result[Order | None, ShopError]:
            row = await session.scalar(
                select(OrderRow).where(OrderRow.owner_id == owner_id, OrderRow.idempotency_key == key)
            )
            return Ok(None if row is None else _order(row))

        return await self._run(f"find checkout {key}", work)

    async def list_for_owner(self, owner_id: OwnerId) -> Result[list[Order], ShopError]:
        async def work(session: AsyncSession) -> Result[list[Order], ShopError]:
            rows = await session.scalars(
                select(OrderRow)
                .where(OrderRow.owner_id == owner_id)
                .order_by(OrderRow.created_at.desc())
            )
            return Ok([_order(row) for row in rows])

        return await self._run(f"list orders of {owner_id}", work)

    async def list_all(self) -> Result[list[Order], ShopError]:
        async def work(session: AsyncSession) -> Result[list[Order], ShopError]:
            rows = await session.scalars(select(OrderRow).order_by(OrderRow.created_at.desc()))
            return Ok([_order(row) for row in rows])

        return await self._run("list orders", work)

    async def compare_and_set_status(
        self,
        order_id: OrderId,
        expected: OrderStatus,
        new: OrderStatus,
        at: datetime,
    ) -> Result[bool, ShopError]:
        async def work(session: AsyncSession) -> Result[bool, ShopError]:
            swapped = await session.scalar(
                update(OrderRow)
                .where(OrderRow.id == order_id, OrderRow.status == expected.value)
                .values(status=new.value, updated_at=at)
                .returning(OrderRow.id)
            )
            await session.commit()
            return Ok(swapped is not None)

        return await self._run(f"set status of order {order_id}", work)


# ═══════════════════════════════════════════════════════════════════════════════
# Reviews
# ═══════════════════════════════════════════════════════════════════════════════


def _review(row: ReviewRow) -> Review:
    return Review(
        id=row.id,
        owner_id=row.owner_id,
        product_id=row.product_id,
        order_id=row.order_id,
        rating=row.rating,
        comment=row.comment,
        author_name=row.author_name,
        created_at=row.created_at,
        verified=row.verified,
    )


class SQLAlchemyReviews(_SessionStore):
    async def insert_if_absent(self, review: Review) -> Result[bool, ShopError]:
        async def work(session: AsyncSession) -> Result[bool, ShopError]:
            session.add(ReviewRow(
                id=review.id,
                owner_id=review.owner_id,
                product_id=review.product_id,
                order_id=review.order_id,
                rating=review.rating,
                comment=review.comment,
                author_name=review.author_name,
                verified=review.verified,
                created_at=review.created_at,
            ))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return Ok(False)
            return Ok(True)

        return await self._run(f"insert review of {review.product_id}", work)

    async def get(
        self, owner_id: OwnerId, product_id: ProductId, order_id: OrderId
    ) -> Result[Review | None, ShopError]:
        async def work(session: AsyncSession) -> Result[Review | None, ShopError]:
            row = await session.scalar(
                select(ReviewRow).where(
                    ReviewRow.owner_id == owner_id,
                    ReviewRow.product_id == product_id,
                    ReviewRow.order_id == order_id,
                )
            )
            return Ok(None if row is None else _review(row))

        return await self._run(f"get review of {product_id}", work)

    async def list_for_product(self, product_id: ProductId) -> Result[list[Review], ShopError]:
        async def work(session: AsyncSession) -> Result[list[Review], ShopError]:
            rows = await session.scalars(
                select(ReviewRow)
                .where(ReviewRow.product_id == product_id)
                .order_by(ReviewRow.created_at.desc())
            )
            return Ok([_review(row) for row in rows])

        return await self._run(f"list reviews of {product_id}", work)


# ═══════════════════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemySettings(_SessionStore):
    async def load(self) -> Result[dict[str, str], ShopError]:
        async def work(session: AsyncSession) -> Result[dict[str, str], ShopError]:
            rows = await session.scalars(select(SettingRow))
            return Ok({row.key: row.value for row in rows})

        return await self._run("load settings", work)

    async def save(self, key: str, value: str) -> Result[None, ShopError]:
        async def work(session: AsyncSession) -> Result[None, ShopError]:
            updated = await session.scalar(
                update(SettingRow)
                .where(SettingRow.key == key)
                .values(value=value)
                .returning(SettingRow.key)
            )
            if updated is None:
                session.add(SettingRow(key=key, value=value))
            await session.commit()
            return Ok(None)

        return await self._run(f"save setting {key}", work)


# ═══════════════════════════════════════════════════════════════════════════════
# Wishlist
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyWishlist(_SessionStore):
    async def add(self, entry: WishlistEntry) -> Result[bool, ShopError]:
        async def work(session: AsyncSession) -> Result[bool, ShopError]:
            session.add(WishlistRow(
                owner_id=entry.owner_id,
                product_id=entry.product_id,
                added_at=entry.added_at,
            ))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return Ok(False)
            return Ok(True)

        return await self._run(f"save {entry.product_id} to wishlist", work)

    async def remove(self, owner_id: OwnerId, product_id: ProductId) -> Result[bool, ShopError]:
        async def work(session: AsyncSession) -> Result[bool, ShopError]:
            removed = await session.scalar(
                delete(WishlistRow)
                .where(WishlistRow.owner_id == owner_id, WishlistRow.product_id == product_id)
                .returning(WishlistRow.product_id)
            )
            await session.commit()
            return Ok(removed is not None)

        return await self._run(f"remove {product_id} from wishlist", work)

    async def list_for_owner(self, owner_id: OwnerId) -> Result[list[WishlistEntry], ShopError]:
        async def work(session: AsyncSession) -> Result[list[WishlistEntry], ShopError]:
            rows = await session.scalars(
                select(WishlistRow)
                .where(WishlistRow.owner_id == owner_id)
                .order_by(WishlistRow.added_at.desc())
            )
            return Ok([WishlistEntry(r.owner_id, r.product_id, r.added_at) for r in rows])

        return await self._run(f"list wishlist of {owner_id}", work)


# ═══════════════════════════════════════════════════════════════════════════════
# Backend
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class SQLAlchemyBackend:
    engine: AsyncEngine
    catalog: SQLAlchemyCatalog
    carts: SQLAlchemyCarts
    orders: SQLAlchemyOrders
    reviews: SQLAlchemyReviews
    settings: SQLAlchemySettings
    wishlist: SQLAlchemyWishlist

    @property
    def stock(self) -> SQLAlchemyCatalog:
        return self.catalog

    @classmethod
    def from_sessions(cls, engine: AsyncEngine, sessions: Sessions) -> SQLAlchemyBackend:
        return cls(
            engine=engine,
            catalog=SQLAlchemyCatalog(sessions),
            carts=SQLAlchemyCarts(sessions),
            orders=SQLAlchemyOrders(sessions),
            reviews=SQLAlchemyReviews(sessions),
            settings=SQLAlchemySettings(sessions),
            wishlist=SQLAlchemyWishlist(sessions),
        )

    @classmethod
    def create(cls, url: str, *, echo: bool = False) -> SQLAlchemyBackend:
        engine = create_async_engine(url, echo=echo)
        return cls.from_sessions(engine, async_sessionmaker(engine, expire_on_commit=False))

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


__all__ = (
    "SQLAlchemyCatalog",
    "SQLAlchemyCarts",
    "SQLAlchemyOrders",
    "SQLAlchemyReviews",
    "SQLAlchemySettings",
    "SQLAlchemyWishlist",
    "SQLAlchemyBackend",
)
