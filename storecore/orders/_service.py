"""
Order service — checkout and status transitions.

Checkout:
    1. replay an already-placed idempotency key
    2. plan (graph): non-empty cart, every line fits stock, totals
    3. place (saga): reserve each line → insert order → clear cart,
       compensated in reverse on any failure

Status transition:
    per-order lock + compare-and-set on the stored status, then ledger
    adjustments for the cancelled boundary, all as one saga.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import UTC, datetime

from kungfu import Result, Ok, Error

from storecore import saga as S
from storecore._errors import ShopError, ShopErrorKind, ShopErrors
from storecore._locks import KeyedLock
from storecore._types import OrderId, OwnerId
from storecore.cart import CartService, CartStore
from storecore.catalog import CatalogStore
from storecore.config import ReinstatePolicy
from storecore.inventory import InventoryLedger, StockChange
from storecore.orders._checkout import CheckoutDeps, CheckoutPlan, plan_checkout
from storecore.orders._status import StockEffect, stock_effect
from storecore.orders._store import OrderStore
from storecore.orders._types import CheckoutRequest, Order, OrderLine, OrderStatus
from storecore.settings import SettingsProvider

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


class OrderService:
    def __init__(
        self,
        orders: OrderStore,
        carts: CartService,
        cart_store: CartStore,
        catalog: CatalogStore,
        ledger: InventoryLedger,
        settings: SettingsProvider,
        reinstate_policy: ReinstatePolicy = ReinstatePolicy.CLAMP,
    ) -> None:
        self._orders = orders
        self._carts = carts
        self._ledger = ledger
        self._deps = CheckoutDeps(carts=cart_store, catalog=catalog, settings=settings)
        self._reinstate_policy = reinstate_policy
        self._locks = KeyedLock()

    # ═══════════════════════════════════════════════════════════════════════════
    # Checkout
    # ═══════════════════════════════════════════════════════════════════════════

    async def checkout(self, request: CheckoutRequest) -> Result[Order, ShopError]:
        """
        Convert the owner's cart into a pending order.

        Either the order exists, its stock is reserved and the cart is
        empty, or none of that happened.

        Example:
            request = CheckoutRequest.parse(form).unwrap()
            match await orders.checkout(request):
                case Ok(order):
                    print(order.reference)
                case Error(e) if e.kind is ShopErrorKind.INSUFFICIENT_STOCK:
                    print(f"{e.product_id} sold out")
        """
        owner_id = request.owner_id

        async with self._carts.hold(owner_id):
            if request.idempotency_key is not None:
                match await self._orders.find_by_idempotency_key(owner_id, request.idempotency_key):
                    case Ok(None):
                        pass
                    case Ok(existing):
                        logger.info("Checkout %s replayed as order %s", request.idempotency_key, existing.id)
                        return Ok(existing)
                    case Error(e):
                        return Error(e)

            match await plan_checkout(request, self._deps):
                case Ok(plan):
                    placed = await self._place(plan)
                case Error(e):
                    logger.info("Checkout of %s rejected: %s", owner_id, e)
                    return Error(e)

        match placed:
            case Error(e) if e.kind is ShopErrorKind.CONFLICT and request.idempotency_key:
                return await self._replayed(owner_id, request.idempotency_key, e)
            case _:
                return placed

    async def _place(self, plan: CheckoutPlan) -> Result[Order, ShopError]:
        request = plan.request
        now = _now()
        order = Order(
            id=uuid.uuid4().hex,
            owner_id=request.owner_id,
            lines=tuple(OrderLine(ln.product_id, ln.quantity, ln.unit_price) for ln in plan.lines),
            totals=plan.totals,
            payment_method=request.payment_method,
            delivery_type=request.delivery_type,
            shipping=request.shipping,
            notes=request.notes,
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
            idempotency_key=request.idempotency_key,
        )

        steps: list[S.Step[object, ShopError]] = [
            S.step(
                f"reserve:{line.product_id}",
                lambda line=line: self._ledger.reserve(line.product_id, line.quantity),
                compensate=self._ledger.undo,
            )
            for line in order.lines
        ]
        steps.append(S.step(
            "insert-order",
            lambda: self._insert(order),
            compensate=lambda _: self._orders.delete(order.id),
        ))
        steps.append(S.step(
            "clear-cart",
            lambda: self._deps.carts.clear(order.owner_id),
        ))

        match await S.run(steps):
            case Ok(_):
                logger.info(
                    "Order %s placed by %s: %d line(s), total %s %s",
                    order.id,
                    order.owner_id,
                    len(order.lines),
                    order.totals.total,
                    order.totals.currency,
                )
                return Ok(order)
            case Error(failure):
                if not failure.rollback_complete:
                    logger.error(
                        "Checkout of %s failed at %s and %d compensation(s) failed",
                        order.owner_id,
                        failure.step_failed,
                        failure.compensators_failed,
                    )
                return Error(failure.error)

    async def _insert(self, order: Order) -> Result[Order, ShopError]:
        match await self._orders.insert(order):
            case Ok(True):
                return Ok(order)
            case Ok(False):
                return Error(ShopErrors.duplicate_checkout(order.owner_id, order.idempotency_key or ""))
            case Error(e):
                return Error(e)

    async def _replayed(self, owner_id: OwnerId, key: str, conflict: ShopError) -> Result[Order, ShopError]:
        match await self._orders.find_by_idempotency_key(owner_id, key):
            case Ok(None):
                return Error(conflict)
            case Ok(existing):
                logger.info("Checkout %s lost a race, returning order %s", key, existing.id)
                return Ok(existing)
            case Error(e):
                return Error(e)

    # ═══════════════════════════════════════════════════════════════════════════
    # Status Transitions
    # ═══════════════════════════════════════════════════════════════════════════

    async def set_status(self, order_id: OrderId, new_status: OrderStatus) -> Result[Order, ShopError]:
        """
        Move an order to `new_status`.

        Crossing into cancelled returns every line's quantity to stock;
        crossing out of it takes the quantities again. A status that
        changed underneath the transition fails with CONFLICT and
        nothing is applied.
        """
        async with self._locks.hold(order_id):
            match await self._orders.get(order_id):
                case Ok(None):
                    return Error(ShopErrors.order_not_found(order_id))
                case Ok(order):
                    pass
                case Error(e):
                    return Error(e)

            previous = order.status
            effect = stock_effect(previous, new_status)
            now = _now()

            steps: list[S.Step[object, ShopError]] = [
                S.step(
                    "status",
                    lambda: self._swap_status(order_id, previous, new_status, now),
                    compensate=lambda _: self._orders.compare_and_set_status(
                        order_id, new_status, previous, order.updated_at
                    ),
                ),
            ]
            steps.extend(
                S.step(
                    f"{effect.name.lower()}:{line.product_id}",
                    lambda line=line: self._adjust(effect, line),
                    compensate=self._undo_adjustment,
                )
                for line in order.lines
                if effect is not StockEffect.NONE
            )

            match await S.run(steps):
                case Ok(_):
                    logger.info(
                        "Order %s: %s → %s (%s)",
                        order_id,
                        previous.value,
                        new_status.value,
                        effect.name.lower(),
                    )
                    return Ok(replace(order, status=new_status, updated_at=now))
                case Error(failure):
                    return Error(failure.error)

    async def _swap_status(
        self,
        order_id: OrderId,
        previous: OrderStatus,
        new_status: OrderStatus,
        at: datetime,
    ) -> Result[OrderStatus, ShopError]:
        match await self._orders.compare_and_set_status(order_id, previous, new_status, at):
            case Ok(True):
                return Ok(new_status)
            case Ok(False):
                return Error(ShopErrors.status_conflict(order_id, previous.value))
            case Error(e):
                return Error(e)

    async def _adjust(self, effect: StockEffect, line: OrderLine) -> Result[StockChange, ShopError]:
        if effect is StockEffect.RECLAIM and self._reinstate_policy is ReinstatePolicy.STRICT:
            return await self._ledger.reserve(line.product_id, line.quantity)

        if effect is StockEffect.RELEASE:
            adjusted = await self._ledger.increment(line.product_id, line.quantity)
        else:
            adjusted = await self._ledger.decrement(line.product_id, line.quantity)

        match adjusted:
            case Error(e) if e.kind is ShopErrorKind.NOT_FOUND:
                # Product left the catalog: nothing to return to or take from.
                logger.warning(
                    "Product %s no longer exists, %s of %d unit(s) skipped",
                    line.product_id,
                    effect.name.lower(),
                    line.quantity,
                )
                return Ok(StockChange(line.product_id, line.quantity, 0, 0))
            case _:
                return adjusted

    async def _undo_adjustment(self, change: StockChange) -> Result[StockChange | None, ShopError]:
        return await self._ledger.undo(change)

    # ═══════════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_order(self, order_id: OrderId) -> Result[Order, ShopError]:
        match await self._orders.get(order_id):
            case Ok(None):
                return Error(ShopErrors.order_not_found(order_id))
            case Ok(order):
                return Ok(order)
            case Error(e):
                return Error(e)

    async def list_orders(self, owner_id: OwnerId) -> Result[list[Order], ShopError]:
        """The owner's orders, newest first."""
        return await self._orders.list_for_owner(owner_id)

    async def list_all_orders(self) -> Result[list[Order], ShopError]:
        """Every order, newest first."""
        return await self._orders.list_all()


__all__ = ("OrderService",)
