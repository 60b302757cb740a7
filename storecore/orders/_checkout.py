"""
Checkout graph — everything that must hold before stock is touched.

    CheckoutRequest, CheckoutDeps (injected)
         │                │
         ▼                ▼
    RequestNode        DepsNode
         │                │
         ├──── CartLinesNode ────┐      SettingsNode
         │          │            │           │
         │          ▼            └──── TotalsNode
         │    StockCheckNode                 │
         │          │                        │
         └──────────┴──── CheckoutPlanNode ──┘

Cart lines and settings load concurrently. Any failure raises
ShopFailure, which `resolve` turns back into an Error; nothing here
writes.

Note: no 'from __future__ import annotations' here; nodnod reads
the __compose__ signatures at runtime to wire dependencies.
"""

from dataclasses import dataclass

from combinators import traverse_par
from kungfu import LazyCoroResult, Result, Ok, Error

from storecore._errors import ShopError, ShopErrors, ShopFailure
from storecore._graph import node, resolve
from storecore.cart import CartLine, CartStore, Totals, compute_totals
from storecore.catalog import CatalogStore
from storecore.orders._types import CheckoutRequest
from storecore.settings import Settings, SettingsProvider


def _unwrap[T](result: Result[T, ShopError]) -> T:
    match result:
        case Ok(value):
            return value
        case Error(e):
            raise ShopFailure(e)


# ═══════════════════════════════════════════════════════════════════════════════
# Inputs (injected)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutDeps:
    carts: CartStore
    catalog: CatalogStore
    settings: SettingsProvider


@node
class RequestNode:
    def __init__(self, request: CheckoutRequest) -> None:
        self.request = request

    @classmethod
    def __compose__(cls, request: CheckoutRequest) -> "RequestNode":
        return cls(request)


@node
class DepsNode:
    def __init__(self, deps: CheckoutDeps) -> None:
        self.deps = deps

    @classmethod
    def __compose__(cls, deps: CheckoutDeps) -> "DepsNode":
        return cls(deps)


# ═══════════════════════════════════════════════════════════════════════════════
# Loads
# ═══════════════════════════════════════════════════════════════════════════════


@node
class CartLinesNode:
    """The owner's lines. An empty cart ends checkout here."""

    def __init__(self, lines: tuple[CartLine, ...]) -> None:
        self.lines = lines

    @classmethod
    async def __compose__(cls, request: RequestNode, deps: DepsNode) -> "CartLinesNode":
        owner_id = request.request.owner_id
        lines = _unwrap(await deps.deps.carts.get_lines(owner_id))
        if not lines:
            raise ShopFailure(ShopErrors.empty_cart(owner_id))
        return cls(tuple(lines))


@node
class SettingsNode:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @classmethod
    async def __compose__(cls, deps: DepsNode) -> "SettingsNode":
        return cls(_unwrap(await deps.deps.settings.get_settings()))


# ═══════════════════════════════════════════════════════════════════════════════
# Checks
# ═══════════════════════════════════════════════════════════════════════════════


async def _check_line(catalog: CatalogStore, line: CartLine) -> Result[CartLine, ShopError]:
    match await catalog.get_product(line.product_id):
        case Ok(None):
            return Error(ShopErrors.product_not_found(line.product_id))
        case Ok(product) if line.quantity > product.stock:
            return Error(
                ShopErrors.insufficient_stock(line.product_id, line.quantity, product.stock)
            )
        case Ok(_):
            return Ok(line)
        case Error(e):
            return Error(e)


@node
class StockCheckNode:
    """
    Every line fits current stock.

    Products are read concurrently; the first failing line in cart
    order is the one reported.
    """

    def __init__(self, lines: tuple[CartLine, ...]) -> None:
        self.lines = lines

    @classmethod
    async def __compose__(cls, cart: CartLinesNode, deps: DepsNode) -> "StockCheckNode":
        catalog = deps.deps.catalog
        checked = await traverse_par(
            cart.lines,
            lambda line: LazyCoroResult(lambda: _check_line(catalog, line)),
            concurrency=8,
        )
        return cls(tuple(_unwrap(checked)))


@node
class TotalsNode:
    def __init__(self, totals: Totals) -> None:
        self.totals = totals

    @classmethod
    def __compose__(cls, cart: CartLinesNode, settings: SettingsNode) -> "TotalsNode":
        return cls(compute_totals(cart.lines, settings.settings))


# ═══════════════════════════════════════════════════════════════════════════════
# Plan
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutPlan:
    """A validated cart with its frozen totals, ready to be placed."""

    request: CheckoutRequest
    lines: tuple[CartLine, ...]
    totals: Totals


@node
class CheckoutPlanNode:
    def __init__(self, plan: CheckoutPlan) -> None:
        self.plan = plan

    @classmethod
    def __compose__(
        cls,
        request: RequestNode,
        stock: StockCheckNode,
        totals: TotalsNode,
    ) -> "CheckoutPlanNode":
        return cls(CheckoutPlan(request.request, stock.lines, totals.totals))


async def plan_checkout(request: CheckoutRequest, deps: CheckoutDeps) -> Result[CheckoutPlan, ShopError]:
    """Run the graph. Ok(plan) when the cart may be placed as-is."""
    resolved = await resolve(CheckoutPlanNode, request, deps, detail="checkout")
    return resolved.map(lambda n: n.plan)


__all__ = (
    "CheckoutDeps",
    "CheckoutPlan",
    "RequestNode",
    "DepsNode",
    "CartLinesNode",
    "SettingsNode",
    "StockCheckNode",
    "TotalsNode",
    "CheckoutPlanNode",
    "plan_checkout",
)
