"""Seeding and request helpers shared by the test modules."""

from storecore import Shop, money
from storecore.catalog import Product
from storecore.orders import CheckoutRequest


async def seed(
    shop: Shop,
    product_id: str,
    price: str = "10.00",
    stock: int = 10,
    **fields: object,
) -> Product:
    product = Product(
        id=product_id,
        title=f"Product {product_id}",
        price=money(price),
        stock=stock,
        **fields,  # type: ignore[arg-type]
    )
    (await shop.put_product(product)).unwrap()
    return product


def checkout_request(owner_id: str = "user-1", **fields: object) -> CheckoutRequest:
    data: dict[str, object] = {
        "owner_id": owner_id,
        "shipping": {
            "name": "Ana Ruiz",
            "email": "ana@example.com",
            "phone": "555-0100",
            "address": "1 Main St",
            "city": "Springfield",
        },
    }
    data.update(fields)
    return CheckoutRequest.parse(data).unwrap()


async def stock_of(shop: Shop, product_id: str) -> int:
    return (await shop.inventory.get_stock(product_id)).unwrap()
