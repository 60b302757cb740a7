"""Tests for WishlistService."""

from kungfu import Error

from storecore import ShopErrorKind

from tests.support import seed


class TestWishlist:
    async def test_add_list_remove(self, shop):
        await seed(shop, "p-1")
        await seed(shop, "p-2")

        assert (await shop.wishlist.add("user-1", "p-1")).unwrap() is True
        assert (await shop.wishlist.add("user-1", "p-2")).unwrap() is True
        assert (await shop.wishlist.add("user-1", "p-1")).unwrap() is False

        saved = (await shop.wishlist.list("user-1")).unwrap()
        assert sorted(e.product_id for e in saved) == ["p-1", "p-2"]

        assert (await shop.wishlist.remove("user-1", "p-1")).unwrap() is True
        assert (await shop.wishlist.remove("user-1", "p-1")).unwrap() is False
        assert [e.product_id for e in (await shop.wishlist.list("user-1")).unwrap()] == ["p-2"]

    async def test_unknown_product_not_found(self, shop):
        result = await shop.wishlist.add("user-1", "missing")

        assert isinstance(result, Error)
        assert result.error.kind is ShopErrorKind.NOT_FOUND

    async def test_lists_are_per_owner(self, shop):
        await seed(shop, "p-1")
        await shop.wishlist.add("user-1", "p-1")

        assert (await shop.wishlist.list("user-2")).unwrap() == []
