"""PostgREST stand-in for httpx.MockTransport, shared by service and route tests.

Routes by the select/filter params that distinguish the five listing
sub-queries; set `fail_query` to make one of them return 500.
"""

import httpx


def listing_row(item_id, category="tools", shop="Shop A", price=5, **extra):
    row = {
        "id": item_id,
        "name": f"Item {item_id}",
        "category": category,
        "price_diamonds": price,
        "owner_shop_name": shop,
        "warp_command": f"/warp shop{item_id}",
        "confidence_level": "high",
    }
    row.update(extra)
    return row


class FakeUpstream:
    """PostgREST stand-in: answers the five listing sub-queries."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.fail_query: str | None = None
        self.total = 57
        self.page_rows = [
            listing_row(1), listing_row(2, "food", "Shop B"), listing_row(3),
        ]
        self.featured_rows = [listing_row(100 + i, price=50 - i) for i in range(7)]
        self.shop_rows = [
            {"owner_shop_name": "Shop A"}, {"owner_shop_name": "Shop B"},
            {"owner_shop_name": "Shop A"},
        ]
        self.category_rows = [{"category": "tools"}, {"category": "food"}, {"category": "tools"}]

    def classify(self, request: httpx.Request) -> str:
        params = request.url.params
        select = params.get("select")
        if select == "id":
            return "count"
        if select == "owner_shop_name":
            return "shops"
        if select == "category":
            return "categories"
        if "confidence_level" in params:
            return "featured"
        return "page"

    def names(self) -> list[str]:
        return sorted(self.classify(r) for r in self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        name = self.classify(request)
        if name == self.fail_query:
            return httpx.Response(500, json={"message": "boom"})
        if name == "count":
            return httpx.Response(
                200, json=[{"id": 1}], headers={"Content-Range": f"0-0/{self.total}"},
            )
        rows = {
            "shops": self.shop_rows,
            "categories": self.category_rows,
            "featured": self.featured_rows,
            "page": self.page_rows,
        }[name]
        return httpx.Response(200, json=rows)
