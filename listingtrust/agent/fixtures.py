"""Built-in test listings analyzed in offline mode (the only URLs offline mode accepts)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class OfflineListing:
    product_text: str
    policy_text: str


OFFLINE_LISTINGS: dict[str, OfflineListing] = {
    "https://example.com/product/clear": OfflineListing(
        product_text="In stock. Returns accepted within 30 days. 1 year warranty included.",
        policy_text="Return policy: returns accepted within 30 days. Warranty lasts 12 months.",
    ),
    "https://example.com/product/conflict": OfflineListing(
        product_text="Price match guarantee. In stock. Free returns in 30 days.",
        policy_text="Prices subject to change without notice. Availability not guaranteed.",
    ),
    "https://example.com/product/unclear": OfflineListing(
        product_text="Warranty included.",
        policy_text="",
    ),
}


def get_offline_listing(url: str) -> OfflineListing | None:
    return OFFLINE_LISTINGS.get(url)
