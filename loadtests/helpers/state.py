"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared across users.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks what a simulated shopper expects to find in their cart."""

    username: str | None = None
    expected_lines: dict[int, int] = field(default_factory=dict)
    orders_placed: int = 0

    def added(self, product_id: int) -> None:
        self.expected_lines[product_id] = self.expected_lines.get(product_id, 0) + 1

    def removed(self, product_id: int) -> None:
        remaining = self.expected_lines.get(product_id, 0) - 1
        if remaining > 0:
            self.expected_lines[product_id] = remaining
        else:
            self.expected_lines.pop(product_id, None)
