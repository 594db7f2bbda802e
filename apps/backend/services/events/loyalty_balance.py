"""
Loyalty Balance
===============

Immutable running points balance attached to loyalty event profiles as the
`loyaltyPoints` custom property.

- earn/spend return a new LoyaltyBalance; nothing is rebound in place.
- Negative balances are allowed: Klaviyo only mirrors what the loyalty
  platform reports, it does not enforce program rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

PROFILE_POINTS_KEY = "loyaltyPoints"


@dataclass(frozen=True)
class LoyaltyBalance:
    points: int = 0

    def earn(self, points: int) -> "LoyaltyBalance":
        return LoyaltyBalance(points=self.points + int(points))

    def spend(self, points: int) -> "LoyaltyBalance":
        return LoyaltyBalance(points=self.points - int(points))

    def profile_properties(self) -> Dict[str, Any]:
        return {PROFILE_POINTS_KEY: int(self.points)}
