# src/clustercost/core/pricing.py
"""
Static node price lookup keyed by instance type.
"""

import logging
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


class NodePriceLookup:
    """Resolves a node's hourly price from its instance type."""

    def __init__(self, prices: Optional[Mapping[str, float]] = None, default_price: float = 0.0):
        self.default_price = default_price
        self._prices = {}
        for instance_type, price in (prices or {}).items():
            if not instance_type or price < 0:
                logger.debug("Dropping price entry %r=%r", instance_type, price)
                continue
            self._prices[instance_type.lower()] = float(price)

    def price(self, instance_type: Optional[str]) -> float:
        """Hourly price for the instance type, or the default when unknown or empty."""
        if not instance_type:
            return self.default_price
        return self._prices.get(instance_type.lower(), self.default_price)

    def __len__(self) -> int:
        return len(self._prices)


def lookup_price(lookup: Optional[NodePriceLookup], instance_type: Optional[str]) -> float:
    """Like ``lookup.price`` but a missing lookup prices every node at 0."""
    if lookup is None:
        return 0.0
    return lookup.price(instance_type)
