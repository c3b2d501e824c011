"""
Product sink that preserves discovery order.
"""

from __future__ import annotations

import itertools

from cafe_crawler.domain.products import Product


class ProductDataset:
    """
    Collects products pushed by concurrent handlers.

    Each product carries an order key (category, page, position); `items()`
    sorts by that key so output follows discovery order regardless of which
    worker finished first. Equal keys keep insertion order.

    A push is keyed by (order, external id). A retried request that pushes
    the same product at the same position replaces the earlier entry.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[tuple[int, ...], str], tuple[int, Product]] = {}
        self._sequence = itertools.count()

    def push(self, product: Product, order: tuple[int, ...] = ()) -> None:
        key = (order, product.external_id)
        previous = self._entries.get(key)
        sequence = previous[0] if previous is not None else next(self._sequence)
        self._entries[key] = (sequence, product)

    def items(self) -> list[Product]:
        ordered = sorted(self._entries.items(), key=lambda entry: (entry[0][0], entry[1][0]))
        return [product for _, (_, product) in ordered]

    def __len__(self) -> int:
        return len(self._entries)
