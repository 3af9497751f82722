"""
Display-Order Sequencer

Admin reordering of menu products. Works on one filtered view at a time
(all products, or a single category): the ids of the view get positions
0..n-1 and every other product keeps its value. Values therefore need not
be dense across categories, only consistent enough for a stable sort.
"""

import logging

from pos_app.core.exceptions import NotFoundError, ValidationError
from pos_app.schemas import Product
from pos_app.services.catalog import CatalogRepository, sorted_products

logger = logging.getLogger(__name__)


class DisplayOrderSequencer:
    """Re-sequences products and persists the full product set."""

    def __init__(self, catalog: CatalogRepository):
        self.catalog = catalog

    def reorder(self, ordered_ids: list[str]) -> list[Product]:
        """
        Give each product in ``ordered_ids`` its index as display order.

        Returns:
            All products, sorted by the new display order

        Raises:
            ValidationError: an id appears twice
            NotFoundError: an id is not in the catalog
        """
        if len(set(ordered_ids)) != len(ordered_ids):
            raise ValidationError("Duplicate product ids in reorder request")

        products = self.catalog.load_products()
        known = {p.id for p in products}
        for product_id in ordered_ids:
            if product_id not in known:
                raise NotFoundError("Product", product_id)

        positions = {product_id: index for index, product_id in enumerate(ordered_ids)}
        updated = [
            p.model_copy(update={"display_order": positions[p.id]}) if p.id in positions else p
            for p in products
        ]

        self.catalog.write_products(updated)
        logger.info(f"Reordered {len(ordered_ids)} products")
        return sorted_products(updated)

    def move(self, product_id: str, new_index: int, view_ids: list[str]) -> list[Product]:
        """
        Move one product within a view (drag and drop) and re-sequence it.

        ``new_index`` is clamped to the bounds of the view.

        Raises:
            NotFoundError: ``product_id`` is not part of ``view_ids``
        """
        if product_id not in view_ids:
            raise NotFoundError("Product", product_id)

        ordered = [pid for pid in view_ids if pid != product_id]
        new_index = max(0, min(new_index, len(ordered)))
        ordered.insert(new_index, product_id)
        return self.reorder(ordered)
