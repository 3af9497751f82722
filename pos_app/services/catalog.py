"""
Catalog Repository

Products and categories kept in the local store under ``menu_products``
and ``menu_categories``. On first access an empty store is seeded with the
default restaurant sections and menu.

Version: 1.0.0
"""

import logging
from decimal import Decimal
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from pos_app.core.config import get_settings
from pos_app.core.exceptions import NotFoundError, ValidationError
from pos_app.schemas import Category, PortionType, Product
from pos_app.services.storage.base import BaseStore

logger = logging.getLogger(__name__)

PRODUCTS_KEY = "menu_products"
CATEGORIES_KEY = "menu_categories"

DEFAULT_CATEGORIES = [
    Category(id="arroces", name="Arroces y Paellas", display_order=1),
    Category(id="entrantes", name="Entrantes", display_order=2),
    Category(id="principales", name="Platos Principales", display_order=3),
    Category(id="bebidas", name="Bebidas", display_order=4),
    Category(id="postres", name="Postres", display_order=5),
]

DEFAULT_PRODUCTS = [
    Product(id="paella-valenciana", name="Paella Valenciana", price=Decimal("14.00"),
            category="arroces", portion_type=PortionType.RATION, half_price=Decimal("8.00"), display_order=0),
    Product(id="paella-mixta", name="Paella Mixta", price=Decimal("12.00"),
            category="arroces", portion_type=PortionType.RATION, half_price=Decimal("7.00"), display_order=1),
    Product(id="arroz-negro", name="Arroz Negro", price=Decimal("13.50"),
            category="arroces", portion_type=PortionType.RATION, display_order=2),
    Product(id="croquetas", name="Croquetas Caseras", price=Decimal("1.50"),
            category="entrantes", display_order=3),
    Product(id="patatas-bravas", name="Patatas Bravas", price=Decimal("6.00"),
            category="entrantes", portion_type=PortionType.RATION, half_price=Decimal("3.50"), display_order=4),
    Product(id="pollo-asado", name="Pollo Asado", price=Decimal("11.00"),
            category="principales", display_order=5),
    Product(id="agua", name="Agua Mineral", price=Decimal("1.80"),
            category="bebidas", display_order=6),
    Product(id="flan", name="Flan de la Casa", price=Decimal("4.00"),
            category="postres", display_order=7),
]


def sort_key(display_order: Optional[int]) -> int:
    """Sort value for a possibly missing display order (missing sorts last)."""
    if display_order is None:
        return get_settings().default_display_order
    return display_order


def sorted_products(products: list[Product]) -> list[Product]:
    """Stable sort by display order."""
    return sorted(products, key=lambda p: sort_key(p.display_order))


class CatalogRepository:
    """
    Admin-managed menu catalog.

    Example:
        >>> catalog = CatalogRepository(get_store())
        >>> [c.name for c in catalog.list_categories()][:2]
        ['Arroces y Paellas', 'Entrantes']
    """

    def __init__(self, store: BaseStore, seed_defaults: bool = True):
        self.store = store
        self.seed_defaults = seed_defaults

    def _initialize_default_data(self) -> None:
        """Seed products and categories when their keys are absent."""
        if not self.seed_defaults:
            return
        if self.store.get(PRODUCTS_KEY) is None:
            self.store.set(PRODUCTS_KEY, [p.model_dump(mode="json") for p in DEFAULT_PRODUCTS])
            logger.info(f"Seeded {len(DEFAULT_PRODUCTS)} default products")
        if self.store.get(CATEGORIES_KEY) is None:
            self.store.set(CATEGORIES_KEY, [c.model_dump(mode="json") for c in DEFAULT_CATEGORIES])
            logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} default categories")

    # =========================================================================
    # PRODUCTS
    # =========================================================================

    def load_products(self) -> list[Product]:
        """Products in stored order."""
        self._initialize_default_data()
        return [Product.model_validate(p) for p in self.store.get(PRODUCTS_KEY) or []]

    def write_products(self, products: list[Product]) -> None:
        self.store.set(PRODUCTS_KEY, [p.model_dump(mode="json") for p in products])

    def list_products(self) -> list[Product]:
        """Products sorted by display order."""
        return sorted_products(self.load_products())

    def products_in_category(self, category_id: str) -> list[Product]:
        return [p for p in self.list_products() if p.category == category_id]

    def get_product(self, product_id: str) -> Product:
        for product in self.load_products():
            if product.id == product_id:
                return product
        raise NotFoundError("Product", product_id)

    def save_product(self, product: Any) -> Product:
        """
        Insert or replace a product by id.

        New products without a display order are appended after every
        existing product.

        Raises:
            ValidationError: invalid product data
        """
        product = _validate(Product, product)
        products = self.load_products()

        for index, existing in enumerate(products):
            if existing.id == product.id:
                products[index] = product
                self.write_products(products)
                logger.info(f"Product '{product.id}' updated")
                return product

        if product.display_order is None:
            positions = [p.display_order for p in products if p.display_order is not None]
            product = product.model_copy(update={"display_order": max(positions, default=-1) + 1})

        products.append(product)
        self.write_products(products)
        logger.info(f"Product '{product.id}' created")
        return product

    def delete_product(self, product_id: str) -> None:
        products = self.load_products()
        remaining = [p for p in products if p.id != product_id]
        if len(remaining) == len(products):
            raise NotFoundError("Product", product_id)
        self.write_products(remaining)
        logger.info(f"Product '{product_id}' deleted")

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    def list_categories(self) -> list[Category]:
        self._initialize_default_data()
        categories = [Category.model_validate(c) for c in self.store.get(CATEGORIES_KEY) or []]
        return sorted(categories, key=lambda c: c.display_order)

    def get_category(self, category_id: str) -> Category:
        for category in self.list_categories():
            if category.id == category_id:
                return category
        raise NotFoundError("Category", category_id)

    def save_category(self, category: Any) -> Category:
        category = _validate(Category, category)
        categories = self.list_categories()

        for index, existing in enumerate(categories):
            if existing.id == category.id:
                categories[index] = category
                break
        else:
            categories.append(category)

        self.store.set(CATEGORIES_KEY, [c.model_dump(mode="json") for c in categories])
        return category

    def delete_category(self, category_id: str) -> None:
        """
        Delete a category.

        Products pointing at it are kept; they simply stop showing up
        under any tab until reassigned.
        """
        categories = self.list_categories()
        remaining = [c for c in categories if c.id != category_id]
        if len(remaining) == len(categories):
            raise NotFoundError("Category", category_id)
        self.store.set(CATEGORIES_KEY, [c.model_dump(mode="json") for c in remaining])
        logger.info(f"Category '{category_id}' deleted")


def _validate(model, data):
    if isinstance(data, model):
        data = data.model_dump()
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {model.__name__.lower()}: {e.errors()[0]['msg']}") from e
