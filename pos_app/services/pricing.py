"""
Pricing & Variant Resolver

Effective unit price for a product/portion pair:

    unit product,   full → price
    unit product,   half → ValidationError (units cannot be halved)
    ration product, full → price
    ration product, half → half_price, or price when no half price is set

The last fallback is deliberate degraded behavior: a ration whose half
price was never filled in sells halves at the full price rather than
refusing the sale.
"""

import logging
from decimal import Decimal

from pos_app.core.exceptions import ValidationError
from pos_app.schemas import PortionType, Product, Variant

logger = logging.getLogger(__name__)


def supports_half_portion(product: Product) -> bool:
    """Whether a half variant may be requested for ``product``."""
    return product.portion_type == PortionType.RATION


def resolve_unit_price(product: Product, variant: Variant = Variant.FULL) -> Decimal:
    """
    Return the price charged for one unit of ``product`` in ``variant``.

    Raises:
        ValidationError: half portion requested for a unit-type product
    """
    if variant == Variant.FULL:
        return product.price

    if not supports_half_portion(product):
        raise ValidationError(f"Product '{product.id}' is sold by unit and has no half portion")

    if product.half_price is None:
        logger.debug(f"No half price for '{product.id}', charging full price for half portion")
        return product.price

    return product.half_price
