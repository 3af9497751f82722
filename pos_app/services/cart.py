"""
Cart Aggregator

In-memory order builder for the active terminal session. Lines are keyed
by (product id, variant): a full and a half Paella are two lines and are
never merged.

Prices are captured when a line is first added. Later quantity changes
keep that price, so a manual adjustment made before confirmation survives
further edits and is what ends up in the confirmed order.

Version: 1.0.0
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from pos_app.core.exceptions import NotFoundError, ValidationError
from pos_app.schemas import OrderLineItem, Product, Variant, order_total
from pos_app.services.pricing import resolve_unit_price

logger = logging.getLogger(__name__)

LineKey = tuple[str, Variant]

CENTS = Decimal("0.01")


def _to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Exact two-decimal amount; ``10.1`` becomes ``Decimal('10.10')``."""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as e:
        raise ValidationError(f"Invalid price: {value!r}") from e
    if not amount.is_finite():
        raise ValidationError(f"Invalid price: {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class Cart:
    """
    Ordered collection of order lines, one per (product id, variant).

    Example:
        >>> cart = Cart()
        >>> cart.add_item(paella)
        >>> cart.add_item(paella, Variant.HALF)
        >>> cart.total
        Decimal('19.00')
    """

    def __init__(self):
        # Insertion order is the display order of the lines
        self._lines: dict[LineKey, OrderLineItem] = {}

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add_item(self, product: Product, variant: Variant = Variant.FULL) -> list[OrderLineItem]:
        """
        Add one unit of ``product`` in ``variant``.

        Increments an existing line, otherwise inserts a new line with
        quantity 1 and the resolved price snapshot.

        Raises:
            ValidationError: half portion requested for a unit product
        """
        key = (product.id, variant)
        existing = self._lines.get(key)

        if existing is not None:
            self._lines[key] = existing.model_copy(update={"quantity": existing.quantity + 1})
        else:
            self._lines[key] = OrderLineItem(
                product_id=product.id,
                name=product.name,
                price=resolve_unit_price(product, variant),
                quantity=1,
                variant=variant,
                image=product.image,
                category=product.category,
            )

        logger.debug(f"Cart: +1 {product.id} ({variant.value}) → {self._lines[key].quantity}")
        return self.lines

    def set_quantity(self, product_id: str, variant: Variant, quantity: int) -> list[OrderLineItem]:
        """
        Replace the quantity of a line, or remove it when ``quantity <= 0``.

        Removing a line that is not in the cart is a no-op.

        Raises:
            NotFoundError: positive quantity for a line that is not in the cart
        """
        key = (product_id, variant)

        if quantity <= 0:
            self._lines.pop(key, None)
            return self.lines

        existing = self._lines.get(key)
        if existing is None:
            raise NotFoundError("Cart line", f"{product_id}/{variant.value}")

        self._lines[key] = existing.model_copy(update={"quantity": quantity})
        return self.lines

    def set_price(self, product_id: str, variant: Variant, price: Decimal) -> list[OrderLineItem]:
        """
        Manually adjust the captured price of one line (discounts, corrections).

        Negative prices are clamped to zero. Floats are read through their
        decimal text and every price is rounded to cents.

        Raises:
            NotFoundError: line is not in the cart
            ValidationError: price is not a number
        """
        key = (product_id, variant)
        existing = self._lines.get(key)
        if existing is None:
            raise NotFoundError("Cart line", f"{product_id}/{variant.value}")

        new_price = max(Decimal("0"), _to_money(price))
        self._lines[key] = existing.model_copy(update={"price": new_price})
        logger.info(f"Cart: price of {product_id} ({variant.value}) set to {new_price}")
        return self.lines

    def clear(self) -> None:
        self._lines.clear()

    # =========================================================================
    # READS
    # =========================================================================

    def get_line(self, product_id: str, variant: Variant = Variant.FULL) -> Optional[OrderLineItem]:
        return self._lines.get((product_id, variant))

    def quantity_of(self, product_id: str, variant: Variant = Variant.FULL) -> int:
        line = self.get_line(product_id, variant)
        return line.quantity if line else 0

    @property
    def lines(self) -> list[OrderLineItem]:
        return list(self._lines.values())

    @property
    def total(self) -> Decimal:
        return order_total(self._lines.values())

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def snapshot(self) -> list[OrderLineItem]:
        """Deep copies of the current lines, safe to hand to the order manager."""
        return [line.model_copy(deep=True) for line in self._lines.values()]

    def __len__(self) -> int:
        return len(self._lines)
