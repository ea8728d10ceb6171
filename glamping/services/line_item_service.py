"""
Line-item aggregation for glamping bookings.

Each persisted item category is loaded into its own line type so the pricing
rules (overrides, grouped add-on pricing, discounts) work on typed fields
rather than on raw rows or JSON metadata.
"""

from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from glamping.models import BookingAdditionalCost, BookingItem, BookingMenuProduct, BookingTent
from glamping.models.booking_item import PRICING_PER_GROUP

ZERO = Decimal("0")


def as_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(str(value))


@dataclass(frozen=True)
class AccommodationLine:
    line_id: int
    item_id: int
    subtotal: Decimal
    subtotal_override: Optional[Decimal]
    discount_amount: Decimal

    @property
    def amount(self) -> Decimal:
        if self.subtotal_override is not None:
            return self.subtotal_override
        return self.subtotal


@dataclass(frozen=True)
class AddonLine:
    line_id: int
    addon_item_id: Optional[int]
    accommodation_line_id: Optional[int]
    pricing_mode: str
    unit_price: Decimal
    quantity: int
    price_override: Optional[Decimal]
    subtotal_override: Optional[Decimal]
    voucher_discount_amount: Decimal

    @property
    def group_key(self):
        return (self.addon_item_id, self.accommodation_line_id)


@dataclass(frozen=True)
class MenuLine:
    line_id: int
    menu_item_id: int
    unit_price: Decimal
    quantity: int
    subtotal_override: Optional[Decimal]
    discount_amount: Decimal

    @property
    def amount(self) -> Decimal:
        if self.subtotal_override is not None:
            return self.subtotal_override
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class AdditionalCostLine:
    line_id: int
    total_price: Decimal
    tax_amount: Decimal


LineItem = Union[AccommodationLine, AddonLine, MenuLine, AdditionalCostLine]


@dataclass(frozen=True)
class ItemTotals:
    subtotal: Decimal
    total_discount: Decimal
    additional_tax: Decimal


class AddonGroup:
    """Add-on rows sharing one add-on item on one accommodation line."""

    def __init__(self, key):
        self.key = key
        self.lines = []

    def add(self, line: AddonLine):
        self.lines.append(line)

    def override(self) -> Optional[Decimal]:
        price_override = next((l.price_override for l in self.lines if l.price_override is not None), None)
        if price_override is not None:
            return price_override
        return next((l.subtotal_override for l in self.lines if l.subtotal_override is not None), None)

    @property
    def pricing_mode(self):
        return self.lines[0].pricing_mode

    def contribution(self) -> Decimal:
        override = self.override()
        if override is not None:
            return override
        if self.pricing_mode == PRICING_PER_GROUP:
            return max(l.unit_price for l in self.lines)
        return sum((l.unit_price * l.quantity for l in self.lines), ZERO)

    def discount(self) -> Decimal:
        # One voucher per group; every row of the group carries a copy of it.
        return max(l.voucher_discount_amount for l in self.lines)


def group_addons(lines):
    groups = OrderedDict()
    for line in lines:
        if not isinstance(line, AddonLine):
            continue
        groups.setdefault(line.group_key, AddonGroup(line.group_key)).add(line)
    return list(groups.values())


def summarize(lines) -> ItemTotals:
    accommodation = ZERO
    menu = ZERO
    additional = ZERO
    additional_tax = ZERO
    discount = ZERO

    for line in lines:
        if isinstance(line, AccommodationLine):
            accommodation += line.amount
            discount += line.discount_amount
        elif isinstance(line, MenuLine):
            menu += line.amount
            discount += line.discount_amount
        elif isinstance(line, AdditionalCostLine):
            additional += line.total_price
            additional_tax += line.tax_amount

    for group in group_addons(lines):
        accommodation += group.contribution()
        discount += group.discount()

    return ItemTotals(
        subtotal=accommodation + menu + additional,
        total_discount=discount,
        additional_tax=additional_tax,
    )


class LineItemService:
    @staticmethod
    def load_lines(session, booking_id):
        lines = []
        for tent in session.query(BookingTent).filter_by(booking_id=booking_id).order_by(BookingTent.id):
            lines.append(
                AccommodationLine(
                    line_id=tent.id,
                    item_id=tent.item_id,
                    subtotal=as_decimal(tent.subtotal),
                    subtotal_override=None if tent.subtotal_override is None else as_decimal(tent.subtotal_override),
                    discount_amount=as_decimal(tent.discount_amount),
                )
            )

        for item in session.query(BookingItem).filter_by(booking_id=booking_id).order_by(BookingItem.id):
            if not item.is_addon:
                continue
            lines.append(
                AddonLine(
                    line_id=item.id,
                    addon_item_id=item.addon_item_id,
                    accommodation_line_id=item.booking_tent_id,
                    pricing_mode=item.pricing_mode,
                    unit_price=as_decimal(item.unit_price),
                    quantity=int(item.quantity or 0),
                    price_override=item.price_override,
                    subtotal_override=item.subtotal_override,
                    voucher_discount_amount=as_decimal(item.voucher_discount_amount),
                )
            )

        menu_rows = session.query(BookingMenuProduct).filter_by(booking_id=booking_id).order_by(BookingMenuProduct.id)
        for product in menu_rows:
            lines.append(
                MenuLine(
                    line_id=product.id,
                    menu_item_id=product.menu_item_id,
                    unit_price=as_decimal(product.unit_price),
                    quantity=int(product.quantity or 0),
                    subtotal_override=(
                        None if product.subtotal_override is None else as_decimal(product.subtotal_override)
                    ),
                    discount_amount=as_decimal(product.discount_amount),
                )
            )

        cost_rows = (
            session.query(BookingAdditionalCost)
            .filter_by(booking_id=booking_id)
            .order_by(BookingAdditionalCost.id)
        )
        for cost in cost_rows:
            lines.append(
                AdditionalCostLine(
                    line_id=cost.id,
                    total_price=as_decimal(cost.total_price),
                    tax_amount=as_decimal(cost.tax_amount),
                )
            )
        return lines

    @staticmethod
    def sum_booking_items(session, booking_id) -> ItemTotals:
        return summarize(LineItemService.load_lines(session, booking_id))
