from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import List

from flask import current_app

from glamping.models import BookingMenuProduct, GlampingTax, MenuItem
from glamping.models.glamping_item import glamping_item_taxes
from glamping.services.line_item_service import ZERO, AccommodationLine, LineItemService, MenuLine, as_decimal

HUNDRED = Decimal("100")


def round_whole(value) -> Decimal:
    return Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


@dataclass
class LineTax:
    line_id: int
    catalog_id: int
    taxable_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal


@dataclass
class PerItemTaxResult:
    total_tax_amount: Decimal = ZERO
    tent_details: List[LineTax] = field(default_factory=list)
    product_details: List[LineTax] = field(default_factory=list)


class TaxService:
    @staticmethod
    def _line_tax(taxable_amount, tax_rate):
        if tax_rate <= 0:
            return ZERO
        return round_whole(taxable_amount * tax_rate / HUNDRED)

    @staticmethod
    def item_tax_rates(session, item_ids):
        """First active tax per accommodation catalog item, keyed by item id."""
        if not item_ids:
            return {}
        rows = (
            session.query(glamping_item_taxes.c.item_id, GlampingTax.amount)
            .join(GlampingTax, GlampingTax.id == glamping_item_taxes.c.tax_id)
            .filter(glamping_item_taxes.c.item_id.in_(item_ids))
            .filter(GlampingTax.status.is_(True))
            .order_by(glamping_item_taxes.c.item_id, GlampingTax.id)
            .all()
        )
        rates = {}
        for item_id, amount in rows:
            rates.setdefault(item_id, as_decimal(amount))
        return rates

    @staticmethod
    def menu_tax_rates(session, booking_id):
        rows = (
            session.query(MenuItem.id, MenuItem.tax_rate)
            .join(BookingMenuProduct, BookingMenuProduct.menu_item_id == MenuItem.id)
            .filter(BookingMenuProduct.booking_id == booking_id)
            .distinct()
            .all()
        )
        return {menu_item_id: as_decimal(rate) for menu_item_id, rate in rows}

    @staticmethod
    def calculate_per_item_tax(session, booking_id) -> PerItemTaxResult:
        """
        Tax each tent and menu product at its own rate.

        Taxable amount is the line's effective amount less its discount; each
        line's tax is rounded to whole currency units before summing.
        """
        result = PerItemTaxResult()
        lines = LineItemService.load_lines(session, booking_id)

        tents = [line for line in lines if isinstance(line, AccommodationLine)]
        item_rates = TaxService.item_tax_rates(session, sorted({t.item_id for t in tents}))
        for tent in tents:
            # An override replaces the stored subtotal as the tax base too.
            taxable = tent.amount - tent.discount_amount
            rate = item_rates.get(tent.item_id, ZERO)
            tax = TaxService._line_tax(taxable, rate)
            result.tent_details.append(LineTax(tent.line_id, tent.item_id, taxable, rate, tax))
            result.total_tax_amount += tax

        menu_rates = TaxService.menu_tax_rates(session, booking_id)
        for product in (line for line in lines if isinstance(line, MenuLine)):
            taxable = product.amount - product.discount_amount
            rate = menu_rates.get(product.menu_item_id, ZERO)
            tax = TaxService._line_tax(taxable, rate)
            result.product_details.append(LineTax(product.line_id, product.menu_item_id, taxable, rate, tax))
            result.total_tax_amount += tax

        return result

    @staticmethod
    def compute_tax(session, booking_id, subtotal, additional_tax, tax_invoice_required, per_item_tax=None):
        if not tax_invoice_required:
            return ZERO
        per_item_tax = per_item_tax or TaxService.calculate_per_item_tax
        item_tax = per_item_tax(session, booking_id).total_tax_amount
        current_app.logger.debug(
            "Booking %s tax: per-item %s + additional %s on subtotal %s",
            booking_id,
            item_tax,
            additional_tax,
            subtotal,
        )
        return as_decimal(item_tax) + as_decimal(additional_tax)
