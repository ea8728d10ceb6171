from decimal import Decimal

from glamping.models import GlampingTax
from glamping.services import TaxService
from glamping.services.tax_service import PerItemTaxResult, round_whole


class CountingTax:
    def __init__(self, amount):
        self.amount = Decimal(str(amount))
        self.calls = 0

    def __call__(self, session, booking_id):
        self.calls += 1
        return PerItemTaxResult(total_tax_amount=self.amount)


def test_no_tax_without_invoice_even_with_item_rates(session, factory):
    booking = factory.glamping_booking(tax_invoice_required=False)
    factory.tent(booking, 1_000_000, item=factory.item(tax_rate=10))
    per_item = CountingTax(100000)

    tax = TaxService.compute_tax(session, booking.id, Decimal("1000000"), Decimal("5000"), False, per_item_tax=per_item)

    assert tax == 0
    assert per_item.calls == 0


def test_invoice_tax_adds_additional_tax_and_calls_service_once(session, factory):
    booking = factory.glamping_booking(tax_invoice_required=True)
    per_item = CountingTax(80000)

    tax = TaxService.compute_tax(session, booking.id, Decimal("1000000"), Decimal("5000"), True, per_item_tax=per_item)

    assert tax == Decimal("85000")
    assert per_item.calls == 1


def test_per_item_tax_uses_each_line_rate_after_discount(session, factory):
    booking = factory.glamping_booking(tax_invoice_required=True)
    taxed_tent = factory.tent(
        booking, 1_000_000, item=factory.item("Dome", tax_rate=8), discount_amount=Decimal("100000")
    )
    factory.tent(booking, 500000, item=factory.item("Bell tent"))
    drink = factory.menu_item("Wine", price=300000, tax_rate=10)
    factory.menu_product(booking, 300000, quantity=2, menu_item=drink)

    result = TaxService.calculate_per_item_tax(session, booking.id)

    assert result.total_tax_amount == Decimal("132000")
    tent_tax = {d.line_id: d.tax_amount for d in result.tent_details}
    assert tent_tax[taxed_tent.id] == Decimal("72000")
    assert result.product_details[0].tax_amount == Decimal("60000")


def test_per_item_tax_uses_tent_override(session, factory):
    # Tax follows the overridden amount, not the stored subtotal.
    booking = factory.glamping_booking(tax_invoice_required=True)
    factory.tent(booking, 1_000_000, item=factory.item(tax_rate=10), subtotal_override=Decimal("800000"))

    result = TaxService.calculate_per_item_tax(session, booking.id)

    assert result.tent_details[0].taxable_amount == Decimal("800000")
    assert result.total_tax_amount == Decimal("80000")


def test_inactive_item_tax_is_ignored(session, factory):
    booking = factory.glamping_booking(tax_invoice_required=True)
    item = factory.item()
    item.taxes.append(GlampingTax(name="Old VAT", amount=Decimal("10"), status=False))
    session.flush()
    factory.tent(booking, 1_000_000, item=item)

    result = TaxService.calculate_per_item_tax(session, booking.id)

    assert result.total_tax_amount == 0


def test_line_tax_rounds_half_up_to_whole_units():
    assert round_whole(Decimal("12.5")) == Decimal("13")
    assert round_whole(Decimal("12.49")) == Decimal("12")
