from decimal import Decimal

import pytest

from glamping.errors import AppError, NotFoundError
from glamping.models import BookingAdditionalCost, BookingItem, BookingMenuProduct, StatusHistory
from glamping.services import GlampingBookingEditService, HistoryService


@pytest.fixture
def booking(session, factory):
    booking = factory.glamping_booking()
    factory.tent(booking, 1_000_000)
    session.commit()
    return booking


def test_add_menu_product_recalculates_and_records(session, factory, booking, staff_user):
    breakfast = factory.menu_item("Breakfast", price=150000)
    session.commit()

    product = GlampingBookingEditService.add_menu_product(booking.id, staff_user.id, breakfast.id, quantity=2)

    assert product.unit_price == Decimal("150000")
    assert booking.subtotal_amount == Decimal("1300000")
    assert booking.total_amount == Decimal("1300000")
    entry = session.query(StatusHistory).filter_by(booking_id=booking.id).one()
    assert entry.action_type == "item_add"
    assert entry.description == 'Added menu product "Breakfast" x2'
    assert entry.changed_by_user_id == staff_user.id


def test_failed_edit_rolls_back_rows_and_totals(session, factory, booking, staff_user, monkeypatch):
    breakfast = factory.menu_item("Breakfast", price=150000)
    session.commit()

    def fail(*args, **kwargs):
        raise RuntimeError("history store unavailable")

    monkeypatch.setattr(HistoryService, "log_glamping_booking_edit_action", staticmethod(fail))

    with pytest.raises(RuntimeError):
        GlampingBookingEditService.add_menu_product(booking.id, staff_user.id, breakfast.id)

    assert session.query(BookingMenuProduct).count() == 0
    assert booking.subtotal_amount == 0
    assert session.query(StatusHistory).count() == 0


def test_update_menu_product_applies_override(session, factory, booking, staff_user):
    product = factory.menu_product(booking, 100000, quantity=3)
    session.commit()

    GlampingBookingEditService.update_menu_product(
        booking.id, product.id, staff_user.id, subtotal_override="250000", discount_amount="50000"
    )

    assert booking.subtotal_amount == Decimal("1250000")
    assert booking.discount_amount == Decimal("50000")
    assert booking.total_amount == Decimal("1200000")
    assert session.query(StatusHistory).filter_by(action_type="item_edit").count() == 1


def test_update_menu_product_without_changes_is_rejected(session, factory, booking, staff_user):
    product = factory.menu_product(booking, 100000)
    session.commit()

    with pytest.raises(AppError):
        GlampingBookingEditService.update_menu_product(booking.id, product.id, staff_user.id)

    assert session.query(StatusHistory).count() == 0


def test_remove_menu_product(session, factory, booking, staff_user):
    product = factory.menu_product(booking, 100000, quantity=2)
    session.commit()

    GlampingBookingEditService.remove_menu_product(booking.id, product.id, staff_user.id)

    assert session.query(BookingMenuProduct).count() == 0
    assert booking.subtotal_amount == Decimal("1000000")
    assert session.query(StatusHistory).filter_by(action_type="item_delete").count() == 1


def test_additional_cost_is_taxed_when_invoice_required(session, factory, staff_user):
    booking = factory.glamping_booking(tax_invoice_required=True, tax_rate=Decimal("10"))
    factory.tent(booking, 1_000_000)
    session.commit()

    cost = GlampingBookingEditService.add_additional_cost(
        booking.id, staff_user.id, "Extra bed", "50000", quantity=2
    )

    assert cost.total_price == Decimal("100000")
    assert cost.tax_amount == Decimal("10000")
    assert cost.created_by_user_id == staff_user.id
    assert booking.subtotal_amount == Decimal("1100000")
    assert booking.tax_amount == Decimal("10000")
    assert booking.total_amount == Decimal("1110000")


def test_additional_cost_respects_zero_booking_tax_rate(session, factory, staff_user):
    booking = factory.glamping_booking(tax_invoice_required=True, tax_rate=Decimal("0"))
    factory.tent(booking, 1_000_000)
    session.commit()

    cost = GlampingBookingEditService.add_additional_cost(booking.id, staff_user.id, "Extra bed", 100000)

    assert cost.tax_rate == 0
    assert cost.tax_amount == 0
    assert booking.tax_amount == 0
    assert booking.total_amount == Decimal("1100000")


def test_additional_cost_is_untaxed_without_invoice(session, booking, staff_user):
    cost = GlampingBookingEditService.add_additional_cost(booking.id, staff_user.id, "Late checkout", 200000)

    assert cost.tax_amount == 0
    assert booking.tax_amount == 0
    assert booking.total_amount == Decimal("1200000")


def test_additional_cost_requires_name(booking, staff_user):
    with pytest.raises(AppError):
        GlampingBookingEditService.add_additional_cost(booking.id, staff_user.id, "  ", 200000)


def test_remove_additional_cost(session, factory, booking, staff_user):
    cost = factory.additional_cost(booking, 200000)
    session.commit()

    GlampingBookingEditService.remove_additional_cost(booking.id, cost.id, staff_user.id)

    assert session.query(BookingAdditionalCost).count() == 0
    assert booking.subtotal_amount == Decimal("1000000")


def test_override_tent_subtotal(session, booking, staff_user):
    tent = booking.tents.first()

    GlampingBookingEditService.override_tent_subtotal(booking.id, tent.id, staff_user.id, "800000")

    assert tent.subtotal_override == Decimal("800000")
    assert booking.subtotal_amount == Decimal("800000")
    assert session.query(StatusHistory).filter_by(action_type="item_edit").count() == 1


def test_clearing_tent_override_restores_subtotal(session, factory, staff_user):
    booking = factory.glamping_booking()
    tent = factory.tent(booking, 1_000_000, subtotal_override=Decimal("800000"))
    session.commit()

    GlampingBookingEditService.override_tent_subtotal(booking.id, tent.id, staff_user.id, None)

    assert tent.subtotal_override is None
    assert booking.subtotal_amount == Decimal("1000000")


def test_remove_tent_drops_its_addons(session, factory, staff_user):
    booking = factory.glamping_booking()
    first = factory.tent(booking, 1_000_000)
    factory.tent(booking, 600000)
    factory.addon(booking, first, addon_item_id=3, unit_price=50000, quantity=2)
    dinner = factory.menu_product(booking, 100000, booking_tent_id=first.id)
    session.commit()

    GlampingBookingEditService.remove_tent(booking.id, first.id, staff_user.id)

    assert session.query(BookingItem).count() == 0
    assert dinner.booking_tent_id is None
    assert booking.subtotal_amount == Decimal("700000")
    assert session.query(StatusHistory).filter_by(action_type="item_delete").count() == 1


def test_edit_of_unknown_tent_is_not_found(booking, staff_user):
    with pytest.raises(NotFoundError):
        GlampingBookingEditService.remove_tent(booking.id, 999, staff_user.id)


def test_edit_of_unknown_booking_is_not_found(staff_user):
    with pytest.raises(NotFoundError):
        GlampingBookingEditService.add_additional_cost(999, staff_user.id, "Extra bed", 1000)
