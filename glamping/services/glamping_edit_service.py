from datetime import date
from decimal import Decimal

from flask import current_app

from glamping.errors import AppError, NotFoundError
from glamping.extensions import db
from glamping.models import (
    BookingAdditionalCost,
    BookingItem,
    BookingMenuProduct,
    BookingTent,
    GlampingBooking,
    MenuItem,
)
from glamping.services.booking_totals_service import BookingTotalsService
from glamping.services.history_service import HistoryService
from glamping.services.line_item_service import ZERO, as_decimal
from glamping.services.tax_service import HUNDRED, round_whole


def _parse_quantity(value):
    try:
        quantity = int(value)
        if quantity <= 0:
            raise ValueError
    except (TypeError, ValueError) as exc:
        raise AppError("Quantity must be at least 1.", 400) from exc
    return quantity


def _parse_amount(value, label, allow_none=False):
    if value is None or value == "":
        if allow_none:
            return None
        raise AppError(f"{label} is required.", 400)
    try:
        amount = Decimal(str(value))
    except Exception as exc:
        raise AppError(f"{label} must be a number.", 400) from exc
    if not amount.is_finite() or amount < 0:
        raise AppError(f"{label} must be non-negative.", 400)
    return amount


def _parse_date(value):
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise AppError("Dates must use YYYY-MM-DD.", 400) from exc


class GlampingBookingEditService:
    """
    Staff edits of a booking's line items.

    Every edit is one unit of work: change the rows, recalculate the booking
    totals, record the action, commit. Any failure rolls all of it back.
    """

    @staticmethod
    def _run(booking_id, user_id, action_type, edit):
        session = db.session
        try:
            if session.get(GlampingBooking, booking_id) is None:
                raise NotFoundError("Booking not found.")
            result, description = edit(session)
            session.flush()
            BookingTotalsService.recalculate_glamping_booking_totals(session, booking_id)
            HistoryService.log_glamping_booking_edit_action(session, booking_id, user_id, action_type, description)
            session.commit()
        except Exception:
            session.rollback()
            raise
        current_app.logger.info("Booking %s %s: %s", booking_id, action_type, description)
        return result

    @staticmethod
    def _menu_product(session, booking_id, product_id):
        product = session.query(BookingMenuProduct).filter_by(id=product_id, booking_id=booking_id).first()
        if product is None:
            raise NotFoundError("Menu product not found.")
        return product

    @staticmethod
    def add_menu_product(
        booking_id, user_id, menu_item_id, quantity=1, unit_price=None, booking_tent_id=None, serving_date=None
    ):
        quantity = _parse_quantity(quantity)
        unit_price = _parse_amount(unit_price, "Unit price", allow_none=True)
        serving_date = _parse_date(serving_date)

        def edit(session):
            menu_item = session.get(MenuItem, menu_item_id)
            if menu_item is None:
                raise NotFoundError("Menu item not found.")
            if booking_tent_id is not None:
                GlampingBookingEditService._tent(session, booking_id, booking_tent_id)
            product = BookingMenuProduct(
                booking_id=booking_id,
                booking_tent_id=booking_tent_id,
                menu_item_id=menu_item.id,
                serving_date=serving_date,
                quantity=quantity,
                unit_price=menu_item.price if unit_price is None else unit_price,
            )
            session.add(product)
            return product, f'Added menu product "{menu_item.name}" x{quantity}'

        return GlampingBookingEditService._run(booking_id, user_id, "item_add", edit)

    @staticmethod
    def update_menu_product(booking_id, product_id, user_id, **changes):
        def edit(session):
            product = GlampingBookingEditService._menu_product(session, booking_id, product_id)
            notes = []
            if "quantity" in changes:
                quantity = _parse_quantity(changes["quantity"])
                notes.append(f"quantity {product.quantity} → {quantity}")
                product.quantity = quantity
            if "unit_price" in changes:
                product.unit_price = _parse_amount(changes["unit_price"], "Unit price")
                notes.append(f"unit price {product.unit_price}")
            if "subtotal_override" in changes:
                product.subtotal_override = _parse_amount(
                    changes["subtotal_override"], "Subtotal override", allow_none=True
                )
                notes.append(f"subtotal override {product.subtotal_override}")
            if "discount_amount" in changes:
                product.discount_amount = _parse_amount(changes["discount_amount"], "Discount", allow_none=True)
                notes.append(f"discount {product.discount_amount}")
            if "serving_date" in changes:
                product.serving_date = _parse_date(changes["serving_date"])
                notes.append(f"serving date {product.serving_date}")
            if not notes:
                raise AppError("Nothing to update.", 400)
            name = product.menu_item.name if product.menu_item else f"#{product.menu_item_id}"
            return product, f'Edited menu product "{name}": {", ".join(notes)}'

        return GlampingBookingEditService._run(booking_id, user_id, "item_edit", edit)

    @staticmethod
    def remove_menu_product(booking_id, product_id, user_id):
        def edit(session):
            product = GlampingBookingEditService._menu_product(session, booking_id, product_id)
            name = product.menu_item.name if product.menu_item else f"#{product.menu_item_id}"
            description = f'Deleted menu product "{name}" x{product.quantity}'
            session.delete(product)
            return None, description

        return GlampingBookingEditService._run(booking_id, user_id, "item_delete", edit)

    @staticmethod
    def add_additional_cost(booking_id, user_id, name, unit_price, quantity=1, notes=None):
        name = (name or "").strip()
        if not name:
            raise AppError("Name is required.", 400)
        unit_price = _parse_amount(unit_price, "Unit price")
        quantity = _parse_quantity(quantity)

        def edit(session):
            booking = session.get(GlampingBooking, booking_id)
            if booking.tax_invoice_required:
                tax_rate = as_decimal(booking.tax_rate if booking.tax_rate is not None else 10)
            else:
                tax_rate = ZERO
            total_price = unit_price * quantity
            cost = BookingAdditionalCost(
                booking_id=booking_id,
                name=name,
                quantity=quantity,
                unit_price=unit_price,
                total_price=total_price,
                tax_rate=tax_rate,
                tax_amount=round_whole(total_price * tax_rate / HUNDRED),
                notes=(notes or "").strip() or None,
                created_by_user_id=HistoryService.resolve_actor_id(session, user_id),
            )
            session.add(cost)
            return cost, f'Added additional cost "{name}" x{quantity} ({total_price})'

        return GlampingBookingEditService._run(booking_id, user_id, "item_add", edit)

    @staticmethod
    def remove_additional_cost(booking_id, cost_id, user_id):
        def edit(session):
            cost = session.query(BookingAdditionalCost).filter_by(id=cost_id, booking_id=booking_id).first()
            if cost is None:
                raise NotFoundError("Additional cost not found.")
            description = f'Deleted additional cost "{cost.name}" ({cost.total_price})'
            session.delete(cost)
            return None, description

        return GlampingBookingEditService._run(booking_id, user_id, "item_delete", edit)

    @staticmethod
    def _tent(session, booking_id, tent_id):
        tent = session.query(BookingTent).filter_by(id=tent_id, booking_id=booking_id).first()
        if tent is None:
            raise NotFoundError("Tent not found.")
        return tent

    @staticmethod
    def override_tent_subtotal(booking_id, tent_id, user_id, subtotal_override):
        override = _parse_amount(subtotal_override, "Subtotal override", allow_none=True)

        def edit(session):
            tent = GlampingBookingEditService._tent(session, booking_id, tent_id)
            previous = tent.subtotal_override if tent.subtotal_override is not None else tent.subtotal
            tent.subtotal_override = override
            shown = override if override is not None else tent.subtotal
            return tent, f'Edited tent "{tent.item.name}": subtotal {previous} → {shown}'

        return GlampingBookingEditService._run(booking_id, user_id, "item_edit", edit)

    @staticmethod
    def remove_tent(booking_id, tent_id, user_id):
        def edit(session):
            tent = GlampingBookingEditService._tent(session, booking_id, tent_id)
            description = (
                f'Deleted tent "{tent.item.name}" ({tent.check_in_date} - {tent.check_out_date}, '
                f"subtotal: {tent.subtotal})"
            )
            session.query(BookingItem).filter_by(booking_tent_id=tent.id).delete(synchronize_session="fetch")
            session.query(BookingMenuProduct).filter_by(booking_tent_id=tent.id).update(
                {"booking_tent_id": None}, synchronize_session="fetch"
            )
            session.delete(tent)
            return None, description

        return GlampingBookingEditService._run(booking_id, user_id, "item_delete", edit)
