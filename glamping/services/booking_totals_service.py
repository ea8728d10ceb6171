"""
Authoritative money figures for glamping bookings.

The write path (``recalculate_glamping_booking_totals``) and the read-only
path (``get_glamping_booking_live_total``) share ``_compute`` so they cannot
disagree. Neither commits: both run inside the caller's transaction.
"""

from dataclasses import dataclass
from decimal import Decimal

from flask import current_app
from sqlalchemy import func

from glamping.errors import AppError, NotFoundError
from glamping.models import BookingPayment, GlampingBooking
from glamping.models.base import utcnow
from glamping.models.booking_payment import SUCCESSFUL_PAYMENT_STATUSES
from glamping.services.history_service import TAX_INVOICE_TOGGLE, HistoryService
from glamping.services.line_item_service import LineItemService, as_decimal
from glamping.services.tax_service import TaxService, round_whole

# Pay-later bookings created by staff carry no deposit history; the whole
# amount is then due as deposit.
FULL_DEPOSIT_RATIO = Decimal("1")

PAYMENT_DEPOSIT_PAID = "deposit_paid"
PAYMENT_FULLY_PAID = "fully_paid"


@dataclass(frozen=True)
class LiveTotal:
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal


class BookingTotalsService:
    @staticmethod
    def load_booking(session, booking_id):
        booking = session.get(GlampingBooking, booking_id)
        if booking is None:
            raise NotFoundError("Booking not found.")
        return booking

    @staticmethod
    def _compute(session, booking, per_item_tax=None) -> LiveTotal:
        totals = LineItemService.sum_booking_items(session, booking.id)
        after_discount = totals.subtotal - totals.total_discount
        if after_discount < 0:
            current_app.logger.warning(
                "Booking %s discount %s exceeds subtotal %s",
                booking.id,
                totals.total_discount,
                totals.subtotal,
            )
        tax_amount = TaxService.compute_tax(
            session,
            booking.id,
            totals.subtotal,
            totals.additional_tax,
            booking.tax_invoice_required,
            per_item_tax=per_item_tax,
        )
        return LiveTotal(
            subtotal=totals.subtotal,
            tax_amount=tax_amount,
            discount_amount=totals.total_discount,
            total_amount=after_discount + tax_amount,
        )

    @staticmethod
    def total_paid(session, booking_id) -> Decimal:
        paid = (
            session.query(func.coalesce(func.sum(BookingPayment.amount), 0))
            .filter(BookingPayment.booking_id == booking_id)
            .filter(BookingPayment.status.in_(SUCCESSFUL_PAYMENT_STATUSES))
            .scalar()
        )
        return as_decimal(paid)

    @staticmethod
    def deposit_ratio(old_deposit_due, old_total_amount) -> Decimal:
        old_deposit_due = as_decimal(old_deposit_due)
        old_total_amount = as_decimal(old_total_amount)
        if old_total_amount > 0 and old_deposit_due > 0:
            return old_deposit_due / old_total_amount
        return FULL_DEPOSIT_RATIO

    @staticmethod
    def payment_status_for(total_paid, total_amount, current_status):
        if total_paid <= 0:
            return current_status
        if total_paid >= total_amount:
            return PAYMENT_FULLY_PAID
        return PAYMENT_DEPOSIT_PAID

    @staticmethod
    def get_glamping_booking_live_total(session, booking_id, per_item_tax=None) -> LiveTotal:
        booking = BookingTotalsService.load_booking(session, booking_id)
        return BookingTotalsService._compute(session, booking, per_item_tax=per_item_tax)

    @staticmethod
    def recalculate_glamping_booking_totals(session, booking_id, per_item_tax=None):
        booking = BookingTotalsService.load_booking(session, booking_id)
        old_deposit_due = booking.deposit_due
        old_total_amount = booking.total_amount

        live = BookingTotalsService._compute(session, booking, per_item_tax=per_item_tax)
        total_paid = BookingTotalsService.total_paid(session, booking.id)
        ratio = BookingTotalsService.deposit_ratio(old_deposit_due, old_total_amount)

        booking.subtotal_amount = live.subtotal
        booking.tax_amount = live.tax_amount
        booking.discount_amount = live.discount_amount
        booking.deposit_due = round_whole(live.total_amount * ratio)
        booking.balance_due = live.total_amount - total_paid
        booking.updated_at = utcnow()
        session.flush()

        previous_payment_status = booking.payment_status
        new_payment_status = BookingTotalsService.payment_status_for(
            total_paid, live.total_amount, previous_payment_status
        )
        if new_payment_status != previous_payment_status:
            booking.payment_status = new_payment_status
            session.flush()
            HistoryService.log_payment_status_change(session, booking, previous_payment_status)
            current_app.logger.info(
                "Booking %s payment status %s -> %s (paid %s of %s)",
                booking.id,
                previous_payment_status,
                new_payment_status,
                total_paid,
                live.total_amount,
            )

        current_app.logger.info(
            "Recalculated booking %s: subtotal=%s discount=%s tax=%s total=%s deposit=%s balance=%s",
            booking.id,
            live.subtotal,
            live.discount_amount,
            live.tax_amount,
            live.total_amount,
            booking.deposit_due,
            booking.balance_due,
        )

    @staticmethod
    def toggle_tax_invoice(session, booking_id, tax_invoice_required, user_id=None):
        if not isinstance(tax_invoice_required, bool):
            raise AppError("tax_invoice_required must be a boolean.", 400)
        booking = BookingTotalsService.load_booking(session, booking_id)
        booking.tax_invoice_required = tax_invoice_required
        session.flush()
        BookingTotalsService.recalculate_glamping_booking_totals(session, booking.id)
        HistoryService.log_booking_note(
            session,
            booking,
            TAX_INVOICE_TOGGLE,
            "VAT invoice enabled" if tax_invoice_required else "VAT invoice disabled",
            user_id=user_id,
        )
        return booking
