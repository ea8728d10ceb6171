from decimal import Decimal

from flask import current_app

from glamping.errors import AppError, NotFoundError
from glamping.extensions import db
from glamping.models import BookingPayment, GlampingBooking
from glamping.models.base import utcnow
from glamping.services.booking_totals_service import BookingTotalsService
from glamping.services.history_service import PAYMENT_RECEIVED, HistoryService

PAYMENT_METHODS = {"cash", "bank_transfer", "card", "qr"}


class PaymentService:
    @staticmethod
    def record_payment(booking_id, amount, payment_method="cash", user_id=None):
        try:
            amount = Decimal(str(amount))
            if not amount.is_finite() or amount <= 0:
                raise ValueError
        except Exception as exc:
            raise AppError("Amount must be a positive number.", 400) from exc
        payment_method = (payment_method or "cash").strip().lower()
        if payment_method not in PAYMENT_METHODS:
            raise AppError("Invalid payment method.", 400)

        session = db.session
        try:
            booking = session.get(GlampingBooking, booking_id)
            if booking is None:
                raise NotFoundError("Booking not found.")

            payment = BookingPayment(
                booking_id=booking.id,
                amount=amount,
                status="paid",
                payment_method=payment_method,
                paid_at=utcnow(),
                created_by_user_id=HistoryService.resolve_actor_id(session, user_id),
            )
            session.add(payment)
            session.flush()

            previous_payment_status = booking.payment_status
            BookingTotalsService.recalculate_glamping_booking_totals(session, booking.id)
            HistoryService.log_booking_note(
                session,
                booking,
                PAYMENT_RECEIVED,
                f"Received payment {amount} via {payment_method}",
                user_id=user_id,
            )
            session.commit()
        except Exception:
            session.rollback()
            raise

        current_app.logger.info(
            "Payment %s recorded for booking %s: %s via %s (payment status %s -> %s)",
            payment.id,
            booking.booking_code,
            amount,
            payment_method,
            previous_payment_status,
            booking.payment_status,
        )
        return payment
