from flask import current_app

from glamping.errors import AppError, NotFoundError
from glamping.models import GlampingBooking, StatusHistory, User

EDIT_ACTIONS = {"item_edit", "item_delete", "item_add"}
PAYMENT_STATUS_ADJUST = "payment_status_adjust"
PAYMENT_RECEIVED = "payment_received"
TAX_INVOICE_TOGGLE = "tax_invoice_toggle"

AUTO_ADJUST_NOTE = "Payment status automatically adjusted due to booking total change"


class HistoryService:
    @staticmethod
    def resolve_actor_id(session, user_id):
        if user_id is None:
            return None
        try:
            user_pk = int(user_id)
        except (TypeError, ValueError):
            return None
        if session.get(User, user_pk) is None:
            current_app.logger.info("History actor %s not found; recording without actor", user_id)
            return None
        return user_pk

    @staticmethod
    def _append(session, booking, previous_payment_status, new_payment_status, action_type, description, user_id):
        entry = StatusHistory(
            booking_id=booking.id,
            previous_status=booking.status,
            new_status=booking.status,
            previous_payment_status=previous_payment_status,
            new_payment_status=new_payment_status,
            action_type=action_type,
            description=description,
            changed_by_user_id=HistoryService.resolve_actor_id(session, user_id),
        )
        session.add(entry)
        session.flush()
        return entry

    @staticmethod
    def log_glamping_booking_edit_action(session, booking_id, user_id, action_type, description):
        if action_type not in EDIT_ACTIONS:
            raise AppError(f"Unsupported edit action: {action_type}.", 400)
        booking = session.get(GlampingBooking, booking_id)
        if booking is None:
            raise NotFoundError("Booking not found.")
        return HistoryService._append(
            session,
            booking,
            booking.payment_status,
            booking.payment_status,
            action_type,
            description,
            user_id,
        )

    @staticmethod
    def log_payment_status_change(
        session, booking, previous_payment_status, action_type=PAYMENT_STATUS_ADJUST, description=None, user_id=None
    ):
        return HistoryService._append(
            session,
            booking,
            previous_payment_status,
            booking.payment_status,
            action_type,
            description if description is not None else AUTO_ADJUST_NOTE,
            user_id,
        )

    @staticmethod
    def log_booking_note(session, booking, action_type, description, user_id=None):
        return HistoryService._append(
            session,
            booking,
            booking.payment_status,
            booking.payment_status,
            action_type,
            description,
            user_id,
        )

    @staticmethod
    def list_history(booking_id):
        return (
            StatusHistory.query.filter_by(booking_id=booking_id)
            .order_by(StatusHistory.created_at.asc(), StatusHistory.id.asc())
            .all()
        )
