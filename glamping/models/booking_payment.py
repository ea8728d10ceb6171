from glamping.extensions import db
from glamping.models.base import PKType, TimestampMixin

SUCCESSFUL_PAYMENT_STATUSES = ("successful", "completed", "paid")


class BookingPayment(TimestampMixin, db.Model):
    __tablename__ = "glamping_booking_payments"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    booking_id = db.Column(
        PKType, db.ForeignKey("glamping_bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = db.Column(db.Numeric(14, 2), nullable=False)
    status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    payment_method = db.Column(db.String(32), nullable=False, default="cash")
    paid_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_by_user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    booking = db.relationship("GlampingBooking", back_populates="payments")
