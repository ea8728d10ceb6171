from glamping.extensions import db
from glamping.models.base import PKType, TimestampMixin


class StatusHistory(TimestampMixin, db.Model):
    __tablename__ = "glamping_booking_status_history"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    booking_id = db.Column(
        PKType, db.ForeignKey("glamping_bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    previous_status = db.Column(db.String(24), nullable=True)
    new_status = db.Column(db.String(24), nullable=True)
    previous_payment_status = db.Column(db.String(24), nullable=True)
    new_payment_status = db.Column(db.String(24), nullable=True)
    action_type = db.Column(db.String(32), nullable=True, index=True)
    description = db.Column(db.Text, nullable=True)
    changed_by_user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    booking = db.relationship("GlampingBooking", back_populates="history")
    changed_by = db.relationship("User")
