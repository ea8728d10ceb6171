from glamping.extensions import db
from glamping.models.base import PKType, TimestampMixin


class BookingAdditionalCost(TimestampMixin, db.Model):
    __tablename__ = "glamping_booking_additional_costs"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    booking_id = db.Column(
        PKType, db.ForeignKey("glamping_bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    unit_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    total_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    tax_rate = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    tax_amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    notes = db.Column(db.Text, nullable=True)
    created_by_user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    booking = db.relationship("GlampingBooking", back_populates="additional_costs")
