from glamping.extensions import db
from glamping.models.base import PKType, TimestampMixin


class BookingTent(TimestampMixin, db.Model):
    __tablename__ = "glamping_booking_tents"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    booking_id = db.Column(
        PKType, db.ForeignKey("glamping_bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id = db.Column(PKType, db.ForeignKey("glamping_items.id", ondelete="RESTRICT"), nullable=False, index=True)
    check_in_date = db.Column(db.Date, nullable=True)
    check_out_date = db.Column(db.Date, nullable=True)

    subtotal = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    subtotal_override = db.Column(db.Numeric(14, 2), nullable=True)
    discount_amount = db.Column(db.Numeric(14, 2), nullable=True, default=0)

    booking = db.relationship("GlampingBooking", back_populates="tents")
    item = db.relationship("GlampingItem")
