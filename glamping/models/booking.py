from glamping.extensions import db
from glamping.models.base import PKType, TimestampMixin

_TOTAL_EXPR = "accommodation_cost + products_cost + products_tax + tax_amount - discount_amount"
_DEPOSIT_EXPR = f"ROUND(({_TOTAL_EXPR}) * deposit_percentage / 100.0, 2)"


class Booking(TimestampMixin, db.Model):
    """Camping pitch booking. Totals are generated columns over the cost components."""

    __tablename__ = "bookings"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    booking_reference = db.Column(db.String(32), nullable=False, unique=True, index=True)
    customer_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    payment_status = db.Column(db.String(24), nullable=False, default="pending", index=True)

    accommodation_cost = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    products_cost = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    products_tax = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    discount_amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    tax_amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    deposit_percentage = db.Column(db.Numeric(5, 2), nullable=False, default=100)

    total_amount = db.Column(db.Numeric(14, 2), db.Computed(_TOTAL_EXPR, persisted=True))
    deposit_amount = db.Column(db.Numeric(14, 2), db.Computed(_DEPOSIT_EXPR, persisted=True))
    balance_amount = db.Column(db.Numeric(14, 2), db.Computed(f"({_TOTAL_EXPR}) - {_DEPOSIT_EXPR}", persisted=True))

    products = db.relationship("BookingProduct", back_populates="booking", lazy="dynamic", cascade="all, delete-orphan")
