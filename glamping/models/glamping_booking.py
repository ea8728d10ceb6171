from glamping.extensions import db
from glamping.models.base import PKType, TimestampMixin


class GlampingBooking(TimestampMixin, db.Model):
    __tablename__ = "glamping_bookings"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    booking_code = db.Column(db.String(32), nullable=False, unique=True, index=True)
    customer_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    payment_status = db.Column(db.String(24), nullable=False, default="pending", index=True)

    subtotal_amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    tax_amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    discount_amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    # Derived by the database; written components only.
    total_amount = db.Column(
        db.Numeric(14, 2),
        db.Computed("subtotal_amount + tax_amount - discount_amount", persisted=True),
    )
    deposit_due = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    balance_due = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    tax_rate = db.Column(db.Numeric(5, 2), nullable=False, default=10)
    tax_invoice_required = db.Column(db.Boolean, nullable=False, default=False)

    tents = db.relationship("BookingTent", back_populates="booking", lazy="dynamic", cascade="all, delete-orphan")
    items = db.relationship("BookingItem", back_populates="booking", lazy="dynamic", cascade="all, delete-orphan")
    menu_products = db.relationship(
        "BookingMenuProduct", back_populates="booking", lazy="dynamic", cascade="all, delete-orphan"
    )
    additional_costs = db.relationship(
        "BookingAdditionalCost", back_populates="booking", lazy="dynamic", cascade="all, delete-orphan"
    )
    payments = db.relationship("BookingPayment", back_populates="booking", lazy="dynamic", cascade="all, delete-orphan")
    history = db.relationship("StatusHistory", back_populates="booking", lazy="dynamic", cascade="all, delete-orphan")

    __table_args__ = (
        db.Index("ix_glamping_bookings_status_payment", "status", "payment_status"),
    )
