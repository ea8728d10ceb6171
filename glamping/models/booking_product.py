from glamping.extensions import db
from glamping.models.base import PKType, TimestampMixin


class BookingProduct(TimestampMixin, db.Model):
    __tablename__ = "booking_products"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    booking_id = db.Column(PKType, db.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(PKType, nullable=True, index=True)
    name = db.Column(db.String(255), nullable=False)
    unit_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    tax_rate = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    status = db.Column(db.String(24), nullable=False, default="active", index=True)
    cancelled_reason = db.Column(db.Text, nullable=True)
    cancelled_at = db.Column(db.DateTime(timezone=True), nullable=True)

    discount_id = db.Column(PKType, nullable=True)
    discount_name = db.Column(db.String(255), nullable=True)
    discount_code = db.Column(db.String(64), nullable=True)
    discount_category = db.Column(db.String(32), nullable=True)
    discount_type = db.Column(db.String(24), nullable=True)
    discount_value = db.Column(db.Numeric(14, 2), nullable=True)
    discount_amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    booking = db.relationship("Booking", back_populates="products")

    __table_args__ = (
        db.Index("ix_booking_products_booking_status", "booking_id", "status"),
        db.CheckConstraint("quantity > 0", name="ck_booking_product_quantity_positive"),
    )
