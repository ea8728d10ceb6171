from glamping.extensions import db
from glamping.models.base import PKType, TimestampMixin


class BookingMenuProduct(TimestampMixin, db.Model):
    __tablename__ = "glamping_booking_menu_products"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    booking_id = db.Column(
        PKType, db.ForeignKey("glamping_bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    booking_tent_id = db.Column(
        PKType, db.ForeignKey("glamping_booking_tents.id", ondelete="SET NULL"), nullable=True, index=True
    )
    menu_item_id = db.Column(PKType, db.ForeignKey("menu_items.id", ondelete="RESTRICT"), nullable=False, index=True)
    serving_date = db.Column(db.Date, nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    unit_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    subtotal_override = db.Column(db.Numeric(14, 2), nullable=True)
    discount_amount = db.Column(db.Numeric(14, 2), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    booking = db.relationship("GlampingBooking", back_populates="menu_products")
    menu_item = db.relationship("MenuItem")

    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_menu_product_quantity_positive"),
    )
