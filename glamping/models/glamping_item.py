from glamping.extensions import db
from glamping.models.base import PKType, TimestampMixin

glamping_item_taxes = db.Table(
    "glamping_item_taxes",
    db.Column("item_id", PKType, db.ForeignKey("glamping_items.id", ondelete="CASCADE"), primary_key=True),
    db.Column("tax_id", PKType, db.ForeignKey("glamping_taxes.id", ondelete="CASCADE"), primary_key=True),
)


class GlampingTax(TimestampMixin, db.Model):
    __tablename__ = "glamping_taxes"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    name = db.Column(db.String(120), nullable=False, default="VAT")
    amount = db.Column(db.Numeric(7, 2), nullable=False, default=0)
    is_percentage = db.Column(db.Boolean, nullable=False, default=True)
    status = db.Column(db.Boolean, nullable=False, default=True, index=True)


class GlampingItem(TimestampMixin, db.Model):
    __tablename__ = "glamping_items"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    name = db.Column(db.String(255), nullable=False)

    taxes = db.relationship("GlampingTax", secondary=glamping_item_taxes, order_by="GlampingTax.id")
