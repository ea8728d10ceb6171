from decimal import Decimal

from glamping.extensions import db
from glamping.models.base import PKType, TimestampMixin

ADDON_TYPE = "addon"
PRICING_PER_UNIT = "per_unit"
PRICING_PER_GROUP = "per_group"


def _to_decimal(value):
    if value is None or value == "":
        return None
    return Decimal(str(value))


def _to_json_number(value):
    return None if value is None else str(value)


class BookingItem(TimestampMixin, db.Model):
    """
    Supplementary row attached to a booked tent (add-ons, parameters).

    Pricing mode, overrides and the applied voucher live in the ``meta`` JSON
    column. Callers use the typed properties below instead of the raw dict.
    """

    __tablename__ = "glamping_booking_items"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    booking_id = db.Column(
        PKType, db.ForeignKey("glamping_bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    booking_tent_id = db.Column(
        PKType, db.ForeignKey("glamping_booking_tents.id", ondelete="CASCADE"), nullable=True, index=True
    )
    addon_item_id = db.Column(PKType, nullable=True, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    unit_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    meta = db.Column(db.JSON, nullable=False, default=dict)

    booking = db.relationship("GlampingBooking", back_populates="items")
    tent = db.relationship("BookingTent")

    def _meta(self):
        return dict(self.meta or {})

    def _set_meta_key(self, key, value):
        data = self._meta()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        self.meta = data

    @property
    def item_type(self):
        return self._meta().get("type")

    @item_type.setter
    def item_type(self, value):
        self._set_meta_key("type", value)

    @property
    def is_addon(self):
        return self.item_type == ADDON_TYPE

    @property
    def pricing_mode(self):
        return self._meta().get("pricing_mode") or PRICING_PER_UNIT

    @pricing_mode.setter
    def pricing_mode(self, value):
        self._set_meta_key("pricing_mode", value)

    @property
    def price_override(self):
        return _to_decimal(self._meta().get("price_override"))

    @price_override.setter
    def price_override(self, value):
        self._set_meta_key("price_override", _to_json_number(value))

    @property
    def subtotal_override(self):
        return _to_decimal(self._meta().get("subtotal_override"))

    @subtotal_override.setter
    def subtotal_override(self, value):
        self._set_meta_key("subtotal_override", _to_json_number(value))

    @property
    def voucher(self):
        return self._meta().get("voucher") or None

    @voucher.setter
    def voucher(self, value):
        if value:
            value = {key: _to_json_number(val) if isinstance(val, Decimal) else val for key, val in value.items()}
        self._set_meta_key("voucher", value or None)

    @property
    def voucher_discount_amount(self):
        voucher = self.voucher or {}
        return _to_decimal(voucher.get("discount_amount"))
