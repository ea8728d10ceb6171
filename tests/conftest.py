import itertools
from decimal import Decimal

import pytest

from glamping import create_app
from glamping.extensions import db
from glamping.models import (
    Booking,
    BookingAdditionalCost,
    BookingItem,
    BookingMenuProduct,
    BookingPayment,
    BookingProduct,
    BookingTent,
    GlampingBooking,
    GlampingItem,
    GlampingTax,
    MenuItem,
    User,
)


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def staff_user(session):
    user = User(full_name="Front Desk", email="staff@example.com", role="staff")
    session.add(user)
    session.commit()
    return user


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def staff_client(client, staff_user):
    with client.session_transaction() as sess:
        sess["_user_id"] = str(staff_user.id)
        sess["_fresh"] = True
    return client


class Factory:
    """Row builders for the booking tables. Each call flushes so ids are available."""

    def __init__(self, session):
        self.session = session
        self._seq = itertools.count(1)

    def _save(self, obj):
        self.session.add(obj)
        self.session.flush()
        return obj

    def glamping_booking(self, **kwargs):
        kwargs.setdefault("booking_code", f"GB-{next(self._seq):05d}")
        return self._save(GlampingBooking(**kwargs))

    def item(self, name="Safari Tent", tax_rate=None):
        item = GlampingItem(name=name)
        if tax_rate is not None:
            item.taxes.append(GlampingTax(name="VAT", amount=Decimal(str(tax_rate)), is_percentage=True, status=True))
        return self._save(item)

    def tent(self, booking, subtotal, item=None, **kwargs):
        item = item or self.item()
        return self._save(
            BookingTent(booking_id=booking.id, item_id=item.id, subtotal=Decimal(str(subtotal)), **kwargs)
        )

    def addon(self, booking, tent, addon_item_id, unit_price, quantity=1, pricing_mode="per_unit", **typed):
        row = BookingItem(
            booking_id=booking.id,
            booking_tent_id=tent.id if tent is not None else None,
            addon_item_id=addon_item_id,
            unit_price=Decimal(str(unit_price)),
            quantity=quantity,
        )
        row.item_type = "addon"
        row.pricing_mode = pricing_mode
        for key, value in typed.items():
            setattr(row, key, value)
        return self._save(row)

    def menu_item(self, name="Breakfast", price=100000, tax_rate=0):
        return self._save(MenuItem(name=name, price=Decimal(str(price)), tax_rate=Decimal(str(tax_rate))))

    def menu_product(self, booking, unit_price, quantity=1, menu_item=None, **kwargs):
        menu_item = menu_item or self.menu_item()
        return self._save(
            BookingMenuProduct(
                booking_id=booking.id,
                menu_item_id=menu_item.id,
                unit_price=Decimal(str(unit_price)),
                quantity=quantity,
                **kwargs,
            )
        )

    def additional_cost(self, booking, total_price, tax_amount=0, name="Late checkout"):
        return self._save(
            BookingAdditionalCost(
                booking_id=booking.id,
                name=name,
                quantity=1,
                unit_price=Decimal(str(total_price)),
                total_price=Decimal(str(total_price)),
                tax_amount=Decimal(str(tax_amount)),
            )
        )

    def payment(self, booking, amount, status="paid"):
        return self._save(BookingPayment(booking_id=booking.id, amount=Decimal(str(amount)), status=status))

    def camping_booking(self, **kwargs):
        kwargs.setdefault("booking_reference", f"CB-{next(self._seq):05d}")
        return self._save(Booking(**kwargs))

    def product(self, booking, name, unit_price, quantity=1, tax_rate=0, **kwargs):
        return self._save(
            BookingProduct(
                booking_id=booking.id,
                name=name,
                unit_price=Decimal(str(unit_price)),
                quantity=quantity,
                tax_rate=Decimal(str(tax_rate)),
                **kwargs,
            )
        )


@pytest.fixture
def factory(session):
    return Factory(session)
