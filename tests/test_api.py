from decimal import Decimal

from glamping.models import User


def _booking(session, factory, **kwargs):
    booking = factory.glamping_booking(**kwargs)
    factory.tent(booking, 1_000_000, item=factory.item(tax_rate=10))
    session.commit()
    return booking


def test_requires_login(client, session, factory):
    booking = _booking(session, factory)

    resp = client.get(f"/api/v1/glamping-bookings/{booking.id}/live-total")

    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Unauthorized"


def test_customers_are_forbidden(client, session, factory):
    booking = _booking(session, factory)
    customer = User(full_name="Guest", email="guest@example.com", role="customer")
    session.add(customer)
    session.commit()
    with client.session_transaction() as sess:
        sess["_user_id"] = str(customer.id)
        sess["_fresh"] = True

    resp = client.get(f"/api/v1/glamping-bookings/{booking.id}/live-total")

    assert resp.status_code == 403


def test_live_total(staff_client, session, factory):
    booking = _booking(session, factory, tax_invoice_required=True)

    resp = staff_client.get(f"/api/v1/glamping-bookings/{booking.id}/live-total")

    assert resp.status_code == 200
    data = resp.get_json()
    assert Decimal(data["subtotal"]) == Decimal("1000000")
    assert Decimal(data["tax_amount"]) == Decimal("100000")
    assert Decimal(data["total_amount"]) == Decimal("1100000")


def test_live_total_unknown_booking(staff_client):
    resp = staff_client.get("/api/v1/glamping-bookings/999/live-total")

    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Booking not found."


def test_recalculate_persists_totals(staff_client, session, factory):
    booking = _booking(session, factory)

    resp = staff_client.post(f"/api/v1/glamping-bookings/{booking.id}/recalculate")

    assert resp.status_code == 200
    data = resp.get_json()
    assert Decimal(data["total_amount"]) == Decimal("1000000")
    assert Decimal(data["deposit_due"]) == Decimal("1000000")


def test_toggle_tax_invoice(staff_client, session, factory):
    booking = _booking(session, factory)

    resp = staff_client.post(
        f"/api/v1/glamping-bookings/{booking.id}/tax-invoice", json={"tax_invoice_required": True}
    )

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["tax_invoice_required"] is True
    assert Decimal(data["tax_amount"]) == Decimal("100000")


def test_toggle_tax_invoice_requires_boolean(staff_client, session, factory):
    booking = _booking(session, factory)

    resp = staff_client.post(f"/api/v1/glamping-bookings/{booking.id}/tax-invoice", json={})

    assert resp.status_code == 400


def test_payment_then_history(staff_client, session, factory, staff_user):
    booking = _booking(session, factory)

    resp = staff_client.post(
        f"/api/v1/glamping-bookings/{booking.id}/payments", json={"amount": "300000", "payment_method": "cash"}
    )
    assert resp.status_code == 201

    history = staff_client.get(f"/api/v1/glamping-bookings/{booking.id}/history").get_json()
    assert [h["action_type"] for h in history] == ["payment_status_adjust", "payment_received"]
    assert history[0]["new_payment_status"] == "deposit_paid"
    assert history[1]["changed_by_user_id"] == staff_user.id


def test_additional_cost_endpoint(staff_client, session, factory):
    booking = _booking(session, factory)

    resp = staff_client.post(
        f"/api/v1/glamping-bookings/{booking.id}/additional-costs",
        json={"name": "Extra bed", "unit_price": 50000, "quantity": 2},
    )

    assert resp.status_code == 201
    assert Decimal(resp.get_json()["total_price"]) == Decimal("100000")


def test_add_camping_product_endpoint(staff_client, session, factory):
    booking = factory.camping_booking(accommodation_cost=Decimal("100000"))
    session.commit()

    resp = staff_client.post(
        f"/api/v1/bookings/{booking.id}/products", json={"name": "Firewood", "unit_price": 20000, "quantity": 2}
    )

    assert resp.status_code == 201
    data = resp.get_json()
    assert Decimal(data["products_cost"]) == Decimal("40000")
    assert Decimal(data["total_amount"]) == Decimal("140000")
