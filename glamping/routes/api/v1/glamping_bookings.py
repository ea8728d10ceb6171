from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from glamping.decorators import STAFF_ROLES, role_required
from glamping.extensions import db
from glamping.services import BookingTotalsService, GlampingBookingEditService, HistoryService, PaymentService

api_glamping_booking_bp = Blueprint("api_glamping_booking", __name__)


def _totals_payload(booking):
    return {
        "id": booking.id,
        "subtotal_amount": str(booking.subtotal_amount),
        "discount_amount": str(booking.discount_amount),
        "tax_amount": str(booking.tax_amount),
        "total_amount": str(booking.total_amount),
        "deposit_due": str(booking.deposit_due),
        "balance_due": str(booking.balance_due),
        "payment_status": booking.payment_status,
        "tax_invoice_required": booking.tax_invoice_required,
    }


@api_glamping_booking_bp.get("/<int:booking_id>/live-total")
@login_required
@role_required(*STAFF_ROLES)
def live_total(booking_id):
    live = BookingTotalsService.get_glamping_booking_live_total(db.session, booking_id)
    return jsonify(
        {
            "subtotal": str(live.subtotal),
            "tax_amount": str(live.tax_amount),
            "discount_amount": str(live.discount_amount),
            "total_amount": str(live.total_amount),
        }
    )


@api_glamping_booking_bp.post("/<int:booking_id>/recalculate")
@login_required
@role_required(*STAFF_ROLES)
def recalculate(booking_id):
    try:
        BookingTotalsService.recalculate_glamping_booking_totals(db.session, booking_id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    booking = BookingTotalsService.load_booking(db.session, booking_id)
    return jsonify(_totals_payload(booking))


@api_glamping_booking_bp.post("/<int:booking_id>/tax-invoice")
@login_required
@role_required(*STAFF_ROLES)
def toggle_tax_invoice(booking_id):
    payload = request.get_json(silent=True) or {}
    try:
        booking = BookingTotalsService.toggle_tax_invoice(
            db.session, booking_id, payload.get("tax_invoice_required"), user_id=current_user.id
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return jsonify(_totals_payload(booking))


@api_glamping_booking_bp.post("/<int:booking_id>/payments")
@login_required
@role_required(*STAFF_ROLES)
def add_payment(booking_id):
    payload = request.get_json(silent=True) or {}
    payment = PaymentService.record_payment(
        booking_id,
        payload.get("amount"),
        payment_method=payload.get("payment_method"),
        user_id=current_user.id,
    )
    return jsonify({"id": payment.id, "amount": str(payment.amount), "status": payment.status}), 201


@api_glamping_booking_bp.get("/<int:booking_id>/history")
@login_required
@role_required(*STAFF_ROLES)
def history(booking_id):
    BookingTotalsService.load_booking(db.session, booking_id)
    return jsonify(
        [
            {
                "id": h.id,
                "action_type": h.action_type,
                "previous_status": h.previous_status,
                "new_status": h.new_status,
                "previous_payment_status": h.previous_payment_status,
                "new_payment_status": h.new_payment_status,
                "description": h.description,
                "changed_by_user_id": h.changed_by_user_id,
                "created_at": h.created_at.isoformat(),
            }
            for h in HistoryService.list_history(booking_id)
        ]
    )


@api_glamping_booking_bp.post("/<int:booking_id>/menu-products")
@login_required
@role_required(*STAFF_ROLES)
def add_menu_product(booking_id):
    payload = request.get_json(silent=True) or {}
    product = GlampingBookingEditService.add_menu_product(
        booking_id,
        current_user.id,
        payload.get("menu_item_id"),
        quantity=payload.get("quantity", 1),
        unit_price=payload.get("unit_price"),
        booking_tent_id=payload.get("booking_tent_id"),
        serving_date=payload.get("serving_date"),
    )
    return jsonify({"id": product.id}), 201


@api_glamping_booking_bp.patch("/<int:booking_id>/menu-products/<int:product_id>")
@login_required
@role_required(*STAFF_ROLES)
def update_menu_product(booking_id, product_id):
    payload = request.get_json(silent=True) or {}
    allowed = {"quantity", "unit_price", "subtotal_override", "discount_amount", "serving_date"}
    changes = {key: value for key, value in payload.items() if key in allowed}
    product = GlampingBookingEditService.update_menu_product(booking_id, product_id, current_user.id, **changes)
    return jsonify({"id": product.id, "quantity": product.quantity})


@api_glamping_booking_bp.delete("/<int:booking_id>/menu-products/<int:product_id>")
@login_required
@role_required(*STAFF_ROLES)
def remove_menu_product(booking_id, product_id):
    GlampingBookingEditService.remove_menu_product(booking_id, product_id, current_user.id)
    return jsonify({"ok": True})


@api_glamping_booking_bp.post("/<int:booking_id>/additional-costs")
@login_required
@role_required(*STAFF_ROLES)
def add_additional_cost(booking_id):
    payload = request.get_json(silent=True) or {}
    cost = GlampingBookingEditService.add_additional_cost(
        booking_id,
        current_user.id,
        payload.get("name"),
        payload.get("unit_price"),
        quantity=payload.get("quantity", 1),
        notes=payload.get("notes"),
    )
    return jsonify({"id": cost.id, "total_price": str(cost.total_price), "tax_amount": str(cost.tax_amount)}), 201


@api_glamping_booking_bp.delete("/<int:booking_id>/additional-costs/<int:cost_id>")
@login_required
@role_required(*STAFF_ROLES)
def remove_additional_cost(booking_id, cost_id):
    GlampingBookingEditService.remove_additional_cost(booking_id, cost_id, current_user.id)
    return jsonify({"ok": True})


@api_glamping_booking_bp.patch("/<int:booking_id>/tents/<int:tent_id>")
@login_required
@role_required(*STAFF_ROLES)
def override_tent_subtotal(booking_id, tent_id):
    payload = request.get_json(silent=True) or {}
    tent = GlampingBookingEditService.override_tent_subtotal(
        booking_id, tent_id, current_user.id, payload.get("subtotal_override")
    )
    override = tent.subtotal_override
    return jsonify({"id": tent.id, "subtotal_override": None if override is None else str(override)})


@api_glamping_booking_bp.delete("/<int:booking_id>/tents/<int:tent_id>")
@login_required
@role_required(*STAFF_ROLES)
def remove_tent(booking_id, tent_id):
    GlampingBookingEditService.remove_tent(booking_id, tent_id, current_user.id)
    return jsonify({"ok": True})
