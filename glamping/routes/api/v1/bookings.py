from flask import Blueprint, jsonify, request
from flask_login import login_required

from glamping.decorators import STAFF_ROLES, role_required
from glamping.services import BookingProductService

api_booking_bp = Blueprint("api_booking", __name__)


def _recalculation_payload(result):
    return {
        "products_cost": str(result.products_cost),
        "products_tax": str(result.products_tax),
        "total_amount": str(result.total_amount),
        "deposit_amount": str(result.deposit_amount),
        "balance_amount": str(result.balance_amount),
    }


@api_booking_bp.post("/<int:booking_id>/products")
@login_required
@role_required(*STAFF_ROLES)
def add_product(booking_id):
    payload = request.get_json(silent=True) or {}
    product, result = BookingProductService.add_product(
        booking_id,
        payload.get("name"),
        payload.get("unit_price"),
        quantity=payload.get("quantity", 1),
        tax_rate=payload.get("tax_rate", 0),
        product_id=payload.get("product_id"),
    )
    return jsonify({"id": product.id, "discount_amount": str(product.discount_amount), **_recalculation_payload(result)}), 201


@api_booking_bp.post("/<int:booking_id>/products/<int:product_id>/cancel")
@login_required
@role_required(*STAFF_ROLES)
def cancel_product(booking_id, product_id):
    payload = request.get_json(silent=True) or {}
    product, result = BookingProductService.cancel_product(booking_id, product_id, reason=payload.get("reason"))
    return jsonify({"id": product.id, "status": product.status, **_recalculation_payload(result)})


@api_booking_bp.post("/<int:booking_id>/products/recalculate")
@login_required
@role_required(*STAFF_ROLES)
def recalculate_products(booking_id):
    result = BookingProductService.recalculate_booking_products_with_pool(booking_id)
    return jsonify(_recalculation_payload(result))
