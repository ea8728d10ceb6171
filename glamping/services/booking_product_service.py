from dataclasses import dataclass
from decimal import Decimal

from flask import current_app
from sqlalchemy.orm import Session

from glamping.errors import AppError, NotFoundError
from glamping.extensions import db
from glamping.models import Booking, BookingProduct
from glamping.models.base import utcnow
from glamping.services.line_item_service import ZERO, as_decimal

CENT = Decimal("0.01")
PRODUCT_ACTIVE = "active"
PRODUCT_CANCELLED = "cancelled"
VOUCHER_CATEGORY = "vouchers"


@dataclass(frozen=True)
class ProductsRecalculation:
    products_cost: Decimal
    products_tax: Decimal
    total_amount: Decimal
    deposit_amount: Decimal
    balance_amount: Decimal


def calculate_product_discount(unit_price, quantity, discount_type, discount_value):
    unit_price = as_decimal(unit_price)
    discount_value = as_decimal(discount_value)
    if discount_type == "percentage":
        return unit_price * quantity * discount_value / Decimal("100")
    if discount_type == "fixed_amount":
        # Fixed vouchers apply per unit.
        return discount_value * quantity
    return ZERO


class BookingProductService:
    @staticmethod
    def recalculate_booking_products(session, booking_id) -> ProductsRecalculation:
        booking = session.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking not found.")

        rows = (
            session.query(BookingProduct.unit_price, BookingProduct.quantity, BookingProduct.tax_rate)
            .filter(BookingProduct.booking_id == booking_id)
            .filter(BookingProduct.status == PRODUCT_ACTIVE)
            .all()
        )
        products_cost = ZERO
        products_tax = ZERO
        for unit_price, quantity, tax_rate in rows:
            line_total = as_decimal(unit_price) * quantity
            products_cost += line_total
            products_tax += line_total * as_decimal(tax_rate) / Decimal("100")
        products_cost = products_cost.quantize(CENT)
        products_tax = products_tax.quantize(CENT)

        booking.products_cost = products_cost
        booking.products_tax = products_tax
        booking.updated_at = utcnow()
        session.flush()
        # Generated totals are expired by the flush and reloaded here.
        session.refresh(booking, ["total_amount", "deposit_amount", "balance_amount"])

        return ProductsRecalculation(
            products_cost=products_cost,
            products_tax=products_tax,
            total_amount=as_decimal(booking.total_amount),
            deposit_amount=as_decimal(booking.deposit_amount),
            balance_amount=as_decimal(booking.balance_amount),
        )

    @staticmethod
    def recalculate_booking_products_with_pool(booking_id) -> ProductsRecalculation:
        """Recalculate on a dedicated session for callers outside a transaction."""
        session = Session(bind=db.engine)
        try:
            with session.begin():
                return BookingProductService.recalculate_booking_products(session, booking_id)
        finally:
            session.close()

    @staticmethod
    def get_products_discount_info(session, booking_id):
        product = (
            session.query(BookingProduct)
            .filter(BookingProduct.booking_id == booking_id)
            .filter(BookingProduct.status == PRODUCT_ACTIVE)
            .filter(BookingProduct.discount_id.isnot(None))
            .filter(BookingProduct.discount_category == VOUCHER_CATEGORY)
            .order_by(BookingProduct.id)
            .first()
        )
        if product is None:
            return None
        return {
            "discount_id": product.discount_id,
            "discount_name": product.discount_name,
            "discount_code": product.discount_code,
            "discount_category": product.discount_category,
            "discount_type": product.discount_type,
            "discount_value": as_decimal(product.discount_value),
        }

    @staticmethod
    def add_product(booking_id, name, unit_price, quantity=1, tax_rate=0, product_id=None):
        try:
            quantity = int(quantity)
            if quantity <= 0:
                raise ValueError
        except (TypeError, ValueError) as exc:
            raise AppError("Quantity must be a positive integer.", 400) from exc
        try:
            unit_price = Decimal(str(unit_price))
            tax_rate = Decimal(str(tax_rate or 0))
        except Exception as exc:
            raise AppError("Unit price and tax rate must be numbers.", 400) from exc
        if unit_price < 0 or tax_rate < 0:
            raise AppError("Unit price and tax rate must be non-negative.", 400)
        if not (name or "").strip():
            raise AppError("Product name is required.", 400)

        session = db.session
        try:
            if session.get(Booking, booking_id) is None:
                raise NotFoundError("Booking not found.")

            product = BookingProduct(
                booking_id=booking_id,
                product_id=product_id,
                name=name.strip(),
                unit_price=unit_price,
                quantity=quantity,
                tax_rate=tax_rate,
                status=PRODUCT_ACTIVE,
            )
            voucher = BookingProductService.get_products_discount_info(session, booking_id)
            if voucher:
                product.discount_id = voucher["discount_id"]
                product.discount_name = voucher["discount_name"]
                product.discount_code = voucher["discount_code"]
                product.discount_category = voucher["discount_category"]
                product.discount_type = voucher["discount_type"]
                product.discount_value = voucher["discount_value"]
                product.discount_amount = calculate_product_discount(
                    unit_price, quantity, voucher["discount_type"], voucher["discount_value"]
                ).quantize(CENT)
            session.add(product)
            session.flush()

            result = BookingProductService.recalculate_booking_products(session, booking_id)
            session.commit()
        except Exception:
            session.rollback()
            raise
        current_app.logger.info("Added product %s to booking %s", product.id, booking_id)
        return product, result

    @staticmethod
    def cancel_product(booking_id, product_id, reason=None):
        session = db.session
        try:
            product = session.query(BookingProduct).filter_by(id=product_id, booking_id=booking_id).first()
            if product is None:
                raise NotFoundError("Product not found.")
            if product.status != PRODUCT_ACTIVE:
                raise AppError("Product is already cancelled.", 409)

            product.status = PRODUCT_CANCELLED
            product.cancelled_reason = (reason or "").strip() or None
            product.cancelled_at = utcnow()
            session.flush()

            result = BookingProductService.recalculate_booking_products(session, booking_id)
            session.commit()
        except Exception:
            session.rollback()
            raise
        current_app.logger.info("Cancelled product %s on booking %s", product_id, booking_id)
        return product, result
