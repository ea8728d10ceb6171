from glamping.services.booking_product_service import BookingProductService
from glamping.services.booking_totals_service import BookingTotalsService
from glamping.services.glamping_edit_service import GlampingBookingEditService
from glamping.services.history_service import HistoryService
from glamping.services.line_item_service import LineItemService
from glamping.services.payment_service import PaymentService
from glamping.services.tax_service import TaxService

__all__ = [
    "BookingProductService",
    "BookingTotalsService",
    "GlampingBookingEditService",
    "HistoryService",
    "LineItemService",
    "PaymentService",
    "TaxService",
]
