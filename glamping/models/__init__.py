from glamping.models.booking import Booking
from glamping.models.booking_additional_cost import BookingAdditionalCost
from glamping.models.booking_item import BookingItem
from glamping.models.booking_menu_product import BookingMenuProduct
from glamping.models.booking_payment import BookingPayment
from glamping.models.booking_product import BookingProduct
from glamping.models.booking_tent import BookingTent
from glamping.models.glamping_booking import GlampingBooking
from glamping.models.glamping_item import GlampingItem, GlampingTax
from glamping.models.menu_item import MenuItem
from glamping.models.status_history import StatusHistory
from glamping.models.user import User

__all__ = [
    "User",
    "GlampingBooking",
    "BookingTent",
    "BookingItem",
    "BookingMenuProduct",
    "BookingAdditionalCost",
    "BookingPayment",
    "StatusHistory",
    "GlampingItem",
    "GlampingTax",
    "MenuItem",
    "Booking",
    "BookingProduct",
]
