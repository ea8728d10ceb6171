from flask import Blueprint

from glamping.routes.api.v1.bookings import api_booking_bp
from glamping.routes.api.v1.glamping_bookings import api_glamping_booking_bp

api_v1_bp = Blueprint("api_v1", __name__)
api_v1_bp.register_blueprint(api_glamping_booking_bp, url_prefix="/glamping-bookings")
api_v1_bp.register_blueprint(api_booking_bp, url_prefix="/bookings")
