from flask_login import UserMixin

from glamping.extensions import db
from glamping.models.base import PKType, TimestampMixin


class User(UserMixin, TimestampMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    full_name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    role = db.Column(db.String(24), nullable=False, default="customer", index=True)
    is_active_user = db.Column(db.Boolean, nullable=False, default=True)

    @property
    def is_active(self):
        return bool(self.is_active_user)
