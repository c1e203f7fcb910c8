from datetime import datetime, timezone
from babyshop.extensions import db


class AdminUser(db.Model):
    __tablename__ = "admin_users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    is_admin = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    @staticmethod
    def is_admin_email(email):
        if not email:
            return False
        row = AdminUser.query.filter_by(email=email.strip().lower()).first()
        return bool(row and row.is_admin)

    def __repr__(self):
        return f"<AdminUser {self.email} admin={self.is_admin}>"
