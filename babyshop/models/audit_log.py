from datetime import datetime, timezone
from babyshop.extensions import db


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)
    admin_email = db.Column(db.String(255), nullable=False, index=True)
    action = db.Column(db.String(50), nullable=False)  # SAVE_ATTRIBUTES, GENERATE_VARIATIONS
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    payload = db.Column(db.JSON)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.admin_email}>"
