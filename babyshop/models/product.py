from datetime import datetime, timezone
from babyshop.extensions import db


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    name_bn = db.Column(db.String(255))  # Bangla display name
    description = db.Column(db.Text, default="")
    price = db.Column(db.Numeric(10, 2), nullable=False)  # base price, BDT
    sale_price = db.Column(db.Numeric(10, 2))
    status = db.Column(  # DRAFT, PUBLISHED, HIDDEN
        db.String(20), nullable=False, default="DRAFT", index=True
    )
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    colors = db.relationship(
        "ProductColor",
        backref="product",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="ProductColor.display_order",
    )
    sizes = db.relationship(
        "ProductSize",
        backref="product",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="ProductSize.display_order",
    )
    variations = db.relationship(
        "ProductVariation",
        backref="product",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="ProductVariation.id",
    )

    @property
    def is_visible(self):
        return self.status == "PUBLISHED"

    def display_name(self, language="en"):
        if language == "bn" and self.name_bn:
            return self.name_bn
        return self.name

    def to_dict(self, language="en"):
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.display_name(language),
            "description": self.description or "",
            "price": self.price,
            "sale_price": self.sale_price,
            "status": self.status,
        }

    def __repr__(self):
        return f"<Product {self.slug}: {self.name}>"
