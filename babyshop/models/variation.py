from datetime import datetime, timezone
from babyshop.extensions import db


class ProductVariation(db.Model):
    __tablename__ = "product_variations"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    color_id = db.Column(
        db.Integer,
        db.ForeignKey("product_colors.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    size_id = db.Column(
        db.Integer,
        db.ForeignKey("product_sizes.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    sku = db.Column(db.String(100))
    price = db.Column(db.Numeric(10, 2), nullable=False)
    sale_price = db.Column(db.Numeric(10, 2))
    stock = db.Column(db.Integer, nullable=False, default=0)
    is_default = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    color = db.relationship("ProductColor", lazy="joined")
    size = db.relationship("ProductSize", lazy="joined")
    images = db.relationship(
        "ProductVariationImage",
        backref="variation",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="ProductVariationImage.display_order",
    )

    __table_args__ = (
        db.UniqueConstraint(
            "product_id", "color_id", "size_id", name="uq_variation_combo"
        ),
    )

    @property
    def in_stock(self):
        return self.stock > 0

    @property
    def effective_price(self):
        """Price a shopper pays: the sale price when one is set."""
        if self.sale_price is not None and self.sale_price < self.price:
            return self.sale_price
        return self.price

    def to_dict(self):
        return {
            "id": self.id,
            "color_id": self.color_id,
            "size_id": self.size_id,
            "sku": self.sku,
            "price": self.price,
            "sale_price": self.sale_price,
            "stock": self.stock,
            "is_default": self.is_default,
            "images": [img.to_dict() for img in self.images],
        }

    def __repr__(self):
        return f"<Variation {self.id} color={self.color_id} size={self.size_id}>"


class ProductVariationImage(db.Model):
    __tablename__ = "product_variation_images"

    id = db.Column(db.Integer, primary_key=True)
    variation_id = db.Column(
        db.Integer,
        db.ForeignKey("product_variations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    image_url = db.Column(db.String(1024), nullable=False)
    # Set only when the URL points at an object we uploaded
    storage_key = db.Column(db.String(512))
    is_primary = db.Column(db.Boolean, nullable=False, default=False)
    media_type = db.Column(db.String(10), nullable=False, default="image")
    display_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "image_url": self.image_url,
            "is_primary": self.is_primary,
            "media_type": self.media_type,
            "display_order": self.display_order,
        }

    def __repr__(self):
        return f"<VariationImage {self.media_type} #{self.display_order}>"
