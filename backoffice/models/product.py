from datetime import datetime, timezone
from backoffice.extensions import db


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    summary = db.Column(db.Text, default="")
    content = db.Column(db.Text, default="")
    vendor = db.Column(db.String(255), default="")
    product_type = db.Column(db.String(255), default="")
    tags = db.Column(db.JSON, default=list)  # ["summer", "cotton"]
    status = db.Column(db.String(20), nullable=False, default="ACTIVE", index=True)
    stock_recorded_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    attributes = db.relationship(
        "ProductAttribute",
        backref="product",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="ProductAttribute.position",
    )
    variants = db.relationship(
        "Variant",
        backref="product",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="Variant.position",
    )

    VALID_STATUSES = {"ACTIVE", "DRAFT", "ARCHIVED"}

    @property
    def has_default_variant(self):
        """True when the product was saved without real attributes."""
        return bool(
            self.attributes
            and self.variants
            and self.attributes[0].name == "Title"
        )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "summary": self.summary,
            "content": self.content,
            "vendor": self.vendor,
            "product_type": self.product_type,
            "tags": self.tags or [],
            "status": self.status,
            "attributes": [a.to_dict() for a in self.attributes],
            "variants": [v.to_dict() for v in self.variants],
        }

    def __repr__(self):
        return f"<Product {self.id}: {self.name}>"


class ProductAttribute(db.Model):
    __tablename__ = "product_attributes"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(100), nullable=False)  # "Size", "Color"
    values = db.Column(db.JSON, default=list)  # ["S", "M", "L"]
    value_keys = db.Column(db.JSON, default=list)
    position = db.Column(db.Integer, default=1)

    def to_dict(self):
        return {
            "name": self.name,
            "values": list(self.values or []),
            "value_keys": list(self.value_keys or []),
            "position": self.position,
        }

    def __repr__(self):
        return f"<ProductAttribute {self.name}: {self.values}>"
