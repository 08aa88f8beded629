from datetime import datetime, timezone
from backoffice.extensions import db


class Variant(db.Model):
    __tablename__ = "variants"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    key = db.Column(db.String(255), nullable=False, default="")
    title = db.Column(db.String(255), nullable=False)  # "Red / S"
    option1 = db.Column(db.String(100))
    option2 = db.Column(db.String(100))
    option3 = db.Column(db.String(100))
    sku = db.Column(db.String(100), default="", index=True)
    barcode = db.Column(db.String(100), default="")
    price = db.Column(db.Numeric(12, 2))
    compare_at_price = db.Column(db.Numeric(12, 2), default=0)
    cost_price = db.Column(db.Numeric(12, 2), default=0)
    tracked = db.Column(db.Boolean, nullable=False, default=False)
    lot_management = db.Column(db.Boolean, nullable=False, default=False)
    requires_shipping = db.Column(db.Boolean, nullable=False, default=True)
    position = db.Column(db.Integer, default=1)
    weight = db.Column(db.Float, default=0)
    weight_unit = db.Column(db.String(10), default="g")
    unit = db.Column(db.String(50), default="")
    image = db.Column(db.JSON)  # {"id", "url", "filename"}
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    inventory_levels = db.relationship(
        "InventoryLevel",
        backref="variant",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="InventoryLevel.location_id",
    )

    EDITABLE_FIELDS = (
        "sku",
        "barcode",
        "price",
        "compare_at_price",
        "cost_price",
        "tracked",
        "lot_management",
        "requires_shipping",
        "position",
        "weight",
        "weight_unit",
        "unit",
        "image",
    )

    @property
    def image_id(self):
        return self.image.get("id") if self.image else None

    @property
    def inventory_quantity(self):
        return sum(level.available for level in self.inventory_levels)

    def to_dict(self):
        return {
            "id": self.id,
            "key": self.key,
            "title": self.title,
            "option1": self.option1,
            "option2": self.option2,
            "option3": self.option3,
            "sku": self.sku,
            "barcode": self.barcode,
            "price": float(self.price) if self.price is not None else None,
            "compare_at_price": float(self.compare_at_price or 0),
            "cost_price": float(self.cost_price or 0),
            "tracked": self.tracked,
            "lot_management": self.lot_management,
            "requires_shipping": self.requires_shipping,
            "position": self.position,
            "weight": self.weight,
            "weight_unit": self.weight_unit,
            "unit": self.unit,
            "image": self.image,
            "image_id": self.image_id,
            "inventory_quantity": self.inventory_quantity,
            "inventory_quantities": [
                level.to_quantity() for level in self.inventory_levels
            ],
        }

    def __repr__(self):
        return f"<Variant {self.title}>"
