from datetime import datetime, timezone
from backoffice.extensions import db


class InventoryLevel(db.Model):
    """Stock of one variant at one location."""

    __tablename__ = "inventory_levels"

    id = db.Column(db.Integer, primary_key=True)
    variant_id = db.Column(
        db.Integer,
        db.ForeignKey("variants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    location_id = db.Column(
        db.Integer,
        db.ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    available = db.Column(db.Integer, nullable=False, default=0)
    on_hand = db.Column(db.Integer, nullable=False, default=0)
    # Set once the starting quantity has been posted to the ledger
    recorded_at = db.Column(db.DateTime(timezone=True))
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    location = db.relationship("Location", lazy="joined")

    __table_args__ = (
        db.UniqueConstraint("variant_id", "location_id", name="uq_inventory_level"),
    )

    def to_quantity(self):
        return {
            "location_id": self.location_id,
            "available": self.available,
            "on_hand": self.on_hand,
        }

    def to_dict(self):
        return {
            "id": self.id,
            "variant_id": self.variant_id,
            "location_id": self.location_id,
            "location_name": self.location.name if self.location else None,
            "available": self.available,
            "on_hand": self.on_hand,
        }

    def __repr__(self):
        return f"<InventoryLevel v{self.variant_id}@{self.location_id}: {self.available}>"
