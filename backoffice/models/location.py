from datetime import datetime, timezone
from backoffice.extensions import db


class Location(db.Model):
    __tablename__ = "locations"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(50), unique=True, index=True)
    status = db.Column(db.String(20), nullable=False, default="ACTIVE")
    default_location = db.Column(db.Boolean, nullable=False, default=False)
    inventory_management = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    STATUSES = {"ACTIVE", "INACTIVE"}

    @property
    def is_active(self):
        return self.status == "ACTIVE"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "status": self.status,
            "default_location": self.default_location,
            "inventory_management": self.inventory_management,
        }

    def __repr__(self):
        return f"<Location {self.code}: {self.name}>"
