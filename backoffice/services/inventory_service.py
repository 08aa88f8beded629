"""Per-location stock: the allocation template used while variants are
being generated, and signed-delta adjustments once they are persisted."""
import copy
import logging

from backoffice.extensions import db
from backoffice.models.audit_log import AuditLog
from backoffice.models.inventory import InventoryLevel
from backoffice.models.location import Location
from backoffice.models.variant import Variant
from backoffice.services import ledger_service

logger = logging.getLogger(__name__)

REASONS = ("create_product", "fact_inventory", "create_order")
DEFAULT_REASON = "fact_inventory"


class AllocationTable:
    """One ``{location_id, available, on_hand}`` row per active location.

    The rows are a template: every variant receives its own copy, so editing
    one variant's quantities later never leaks into another.
    """

    def __init__(self, rows=None):
        self._rows = []
        for row in rows or []:
            if not isinstance(row, dict) or "location_id" not in row:
                raise ValueError("Each allocation row needs a location_id")
            available = int(row.get("available") or 0)
            on_hand = row.get("on_hand")
            self._rows.append(
                {
                    "location_id": row["location_id"],
                    "available": available,
                    "on_hand": available if on_hand is None else int(on_hand),
                }
            )

    @classmethod
    def for_locations(cls, location_ids):
        return cls(
            {"location_id": lid, "available": 0, "on_hand": 0} for lid in location_ids
        )

    def __len__(self):
        return len(self._rows)

    def __iter__(self):
        return iter(self.template())

    def template(self):
        return copy.deepcopy(self._rows)

    def get(self, location_id):
        for row in self._rows:
            if row["location_id"] == location_id:
                return dict(row)
        return None

    def set_location_quantity(self, location_id, value, variants=()):
        """Set one location's quantity and push the table onto every variant.

        ``available`` and ``on_hand`` move together. A ``None`` value is
        ignored. Returns the updated variants.
        """
        variants = list(variants)
        if value is None:
            return variants

        for row in self._rows:
            if row["location_id"] == location_id:
                row["available"] = int(value)
                row["on_hand"] = int(value)
                break
        else:
            raise ValueError(f"Unknown location {location_id}")

        for variant in variants:
            variant["inventory_quantities"] = self.template()
        return variants

    def total_available(self, variant_count):
        """Stock shown to the operator: every variant starts with the full table."""
        return sum(row["available"] for row in self._rows) * variant_count


def active_location_ids():
    rows = (
        Location.query.filter_by(status="ACTIVE", inventory_management=True)
        .order_by(Location.id)
        .all()
    )
    return [loc.id for loc in rows]


def initial_allocation():
    """Empty allocation table covering every active location."""
    return AllocationTable.for_locations(active_location_ids())


class AdjustmentDraft:
    """Delta and resulting total for one (variant, location), kept in sync.

    Both are computed against ``baseline``, the last known ``available``.
    """

    def __init__(self, baseline, reason=DEFAULT_REASON):
        self.baseline = baseline or 0
        self.reason = reason
        self.change = 0
        self.new_quantity = self.baseline

    def set_change(self, value):
        if value is None:
            return
        self.change = int(value)
        self.new_quantity = self.baseline + self.change

    def set_new_quantity(self, value):
        if value is None:
            return
        self.new_quantity = int(value)
        self.change = self.new_quantity - self.baseline

    @property
    def is_noop(self):
        return self.change == 0


def get_inventory_levels(variant_id):
    return (
        InventoryLevel.query.filter_by(variant_id=variant_id)
        .order_by(InventoryLevel.location_id)
        .all()
    )


def adjust_inventory_level(
    variant_id,
    location_id,
    change_value=None,
    new_quantity=None,
    reason=DEFAULT_REASON,
    reference_document_id=0,
    admin_id=None,
):
    """Adjust a persisted variant's stock at one location.

    Returns ``(level, draft)``, or None when the variant or location does not
    exist. A zero change returns without touching the ledger. Ledger failures
    raise ``LedgerError`` and leave the stored level unchanged.
    """
    if reason not in REASONS:
        raise ValueError(f"Unknown adjustment reason '{reason}'")

    variant = db.session.get(Variant, variant_id)
    location = db.session.get(Location, location_id)
    if not variant or not location:
        return None

    level = InventoryLevel.query.filter_by(
        variant_id=variant_id, location_id=location_id
    ).first()
    baseline = level.available if level else 0

    draft = AdjustmentDraft(baseline, reason=reason)
    if new_quantity is not None:
        draft.set_new_quantity(new_quantity)
    else:
        draft.set_change(change_value)

    if draft.is_noop:
        return level, draft

    ledger_service.record_adjustment(
        location_id=location_id,
        variant_id=variant_id,
        reason=reason,
        change_value=draft.change,
        reference_document_id=reference_document_id,
    )

    if level is None:
        level = InventoryLevel(
            variant_id=variant_id, location_id=location_id, available=0, on_hand=0
        )
        db.session.add(level)
    level.available += draft.change
    level.on_hand += draft.change

    db.session.add(
        AuditLog(
            admin_id=admin_id,
            action="ADJUST_INVENTORY",
            product_id=variant.product_id,
            payload={
                "variant_id": variant_id,
                "location_id": location_id,
                "reason": reason,
                "change_value": draft.change,
                "new_quantity": draft.new_quantity,
            },
        )
    )
    db.session.commit()
    return level, draft
