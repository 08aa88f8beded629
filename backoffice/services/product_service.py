import logging
from backoffice import extensions
from backoffice.extensions import db
from backoffice.models.audit_log import AuditLog
from backoffice.models.inventory import InventoryLevel
from backoffice.models.location import Location
from backoffice.models.product import Product, ProductAttribute
from backoffice.models.variant import Variant
from backoffice.services import inventory_service, variant_service

logger = logging.getLogger(__name__)

VARIANT_FIELDS = ("key", "title", "option1", "option2", "option3") + Variant.EDITABLE_FIELDS


def _prepare_payload(data):
    """Validate a product payload and apply the submission fallback.

    Returns ``(attributes, variants)`` ready to persist.
    """
    if not (data.get("name") or "").strip():
        raise ValueError("Product name is required")

    attributes = variant_service.normalize_attributes(data.get("attributes"))
    variants = data.get("variants") or []
    if not isinstance(variants, list):
        raise ValueError("Variants must be a list")
    for variant in variants:
        if not isinstance(variant, dict) or not variant.get("title"):
            raise ValueError("Every variant needs a title")

    allocation = data.get("inventory_quantities")
    if allocation is None:
        allocation = inventory_service.initial_allocation()
    else:
        allocation = inventory_service.AllocationTable(allocation)

    return variant_service.ensure_non_empty_variants(
        attributes, variants, defaults=data.get("defaults"), allocation=allocation
    )


def _apply_product_fields(product, data):
    product.name = data["name"].strip()
    for field in ("summary", "content", "vendor", "product_type"):
        if field in data:
            setattr(product, field, data.get(field) or "")
    if "tags" in data:
        product.tags = list(data.get("tags") or [])
    if data.get("status"):
        if data["status"] not in Product.VALID_STATUSES:
            raise ValueError(f"Invalid status '{data['status']}'")
        product.status = data["status"]


def _replace_attributes(product, attributes):
    product.attributes = [
        ProductAttribute(
            name=a["name"],
            values=list(a["values"]),
            value_keys=list(a.get("value_keys") or []),
            position=a.get("position") or i + 1,
        )
        for i, a in enumerate(attributes)
    ]


def _apply_variant_fields(variant, payload, position):
    for field in VARIANT_FIELDS:
        if field in payload:
            setattr(variant, field, payload[field])
    if not variant.key:
        variant.key = variant.title
    if variant.position is None:
        variant.position = position


def _create_levels(variant, quantities, known_locations):
    for row in quantities or []:
        location_id = row.get("location_id")
        if location_id not in known_locations:
            logger.warning("Skipping stock for unknown location %s", location_id)
            continue
        available = int(row.get("available") or 0)
        on_hand = row.get("on_hand")
        variant.inventory_levels.append(
            InventoryLevel(
                location_id=location_id,
                available=available,
                on_hand=available if on_hand is None else int(on_hand),
            )
        )


def _known_location_ids():
    return {loc_id for (loc_id,) in db.session.query(Location.id).all()}


def create_product(data, admin_id=None):
    """Persist a new product with its attributes, variants and initial stock.

    Initial stock is then recorded in the ledger by a background job.
    """
    attributes, variants = _prepare_payload(data)

    product = Product()
    _apply_product_fields(product, data)
    _replace_attributes(product, attributes)

    known_locations = _known_location_ids()
    for i, payload in enumerate(variants):
        variant = Variant()
        _apply_variant_fields(variant, payload, i + 1)
        _create_levels(variant, payload.get("inventory_quantities"), known_locations)
        product.variants.append(variant)

    db.session.add(product)
    db.session.flush()  # get product.id

    db.session.add(
        AuditLog(
            admin_id=admin_id,
            action="CREATE_PRODUCT",
            product_id=product.id,
            payload={"name": product.name, "variants": len(variants)},
        )
    )
    db.session.commit()

    extensions.task_queue.enqueue(
        "backoffice.workers.inventory_sync.record_initial_stock",
        product_id=product.id,
        job_id=f"initial_stock_{product.id}",
    )
    return product


def update_product(product_id, data, admin_id=None):
    """Apply an edited attribute/variant set to an existing product.

    Variants sent with an ``id`` are updated in place; those without one are
    created with their stock. Persisted variants missing from the payload
    are deleted.
    """
    product = db.session.get(Product, product_id)
    if not product:
        return None

    attributes, variants = _prepare_payload(data)
    _apply_product_fields(product, data)
    _replace_attributes(product, attributes)

    existing = {v.id: v for v in product.variants}
    previous = [v.to_dict() for v in product.variants]
    known_locations = _known_location_ids()

    kept = []
    for i, payload in enumerate(variants):
        variant = existing.get(payload.get("id"))
        if variant is None:
            variant = Variant()
            _create_levels(variant, payload.get("inventory_quantities"), known_locations)
        _apply_variant_fields(variant, payload, i + 1)
        kept.append(variant)

    removed = variant_service.dropped_variants(
        previous, [{"id": v.id} for v in kept if v.id is not None]
    )
    product.variants = kept

    if removed:
        titles = [v["title"] for v in removed]
        logger.info("Product %s: removing variants %s", product.id, titles)
        db.session.add(
            AuditLog(
                admin_id=admin_id,
                action="REMOVE_VARIANTS",
                product_id=product.id,
                payload={"titles": titles},
            )
        )

    db.session.add(
        AuditLog(
            admin_id=admin_id,
            action="UPDATE_PRODUCT",
            product_id=product.id,
            payload={"variants": len(kept)},
        )
    )
    db.session.commit()
    return product


def get_product(product_id):
    return db.session.get(Product, product_id)


def load_editor_state(product):
    """Editor starting point for an existing product.

    A product saved with the "Default Title" fallback opens with no
    attributes and no variants; its single variant's fields become the form
    defaults instead.
    """
    state = {
        "product": product.to_dict(),
        "has_default_variant": product.has_default_variant,
        "attributes": [a.to_dict() for a in product.attributes],
        "variants": [v.to_dict() for v in product.variants],
        "defaults": variant_service.template_defaults(),
        "inventory_quantities": inventory_service.initial_allocation().template(),
    }
    if product.has_default_variant:
        first = product.variants[0].to_dict()
        state["defaults"] = variant_service.template_defaults(
            {field: first.get(field) for field in variant_service.TEMPLATE_FIELDS}
        )
        state["attributes"] = []
        state["variants"] = []
    return state


def list_locations(active_only=True):
    query = Location.query
    if active_only:
        query = query.filter_by(status="ACTIVE")
    return query.order_by(Location.id).all()


def create_location(name, code, default_location=False):
    if not (name or "").strip():
        raise ValueError("Location name is required")
    if Location.query.filter_by(code=code).first():
        raise ValueError(f"Location code '{code}' already exists")
    location = Location(name=name.strip(), code=code, default_location=default_location)
    db.session.add(location)
    db.session.commit()
    return location


def get_stats():
    """Product counts by status for the stats command."""
    rows = (
        db.session.query(Product.status, db.func.count(Product.id))
        .group_by(Product.status)
        .all()
    )
    return dict(rows)
