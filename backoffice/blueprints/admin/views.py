"""Admin JSON API behind the product editor."""
import logging
from flask import request, abort, jsonify
from backoffice.blueprints.admin import admin_bp
from backoffice.services import inventory_service, product_service, variant_service
from backoffice.services.ledger_service import LedgerError

logger = logging.getLogger(__name__)


def _notification(level, message):
    return {"level": level, "message": message}


def _body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400)
    return data


def _admin_id():
    return request.headers.get("X-Admin-Id", type=int)


def _allocation(data):
    rows = data.get("inventory_quantities")
    if rows is None:
        return inventory_service.initial_allocation()
    return inventory_service.AllocationTable(rows)


@admin_bp.errorhandler(ValueError)
def handle_value_error(e):
    return {"error": str(e), "notification": _notification("error", str(e))}, 400


@admin_bp.errorhandler(LedgerError)
def handle_ledger_error(e):
    logger.warning("Ledger call failed: %s", e)
    return {
        "error": "ledger_unavailable",
        "notification": _notification("error", "Inventory update failed"),
    }, 502


@admin_bp.route("/variants/generate", methods=["POST"])
def generate_variants():
    """Regenerate the variant table after an attribute edit."""
    data = _body()
    attributes = variant_service.normalize_attributes(data.get("attributes"))
    allocation = _allocation(data)
    variants = variant_service.regenerate_variants(
        attributes,
        data.get("variants") or [],
        defaults=data.get("defaults"),
        allocation=allocation,
    )
    return {
        "attributes": attributes,
        "variants": variants,
        "missing_count": len(variant_service.find_missing_variants(attributes, variants)),
        "total_available": allocation.total_available(len(variants)),
    }


@admin_bp.route("/variants/missing", methods=["POST"])
def missing_variants():
    data = _body()
    attributes = variant_service.normalize_attributes(data.get("attributes"))
    missing = variant_service.find_missing_variants(attributes, data.get("variants") or [])
    return {"missing": missing, "count": len(missing)}


@admin_bp.route("/variants/add-missing", methods=["POST"])
def add_missing_variants():
    data = _body()
    attributes = variant_service.normalize_attributes(data.get("attributes"))
    variants, added = variant_service.add_missing_variants(
        attributes,
        data.get("variants") or [],
        defaults=data.get("defaults"),
        allocation=_allocation(data),
    )
    if added:
        notification = _notification("success", f"Added {added} new variant(s)")
    else:
        notification = _notification("info", "No missing variants")
    return {"variants": variants, "added": added, "notification": notification}


@admin_bp.route("/inventory/allocation", methods=["POST"])
def set_allocation():
    """Bulk-edit one location's starting stock for every variant."""
    data = _body()
    if "location_id" not in data:
        raise ValueError("location_id is required")
    table = _allocation(data)
    variants = table.set_location_quantity(
        data["location_id"], data.get("value"), data.get("variants") or []
    )
    return {
        "inventory_quantities": table.template(),
        "variants": variants,
        "total_available": table.total_available(len(variants)),
    }


@admin_bp.route("/locations")
def locations():
    rows = product_service.list_locations()
    return {
        "locations": [loc.to_dict() for loc in rows],
        "inventory_quantities": inventory_service.initial_allocation().template(),
    }


@admin_bp.route("/products", methods=["POST"])
def create_product():
    product = product_service.create_product(_body(), admin_id=_admin_id())
    return {
        "product": product.to_dict(),
        "notification": _notification("success", "Product created"),
    }, 201


@admin_bp.route("/products/<int:product_id>")
def product_detail(product_id):
    product = product_service.get_product(product_id)
    if not product:
        abort(404)
    return {"product": product.to_dict()}


@admin_bp.route("/products/<int:product_id>/editor")
def product_editor(product_id):
    product = product_service.get_product(product_id)
    if not product:
        abort(404)
    return product_service.load_editor_state(product)


@admin_bp.route("/products/<int:product_id>", methods=["PUT"])
def update_product(product_id):
    product = product_service.update_product(product_id, _body(), admin_id=_admin_id())
    if not product:
        abort(404)
    return {
        "product": product.to_dict(),
        "notification": _notification("success", "Product updated"),
    }


@admin_bp.route("/variants/<int:variant_id>/inventory-levels")
def inventory_levels(variant_id):
    levels = inventory_service.get_inventory_levels(variant_id)
    return jsonify(inventory_levels=[level.to_dict() for level in levels])


@admin_bp.route("/inventory-levels", methods=["PUT"])
def adjust_inventory_level():
    """Signed-delta stock adjustment for a persisted variant."""
    data = _body()
    for field in ("location_id", "variant_id"):
        if field not in data:
            raise ValueError(f"{field} is required")

    result = inventory_service.adjust_inventory_level(
        variant_id=data["variant_id"],
        location_id=data["location_id"],
        change_value=data.get("change_value"),
        new_quantity=data.get("new_quantity"),
        reason=data.get("reason") or inventory_service.DEFAULT_REASON,
        reference_document_id=data.get("reference_document_id") or 0,
        admin_id=_admin_id(),
    )
    if result is None:
        abort(404)

    level, draft = result
    if draft.is_noop:
        return {
            "level": level.to_dict() if level else None,
            "change_value": 0,
            "notification": _notification("info", "Nothing to adjust"),
        }
    return {
        "level": level.to_dict(),
        "change_value": draft.change,
        "new_quantity": draft.new_quantity,
        "notification": _notification("success", "Inventory updated"),
    }
