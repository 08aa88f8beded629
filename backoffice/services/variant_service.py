"""Variant matrix: attribute editing, combination generation and reconciliation.

Everything here works on plain payload dicts (the same shape the admin API
receives and returns) and never touches the database:

    attribute   {"name", "values", "value_keys", "position"}
    combination {"title", "option1", "option2", "option3", "key"}
    variant     {"key", "title", "option1".., "sku", "price", ...,
                 "inventory_quantities": [{"location_id", "available", "on_hand"}]}
"""
import copy
import logging
import uuid

logger = logging.getLogger(__name__)

TITLE_SEPARATOR = " / "
KEY_SEPARATOR = "|"
OPTION_SLOTS = ("option1", "option2", "option3")
MAX_ATTRIBUTES = 3

DEFAULT_TITLE = "Default Title"
DEFAULT_ATTRIBUTE_NAME = "Title"

# Form field → fallback used when the field is empty at generation time.
TEMPLATE_FIELDS = {
    "sku": "",
    "barcode": "",
    "price": None,
    "compare_at_price": 0,
    "cost_price": 0,
    "tracked": False,
    "lot_management": False,
    "requires_shipping": True,
    "weight": 0,
    "weight_unit": "g",
    "unit": "",
}

EDITABLE_FIELDS = tuple(TEMPLATE_FIELDS) + ("image",)


def new_value_key():
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------

def normalize_attribute(raw, position=None):
    """Coerce an attribute payload into the canonical dict.

    Duplicate values are dropped (first occurrence wins) and every value
    gets a key: the one supplied in ``value_keys`` when present, otherwise a
    fresh one.
    """
    if not isinstance(raw, dict):
        raise ValueError("Attribute must be an object")

    raw_values = raw.get("values") or []
    if not isinstance(raw_values, list):
        raise ValueError("Attribute values must be a list")
    raw_keys = raw.get("value_keys") or []

    values, keys = [], []
    for i, value in enumerate(raw_values):
        value = str(value).strip() if value is not None else ""
        if not value or value in values:
            continue
        values.append(value)
        key = raw_keys[i] if i < len(raw_keys) else None
        keys.append(str(key) if key else new_value_key())

    return {
        "name": str(raw.get("name") or ""),
        "values": values,
        "value_keys": keys,
        "position": raw.get("position") or position or 1,
    }


def normalize_attributes(raw_attributes):
    if not raw_attributes:
        return []
    if not isinstance(raw_attributes, list):
        raise ValueError("Attributes must be a list")
    return [normalize_attribute(a, position=i + 1) for i, a in enumerate(raw_attributes)]


def is_valid_attribute(attribute):
    return bool(attribute.get("name")) and bool(attribute.get("values"))


def valid_attributes(attributes):
    """Attributes that take part in generation: named and with values."""
    return [a for a in attributes or [] if is_valid_attribute(a)]


def add_attribute(attributes, max_attributes=MAX_ATTRIBUTES):
    """Append an empty attribute row. Refuses past ``max_attributes``."""
    if len(attributes) >= max_attributes:
        raise ValueError(f"A product can have at most {max_attributes} attributes")
    attributes.append(
        {"name": "", "values": [], "value_keys": [], "position": len(attributes) + 1}
    )
    return attributes


def remove_attribute(attributes, index):
    del attributes[index]
    for i, attribute in enumerate(attributes):
        attribute["position"] = i + 1
    return attributes


def add_attribute_value(attribute, value):
    """Add a value to an attribute.

    Returns False without touching the attribute when the value is blank or
    already present.
    """
    value = (value or "").strip()
    if not value or value in attribute["values"]:
        return False
    attribute["values"].append(value)
    attribute.setdefault("value_keys", []).append(new_value_key())
    return True


def remove_attribute_value(attribute, index):
    del attribute["values"][index]
    keys = attribute.get("value_keys") or []
    if index < len(keys):
        del keys[index]
    return attribute


def rename_attribute_value(attribute, index, new_value):
    """Change a value's text while keeping its key."""
    new_value = (new_value or "").strip()
    if not new_value:
        return False
    others = attribute["values"][:index] + attribute["values"][index + 1:]
    if new_value in others:
        return False
    attribute["values"][index] = new_value
    return True


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def _value_key(attribute, index):
    keys = attribute.get("value_keys") or []
    if index < len(keys) and keys[index]:
        return keys[index]
    return attribute["values"][index]


def generate_combinations(attributes):
    """Cartesian product of the valid attributes, in nested-loop order.

    The first attribute is the outer loop. Option slots beyond the number of
    attributes stay None.
    """
    attrs = valid_attributes(attributes)
    if not attrs:
        return []

    picks = []

    def walk(depth, current):
        if depth == len(attrs):
            picks.append(list(current))
            return
        attribute = attrs[depth]
        for i, value in enumerate(attribute["values"]):
            current.append((value, _value_key(attribute, i)))
            walk(depth + 1, current)
            current.pop()

    walk(0, [])

    combinations = []
    for pick in picks:
        values = [value for value, _ in pick]
        combination = {
            "title": TITLE_SEPARATOR.join(values),
            "key": KEY_SEPARATOR.join(key for _, key in pick),
        }
        for slot, name in enumerate(OPTION_SLOTS):
            combination[name] = values[slot] if slot < len(values) else None
        combinations.append(combination)
    return combinations


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------

def template_defaults(form=None):
    """Snapshot the product-level form fields used for new variants."""
    form = form or {}
    defaults = {}
    for field, fallback in TEMPLATE_FIELDS.items():
        value = form.get(field)
        if value is None or value == "":
            value = fallback
        defaults[field] = value
    return defaults


def build_variant_stub(combination, defaults, allocation, position):
    variant = {
        "key": combination.get("key") or combination["title"],
        "title": combination["title"],
        "option1": combination.get("option1"),
        "option2": combination.get("option2"),
        "option3": combination.get("option3"),
    }
    variant.update(copy.deepcopy(defaults))
    variant["position"] = position
    variant["inventory_quantities"] = copy.deepcopy(list(allocation or []))
    return variant


def reconcile_variants(previous, combinations, defaults=None, allocation=None):
    """Merge freshly generated combinations into the current variant list.

    A previous variant is matched by its stable key, falling back to an
    exact title match for variants that predate keys. Matched variants keep
    every edited field; unmatched combinations get a stub built from
    ``defaults`` and a copy of ``allocation``. Previous variants left
    unmatched are dropped.
    """
    defaults = template_defaults(defaults)
    previous = previous or []

    by_key, by_title = {}, {}
    for variant in previous:
        if variant.get("key"):
            by_key.setdefault(variant["key"], variant)
        if variant.get("title"):
            by_title.setdefault(variant["title"], variant)

    claimed = set()
    result = []
    for index, combination in enumerate(combinations):
        match = by_key.get(combination.get("key"))
        if match is None or id(match) in claimed:
            match = by_title.get(combination["title"])
        if match is not None and id(match) not in claimed:
            claimed.add(id(match))
            variant = copy.deepcopy(match)
            variant["title"] = combination["title"]
            for slot in OPTION_SLOTS:
                variant[slot] = combination.get(slot)
            variant["key"] = combination.get("key") or combination["title"]
            result.append(variant)
        else:
            result.append(
                build_variant_stub(combination, defaults, allocation, index + 1)
            )

    dropped = [v.get("title") for v in previous if id(v) not in claimed]
    if dropped:
        logger.info("Dropping %d variant(s) no longer generated: %s", len(dropped), dropped)

    return result


def regenerate_variants(attributes, previous, defaults=None, allocation=None):
    return reconcile_variants(
        previous, generate_combinations(attributes), defaults, allocation
    )


def dropped_variants(previous, variants):
    """Previous variants that did not survive a regeneration."""
    kept = {v.get("id") for v in variants if v.get("id") is not None}
    return [v for v in previous or [] if v.get("id") is not None and v["id"] not in kept]


def find_missing_variants(attributes, variants):
    """Combinations whose title has no variant yet."""
    existing = {v.get("title") for v in variants or []}
    return [c for c in generate_combinations(attributes) if c["title"] not in existing]


def add_missing_variants(attributes, variants, defaults=None, allocation=None):
    """Append stubs for the missing combinations after the current variants.

    Existing variants are returned untouched and in their original order.
    """
    variants = list(variants or [])
    defaults = template_defaults(defaults)
    missing = find_missing_variants(attributes, variants)
    added = [
        build_variant_stub(combination, defaults, allocation, len(variants) + i + 1)
        for i, combination in enumerate(missing)
    ]
    return variants + added, len(added)


def ensure_non_empty_variants(attributes, variants, defaults=None, allocation=None):
    """Submission step: keep valid attributes and guarantee one variant.

    When no variant is left, the product gets a single "Default Title"
    variant under a "Title" attribute.
    """
    attributes = [copy.deepcopy(a) for a in valid_attributes(attributes)]
    variants = list(variants or [])
    if variants:
        return attributes, variants

    defaults = template_defaults(defaults)
    combination = {
        "title": DEFAULT_TITLE,
        "key": DEFAULT_TITLE,
        "option1": DEFAULT_TITLE,
        "option2": None,
        "option3": None,
    }
    variants = [build_variant_stub(combination, defaults, allocation, 1)]
    attributes.append(
        {
            "name": DEFAULT_ATTRIBUTE_NAME,
            "values": [DEFAULT_TITLE],
            "value_keys": [DEFAULT_TITLE],
            "position": 1,
        }
    )
    return attributes, variants


# ---------------------------------------------------------------------------
# Per-variant edits
# ---------------------------------------------------------------------------

def edit_variant(variant, changes):
    """Apply operator edits (price, sku, ...) to a generated variant."""
    for field, value in (changes or {}).items():
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Field '{field}' cannot be edited on a variant")
        variant[field] = value
    return variant


def set_variant_image(variant, attachment):
    """Assign an attachment reference ({id, url, filename}) to a variant."""
    variant["image"] = dict(attachment) if attachment else None
    variant["image_id"] = attachment.get("id") if attachment else None
    return variant
