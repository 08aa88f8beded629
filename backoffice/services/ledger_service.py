"""Client for the external inventory adjustment ledger."""
import logging
import httpx
from flask import current_app

logger = logging.getLogger(__name__)

ADJUST_PATH = "/admin/inventory-levels"


class LedgerError(RuntimeError):
    """The ledger could not be reached or refused the adjustment."""


def _url(path):
    base = current_app.config["LEDGER_API_URL"].rstrip("/")
    if not base:
        raise LedgerError("LEDGER_API_URL is not configured")
    return f"{base}{path}"


def _headers():
    token = current_app.config.get("LEDGER_API_TOKEN")
    return {"Authorization": f"Bearer {token}"} if token else {}


def _request(method, path, **kwargs):
    """Make a request to the ledger API and unwrap its ``data`` envelope."""
    try:
        resp = httpx.request(
            method,
            _url(path),
            headers=_headers(),
            timeout=current_app.config["LEDGER_TIMEOUT"],
            **kwargs,
        )
    except httpx.HTTPError as e:
        logger.error("Ledger request %s %s failed: %s", method, path, e)
        raise LedgerError(f"Ledger unreachable: {e}") from e

    if resp.is_error:
        logger.error("Ledger API error %s: %s", resp.status_code, resp.text[:200])
        raise LedgerError(f"Ledger API error: {resp.status_code}")

    # Any 2xx is a recorded adjustment; the body is informational only.
    if not resp.content:
        return None
    try:
        data = resp.json()
    except ValueError:
        logger.warning("Ledger returned a non-JSON body for %s %s", method, path)
        return None
    return data.get("data") if isinstance(data, dict) else data


def record_adjustment(location_id, variant_id, reason, change_value, reference_document_id=0):
    """Append one immutable adjustment record to the ledger."""
    payload = {
        "location_id": location_id,
        "variant_id": variant_id,
        "reason": reason,
        "change_value": change_value,
        "reference_document_id": reference_document_id,
    }
    logger.info(
        "Ledger adjustment variant=%s location=%s change=%+d (%s)",
        variant_id, location_id, change_value, reason,
    )
    return _request("PUT", ADJUST_PATH, json=payload)
