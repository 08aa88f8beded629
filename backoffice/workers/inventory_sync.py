"""RQ worker job: record a new product's initial stock in the ledger."""
import logging
from datetime import datetime, timezone
from flask import current_app, has_app_context
from backoffice import create_app, extensions
from backoffice.extensions import db
from backoffice.models.audit_log import AuditLog
from backoffice.models.product import Product
from backoffice.services import ledger_service

logger = logging.getLogger(__name__)

_worker_app = None


def _get_app():
    """Return an app instance for worker execution.

    Reuse the current app when already inside an app context (tests/CLI),
    otherwise lazily create the worker app once.
    """
    global _worker_app
    if has_app_context():
        return current_app._get_current_object()
    if _worker_app is None:
        _worker_app = create_app()
    return _worker_app


def record_initial_stock(product_id):
    """Post a ``create_product`` ledger entry per non-zero starting quantity.

    Enqueued by product creation. Idempotency: skips products whose stock was
    already recorded, and levels posted by an earlier partial run.
    Distributed lock: one run per product at a time.
    """
    app = _get_app()
    with app.app_context():
        product = db.session.get(Product, product_id)
        if not product:
            logger.error("Product %d not found", product_id)
            return 0

        if product.stock_recorded_at is not None:
            logger.info("Stock for product %d already recorded, skipping", product_id)
            return 0

        lock = None
        if extensions.redis_client is not None:
            lock = extensions.redis_client.lock(f"initial_stock:{product_id}", timeout=300)
            if not lock.acquire(blocking=False):
                logger.info("Lock held for product %d, skipping", product_id)
                return 0

        try:
            posted = 0
            for variant in product.variants:
                for level in variant.inventory_levels:
                    if not level.available or level.recorded_at is not None:
                        continue
                    ledger_service.record_adjustment(
                        location_id=level.location_id,
                        variant_id=variant.id,
                        reason="create_product",
                        change_value=level.available,
                        reference_document_id=product.id,
                    )
                    level.recorded_at = datetime.now(timezone.utc)
                    db.session.commit()
                    posted += 1

            product.stock_recorded_at = datetime.now(timezone.utc)
            db.session.add(
                AuditLog(
                    action="RECORD_INITIAL_STOCK",
                    product_id=product.id,
                    payload={"entries": posted},
                )
            )
            db.session.commit()
            logger.info("Recorded %d initial stock entries for product %d", posted, product_id)
            return posted

        except Exception:
            logger.exception("Recording initial stock failed for product %d", product_id)
            db.session.rollback()
            raise  # let RQ mark the job failed

        finally:
            if lock is not None:
                try:
                    lock.release()
                except Exception:
                    logger.warning("Lock for product %d already expired", product_id)
