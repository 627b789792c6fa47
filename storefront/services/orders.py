"""Order placement and order lookups by owner."""
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict

from bson import ObjectId
from pymongo.database import Database

from storefront.core.errors import InvalidInput, OutOfStock
from storefront.db.models import ORDER
from storefront.schemas import OrderCreate
from storefront.services import query
from storefront.services.products import get_by_ids

logger = logging.getLogger(__name__)


def create_order(db: Database, subject: str, payload: OrderCreate) -> dict:
    """Validate stock for every line and store the order for `subject`.

    Nothing is written when any line fails. Stock is only checked, never
    decremented. `totalProducts` counts line entries, not units.
    """
    items = payload.products
    if not items:
        raise InvalidInput("Order must contain at least one product")
    owner = query.as_object_id(subject)
    if owner is None:
        raise InvalidInput("Invalid order owner")

    found = {p['_id']: p for p in get_by_ids(db, [it.product for it in items])}

    missing = [it.product for it in items if ObjectId(it.product) not in found]
    if missing:
        raise InvalidInput(
            f"The following products do not exist: {', '.join(dict.fromkeys(missing))}",
            errors={"products": list(dict.fromkeys(missing))},
        )

    short = [found[ObjectId(it.product)]['name'] for it in items
             if it.quantity > found[ObjectId(it.product)].get('quantityInStock', 0)]
    if short:
        names = list(dict.fromkeys(short))
        logger.info("Order for user %s rejected, out of stock: %s", subject, names)
        raise OutOfStock(names)

    total = sum(Decimal(str(found[ObjectId(it.product)].get('price', 0))) * it.quantity for it in items)
    doc = {
        'user': owner,
        'products': [{'product': ObjectId(it.product), 'quantity': it.quantity} for it in items],
        'totalAmount': float(total.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)),
        'totalProducts': len(items),
        'status': payload.status,
    }
    order = query.create(db, ORDER, doc)
    logger.info("Order %s created for user %s with %d line(s)", order['_id'], subject, len(items))
    return order


def list_by_user(db: Database, user_id: str, params: query.ListParams) -> Dict[str, Any]:
    owner = query.as_object_id(user_id)
    if owner is None:
        raise InvalidInput("Invalid user id")
    return query.list_records(db, ORDER, params, base_filter={'user': owner})
