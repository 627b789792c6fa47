from typing import Iterable, List

from pymongo.database import Database

from storefront.db.models import PRODUCT
from storefront.services.query import as_object_id


def get_by_ids(db: Database, ids: Iterable[str]) -> List[dict]:
    """Resolve a set of product ids with a single query. Unknown ids are simply absent."""
    oids = list({oid for oid in (as_object_id(i) for i in ids) if oid is not None})
    if not oids:
        return []
    return [PRODUCT.public(d) for d in db[PRODUCT.collection].find({'_id': {'$in': oids}})]
