"""Generic listing, lookup and mutation over one kind of record.

Every resource goes through these functions with its ``ResourceKind``;
per-resource modules only add the lookups that are specific to them.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database

from storefront.core.errors import InvalidInput, NotFound
from storefront.db.models import KINDS, ResourceKind
from storefront.security.utils import now_utc

RESERVED_PARAMS = ('page', 'limit', 'with')
# skip and limit travel as signed 64-bit integers
MAX_INT64 = 2 ** 63 - 1


@dataclass
class ListParams:
    page: int = 1
    limit: int = 20
    expand: List[str] = field(default_factory=list)
    filters: Dict[str, List[str]] = field(default_factory=dict)


def _positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be a positive integer")
    if value < 1:
        raise InvalidInput(f"{name} must be a positive integer")
    if value > MAX_INT64:
        raise InvalidInput(f"{name} is too large")
    return value


def parse_list_params(items: Iterable[Tuple[str, str]], default_limit: int = 20,
                      max_limit: Optional[int] = None) -> ListParams:
    """Split query-string pairs into paging, expansion and raw filters.

    Repeated keys keep every value. ``with`` may be repeated or comma separated.
    """
    grouped: Dict[str, List[str]] = {}
    for key, value in items:
        grouped.setdefault(key, []).append(value)

    params = ListParams(limit=default_limit)
    if 'page' in grouped:
        params.page = _positive_int('page', grouped['page'][-1])
    if 'limit' in grouped:
        params.limit = _positive_int('limit', grouped['limit'][-1])
    if max_limit is not None:
        params.limit = min(params.limit, max_limit)
    if (params.page - 1) * params.limit > MAX_INT64:
        raise InvalidInput("page is too large for the requested limit")
    for value in grouped.get('with', []):
        params.expand.extend(r.strip() for r in value.split(',') if r.strip())
    params.filters = {k: v for k, v in grouped.items() if k not in RESERVED_PARAMS}
    return params


def build_filter(kind: ResourceKind, raw_filters: Dict[str, List[str]]) -> Dict[str, Any]:
    """Keep only the kind's declared fields; unknown keys are dropped."""
    query: Dict[str, Any] = {}
    for key, values in raw_filters.items():
        coerce = kind.fields.get(key)
        if coerce is None:
            continue
        try:
            coerced = [coerce(v) for v in values]
        except ValueError:
            raise InvalidInput(f"Invalid value for filter '{key}'", errors={key: values})
        query[key] = coerced[0] if len(coerced) == 1 else {'$in': coerced}
    return query


def as_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def _ref_slots(doc: dict, path: str) -> List[Tuple[dict, str]]:
    head, _, tail = path.partition('.')
    if not tail:
        return [(doc, head)] if doc.get(head) is not None else []
    value = doc.get(head)
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, list):
        return []
    return [(item, tail) for item in value if isinstance(item, dict) and item.get(tail) is not None]


def expand(db: Database, kind: ResourceKind, docs: List[dict], relations: Iterable[str]) -> List[dict]:
    """Replace reference ids with the referenced records, one query per relation."""
    for rel in relations:
        target_name = kind.relations.get(rel)
        if target_name is None:
            continue
        target = KINDS[target_name]
        slots = [slot for doc in docs for slot in _ref_slots(doc, rel)]
        ids = {holder[key] for holder, key in slots}
        if not ids:
            continue
        found = {d['_id']: target.public(d) for d in db[target.collection].find({'_id': {'$in': list(ids)}})}
        for holder, key in slots:
            holder[key] = found.get(holder[key])
    return docs


def paginate(db: Database, kind: ResourceKind, query: Dict[str, Any], params: ListParams) -> Dict[str, Any]:
    coll = db[kind.collection]
    skip = (params.page - 1) * params.limit
    # count and page are separate reads, total may drift under concurrent writes
    total = coll.count_documents(query)
    docs = list(coll.find(query).sort('_id', ASCENDING).skip(skip).limit(params.limit))
    docs = [kind.public(d) for d in docs]
    expand(db, kind, docs, params.expand)
    return {
        'items': docs,
        'total': total,
        'page': params.page,
        'pages': math.ceil(total / params.limit),
    }


def list_records(db: Database, kind: ResourceKind, params: ListParams,
                 base_filter: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    query = build_filter(kind, params.filters)
    if base_filter:
        query.update(base_filter)
    return paginate(db, kind, query, params)


def create(db: Database, kind: ResourceKind, data: Dict[str, Any]) -> dict:
    now = now_utc()
    doc = {**data, 'createdAt': now, 'updatedAt': now}
    result = db[kind.collection].insert_one(doc)
    doc['_id'] = result.inserted_id
    return kind.public(doc)


def _oid_or_not_found(kind: ResourceKind, record_id: Any) -> ObjectId:
    oid = as_object_id(record_id)
    if oid is None:
        raise NotFound(f"{kind.label} not found")
    return oid


def get_by_id(db: Database, kind: ResourceKind, record_id: Any) -> dict:
    doc = db[kind.collection].find_one({'_id': _oid_or_not_found(kind, record_id)})
    if doc is None:
        raise NotFound(f"{kind.label} not found")
    return kind.public(doc)


def update(db: Database, kind: ResourceKind, record_id: Any, partial: Dict[str, Any]) -> dict:
    """Merge `partial` into the stored record and return the result."""
    changes = {k: v for k, v in partial.items() if k != '_id'}
    changes['updatedAt'] = now_utc()
    doc = db[kind.collection].find_one_and_update(
        {'_id': _oid_or_not_found(kind, record_id)},
        {'$set': changes},
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        raise NotFound(f"{kind.label} not found")
    return kind.public(doc)


def delete(db: Database, kind: ResourceKind, record_id: Any) -> dict:
    doc = db[kind.collection].find_one_and_delete({'_id': _oid_or_not_found(kind, record_id)})
    if doc is None:
        raise NotFound(f"{kind.label} not found")
    return kind.public(doc)


def set_status(db: Database, kind: ResourceKind, record_id: Any, status: str) -> dict:
    if kind.status_field is None:
        raise InvalidInput(f"{kind.label} records have no status")
    return update(db, kind, record_id, {kind.status_field: status})
