"""Record kinds stored in the document database.

A kind describes one collection: which fields may be used as equality
filters (and how to coerce query-string values for them), which fields are
references that can be expanded, and which fields never leave the service.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, FrozenSet, Optional

from bson import ObjectId
from pymongo import ASCENDING
from pymongo.database import Database


def _to_float(v: str) -> float:
    return float(v)

def _to_int(v: str) -> int:
    return int(v)

def _to_object_id(v: str) -> ObjectId:
    if not ObjectId.is_valid(v):
        raise ValueError(f"'{v}' is not a valid id")
    return ObjectId(v)

def _to_datetime(v: str) -> datetime:
    return datetime.fromisoformat(v.replace('Z', '+00:00'))

def _to_upper(v: str) -> str:
    return v.strip().upper()


@dataclass(frozen=True)
class ResourceKind:
    name: str
    collection: str
    fields: Dict[str, Callable[[str], object]]
    relations: Dict[str, str] = field(default_factory=dict)  # path -> kind name
    hidden: FrozenSet[str] = frozenset()
    status_field: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name.capitalize()

    def public(self, doc: Optional[dict]) -> Optional[dict]:
        if doc is None:
            return None
        return {k: v for k, v in doc.items() if k not in self.hidden}


_TIMESTAMPS = {'_id': _to_object_id, 'createdAt': _to_datetime, 'updatedAt': _to_datetime}

USER = ResourceKind(
    name='user',
    collection='users',
    fields={**_TIMESTAMPS, 'username': str, 'name': str, 'email': str.lower, 'status': _to_upper},
    hidden=frozenset({'password'}),
    status_field='status',
)

PRODUCT = ResourceKind(
    name='product',
    collection='products',
    fields={**_TIMESTAMPS, 'productCode': str, 'name': str, 'description': str,
            'price': _to_float, 'quantityInStock': _to_int},
)

ORDER = ResourceKind(
    name='order',
    collection='orders',
    fields={**_TIMESTAMPS, 'user': _to_object_id, 'products.product': _to_object_id,
            'products.quantity': _to_int, 'totalAmount': _to_float, 'totalProducts': _to_int,
            'status': _to_upper},
    relations={'user': 'user', 'products.product': 'product'},
)

KINDS = {k.name: k for k in (USER, PRODUCT, ORDER)}


def ensure_indexes(db: Database) -> None:
    db[USER.collection].create_index([('username', ASCENDING)], unique=True)
    db[USER.collection].create_index([('email', ASCENDING)], unique=True)
    db[PRODUCT.collection].create_index([('productCode', ASCENDING)], unique=True)
    db[PRODUCT.collection].create_index([('name', ASCENDING)], unique=True)
    db[ORDER.collection].create_index([('user', ASCENDING)])
