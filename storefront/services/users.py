from typing import Any, Dict, Optional

from passlib.context import CryptContext
from pymongo.database import Database

from storefront.db.models import USER
from storefront.schemas import UserCreate, UserUpdate
from storefront.security.utils import hash_password
from storefront.services import query


def register(db: Database, pwd_ctx: CryptContext, payload: UserCreate) -> dict:
    data = payload.model_dump()
    data['password'] = hash_password(pwd_ctx, payload.password)
    data['status'] = 'ACTIVE'
    return query.create(db, USER, data)


def find_by_username(db: Database, username: str) -> Optional[Dict[str, Any]]:
    """Raw lookup, password hash included. Only the login flow should need it."""
    return db[USER.collection].find_one({'username': username})


def update_user(db: Database, pwd_ctx: CryptContext, user_id: str, payload: UserUpdate) -> dict:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if 'password' in changes:
        changes['password'] = hash_password(pwd_ctx, changes['password'])
    return query.update(db, USER, user_id, changes)


def activate(db: Database, user_id: str) -> dict:
    return query.set_status(db, USER, user_id, 'ACTIVE')


def inactivate(db: Database, user_id: str) -> dict:
    return query.set_status(db, USER, user_id, 'INACTIVE')
