from fastapi import APIRouter, Depends, status
from passlib.context import CryptContext
from pymongo.database import Database

from storefront.api.deps import get_current_subject, get_db, get_list_params, get_pwd_ctx
from storefront.api.responses import success
from storefront.db.models import USER
from storefront.schemas import UserCreate, UserUpdate
from storefront.services import query, users
from storefront.services.query import ListParams

router = APIRouter()
authenticated = [Depends(get_current_subject)]


# Public
@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Database = Depends(get_db), pwd_ctx: CryptContext = Depends(get_pwd_ctx)):
    return success(users.register(db, pwd_ctx, payload), "User created successfully", 201)


@router.get("", dependencies=authenticated)
def list_users(params: ListParams = Depends(get_list_params), db: Database = Depends(get_db)):
    return success(query.list_records(db, USER, params), "Users retrieved successfully")


@router.get("/{user_id}", dependencies=authenticated)
def get_user(user_id: str, db: Database = Depends(get_db)):
    return success(query.get_by_id(db, USER, user_id), "User retrieved successfully")


@router.patch("/{user_id}", dependencies=authenticated)
def update_user(user_id: str, payload: UserUpdate, db: Database = Depends(get_db),
                pwd_ctx: CryptContext = Depends(get_pwd_ctx)):
    return success(users.update_user(db, pwd_ctx, user_id, payload), "User updated successfully")


@router.delete("/{user_id}", dependencies=authenticated)
def delete_user(user_id: str, db: Database = Depends(get_db)):
    return success(query.delete(db, USER, user_id), "User deleted successfully")


@router.post("/inactivate/{user_id}", dependencies=authenticated)
def inactivate_user(user_id: str, db: Database = Depends(get_db)):
    return success(users.inactivate(db, user_id), "User inactivated successfully")


@router.post("/activate/{user_id}", dependencies=authenticated)
def activate_user(user_id: str, db: Database = Depends(get_db)):
    return success(users.activate(db, user_id), "User activated successfully")
