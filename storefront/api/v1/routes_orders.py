from fastapi import APIRouter, Depends, status
from pymongo.database import Database

from storefront.api.deps import get_current_subject, get_db, get_list_params
from storefront.api.responses import success
from storefront.db.models import ORDER
from storefront.schemas import OrderCreate, OrderUpdate
from storefront.services import orders, query
from storefront.services.query import ListParams

# All routes protected
router = APIRouter(dependencies=[Depends(get_current_subject)])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreate, subject: str = Depends(get_current_subject), db: Database = Depends(get_db)):
    # owner comes from the verified token, any client-sent "user" is ignored by the schema
    return success(orders.create_order(db, subject, payload), "Order created successfully", 201)


@router.get("")
def list_orders(params: ListParams = Depends(get_list_params), db: Database = Depends(get_db)):
    return success(query.list_records(db, ORDER, params), "Orders retrieved successfully")


@router.get("/from/{user_id}")
def list_orders_by_user(user_id: str, params: ListParams = Depends(get_list_params), db: Database = Depends(get_db)):
    return success(orders.list_by_user(db, user_id, params), "Orders retrieved successfully")


@router.get("/{order_id}")
def get_order(order_id: str, db: Database = Depends(get_db)):
    return success(query.get_by_id(db, ORDER, order_id), "Order retrieved successfully")


@router.patch("/{order_id}")
def update_order(order_id: str, payload: OrderUpdate, db: Database = Depends(get_db)):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    return success(query.update(db, ORDER, order_id, changes), "Order updated successfully")


@router.delete("/{order_id}")
def delete_order(order_id: str, db: Database = Depends(get_db)):
    return success(query.delete(db, ORDER, order_id), "Order deleted successfully")
