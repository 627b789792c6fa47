from fastapi import APIRouter, Depends, status
from pymongo.database import Database

from storefront.api.deps import get_current_subject, get_db, get_list_params
from storefront.api.responses import success
from storefront.db.models import PRODUCT
from storefront.schemas import ProductCreate, ProductUpdate
from storefront.services import query
from storefront.services.query import ListParams

# All routes protected
router = APIRouter(dependencies=[Depends(get_current_subject)])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, db: Database = Depends(get_db)):
    return success(query.create(db, PRODUCT, payload.model_dump()), "Product created successfully", 201)


@router.get("")
def list_products(params: ListParams = Depends(get_list_params), db: Database = Depends(get_db)):
    return success(query.list_records(db, PRODUCT, params), "Products retrieved successfully")


@router.get("/{product_id}")
def get_product(product_id: str, db: Database = Depends(get_db)):
    return success(query.get_by_id(db, PRODUCT, product_id), "Product retrieved successfully")


@router.patch("/{product_id}")
def update_product(product_id: str, payload: ProductUpdate, db: Database = Depends(get_db)):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    return success(query.update(db, PRODUCT, product_id, changes), "Product updated successfully")


@router.delete("/{product_id}")
def delete_product(product_id: str, db: Database = Depends(get_db)):
    return success(query.delete(db, PRODUCT, product_id), "Product deleted successfully")
