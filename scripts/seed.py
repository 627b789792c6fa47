#!/usr/bin/env python3
"""
seed.py: create indexes and demo data in the configured MongoDB for local dev
"""
import argparse, sys

from storefront.core.config import Settings, SettingsError
from storefront.core.logging import configure_logging
from storefront.db.models import PRODUCT, ensure_indexes
from storefront.db.session import StoreConnectionError, connect
from storefront.schemas import ProductCreate, UserCreate
from storefront.security.utils import make_password_context
from storefront.services import query, users
from storefront.services.users import find_by_username

DEMO_PRODUCTS = [
    {"productCode": "MUG-001", "name": "Ceramic Mug", "description": "350ml, dishwasher safe", "price": 9.5, "quantityInStock": 40},
    {"productCode": "TEE-001", "name": "Logo T-Shirt", "description": "Organic cotton", "price": 19.99, "quantityInStock": 25},
    {"productCode": "CAP-001", "name": "Baseball Cap", "description": "One size", "price": 14.0, "quantityInStock": 0},
]

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--username", default="demo", help="Demo user to create")
    ap.add_argument("--password", default="P@ssw0rd!")
    ap.add_argument("--no-products", action="store_true", help="Only create indexes and the demo user")
    args = ap.parse_args()

    try:
        settings = Settings.from_env()
    except SettingsError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    configure_logging(settings.LOG_LEVEL)
    try:
        client, db = connect(settings)
    except StoreConnectionError:
        sys.exit(1)

    try:
        print(f">>> Ensuring indexes on {settings.MONGO_DB_NAME}")
        ensure_indexes(db)

        if find_by_username(db, args.username):
            print(f"User {args.username} already exists")
        else:
            pwd_ctx = make_password_context(settings.BCRYPT_ROUNDS)
            user = users.register(db, pwd_ctx, UserCreate(
                username=args.username, name="Demo User", password=args.password, email=f"{args.username}@example.com"))
            print(f">>> Created user {args.username} ({user['_id']})")

        if not args.no_products:
            for p in DEMO_PRODUCTS:
                if db[PRODUCT.collection].find_one({"productCode": p["productCode"]}):
                    print(f"Skipping {p['productCode']}: exists")
                    continue
                query.create(db, PRODUCT, ProductCreate(**p).model_dump())
                print(f">>> Created product {p['productCode']}")
    finally:
        client.close()

    print("Done.")

if __name__ == "__main__":
    main()
