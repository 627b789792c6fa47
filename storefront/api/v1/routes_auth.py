from fastapi import APIRouter, Depends
from passlib.context import CryptContext
from pymongo.database import Database

from storefront.api.deps import get_db, get_pwd_ctx, get_tokens
from storefront.api.responses import success
from storefront.schemas import LoginPayload, LoginResult
from storefront.security.tokens import TokenService
from storefront.services import auth

router = APIRouter()  # main.py mounts at {prefix}/auth


@router.post("/login")
def login(payload: LoginPayload, db: Database = Depends(get_db), pwd_ctx: CryptContext = Depends(get_pwd_ctx),
          tokens: TokenService = Depends(get_tokens)):
    result = auth.login(db, pwd_ctx, tokens, payload.username, payload.password)
    return success(LoginResult(**result), "Login successful")
