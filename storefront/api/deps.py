from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from pymongo.database import Database

from storefront.core.config import Settings
from storefront.core.errors import Forbidden, Unauthorized
from storefront.security.tokens import TokenService
from storefront.services.query import ListParams, parse_list_params

security = HTTPBearer(auto_error=False)

def get_db(request: Request) -> Database: return request.app.state.db

def get_settings(request: Request) -> Settings: return request.app.state.settings

def get_tokens(request: Request) -> TokenService: return request.app.state.tokens

def get_pwd_ctx(request: Request) -> CryptContext: return request.app.state.pwd_ctx

def get_current_subject(creds: HTTPAuthorizationCredentials = Depends(security), tokens: TokenService = Depends(get_tokens)) -> str:
    """Bearer gate. The verified subject is what handlers get; nothing downstream decodes the token again."""
    if not creds: raise Unauthorized('Token not provided')
    verified = tokens.verify(creds.credentials)
    if not isinstance(verified.subject, str):
        raise Forbidden('Invalid token payload')
    return verified.subject

def get_list_params(request: Request, settings: Settings = Depends(get_settings)) -> ListParams:
    return parse_list_params(request.query_params.multi_items(), settings.DEFAULT_PAGE_LIMIT, settings.MAX_PAGE_LIMIT)
