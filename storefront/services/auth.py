import logging

from passlib.context import CryptContext
from pymongo.database import Database

from storefront.core.errors import InvalidCredentials
from storefront.security.tokens import TokenService
from storefront.security.utils import verify_password
from storefront.services.users import find_by_username

logger = logging.getLogger(__name__)


def login(db: Database, pwd_ctx: CryptContext, tokens: TokenService, username: str, password: str) -> dict:
    user = find_by_username(db, username)

    # unknown and inactive users get the same answer as a bad password
    if not user or user.get('status') != 'ACTIVE':
        logger.warning("Login rejected for %r: unknown or inactive user", username)
        raise InvalidCredentials()
    if not verify_password(pwd_ctx, password, user.get('password', '')):
        logger.warning("Login rejected for %r: bad password", username)
        raise InvalidCredentials()

    claims = {
        'username': user['username'],
        'name': user['name'],
        'email': user['email'],
        'status': user['status'],
    }
    token = tokens.issue(str(user['_id']), claims)
    return {'token': token, 'expiresInMinutes': tokens.ttl_minutes}
