"""Signed bearer tokens carrying a subject and the embedded user claims."""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import jwt

from storefront.core.errors import InvalidToken
from storefront.security.utils import now_utc


@dataclass
class TokenClaims:
    subject: Any
    claims: Dict[str, Any] = field(default_factory=dict)


class TokenService:
    def __init__(self, secret: str, ttl_minutes: int, algorithm: str = 'HS256'):
        self.secret = secret
        self.ttl_minutes = ttl_minutes
        self.algorithm = algorithm

    def issue(self, subject: str, claims: Dict[str, Any], ttl_minutes: Optional[int] = None,
              issued_at: Optional[datetime] = None) -> str:
        """Sign a token for `subject` that expires `ttl_minutes * 60` seconds after issuance."""
        ttl = self.ttl_minutes if ttl_minutes is None else ttl_minutes
        iat = issued_at or now_utc()
        payload = {
            'sub': subject,
            'user': dict(claims),
            'iat': iat,
            'exp': iat + timedelta(seconds=ttl * 60),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as e:
            raise InvalidToken() from e
        return _to_claims(payload)

    def decode_unchecked(self, token: str) -> Optional[TokenClaims]:
        """Read the payload without checking signature or expiry.

        Request handlers never use this; the auth gate hands the verified
        subject downstream instead.
        """
        try:
            payload = jwt.decode(token, options={'verify_signature': False})
        except jwt.PyJWTError:
            return None
        return _to_claims(payload)


def _to_claims(payload: Dict[str, Any]) -> TokenClaims:
    claims = payload.get('user')
    return TokenClaims(subject=payload.get('sub'), claims=claims if isinstance(claims, dict) else {})
