from passlib.context import CryptContext
from datetime import datetime, timezone


def make_password_context(rounds: int = 10) -> CryptContext:
    return CryptContext(schemes=['bcrypt'], deprecated='auto', bcrypt__rounds=rounds)

def hash_password(ctx: CryptContext, p: str) -> str: return ctx.hash(p)

def verify_password(ctx: CryptContext, p: str, h: str) -> bool:
    if not h: return False
    return ctx.verify(p, h)

def now_utc() -> datetime: return datetime.now(timezone.utc)
