from pydantic import BaseModel, Field
from typing import Mapping, Optional
import os

REQUIRED = ('APP_PREFIX', 'APP_PORT', 'MONGO_URI', 'MONGO_DB_NAME', 'JWT_SECRET', 'JWT_EXPIRES_IN_MINUTES')


class SettingsError(RuntimeError):
    pass


class Settings(BaseModel):
    APP_PREFIX: str
    APP_PORT: int
    APP_HOST: str = '0.0.0.0'
    MONGO_URI: str
    MONGO_DB_NAME: str

    # Auth/JWT
    JWT_SECRET: str
    JWT_ALGORITHM: str = 'HS256'
    JWT_EXPIRES_IN_MINUTES: int
    BCRYPT_ROUNDS: int = 10

    # Listing
    DEFAULT_PAGE_LIMIT: int = Field(default=20, gt=0)
    MAX_PAGE_LIMIT: Optional[int] = Field(default=None, gt=0)

    LOG_LEVEL: str = 'INFO'

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> 'Settings':
        missing = [k for k in REQUIRED if not environ.get(k)]
        if missing:
            raise SettingsError(f"Missing required environment variables: {', '.join(missing)}")
        values = {k: environ[k] for k in cls.model_fields if environ.get(k)}
        values['APP_PREFIX'] = values['APP_PREFIX'].rstrip('/')
        try:
            return cls(**values)
        except ValueError as e:
            raise SettingsError(f"Invalid configuration: {e}") from e
