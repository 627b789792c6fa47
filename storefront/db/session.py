import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from storefront.core.config import Settings

logger = logging.getLogger(__name__)


class StoreConnectionError(RuntimeError):
    pass


def connect(settings: Settings) -> tuple[MongoClient, Database]:
    """Open the process-wide client and check the server answers."""
    client = MongoClient(settings.MONGO_URI, tz_aware=True)
    try:
        client.admin.command('ping')
    except PyMongoError as e:
        client.close()
        logger.error("MongoDB connection failed: %s", e)
        raise StoreConnectionError(str(e)) from e
    host, port = client.address or ('?', '?')
    logger.info("MongoDB connected: %s:%s/%s", host, port, settings.MONGO_DB_NAME)
    return client, client[settings.MONGO_DB_NAME]
