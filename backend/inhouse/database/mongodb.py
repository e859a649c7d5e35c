"""
MongoDB connection manager

The store context is built once at startup, attached to the application
state and handed to request handlers through `get_store`. It is never
reassigned while the server is running.
"""
from dataclasses import dataclass, field
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient

from inhouse.core.config import Settings, settings
from inhouse.resources.registry import ResourceRegistry
from inhouse.utils.logger import logger


@dataclass(frozen=True)
class StoreContext:
    client: Any
    database: Any
    db_name: str
    registry: ResourceRegistry = field(repr=False)

    def collection(self, name: str):
        return self.database[name]


def create_store_context(
    client,
    db_name: str,
    cache_size: int = settings.RESOURCE_CACHE_SIZE,
) -> StoreContext:
    database = client[db_name]
    return StoreContext(
        client=client,
        database=database,
        db_name=db_name,
        registry=ResourceRegistry(database, max_size=cache_size),
    )


async def connect_db(config: Settings = settings) -> StoreContext:
    client = AsyncIOMotorClient(config.MONGODB_URL)
    logger.info(f"Connected to MongoDB at {config.MONGODB_HOST}/{config.MONGODB_DB_NAME}")
    return create_store_context(client, config.MONGODB_DB_NAME, config.RESOURCE_CACHE_SIZE)


async def close_db(store: StoreContext) -> None:
    store.client.close()
    logger.info("Closed MongoDB connection")
