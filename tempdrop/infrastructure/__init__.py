"""Infrastructure layer for Redis, object storage and external services."""

from .in_memory_file_repository import InMemoryFileRecordRepository
from .local_object_gateway import LocalObjectGateway
from .redis_file_repository import RedisFileRecordRepository
from .redis_repository import RedisConnectionManager, RedisRepository
from .storage_factory import ObjectGatewayFactory

__all__ = [
    "InMemoryFileRecordRepository",
    "LocalObjectGateway",
    "ObjectGatewayFactory",
    "RedisConnectionManager",
    "RedisFileRecordRepository",
    "RedisRepository",
]
