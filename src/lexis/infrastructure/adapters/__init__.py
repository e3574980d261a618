# Infrastructure Adapters Package
from .memory_store import InMemoryItemRepository
from .yaml_store import YamlItemRepository

__all__ = ["InMemoryItemRepository", "YamlItemRepository"]
