"""
Repository Factory
Centralizes the logic for selecting the item repository.
"""

from lexis.application.config import AppConfig
from lexis.application.study_service import StudyService
from lexis.domain.ports import ItemRepository
from lexis.infrastructure.adapters.yaml_store import YamlItemRepository


def get_item_repository(config: AppConfig) -> ItemRepository:
    """
    Returns the ItemRepository implementation for the configured data directory.
    """
    return YamlItemRepository(config.data_dir)


async def get_study_service(config: AppConfig) -> StudyService:
    """
    Returns a StudyService with the learner's snapshot already loaded.
    """
    service = StudyService(get_item_repository(config), config.learner_id, config)
    await service.load()
    return service
