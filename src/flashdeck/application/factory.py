"""
Service Factory
Centralizes wiring of the deck repository and study service from config.
"""

from flashdeck.application.config import AppConfig
from flashdeck.application.study_service import StudyService
from flashdeck.domain.ports import DeckRepository
from flashdeck.infrastructure.json_store import JsonDeckRepository


def get_deck_repository(config: AppConfig) -> DeckRepository:
    return JsonDeckRepository(config.data_file)


def get_study_service(config: AppConfig) -> StudyService:
    return StudyService(get_deck_repository(config))
