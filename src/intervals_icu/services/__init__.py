"""サービス層モジュール。"""

from intervals_icu.services.activities import AsyncActivitiesService
from intervals_icu.services.athletes import AsyncAthletesService
from intervals_icu.services.chats import AsyncChatsService
from intervals_icu.services.events import AsyncEventsService
from intervals_icu.services.library import AsyncLibraryService
from intervals_icu.services.wellness import AsyncWellnessService

__all__ = [
    "AsyncActivitiesService",
    "AsyncAthletesService",
    "AsyncChatsService",
    "AsyncEventsService",
    "AsyncLibraryService",
    "AsyncWellnessService",
]
