# app/dependencies/services.py

from fastapi import Depends, FastAPI, Request
from sqlalchemy.orm import Session

from app.services.analysis_client import AnalysisAPIClient, APIKeyManager
from app.services.analysis_service import AnalysisService
from app.services.notification_scheduler import NotificationScheduler
from app.services.smart_assistant import SmartAssistant
from app.services.social_service import SocialService
from app.stores.activity_store import ActivityStore
from app.stores.baby_store import BabyStore
from app.stores.media_store import MediaStore
from app.stores.settings_store import SettingsStore
from app.utils.event_bus import EventBus
from app.utils.pattern_learner import BabyPatternLearner
from app.utils.rate_limiter import AnalysisRateLimiter
from config.database import get_db
from config.settings import MEDIA_ROOT


def init_services(app: FastAPI, media_root: str = MEDIA_ROOT, analysis_transport=None) -> None:
    """Cria os serviços de processo e guarda em app.state."""
    bus = EventBus()
    learner = BabyPatternLearner()
    bus.subscribe("activity.changed", learner.on_activity_changed)
    bus.subscribe("baby.changed", learner.on_activity_changed)

    app.state.event_bus = bus
    app.state.pattern_learner = learner
    app.state.rate_limiter = AnalysisRateLimiter()
    app.state.key_manager = APIKeyManager()
    app.state.analysis_client = AnalysisAPIClient(transport=analysis_transport)
    app.state.notification_scheduler = NotificationScheduler()
    app.state.smart_assistant = SmartAssistant(learner)
    app.state.social_service = SocialService()
    app.state.media_root = media_root


# ------------------ serviços de processo ------------------

def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus


def get_rate_limiter(request: Request) -> AnalysisRateLimiter:
    return request.app.state.rate_limiter


def get_notification_scheduler(request: Request) -> NotificationScheduler:
    return request.app.state.notification_scheduler


def get_smart_assistant(request: Request) -> SmartAssistant:
    return request.app.state.smart_assistant


def get_social_service(request: Request) -> SocialService:
    return request.app.state.social_service


# ------------------ stores por requisição ------------------

def get_settings_store(db: Session = Depends(get_db), bus: EventBus = Depends(get_event_bus)) -> SettingsStore:
    return SettingsStore(db, bus)


def get_baby_store(db: Session = Depends(get_db), bus: EventBus = Depends(get_event_bus)) -> BabyStore:
    return BabyStore(db, bus)


def get_activity_store(db: Session = Depends(get_db), bus: EventBus = Depends(get_event_bus)) -> ActivityStore:
    return ActivityStore(db, bus)


def get_media_store(
    request: Request,
    db: Session = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
) -> MediaStore:
    return MediaStore(db, bus, request.app.state.media_root)


def get_analysis_service(
    request: Request,
    media_store: MediaStore = Depends(get_media_store),
    settings_store: SettingsStore = Depends(get_settings_store),
) -> AnalysisService:
    state = request.app.state
    return AnalysisService(
        media_store=media_store,
        settings_store=settings_store,
        rate_limiter=state.rate_limiter,
        key_manager=state.key_manager,
        client=state.analysis_client,
    )
