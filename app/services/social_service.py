# app/services/social_service.py

import asyncio
import threading
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from app.errors import NotConnected, PublishFailed
from app.schemas.social_schema import SocialPostRead, SocialUserRead
from config.logging_config import get_logger
from config.settings import SOCIAL_SIMULATED_DELAY

logger = get_logger(__name__)


class ProviderError(Exception):
    pass


class SimulatedSocialProvider:
    """Rede social simulada: só aguarda um atraso fixo e devolve dados fixos."""

    platform = "facebook"

    def __init__(self, delay: float = SOCIAL_SIMULATED_DELAY):
        self.delay = delay

    async def login(self) -> SocialUserRead:
        await asyncio.sleep(self.delay)
        return SocialUserRead(id="facebook_user_123", name="Usuário de teste")

    def logout(self) -> None:
        pass

    async def publish(self, content: str, media_paths: List[str], privacy: str) -> str:
        await asyncio.sleep(self.delay)
        if not content.strip():
            raise ProviderError("conteúdo vazio")
        return f"{self.platform}_post_{uuid.uuid4()}"


class SocialSession:
    def __init__(self):
        self.user: Optional[SocialUserRead] = None
        self.posts: List[SocialPostRead] = []


class SocialService:
    """Sessões da rede social, uma por dono (o usuário logado).

    O dono padrão None serve para uso local, fora da API.
    """

    def __init__(self, provider: Optional[SimulatedSocialProvider] = None):
        self.provider = provider or SimulatedSocialProvider()
        self._sessions: Dict[Optional[str], SocialSession] = {}
        self._lock = threading.Lock()

    def _session(self, owner: Optional[str]) -> SocialSession:
        return self._sessions.setdefault(owner, SocialSession())

    def is_connected(self, owner: Optional[str] = None) -> bool:
        with self._lock:
            return self._session(owner).user is not None

    async def connect(self, owner: Optional[str] = None) -> SocialUserRead:
        user = await self.provider.login()
        with self._lock:
            self._session(owner).user = user
        logger.info("social_connected", platform=self.provider.platform, user_id=user.id, owner=owner)
        return user

    def disconnect(self, owner: Optional[str] = None) -> None:
        self.provider.logout()
        with self._lock:
            self._sessions.pop(owner, None)
        logger.info("social_disconnected", platform=self.provider.platform, owner=owner)

    async def publish_post(
        self, content: str, privacy: str = "friends", owner: Optional[str] = None
    ) -> SocialPostRead:
        return await self._publish(content, [], privacy, owner)

    async def publish_post_with_media(
        self, content: str, media_items, privacy: str = "friends", owner: Optional[str] = None
    ) -> SocialPostRead:
        return await self._publish(content, [item.file_path for item in media_items], privacy, owner)

    def posts(self, owner: Optional[str] = None) -> List[SocialPostRead]:
        with self._lock:
            return list(self._session(owner).posts)

    async def _publish(
        self, content: str, media_paths: List[str], privacy: str, owner: Optional[str]
    ) -> SocialPostRead:
        if not self.is_connected(owner):
            raise NotConnected()

        try:
            post_id = await self.provider.publish(content, media_paths, privacy)
        except ProviderError as exc:
            logger.warning("social_publish_failed", reason=str(exc), owner=owner)
            raise PublishFailed(str(exc))

        post = SocialPostRead(
            id=post_id,
            content=content,
            media_paths=media_paths,
            privacy=privacy,
            published_at=datetime.now(),
            platform=self.provider.platform,
        )
        with self._lock:
            self._session(owner).posts.insert(0, post)

        logger.info("social_post_published", post_id=post_id, media_count=len(media_paths), owner=owner)
        return post
