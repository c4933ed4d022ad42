# app/stores/media_store.py

import io
import re
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from PIL import Image, UnidentifiedImageError
from sqlalchemy.orm import Session

from app.errors import MediaNotFound, MediaStorageError, RecordNotFound, ValidationFailed
from app.models.baby_model import Baby
from app.models.media_model import AnalysisResult, MediaItem
from app.schemas.media_schema import MediaStatistics
from app.utils.event_bus import EventBus
from config.logging_config import get_logger
from config.settings import MEDIA_ROOT

logger = get_logger(__name__)

TOPIC = "media.changed"
THUMBNAIL_SIZE = (200, 200)
PHOTO_EXTENSIONS = {".jpg", ".jpeg", ".png", ".heic"}
VIDEO_EXTENSIONS = {".mov", ".mp4", ".m4v"}

# {uuid do bebê}_{timestamp unix}.{ext}
FILE_NAME_PATTERN = re.compile(r"^(?P<baby_id>[0-9a-fA-F-]{36})_(?P<timestamp>\d+)\.(?P<ext>\w+)$")


def parse_media_file_name(file_name: str):
    """Devolve (baby_id, datetime) ou None se o nome não seguir o padrão."""
    match = FILE_NAME_PATTERN.match(file_name)
    if not match:
        return None
    try:
        baby_id = str(uuid.UUID(match.group("baby_id")))
    except ValueError:
        return None
    return baby_id, datetime.fromtimestamp(int(match.group("timestamp")))


class MediaStore:
    """Fotos e vídeos no disco, com o catálogo no banco."""

    def __init__(self, db: Session, bus: Optional[EventBus] = None, media_root: Optional[str] = None):
        self.db = db
        self.bus = bus
        self.root = Path(media_root or MEDIA_ROOT)
        self.photos_dir = self.root / "Photos"
        self.videos_dir = self.root / "Videos"
        self.thumbnails_dir = self.root / "Thumbnails"

    def ensure_directories(self) -> None:
        for directory in (self.photos_dir, self.videos_dir, self.thumbnails_dir):
            directory.mkdir(parents=True, exist_ok=True)

    # ------------------ gravação ------------------

    def save_photo(
        self,
        baby_id: str,
        data: bytes,
        description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> MediaItem:
        self._require_baby(baby_id)
        self.ensure_directories()

        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError):
            raise ValidationFailed(["O arquivo enviado não é uma imagem válida"])
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")

        created_at = now or datetime.now()
        path = self._free_path(self.photos_dir, baby_id, created_at, "jpg")
        thumb_path = self.thumbnails_dir / f"{path.stem}_thumb.jpg"

        try:
            image.save(path, format="JPEG", quality=85)
            image.resize(THUMBNAIL_SIZE, Image.LANCZOS).save(thumb_path, format="JPEG", quality=80)
        except OSError as exc:
            logger.error("photo_save_failed", baby_id=baby_id, error=str(exc))
            raise MediaStorageError(f"Falha ao salvar a foto: {exc}")

        item = MediaItem(
            baby_id=baby_id,
            type="photo",
            file_name=path.name,
            file_path=str(path),
            thumbnail_path=str(thumb_path),
            file_size=path.stat().st_size,
            tags=[],
            description=description,
            created_at=created_at,
        )
        return self._insert(item)

    def save_video(
        self,
        baby_id: str,
        data: bytes,
        description: Optional[str] = None,
        duration: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> MediaItem:
        self._require_baby(baby_id)
        self.ensure_directories()

        created_at = now or datetime.now()
        path = self._free_path(self.videos_dir, baby_id, created_at, "mov")
        try:
            path.write_bytes(data)
        except OSError as exc:
            logger.error("video_save_failed", baby_id=baby_id, error=str(exc))
            raise MediaStorageError(f"Falha ao salvar o vídeo: {exc}")

        item = MediaItem(
            baby_id=baby_id,
            type="video",
            file_name=path.name,
            file_path=str(path),
            file_size=len(data),
            duration=duration,
            tags=[],
            description=description,
            created_at=created_at,
        )
        return self._insert(item)

    def scan_media_directory(self) -> List[MediaItem]:
        """Cadastra arquivos presentes no disco que ainda não estão no banco."""
        self.ensure_directories()
        known = {name for (name,) in self.db.query(MediaItem.file_name).all()}
        babies = {baby_id for (baby_id,) in self.db.query(Baby.id).all()}
        registered = []

        for directory, media_type, extensions in (
            (self.photos_dir, "photo", PHOTO_EXTENSIONS),
            (self.videos_dir, "video", VIDEO_EXTENSIONS),
        ):
            for path in sorted(directory.iterdir()):
                if not path.is_file() or path.suffix.lower() not in extensions or path.name in known:
                    continue

                parsed = parse_media_file_name(path.name)
                if parsed is None:
                    logger.debug("media_file_skipped", file_name=path.name)
                    continue
                baby_id, created_at = parsed
                if baby_id not in babies:
                    logger.warning("media_file_orphan", file_name=path.name, baby_id=baby_id)
                    continue

                thumb_path = self.thumbnails_dir / f"{path.stem}_thumb.jpg"
                item = MediaItem(
                    baby_id=baby_id,
                    type=media_type,
                    file_name=path.name,
                    file_path=str(path),
                    thumbnail_path=str(thumb_path) if thumb_path.exists() else None,
                    file_size=path.stat().st_size,
                    tags=[],
                    created_at=created_at,
                )
                self.db.add(item)
                registered.append(item)

        if registered:
            self.db.commit()
            logger.info("media_scanned", registered=len(registered))
            self._publish("scanned", None)
        return registered

    # ------------------ consulta ------------------

    def list_media(self, baby_id: Optional[str] = None, media_type: Optional[str] = None) -> List[MediaItem]:
        query = self.db.query(MediaItem)
        if baby_id:
            query = query.filter(MediaItem.baby_id == baby_id)
        if media_type:
            query = query.filter(MediaItem.type == media_type)
        return query.order_by(MediaItem.created_at.desc()).all()

    def get_media(self, media_id: str) -> MediaItem:
        item = self.db.query(MediaItem).filter_by(id=media_id).first()
        if not item:
            raise RecordNotFound("Mídia não encontrada.")
        return item

    def favorites(self, baby_id: Optional[str] = None) -> List[MediaItem]:
        return [item for item in self.list_media(baby_id) if item.is_favorite]

    def search_media(
        self, query: str = "", baby_id: Optional[str] = None, media_type: Optional[str] = None
    ) -> List[MediaItem]:
        items = self.list_media(baby_id, media_type)
        needle = query.strip().lower()
        if not needle:
            return items
        return [
            item for item in items
            if needle in (item.description or "").lower()
            or any(needle in tag.lower() for tag in item.tags or [])
        ]

    def statistics(self, baby_id: Optional[str] = None) -> MediaStatistics:
        items = self.list_media(baby_id)
        return MediaStatistics(
            photo_count=sum(1 for item in items if item.type == "photo"),
            video_count=sum(1 for item in items if item.type == "video"),
            total_size=sum(item.file_size or 0 for item in items),
        )

    def read_media_bytes(self, media_id: str) -> bytes:
        item = self.db.query(MediaItem).filter_by(id=media_id).first()
        if not item:
            raise MediaNotFound()
        path = Path(item.file_path)
        if not path.is_file():
            raise MediaNotFound()
        return path.read_bytes()

    # ------------------ alteração ------------------

    def add_tag(self, media_id: str, tag: str) -> MediaItem:
        item = self.get_media(media_id)
        tag = tag.strip()
        if tag and tag not in (item.tags or []):
            item.tags = [*(item.tags or []), tag]
            self.db.commit()
            self._publish("updated", item)
        return item

    def remove_tag(self, media_id: str, tag: str) -> MediaItem:
        item = self.get_media(media_id)
        if tag in (item.tags or []):
            item.tags = [t for t in item.tags if t != tag]
            self.db.commit()
            self._publish("updated", item)
        return item

    def toggle_favorite(self, media_id: str) -> MediaItem:
        item = self.get_media(media_id)
        item.is_favorite = not item.is_favorite
        self.db.commit()
        self._publish("updated", item)
        return item

    def delete_media(self, media_id: str) -> None:
        item = self.get_media(media_id)
        self._remove_files(item)
        self.db.query(AnalysisResult).filter(AnalysisResult.media_id == item.id).delete()
        self.db.delete(item)
        self.db.commit()

        logger.info("media_deleted", media_id=media_id, baby_id=item.baby_id)
        self._publish("deleted", item)

    def delete_media_for_baby(self, baby_id: str) -> int:
        items = self.list_media(baby_id)
        for item in items:
            self.delete_media(item.id)
        return len(items)

    # ------------------ resultados de análise ------------------

    def add_analysis_result(
        self,
        media_id: str,
        analysis_type: str,
        result: str,
        confidence: float,
        recommendations: Optional[List[str]] = None,
        development_scores: Optional[dict] = None,
        emotion_tags: Optional[List[str]] = None,
    ) -> AnalysisResult:
        item = self.get_media(media_id)
        analysis = AnalysisResult(
            media_id=item.id,
            analysis_type=analysis_type,
            result=result,
            confidence=confidence,
            recommendations=recommendations or [],
            development_scores=development_scores or {},
            emotion_tags=emotion_tags or [],
        )
        item.is_analyzed = True
        self.db.add(analysis)
        self.db.commit()
        self.db.refresh(analysis)

        self._publish("analyzed", item)
        return analysis

    def analysis_results(self, media_id: str) -> List[AnalysisResult]:
        self.get_media(media_id)
        return (
            self.db.query(AnalysisResult)
            .filter(AnalysisResult.media_id == media_id)
            .order_by(AnalysisResult.analyzed_at.desc())
            .all()
        )

    # ------------------ auxiliares ------------------

    def _require_baby(self, baby_id: str) -> None:
        if not self.db.query(Baby.id).filter_by(id=baby_id).first():
            raise RecordNotFound("Bebê não encontrado.")

    @staticmethod
    def _free_path(directory: Path, baby_id: str, created_at: datetime, ext: str) -> Path:
        timestamp = int(created_at.timestamp())
        path = directory / f"{baby_id}_{timestamp}.{ext}"
        while path.exists():
            timestamp += 1
            path = directory / f"{baby_id}_{timestamp}.{ext}"
        return path

    def _insert(self, item: MediaItem) -> MediaItem:
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)

        logger.info("media_saved", media_id=item.id, baby_id=item.baby_id, type=item.type, size=item.file_size)
        self._publish("created", item)
        return item

    def _remove_files(self, item: MediaItem) -> None:
        try:
            Path(item.file_path).unlink(missing_ok=True)
            if item.thumbnail_path:
                Path(item.thumbnail_path).unlink(missing_ok=True)
        except OSError as exc:
            logger.error("media_delete_failed", media_id=item.id, error=str(exc))
            raise MediaStorageError(f"Falha ao apagar o arquivo: {exc}")

    def _publish(self, action: str, item: Optional[MediaItem]) -> None:
        if self.bus is None:
            return
        payload = {"action": action}
        if item is not None:
            payload.update(media_id=item.id, baby_id=item.baby_id)
        self.bus.publish(TOPIC, payload)
