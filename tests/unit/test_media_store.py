"""Tests for app/stores/media_store.py"""

import io
import uuid
from datetime import datetime

import pytest
from PIL import Image

from app.errors import MediaNotFound, RecordNotFound, ValidationFailed
from app.models.media_model import AnalysisResult
from app.stores.media_store import MediaStore, parse_media_file_name

NOW = datetime(2024, 3, 10, 9, 30)


def png_bytes(size=(640, 480), mode="RGB"):
    buffer = io.BytesIO()
    Image.new(mode, size, color=(200, 120, 80) if mode == "RGB" else (200, 120, 80, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def store(db_session, bus, tmp_path):
    return MediaStore(db_session, bus, media_root=str(tmp_path / "Media"))


@pytest.fixture
def photo(store, baby):
    return store.save_photo(baby.id, png_bytes(), description="Primeiro sorriso", now=NOW)


class TestParseFileName:
    def test_valid(self):
        baby_id = str(uuid.uuid4())
        parsed = parse_media_file_name(f"{baby_id}_1710063000.jpg")

        assert parsed == (baby_id, datetime.fromtimestamp(1710063000))

    @pytest.mark.parametrize("name", ["foto.jpg", "abc_123.jpg", f"{uuid.uuid4()}_agora.jpg", f"{uuid.uuid4()}.jpg"])
    def test_invalid(self, name):
        assert parse_media_file_name(name) is None


class TestSavePhoto:
    def test_writes_photo_and_thumbnail(self, store, photo, baby):
        path = store.photos_dir / photo.file_name

        assert photo.type == "photo"
        assert photo.file_name == f"{baby.id}_{int(NOW.timestamp())}.jpg"
        assert path.is_file()
        assert photo.file_size == path.stat().st_size

        with Image.open(photo.thumbnail_path) as thumb:
            assert thumb.size == (200, 200)
            assert thumb.format == "JPEG"

    def test_rgba_converted_to_jpeg(self, store, baby):
        item = store.save_photo(baby.id, png_bytes(mode="RGBA"), now=NOW)

        with Image.open(item.file_path) as image:
            assert image.mode == "RGB"

    def test_same_second_gets_new_name(self, store, photo, baby):
        second = store.save_photo(baby.id, png_bytes(), now=NOW)

        assert second.file_name != photo.file_name
        assert parse_media_file_name(second.file_name)[0] == baby.id

    def test_not_an_image(self, store, baby):
        with pytest.raises(ValidationFailed):
            store.save_photo(baby.id, b"definitivamente nao e uma imagem")

    def test_unknown_baby(self, store):
        with pytest.raises(RecordNotFound):
            store.save_photo(str(uuid.uuid4()), png_bytes())

    def test_publishes_created(self, store, bus, baby):
        events = []
        bus.subscribe("media.changed", lambda topic, payload: events.append(payload))

        item = store.save_photo(baby.id, png_bytes(), now=NOW)

        assert events == [{"action": "created", "media_id": item.id, "baby_id": baby.id}]


class TestSaveVideo:
    def test_writes_raw_bytes(self, store, baby):
        item = store.save_video(baby.id, b"\x00\x00\x00\x18ftypqt  ", duration=12.5, now=NOW)

        assert item.type == "video"
        assert item.file_name.endswith(".mov")
        assert item.duration == 12.5
        assert item.thumbnail_path is None
        assert store.read_media_bytes(item.id) == b"\x00\x00\x00\x18ftypqt  "


class TestScan:
    def test_registers_only_valid_unknown_files(self, store, photo, baby):
        store.ensure_directories()
        timestamp = 1710000000
        (store.photos_dir / f"{baby.id}_{timestamp}.jpg").write_bytes(png_bytes())
        (store.photos_dir / f"{uuid.uuid4()}_{timestamp}.jpg").write_bytes(b"orfao")
        (store.photos_dir / "sem_padrao.jpg").write_bytes(b"?")
        (store.photos_dir / f"{baby.id}_{timestamp}.txt").write_bytes(b"?")
        (store.videos_dir / f"{baby.id}_{timestamp}.mp4").write_bytes(b"video")

        registered = store.scan_media_directory()

        assert sorted(item.type for item in registered) == ["photo", "video"]
        assert all(item.created_at == datetime.fromtimestamp(timestamp) for item in registered)
        assert len(store.list_media(baby.id)) == 3

    def test_second_scan_finds_nothing(self, store, baby):
        store.ensure_directories()
        (store.videos_dir / f"{baby.id}_1710000000.mov").write_bytes(b"video")

        assert len(store.scan_media_directory()) == 1
        assert store.scan_media_directory() == []


class TestQueries:
    def test_list_newest_first_and_by_type(self, store, photo, baby):
        video = store.save_video(baby.id, b"video", now=datetime(2024, 3, 11, 8, 0))

        assert [item.id for item in store.list_media(baby.id)] == [video.id, photo.id]
        assert [item.id for item in store.list_media(baby.id, "photo")] == [photo.id]

    def test_search_description_and_tags(self, store, photo):
        store.add_tag(photo.id, "Praia")

        assert store.search_media("sorriso") == [photo]
        assert store.search_media("praia") == [photo]
        assert store.search_media("aniversário") == []

    def test_statistics(self, store, photo, baby):
        store.save_video(baby.id, b"12345", now=NOW)

        stats = store.statistics(baby.id)

        assert stats.photo_count == 1
        assert stats.video_count == 1
        assert stats.total_size == photo.file_size + 5

    def test_read_missing_file(self, store, photo):
        (store.photos_dir / photo.file_name).unlink()

        with pytest.raises(MediaNotFound):
            store.read_media_bytes(photo.id)

    def test_read_unknown_id(self, store):
        with pytest.raises(MediaNotFound):
            store.read_media_bytes("nao-existe")


class TestEdits:
    def test_tags_without_duplicates(self, store, photo):
        store.add_tag(photo.id, "praia")
        store.add_tag(photo.id, " praia ")
        store.add_tag(photo.id, "família")

        assert store.get_media(photo.id).tags == ["praia", "família"]

        store.remove_tag(photo.id, "praia")
        assert store.get_media(photo.id).tags == ["família"]

    def test_toggle_favorite(self, store, photo):
        assert store.toggle_favorite(photo.id).is_favorite is True
        assert store.favorites() == [photo]
        assert store.toggle_favorite(photo.id).is_favorite is False
        assert store.favorites() == []

    def test_delete_removes_files_and_results(self, store, db_session, photo):
        store.add_analysis_result(photo.id, "emotion", "Bebê feliz", 0.9)

        store.delete_media(photo.id)

        assert not (store.photos_dir / photo.file_name).exists()
        assert not list(store.thumbnails_dir.iterdir())
        assert db_session.query(AnalysisResult).count() == 0
        with pytest.raises(RecordNotFound):
            store.get_media(photo.id)

    def test_delete_for_baby(self, store, photo, baby):
        store.save_video(baby.id, b"video", now=NOW)

        assert store.delete_media_for_baby(baby.id) == 2
        assert store.list_media(baby.id) == []


class TestAnalysisResults:
    def test_marks_item_analyzed(self, store, photo):
        result = store.add_analysis_result(
            photo.id,
            "development",
            "Desenvolvimento dentro do esperado",
            0.85,
            recommendations=["Tempo de barriga para baixo"],
            development_scores={"motor": 0.8},
        )

        assert store.get_media(photo.id).is_analyzed is True
        assert [r.id for r in store.analysis_results(photo.id)] == [result.id]
        assert result.development_scores == {"motor": 0.8}
        assert result.emotion_tags == []
