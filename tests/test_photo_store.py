import base64
import datetime
import json

import pytest
from PIL import Image

from photo_store import PhotoStore, PhotoStoreError


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "sunset.png"
    Image.new("RGB", (4, 4), (255, 128, 0)).save(path)
    return path


def test_missing_store_lists_nothing(tmp_path):
    assert PhotoStore(tmp_path / "absent.jsonl").list() == []


def test_add_encodes_image_inline(tmp_path, image_file):
    store = PhotoStore(tmp_path / "photos.jsonl")
    added_at = datetime.datetime(2024, 3, 11, 8, 0, tzinfo=datetime.timezone.utc)

    photo = store.add(image_file, now=added_at)

    assert photo.name == "sunset.png"
    assert photo.image_data.startswith("data:image/png;base64,")
    payload = photo.image_data.split(",", 1)[1]
    assert base64.b64decode(payload) == image_file.read_bytes()

    stored = store.list()
    assert stored == [photo]
    assert stored[0].added_at == added_at

    record = json.loads((tmp_path / "photos.jsonl").read_text(encoding="utf-8"))
    assert record["timestamp"] == int(added_at.timestamp() * 1000)


def test_add_keeps_insertion_order(tmp_path, image_file):
    store = PhotoStore(tmp_path / "photos.jsonl")
    second = tmp_path / "later.jpg"
    Image.new("RGB", (2, 2)).save(second, format="JPEG")

    store.add(image_file)
    store.add(second)

    photos = store.list()
    assert [photo.name for photo in photos] == ["sunset.png", "later.jpg"]
    assert photos[1].image_data.startswith("data:image/jpeg;base64,")


def test_add_rejects_unsupported_extension(tmp_path):
    text = tmp_path / "notes.txt"
    text.write_text("hello", encoding="utf-8")

    with pytest.raises(PhotoStoreError, match="Invalid image format"):
        PhotoStore(tmp_path / "photos.jsonl").add(text)


def test_add_rejects_missing_and_corrupt_files(tmp_path):
    store = PhotoStore(tmp_path / "photos.jsonl")
    with pytest.raises(PhotoStoreError, match="File not found"):
        store.add(tmp_path / "ghost.png")

    fake = tmp_path / "fake.png"
    fake.write_bytes(b"not really a png")
    with pytest.raises(PhotoStoreError, match="Not a readable image"):
        store.add(fake)
    assert store.list() == []


def test_unreadable_lines_are_skipped(tmp_path):
    path = tmp_path / "photos.jsonl"
    path.write_text(
        "\n".join(
            [
                json.dumps({"name": "a.png", "data_url": "data:image/png;base64,AA", "timestamp": 1}),
                "{broken json",
                json.dumps({"name": "no-data.png"}),
                "",
                json.dumps({"name": "b.png", "data_url": "data:image/png;base64,BB", "timestamp": 2}),
            ]
        ),
        encoding="utf-8",
    )

    assert [photo.name for photo in PhotoStore(path).list()] == ["a.png", "b.png"]


def test_remove_by_name_and_index(tmp_path, image_file):
    store = PhotoStore(tmp_path / "photos.jsonl")
    other = tmp_path / "other.png"
    Image.new("RGB", (2, 2)).save(other)
    store.add(image_file)
    store.add(other)
    store.add(image_file)

    assert store.remove("other.png").name == "other.png"
    assert [photo.name for photo in store.list()] == ["sunset.png", "sunset.png"]

    assert store.remove("1").name == "sunset.png"
    assert len(store.list()) == 1


def test_remove_errors(tmp_path, image_file):
    store = PhotoStore(tmp_path / "photos.jsonl")
    with pytest.raises(PhotoStoreError, match="No photos found"):
        store.remove("0")

    store.add(image_file)
    for target in ("missing.png", "5", "-1"):
        with pytest.raises(PhotoStoreError, match="Photo not found"):
            store.remove(target)
    assert len(store.list()) == 1
