import importlib.util
import pathlib

import pytest
from PIL import Image

SCRIPT = pathlib.Path(__file__).resolve().parents[1] / "scripts" / "manage_photos.py"


@pytest.fixture(scope="module")
def manage_photos():
    spec = importlib.util.spec_from_file_location("manage_photos", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "photos.jsonl")


def test_add_list_remove(manage_photos, store_path, tmp_path, capsys):
    image = tmp_path / "dog.jpg"
    Image.new("RGB", (3, 3), (10, 20, 30)).save(image, format="JPEG")

    assert manage_photos.main(["--store", store_path, "add", str(image)]) == 0
    assert "Added: dog.jpg" in capsys.readouterr().out

    assert manage_photos.main(["--store", store_path, "list"]) == 0
    listing = capsys.readouterr().out
    assert "1 total" in listing
    assert "[0]" in listing and "dog.jpg" in listing

    assert manage_photos.main(["--store", store_path, "remove", "0"]) == 0
    assert "Remaining photos: 0" in capsys.readouterr().out


def test_list_empty_store(manage_photos, store_path, capsys):
    assert manage_photos.main(["--store", store_path, "list"]) == 0
    assert "No photos stored" in capsys.readouterr().out


def test_errors_exit_non_zero(manage_photos, store_path, tmp_path, capsys):
    assert manage_photos.main(["--store", store_path, "add", str(tmp_path / "nope.png")]) == 1
    assert "File not found" in capsys.readouterr().err

    assert manage_photos.main(["--store", store_path, "remove", "ghost.png"]) == 1
    assert "No photos found" in capsys.readouterr().err
