import re
from datetime import datetime, timedelta, timezone

import pytest

from save_api import keys

WHEN = datetime(2026, 3, 5, 7, 8, 9, 123456, tzinfo=timezone.utc)


def test_key_layout():
    assert keys.json_key("alice") == "alice/data.json"
    assert keys.image_key("alice", "cat.png") == "alice/img/cat.png"
    assert keys.backup_key("alice", WHEN) == "alice/data.json.backup.2026-03-05_07-08-09-123"
    assert keys.backup_key("alice", WHEN).startswith(keys.backup_prefix("alice"))


def test_backup_time_is_utc():
    local = WHEN.astimezone(timezone(timedelta(hours=2)))
    assert keys.backup_key("alice", local) == keys.backup_key("alice", WHEN)


def test_backup_keys_sort_chronologically():
    times = [
        datetime(2025, 12, 31, 23, 59, 59, 999000, tzinfo=timezone.utc),
        datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc),
        datetime(2026, 1, 1, 0, 0, 0, 1000, tzinfo=timezone.utc),
        datetime(2026, 1, 1, 0, 0, 1, tzinfo=timezone.utc),
        datetime(2026, 10, 2, 9, 0, 0, tzinfo=timezone.utc),
    ]
    generated = [keys.backup_key("alice", t) for t in times]
    assert sorted(generated) == generated


def test_parse_backup_timestamp():
    assert keys.parse_backup_timestamp(keys.backup_key("alice", WHEN)) == WHEN.replace(microsecond=123000)
    assert keys.parse_backup_timestamp("alice/data.json.backup.2026-03-05_07-08-09") == WHEN.replace(microsecond=0)
    assert keys.parse_backup_timestamp("alice/data.json") is None
    assert keys.parse_backup_timestamp("alice/data.json.backup.yesterday") is None
    assert keys.parse_backup_timestamp("alice/data.json.backup.2026-13-45_99-00-00") is None


@pytest.mark.parametrize("ext, expected", [
    ("png", "image/png"),
    ("jpg", "image/jpeg"),
    ("jpeg", "image/jpeg"),
    ("JPG", "image/jpeg"),
    ("gif", "image/gif"),
    ("webp", "image/webp"),
    ("svg", "image/svg+xml"),
    ("svg+xml", "image/svg+xml"),
    ("bmp", "image/png"),
    ("", "image/png"),
    (None, "image/png"),
])
def test_infer_content_type(ext, expected):
    assert keys.infer_content_type(ext) == expected


def test_file_extension():
    assert keys.file_extension("Photo.JPEG") == "jpeg"
    assert keys.file_extension("archive.tar.gz") == "gz"
    assert keys.file_extension("noext") == ""


def test_split_data_url():
    assert keys.split_data_url("data:image/jpeg;base64,AAAA") == ("jpeg", "AAAA")
    assert keys.split_data_url("data:image/svg+xml;base64,PHN2Zz4=") == ("svg+xml", "PHN2Zz4=")
    assert keys.split_data_url("AAAA") == (None, "AAAA")


def test_generate_filename():
    name = keys.generate_filename("jpeg")
    assert re.fullmatch(r"[A-Za-z0-9]{24}\.jpg", name)
    assert keys.generate_filename("svg+xml").endswith(".svg")
    assert keys.generate_filename(None).endswith(".png")
    assert keys.generate_filename("tiff").endswith(".png")


def test_generated_filenames_do_not_collide():
    names = {keys.generate_filename("png") for _ in range(1000)}
    assert len(names) == 1000


@pytest.mark.parametrize("name, ok", [
    ("cat.png", True),
    ("my..cat.png", True),
    ("../bob/data.json", False),
    ("bob/cat.png", False),
    ("..\\cat.png", False),
    ("..", False),
    ("", False),
    ("   ", False),
    (42, False),
])
def test_is_safe_filename(name, ok):
    assert keys.is_safe_filename(name) is ok
