"""Behavioural tests for S3Driver backed by an in-memory S3 client."""

from unittest.mock import patch

import pytest

from storage_gateway.infra.storage.driver import DriverException
from storage_gateway.infra.storage.s3_driver import S3Driver
from tests.infra.fake_s3 import FakeS3Client


@pytest.fixture
def fake_s3():
    return FakeS3Client(buckets={"media", "backup"}, forbidden={"locked"})


@pytest.fixture
def driver(fake_s3):
    with patch.object(S3Driver, "_build_client", return_value=fake_s3):
        yield S3Driver("test-key", "test-secret", "eu-central-1")


def test_accessibility(driver):
    assert driver.is_accessible("media") is True
    assert driver.is_accessible("unknown") is False
    assert driver.is_accessible("locked") is False


def test_round_trip_is_byte_exact(driver):
    payload = bytes(range(256)) * 4

    assert driver.put_from_bytes(payload, "media", "blobs/all-bytes.bin") is True
    assert driver.get_as_bytes("media", "blobs/all-bytes.bin") == payload


def test_missing_objects_are_absent_not_errors(driver, tmp_path):
    dest = tmp_path / "never.bin"

    assert driver.get_info("media", "missing") is None
    assert driver.get_as_bytes("media", "missing") is None
    assert driver.get_as_local_file("media", "missing", str(dest)) is False
    assert not dest.exists()


def test_forbidden_reads_raise_with_status(driver, tmp_path):
    for call in (
        lambda: driver.get_info("locked", "key"),
        lambda: driver.get_as_bytes("locked", "key"),
        lambda: driver.get_as_local_file("locked", "key", str(tmp_path / "x")),
    ):
        with pytest.raises(DriverException) as info:
            call()
        assert info.value.code == 403


def test_get_info_reflects_upload(driver, fake_s3):
    driver.put_from_bytes(b"hello", "media", "greeting.txt", content_type="text/plain")

    info = driver.get_info("media", "greeting.txt")

    assert info.content_type == "text/plain"
    assert info.content_length == 5
    assert '"' not in info.etag
    assert info.etag == fake_s3.objects[("media", "greeting.txt")]["etag"].strip('"')
    assert info.url == "https://eu-central-1.amazonaws.com/media/greeting.txt"
    assert info.last_modified.tzinfo is not None


def test_acl_follows_public_flag(driver, fake_s3):
    driver.put_from_bytes(b"a", "media", "private.txt")
    driver.put_from_bytes(b"b", "media", "public.txt", is_public=True)

    assert fake_s3.objects[("media", "private.txt")]["acl"] == "private"
    assert fake_s3.objects[("media", "public.txt")]["acl"] == "public-read"


def test_delete_is_idempotent(driver):
    driver.put_from_bytes(b"gone soon", "media", "tmp.txt")

    assert driver.delete("media", "tmp.txt") is True
    assert driver.delete("media", "tmp.txt") is True
    assert driver.get_as_bytes("media", "tmp.txt") is None


def test_copy_preserves_content(driver):
    driver.put_from_bytes(b"original", "media", "src/file.txt")
    before = driver.get_as_bytes("media", "src/file.txt")

    assert driver.copy("media", "src/file.txt", "backup", "dst/file.txt") is True
    assert driver.get_as_bytes("backup", "dst/file.txt") == before


def test_local_file_round_trip(driver, tmp_path):
    source = tmp_path / "upload.dat"
    source.write_bytes(b"\x01\x02\x03 local")
    dest = tmp_path / "download.dat"

    assert driver.put_from_local_file(str(source), "media", "local.dat") is True
    assert driver.get_as_local_file("media", "local.dat", str(dest)) is True
    assert dest.read_bytes() == source.read_bytes()


def test_write_to_missing_bucket_raises(driver):
    with pytest.raises(DriverException) as info:
        driver.put_from_bytes(b"x", "unknown", "key")

    assert info.value.code == 404
