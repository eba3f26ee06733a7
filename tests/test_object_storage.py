import asyncio

import httpx
import pytest

from libs.storage import LocalObjectStorage, ObjectStorageError, SupabaseObjectStorage
from libs.usecases.attachments import photo_object_key


def test_photo_object_key():
    assert photo_object_key("AgAD", "photos/file_3.PNG", 1700000000000) == "photos/1700000000000_AgAD.png"
    assert photo_object_key("AgAD", "", 5) == "photos/5_AgAD.jpg"


def test_local_upload_and_resolve(tmp_path):
    storage = LocalObjectStorage(tmp_path, "http://localhost:8000/")

    url = asyncio.run(storage.upload("photos/1_x.jpg", b"data", "image/jpeg"))

    assert url == "http://localhost:8000/assets/photos/1_x.jpg"
    assert (tmp_path / "assets" / "photos" / "1_x.jpg").read_bytes() == b"data"
    assert storage.resolve("photos/1_x.jpg") is not None
    assert storage.resolve("photos/absent.jpg") is None


def test_local_rejects_path_traversal(tmp_path):
    storage = LocalObjectStorage(tmp_path)
    assert storage.resolve("../secrets.txt") is None
    with pytest.raises(ObjectStorageError):
        asyncio.run(storage.upload("../escape.jpg", b"x", "image/jpeg"))


def test_supabase_upload_posts_object():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = request.content
        return httpx.Response(200, json={"Key": "assets/photos/1_x.jpg"})

    storage = SupabaseObjectStorage(
        "https://proj.supabase.co/", "service-key", transport=httpx.MockTransport(handler)
    )

    url = asyncio.run(storage.upload("photos/1_x.jpg", b"img", "image/jpeg"))

    assert url == "https://proj.supabase.co/storage/v1/object/public/assets/photos/1_x.jpg"
    assert seen["url"] == "https://proj.supabase.co/storage/v1/object/assets/photos/1_x.jpg"
    assert seen["headers"]["authorization"] == "Bearer service-key"
    assert seen["headers"]["apikey"] == "service-key"
    assert seen["headers"]["content-type"] == "image/jpeg"
    assert seen["headers"]["x-upsert"] == "false"
    assert seen["body"] == b"img"


def test_supabase_rejection_raises_storage_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(409, text="Duplicate"))
    storage = SupabaseObjectStorage("https://proj.supabase.co", "k", transport=transport)
    with pytest.raises(ObjectStorageError, match="409"):
        asyncio.run(storage.upload("photos/1_x.jpg", b"img", "image/jpeg"))


def test_supabase_network_error_raises_storage_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    storage = SupabaseObjectStorage("https://proj.supabase.co", "k", transport=httpx.MockTransport(handler))
    with pytest.raises(ObjectStorageError):
        asyncio.run(storage.upload("photos/1_x.jpg", b"img", "image/jpeg"))
