"""Tests de los backends de almacenamiento."""

import io
import threading
from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from pymongo.errors import ServerSelectionTimeoutError

from repositories.track_index_repository import TrackIndexRepository
from services.errors import StoreUnavailable
from stores.blob_store import S3BlobStore, LocalBlobStore, InMemoryBlobStore
from stores.factory import create_kv_store, create_blob_store
from stores.kv_store import MongoKeyValueStore, InMemoryKeyValueStore
from utils.media import sanitize, pick_ext, join_url


class TestMongoKeyValueStore:
    def test_get_existing(self):
        collection = Mock()
        collection.find_one.return_value = {"_id": "t1", "value": '{"playCount":1}'}
        assert MongoKeyValueStore(collection).get("t1") == '{"playCount":1}'
        collection.find_one.assert_called_once_with({"_id": "t1"})

    def test_get_missing(self):
        collection = Mock()
        collection.find_one.return_value = None
        assert MongoKeyValueStore(collection).get("t1") is None

    def test_put_upserts(self):
        collection = Mock()
        MongoKeyValueStore(collection).put("t1", "v")
        collection.replace_one.assert_called_once_with({"_id": "t1"}, {"_id": "t1", "value": "v"}, upsert=True)

    def test_errors_become_store_unavailable(self):
        collection = Mock()
        collection.find_one.side_effect = ServerSelectionTimeoutError("no server")
        collection.replace_one.side_effect = ServerSelectionTimeoutError("no server")
        store = MongoKeyValueStore(collection)
        with pytest.raises(StoreUnavailable):
            store.get("t1")
        with pytest.raises(StoreUnavailable):
            store.put("t1", "v")


class TestS3BlobStore:
    def test_get(self):
        client = Mock()
        client.get_object.return_value = {"Body": io.BytesIO(b"[]"), "ContentType": "application/json"}
        obj = S3BlobStore("bucket", s3_client=client).get("tracks/tracks.json")
        assert obj.data == b"[]"
        assert obj.content_type == "application/json"
        client.get_object.assert_called_once_with(Bucket="bucket", Key="tracks/tracks.json")

    def test_get_missing_key(self):
        client = Mock()
        client.get_object.side_effect = ClientError({"Error": {"Code": "NoSuchKey"}}, "GetObject")
        assert S3BlobStore("bucket", s3_client=client).get("k") is None

    def test_get_other_error(self):
        client = Mock()
        client.get_object.side_effect = ClientError({"Error": {"Code": "InternalError"}}, "GetObject")
        with pytest.raises(StoreUnavailable):
            S3BlobStore("bucket", s3_client=client).get("k")

    def test_connection_error(self):
        client = Mock()
        client.get_object.side_effect = EndpointConnectionError(endpoint_url="https://r2.example")
        with pytest.raises(StoreUnavailable):
            S3BlobStore("bucket", s3_client=client).get("k")

    def test_put(self):
        client = Mock()
        S3BlobStore("bucket", s3_client=client).put("k", b"data", "audio/mpeg")
        client.put_object.assert_called_once_with(Bucket="bucket", Key="k", Body=b"data", ContentType="audio/mpeg")

    def test_put_error(self):
        client = Mock()
        client.put_object.side_effect = ClientError({"Error": {"Code": "AccessDenied"}}, "PutObject")
        with pytest.raises(StoreUnavailable):
            S3BlobStore("bucket", s3_client=client).put("k", b"", "text/plain")


class TestLocalBlobStore:
    def test_roundtrip_with_content_type(self, tmp_path):
        store = LocalBlobStore(str(tmp_path))
        store.put("tracks/abc/audio.mp3", b"ID3", "audio/mpeg")
        obj = store.get("tracks/abc/audio.mp3")
        assert obj.data == b"ID3"
        assert obj.content_type == "audio/mpeg"
        assert (tmp_path / "tracks" / "abc" / "audio.mp3").read_bytes() == b"ID3"

    def test_missing(self, tmp_path):
        assert LocalBlobStore(str(tmp_path)).get("tracks/tracks.json") is None

    def test_concurrent_reader_never_sees_partial_index(self, tmp_path):
        store = LocalBlobStore(str(tmp_path))
        repository = TrackIndexRepository(store)
        tracks = [{"id": str(i), "title": "t" * 50} for i in range(2000)]
        repository.write_all(tracks)
        done = threading.Event()
        short_reads = []

        def writer():
            for _ in range(30):
                repository.write_all(tracks)
            done.set()

        thread = threading.Thread(target=writer)
        thread.start()
        while not done.is_set():
            if len(repository.read_all()) != len(tracks):
                short_reads.append(1)
        thread.join()
        assert short_reads == []

    def test_failed_write_keeps_previous_object(self, tmp_path):
        store = LocalBlobStore(str(tmp_path))
        store.put("tracks/tracks.json", b"[1]", "application/json")
        with patch("stores.blob_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StoreUnavailable):
                store.put("tracks/tracks.json", b"[1, 2]", "application/json")
        assert store.get("tracks/tracks.json").data == b"[1]"
        assert sorted(p.name for p in (tmp_path / "tracks").iterdir()) == [
            "tracks.json", "tracks.json.content-type",
        ]

    def test_rejects_path_traversal(self, tmp_path):
        store = LocalBlobStore(str(tmp_path / "root"))
        with pytest.raises(ValueError):
            store.put("../escape.txt", b"x", "text/plain")


class TestFactory:
    def test_memory_backends(self):
        cfg = Mock(KV_BACKEND="memory", BLOB_BACKEND="memory")
        assert isinstance(create_kv_store(cfg), InMemoryKeyValueStore)
        assert isinstance(create_blob_store(cfg), InMemoryBlobStore)

    def test_local_backend(self, tmp_path):
        cfg = Mock(BLOB_BACKEND="local", LOCAL_BLOB_DIR=str(tmp_path))
        assert isinstance(create_blob_store(cfg), LocalBlobStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_kv_store(Mock(KV_BACKEND="redis"))
        with pytest.raises(ValueError):
            create_blob_store(Mock(BLOB_BACKEND="ftp"))


class TestMediaHelpers:
    def test_sanitize(self):
        assert sanitize("a<b>\nc") == "abc"
        assert sanitize(None) == ""
        assert sanitize(5) == ""
        assert len(sanitize("z" * 500)) == 200

    def test_pick_ext(self):
        assert pick_ext("audio/mpeg") == "mp3"
        assert pick_ext("image/svg+xml") == "svg"
        assert pick_ext("image/jpeg; charset=binary") == "jpg"
        assert pick_ext("video/mp4") is None
        assert pick_ext(None) is None

    def test_join_url(self):
        assert join_url("https://cdn.example/", "k") == "https://cdn.example/k"
        assert join_url("https://cdn.example", "k") == "https://cdn.example/k"
