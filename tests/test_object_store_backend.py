"""Tests for the S3-compatible object store backend, with a mocked client."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from artwork_catalog.errors import BackendError, NotFound, ValidationError
from artwork_catalog.storage import ObjectStoreBackend


def client_error(code: str, operation: str = "GetObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def s3_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def store(s3_client: MagicMock) -> ObjectStoreBackend:
    return ObjectStoreBackend(s3_client, "artworks")


class TestListing:
    def test_list_identifiers_follows_every_page(self, store: ObjectStoreBackend, s3_client: MagicMock):
        s3_client.list_objects_v2.side_effect = [
            {
                "IsTruncated": True,
                "NextContinuationToken": "t1",
                "CommonPrefixes": [{"Prefix": "b-piece/"}],
            },
            {
                "IsTruncated": True,
                "NextContinuationToken": "t2",
                "CommonPrefixes": [{"Prefix": "a-piece/"}, {"Prefix": "b-piece/"}],
            },
            {"IsTruncated": False, "CommonPrefixes": [{"Prefix": "c-piece/"}]},
        ]

        assert store.list_identifiers() == ["a-piece", "b-piece", "c-piece"]
        assert s3_client.list_objects_v2.call_count == 3

        calls = s3_client.list_objects_v2.call_args_list
        assert "ContinuationToken" not in calls[0].kwargs
        assert calls[1].kwargs["ContinuationToken"] == "t1"
        assert calls[2].kwargs["ContinuationToken"] == "t2"
        assert calls[0].kwargs["Delimiter"] == "/"
        assert calls[0].kwargs["Bucket"] == "artworks"

    def test_repeated_continuation_token_terminates(self, store: ObjectStoreBackend, s3_client: MagicMock):
        s3_client.list_objects_v2.return_value = {
            "IsTruncated": True,
            "NextContinuationToken": "same",
            "CommonPrefixes": [{"Prefix": "a-piece/"}],
        }

        assert store.list_identifiers() == ["a-piece"]
        assert s3_client.list_objects_v2.call_count == 2

    def test_list_files_keeps_direct_children_only(self, store: ObjectStoreBackend, s3_client: MagicMock):
        s3_client.list_objects_v2.return_value = {
            "IsTruncated": False,
            "Contents": [
                {"Key": "a-piece/02.jpg"},
                {"Key": "a-piece/"},
                {"Key": "a-piece/drafts/old.jpg"},
                {"Key": "a-piece/01.jpg"},
            ],
        }

        assert store.list_files("a-piece") == ["01.jpg", "02.jpg"]
        assert s3_client.list_objects_v2.call_args.kwargs["Prefix"] == "a-piece/"

    def test_listing_failure_is_backend_error(self, store: ObjectStoreBackend, s3_client: MagicMock):
        s3_client.list_objects_v2.side_effect = client_error("AccessDenied", "ListObjectsV2")
        with pytest.raises(BackendError):
            store.list_identifiers()

    def test_unsafe_identifier_never_reaches_client(self, store: ObjectStoreBackend, s3_client: MagicMock):
        with pytest.raises(ValidationError):
            store.list_files("../other")
        s3_client.list_objects_v2.assert_not_called()


class TestFiles:
    def test_read_file_with_limit(self, store: ObjectStoreBackend, s3_client: MagicMock):
        body = MagicMock()
        body.read.return_value = b"{}"
        s3_client.get_object.return_value = {"Body": body}

        assert store.read_file("a-piece", "meta.json", max_bytes=1024) == b"{}"
        s3_client.get_object.assert_called_once_with(Bucket="artworks", Key="a-piece/meta.json")
        body.read.assert_called_once_with(1024)
        body.close.assert_called_once()

    def test_read_missing_file(self, store: ObjectStoreBackend, s3_client: MagicMock):
        s3_client.get_object.side_effect = client_error("NoSuchKey")
        with pytest.raises(NotFound):
            store.read_file("a-piece", "meta.json")

    def test_read_failure(self, store: ObjectStoreBackend, s3_client: MagicMock):
        s3_client.get_object.side_effect = client_error("InternalError")
        with pytest.raises(BackendError):
            store.read_file("a-piece", "meta.json")

    def test_write_file(self, store: ObjectStoreBackend, s3_client: MagicMock):
        store.write_file("a-piece", "detalle.txt", b"hola", "text/plain; charset=utf-8")
        s3_client.put_object.assert_called_once_with(
            Bucket="artworks",
            Key="a-piece/detalle.txt",
            Body=b"hola",
            ContentType="text/plain; charset=utf-8",
        )

    def test_has_file(self, store: ObjectStoreBackend, s3_client: MagicMock):
        assert store.has_file("a-piece", "01.jpg")

        s3_client.head_object.side_effect = client_error("404", "HeadObject")
        assert not store.has_file("a-piece", "01.jpg")

    def test_delete_file(self, store: ObjectStoreBackend, s3_client: MagicMock):
        store.delete_file("a-piece", "01.jpg")
        s3_client.delete_object.assert_called_once_with(Bucket="artworks", Key="a-piece/01.jpg")


class TestNamespaces:
    def test_exists_probes_a_single_key(self, store: ObjectStoreBackend, s3_client: MagicMock):
        s3_client.list_objects_v2.return_value = {"Contents": [{"Key": "a-piece/.placeholder"}]}
        assert store.exists("a-piece")
        s3_client.list_objects_v2.assert_called_once_with(
            Bucket="artworks", Prefix="a-piece/", MaxKeys=1
        )

        s3_client.list_objects_v2.return_value = {"KeyCount": 0}
        assert not store.exists("a-piece")

    def test_create_namespace_writes_placeholder(self, store: ObjectStoreBackend, s3_client: MagicMock):
        store.create_namespace("a-piece")
        s3_client.put_object.assert_called_once_with(
            Bucket="artworks", Key="a-piece/.placeholder", Body=b"", ContentType="text/plain"
        )


class TestResolveRef:
    def test_presigned_url(self, store: ObjectStoreBackend, s3_client: MagicMock):
        s3_client.generate_presigned_url.return_value = "https://signed.example/a-piece/01.jpg?sig=1"

        ref = store.resolve_ref("a-piece", "01.jpg")

        assert ref.is_redirect
        assert ref.url == "https://signed.example/a-piece/01.jpg?sig=1"
        assert ref.content_type == "image/jpeg"
        s3_client.generate_presigned_url.assert_called_once_with(
            "get_object",
            Params={"Bucket": "artworks", "Key": "a-piece/01.jpg"},
            ExpiresIn=600,
        )

    def test_public_url_escapes_each_segment(self, s3_client: MagicMock):
        store = ObjectStoreBackend(
            s3_client, "artworks", public_base_url="https://cdn.example.com/art/"
        )

        ref = store.resolve_ref("mi obra", "foto #1.jpg")

        assert ref.url == "https://cdn.example.com/art/mi%20obra/foto%20%231.jpg"
        s3_client.generate_presigned_url.assert_not_called()

    def test_describe(self, store: ObjectStoreBackend):
        assert store.describe() == "s3://artworks"
