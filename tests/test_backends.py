import asyncio
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from lexibayes.backends import BackendKind, BlobBackend, FileSystemBackend, decode_payload
from lexibayes.exceptions import BackendIOError, ClassifierNotFoundError, InvalidSourceError


def test_backend_kind_parses_known_sources():
    assert BackendKind.parse("blob") is BackendKind.BLOB
    assert BackendKind.parse("fs") is BackendKind.FS
    assert BackendKind.parse(BackendKind.FS) is BackendKind.FS


@pytest.mark.parametrize("source", ["ftp", "", None, "FS"])
def test_backend_kind_rejects_unknown_sources(source):
    with pytest.raises(InvalidSourceError):
        BackendKind.parse(source)


def test_filesystem_backend_round_trip(tmp_path):
    backend = FileSystemBackend(str(tmp_path))

    asyncio.run(backend.save("intents", '{"docs": []}'))

    assert (tmp_path / "intents.json").read_text(encoding="utf-8") == '{"docs": []}'
    assert asyncio.run(backend.load("intents")) == '{"docs": []}'


def test_filesystem_backend_creates_missing_directory(tmp_path):
    backend = FileSystemBackend(str(tmp_path / "nested" / "models"))

    asyncio.run(backend.save("intents", "payload"))

    assert (tmp_path / "nested" / "models" / "intents.json").exists()


def test_filesystem_backend_missing_file_is_not_found(tmp_path):
    backend = FileSystemBackend(str(tmp_path))

    with pytest.raises(ClassifierNotFoundError):
        asyncio.run(backend.load("missing"))


def test_filesystem_backend_read_failure_is_io_error(tmp_path):
    (tmp_path / "broken.json").mkdir()
    backend = FileSystemBackend(str(tmp_path))

    with pytest.raises(BackendIOError):
        asyncio.run(backend.load("broken"))


def test_filesystem_backend_saving_twice_is_byte_identical(tmp_path):
    backend = FileSystemBackend(str(tmp_path))
    payload = '{"alpha": 1.0, "docs": [{"label": "café", "text": "naïve"}]}'

    asyncio.run(backend.save("intents", payload))
    first = (tmp_path / "intents.json").read_bytes()
    asyncio.run(backend.save("intents", payload))

    assert (tmp_path / "intents.json").read_bytes() == first


def test_decode_payload_falls_back_for_non_utf8():
    assert decode_payload("héllo".encode("utf-8")) == "héllo"
    assert decode_payload(b"caf\xe9 latte").startswith("caf")


def _client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "GetObject")


def test_blob_backend_downloads_object():
    client = MagicMock()
    client.get_object.return_value = {"Body": MagicMock(read=MagicMock(return_value=b'{"docs": []}'))}
    backend = BlobBackend(bucket="models", prefix="nlp/", client=client)

    assert asyncio.run(backend.load("intents")) == '{"docs": []}'
    client.get_object.assert_called_once_with(Bucket="models", Key="nlp/intents")


def test_blob_backend_uploads_object():
    client = MagicMock()
    backend = BlobBackend(bucket="models", prefix="", client=client)

    asyncio.run(backend.save("intents", "payload"))

    client.put_object.assert_called_once_with(
        Bucket="models",
        Key="intents",
        Body=b"payload",
        ContentType="application/json",
    )


@pytest.mark.parametrize("code", ["NoSuchKey", "404"])
def test_blob_backend_missing_key_is_not_found(code):
    client = MagicMock()
    client.get_object.side_effect = _client_error(code)
    backend = BlobBackend(bucket="models", client=client)

    with pytest.raises(ClassifierNotFoundError):
        asyncio.run(backend.load("intents"))


def test_blob_backend_other_errors_are_io_errors():
    client = MagicMock()
    client.get_object.side_effect = _client_error("AccessDenied")
    client.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3")
    backend = BlobBackend(bucket="models", client=client)

    with pytest.raises(BackendIOError):
        asyncio.run(backend.load("intents"))
    with pytest.raises(BackendIOError):
        asyncio.run(backend.save("intents", "payload"))


def test_blob_backend_requires_bucket(monkeypatch):
    monkeypatch.delenv("LEXIBAYES_BLOB_BUCKET", raising=False)

    with pytest.raises(ValueError):
        BlobBackend(client=MagicMock())


def test_blob_backend_reads_bucket_from_settings(monkeypatch):
    monkeypatch.setenv("LEXIBAYES_BLOB_BUCKET", "env-bucket")
    monkeypatch.setenv("LEXIBAYES_BLOB_PREFIX", "classifiers/")

    backend = BlobBackend(client=MagicMock())

    assert backend.bucket == "env-bucket"
    assert backend.key_for("intents") == "classifiers/intents"
