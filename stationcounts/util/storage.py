# stationcounts/util/storage.py
from __future__ import annotations

from pathlib import Path
from typing import Tuple

from google.cloud import storage


GCS_SCHEME = "gs://"


def is_gcs_uri(location: str | Path) -> bool:
    return str(location).startswith(GCS_SCHEME)


def split_gcs_uri(uri: str) -> Tuple[str, str]:
    """
    "gs://bucket/dir/file.csv" -> ("bucket", "dir/file.csv")
    """
    if not is_gcs_uri(uri):
        raise ValueError(f"not a gs:// uri: {uri!r}")
    bucket, _, blob = uri[len(GCS_SCHEME):].partition("/")
    if not bucket or not blob:
        raise ValueError(f"gs:// uri needs a bucket and an object name: {uri!r}")
    return bucket, blob


def _storage_client(client):
    if client is not None:
        return client
    return storage.Client()


def write_text(location: str | Path, text: str, *, client=None) -> str:
    """
    Write UTF-8 text to a local path or a gs:// object. Returns the location.
    """
    if is_gcs_uri(location):
        bucket_name, blob_name = split_gcs_uri(str(location))
        bucket = _storage_client(client).bucket(bucket_name)
        bucket.blob(blob_name).upload_from_string(
            text.encode("utf-8"), content_type="text/csv"
        )
        return str(location)

    path = Path(location)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(text)
    return str(path)


def read_text(location: str | Path, *, client=None) -> str:
    if is_gcs_uri(location):
        bucket_name, blob_name = split_gcs_uri(str(location))
        bucket = _storage_client(client).bucket(bucket_name)
        return bucket.blob(blob_name).download_as_bytes().decode("utf-8-sig")

    with open(location, newline="", encoding="utf-8-sig") as f:
        return f.read()
