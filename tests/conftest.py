import os

# Dummy env zodat boto3 niet zeurt; er gaat nooit verkeer naar een echte store
os.environ.setdefault("S3_ACCESS_KEY_ID", "test")
os.environ.setdefault("S3_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("S3_BUCKET", "test-bucket")

import pytest
from fastapi.testclient import TestClient

from upload_gateway.core.settings import Settings
from upload_gateway.main import create_app
from upload_gateway.services.multipart import UploadOrchestrator
from upload_gateway.services.upload_tracker import UploadTracker


class FakeSigner:
    """Signer zonder netwerk: onthoudt elke call en faalt op verzoek."""

    bucket = "test-bucket"

    def __init__(self):
        self.calls = []
        self.fail_on = set()  # "sign" | "initiate" | "complete"
        self.upload_id = "abc"

    def sign(
        self,
        key,
        verb,
        expires_in,
        upload_id=None,
        part_number=None,
        content_type=None,
        content_disposition=None,
    ):
        self.calls.append(
            {
                "op": "sign",
                "key": key,
                "verb": verb,
                "expires_in": expires_in,
                "upload_id": upload_id,
                "part_number": part_number,
                "content_type": content_type,
                "content_disposition": content_disposition,
            }
        )
        if "sign" in self.fail_on:
            raise RuntimeError("signer exploded: secret-internal-cause")
        query = f"X-Amz-Expires={expires_in}"
        if upload_id is not None:
            query += f"&partNumber={part_number}&uploadId={upload_id}"
        return f"https://store.test/{self.bucket}/{key}?{query}"

    def initiate_multipart(self, key, content_type):
        self.calls.append({"op": "initiate", "key": key, "content_type": content_type})
        if "initiate" in self.fail_on:
            raise RuntimeError("initiate exploded: secret-internal-cause")
        return self.upload_id

    def complete_multipart(self, key, upload_id, ordered_parts):
        self.calls.append(
            {"op": "complete", "key": key, "upload_id": upload_id, "parts": list(ordered_parts)}
        )
        if "complete" in self.fail_on:
            raise RuntimeError("complete exploded: secret-internal-cause")
        return f"https://store.test/{self.bucket}/{key}"


@pytest.fixture
def signer():
    return FakeSigner()


@pytest.fixture
def tracker():
    return UploadTracker(shards=4)


@pytest.fixture
def orchestrator(signer):
    return UploadOrchestrator(signer, default_expiration_minutes=60)


@pytest.fixture
def settings():
    return Settings(S3_BUCKET="test-bucket", LOG_LEVEL="DEBUG")


@pytest.fixture
def app(settings, signer, tracker):
    return create_app(settings=settings, signer=signer, tracker=tracker)


@pytest.fixture
def client(app):
    # 500-responses willen we als response zien, niet als exception in de test
    return TestClient(app, raise_server_exceptions=False)
