# upload_gateway/infra/s3_client.py

import logging

import boto3
from botocore.config import Config

from upload_gateway.core.settings import Settings

logger = logging.getLogger(__name__)


def build_s3_client(settings: Settings):
    """S3 client voor de geconfigureerde (S3-compatibele) endpoint.

    Eén client per proces; boto3 clients zijn thread-safe. Retries staan uit:
    fouten van de store moeten direct als domeinfout naar boven komen.
    """
    cfg = Config(
        region_name=settings.S3_REGION,
        signature_version="s3v4",
        retries={"max_attempts": 1, "mode": "standard"},
        connect_timeout=settings.S3_CONNECT_TIMEOUT,
        read_timeout=settings.S3_READ_TIMEOUT,
        s3={"addressing_style": "path" if settings.S3_FORCE_PATH_STYLE else "auto"},
    )

    kwargs = {"config": cfg}
    if settings.S3_ENDPOINT_URL:
        kwargs["endpoint_url"] = settings.S3_ENDPOINT_URL
    if settings.S3_ACCESS_KEY_ID and settings.S3_SECRET_ACCESS_KEY:
        kwargs["aws_access_key_id"] = settings.S3_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = settings.S3_SECRET_ACCESS_KEY

    client = boto3.client("s3", **kwargs)
    logger.info(
        "S3 client initialized region=%s bucket=%s endpoint=%s",
        settings.S3_REGION,
        settings.S3_BUCKET,
        settings.S3_ENDPOINT_URL or "aws",
    )
    return client
