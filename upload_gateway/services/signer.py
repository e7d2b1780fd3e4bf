# upload_gateway/services/signer.py
from __future__ import annotations

from typing import Optional, Sequence

from upload_gateway.models import PartETag


class S3Signer:
    """Dunne laag over de boto3 client: presign, multipart start en afronden.

    Vertaalt geen fouten; dat doet de orchestrator met domeincontext erbij.
    """

    def __init__(self, s3_client, bucket: str):
        self._s3 = s3_client
        self.bucket = bucket

    def sign(
        self,
        key: str,
        verb: str,
        expires_in: int,
        upload_id: Optional[str] = None,
        part_number: Optional[int] = None,
        content_type: Optional[str] = None,
        content_disposition: Optional[str] = None,
    ) -> str:
        params = {"Bucket": self.bucket, "Key": key}

        if verb == "PUT" and upload_id is not None:
            client_method = "upload_part"
            params["UploadId"] = upload_id
            params["PartNumber"] = part_number
        elif verb == "PUT":
            client_method = "put_object"
            if content_type:
                params["ContentType"] = content_type
        elif verb == "GET":
            client_method = "get_object"
            if content_disposition:
                params["ResponseContentDisposition"] = content_disposition
        else:
            raise ValueError(f"unsupported verb: {verb}")

        return self._s3.generate_presigned_url(
            ClientMethod=client_method,
            Params=params,
            ExpiresIn=expires_in,
            HttpMethod=verb,
        )

    def initiate_multipart(self, key: str, content_type: str) -> str:
        resp = self._s3.create_multipart_upload(
            Bucket=self.bucket,
            Key=key,
            ContentType=content_type,
        )
        return resp["UploadId"]

    def complete_multipart(self, key: str, upload_id: str, ordered_parts: Sequence[PartETag]) -> str:
        # ETags exact doorgeven zoals de client ze kreeg (incl. quotes)
        resp = self._s3.complete_multipart_upload(
            Bucket=self.bucket,
            Key=key,
            UploadId=upload_id,
            MultipartUpload={
                "Parts": [{"ETag": p.etag, "PartNumber": p.part_number} for p in ordered_parts]
            },
        )
        return resp.get("Location") or self.object_url(key)

    def object_url(self, key: str) -> str:
        base = self._s3.meta.endpoint_url.rstrip("/")
        return f"{base}/{self.bucket}/{key.lstrip('/')}"
