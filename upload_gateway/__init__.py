"""
Upload Gateway - presigned URLs and multipart uploads for S3-compatible stores.
"""

__version__ = "0.1.0"
