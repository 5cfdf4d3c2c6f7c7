from __future__ import annotations

import logging
import re
import uuid
from typing import Optional

import boto3
from botocore.client import Config as BotoConfig

logger = logging.getLogger(__name__)

_NOME_INSEGURO = re.compile(r"[^a-zA-Z0-9._-]")


def build_object_key(prefix: str, filename: str) -> str:
    safe_name = _NOME_INSEGURO.sub("_", filename or "arquivo")
    return f"{prefix.strip('/')}/{uuid.uuid4()}-{safe_name}"


class R2Storage:
    """
    Cliente do bucket R2 (API compativel com S3).

    Construido explicitamente a partir da configuracao da aplicacao e
    entregue aos servicos que precisam dele.
    """

    def __init__(
        self,
        *,
        bucket: str,
        access_key_id: str,
        secret_access_key: str,
        endpoint_url: str,
        region: str = "auto",
        expires_in: int = 300,
        client=None,
    ):
        self.bucket = bucket
        self.expires_in = expires_in
        self.client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region,
            config=BotoConfig(signature_version="s3v4", s3={"addressing_style": "path"}),
        )

    @classmethod
    def from_config(cls, config) -> Optional["R2Storage"]:
        bucket = config.get("R2_BUCKET")
        access_key = config.get("R2_ACCESS_KEY_ID")
        secret_key = config.get("R2_SECRET_ACCESS_KEY")
        if not (bucket and access_key and secret_key):
            return None

        endpoint = config.get("R2_ENDPOINT")
        if not endpoint:
            account_id = config.get("R2_ACCOUNT_ID")
            if not account_id:
                return None
            endpoint = f"https://{account_id}.r2.cloudflarestorage.com"

        return cls(
            bucket=bucket,
            access_key_id=access_key,
            secret_access_key=secret_key,
            endpoint_url=endpoint,
            region=config.get("R2_REGION") or "auto",
            expires_in=int(config.get("SIGNED_URL_TTL") or 300),
        )

    def signed_put_url(self, key: str, content_type: Optional[str] = None) -> str:
        params = {"Bucket": self.bucket, "Key": key}
        if content_type:
            params["ContentType"] = content_type
        return self.client.generate_presigned_url(
            "put_object", Params=params, ExpiresIn=self.expires_in
        )

    def signed_get_url(self, key: str) -> str:
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=self.expires_in,
        )

    def delete_object(self, key: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=key)
        logger.info("Objeto removido do bucket: %s", key)
