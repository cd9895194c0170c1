from __future__ import annotations

import logging
from typing import Any, cast

from botocore.client import BaseClient  # type: ignore[import-untyped]
from botocore.exceptions import ClientError  # type: ignore[import-untyped]
from botocore.response import StreamingBody  # type: ignore[import-untyped]

from adapters.filesystem.json_utils import parse_json_bytes
from adapters.memory.sentence_repository import InMemorySentenceRepository
from adapters.s3.s3_client import create_s3_client, normalize_prefix
from domain.models import SentenceCollection

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class S3SentenceRepository(InMemorySentenceRepository):
    def __init__(self, key: str, collection: SentenceCollection) -> None:
        super().__init__(collection)
        self.key = key

    @classmethod
    def from_client(
        cls,
        client: BaseClient,
        bucket: str,
        ontology: str,
        prefix: str = "",
    ) -> S3SentenceRepository:
        key = build_sentence_key(prefix, ontology)
        try:
            response = client.get_object(Bucket=bucket, Key=key)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code in _MISSING_KEY_CODES:
                logger.warning("Sentence data object not found: s3://%s/%s", bucket, key)
                return cls(key, SentenceCollection())
            raise
        raw = _read_body(response.get("Body"))
        return cls(key, SentenceCollection.model_validate(parse_json_bytes(raw)))

    @classmethod
    def from_settings(cls, settings: Any, ontology: str) -> S3SentenceRepository:
        client = create_s3_client(
            region=settings.region,
            endpoint_url=settings.endpoint_url,
            access_key_id=settings.access_key_id,
            secret_access_key=settings.secret_access_key,
            session_token=settings.session_token,
            use_path_style=settings.use_path_style,
        )
        return cls.from_client(client, settings.bucket, ontology, settings.prefix)


def build_sentence_key(prefix: str, ontology: str) -> str:
    return f"{normalize_prefix(prefix)}{ontology}.json"


def _read_body(body: Any) -> bytes:
    if isinstance(body, bytes | bytearray):
        return bytes(body)
    if isinstance(body, StreamingBody):
        return cast(bytes, body.read())
    if hasattr(body, "read"):
        return cast(bytes, body.read())
    return b""
