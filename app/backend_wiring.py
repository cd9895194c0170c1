from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from adapters.engine.clients import HttpEngineClient, ProcessEngineClient, SocketEngineClient
from adapters.filesystem.sentence_repository import FileSystemSentenceRepository
from adapters.s3.sentence_repository import S3SentenceRepository
from app.config import S3Settings
from domain.ports.engine import EngineClient
from domain.ports.repositories import SentenceRepository
from domain.services.resolve_parameters import DATA_DIR_KEY, DEFAULT_PARAMETERS, ENGINE_COMMAND_KEY

DEFAULT_ONTOLOGY = "default"


def ontology_name(parameters: Mapping[str, str]) -> str:
    return parameters.get("ontology", "").strip() or DEFAULT_ONTOLOGY


def build_sentence_repository(
    parameters: Mapping[str, str],
    s3: S3Settings | None = None,
) -> SentenceRepository:
    storage = parameters.get("storage", "filesystem").strip().lower()
    ontology = ontology_name(parameters)
    if storage == "s3":
        if s3 is None or not s3.bucket:
            msg = "wiki.s3.bucket is required when storage is s3"
            raise ValueError(msg)
        return S3SentenceRepository.from_settings(s3, ontology)
    if storage != "filesystem":
        msg = f"Unsupported storage: {storage}"
        raise ValueError(msg)
    data_dir = Path(parameters.get(DATA_DIR_KEY, DEFAULT_PARAMETERS[DATA_DIR_KEY]))
    return FileSystemSentenceRepository.from_path(data_dir / f"{ontology}.json")


def build_engine_client(parameters: Mapping[str, str]) -> EngineClient:
    engine = parameters.get("engine", "local").strip().lower()
    if engine == "local":
        command = parameters.get(ENGINE_COMMAND_KEY, DEFAULT_PARAMETERS[ENGINE_COMMAND_KEY])
        return ProcessEngineClient(command)
    if engine == "socket":
        raw_port = parameters.get("apeport", "").strip()
        if not raw_port.isdigit():
            msg = "apeport must be a port number when engine is socket"
            raise ValueError(msg)
        return SocketEngineClient(int(raw_port))
    if engine == "webservice":
        server = parameters.get("apeserver", "").strip()
        if not server:
            msg = "apeserver is required when engine is webservice"
            raise ValueError(msg)
        return HttpEngineClient(server)
    msg = f"Unsupported engine: {engine}"
    raise ValueError(msg)
