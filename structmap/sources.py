"""
Source mappings from files and query results.

Contract:
    load_yaml_mapping() / load_json_mapping() return the document's top-level
    mapping; anything else is a DecodeError.
    decode_rows() binds each row of a SQLAlchemy Result to a fresh record.

File and database I/O only; decoding is delegated to the Decoder.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any, TypeVar
from uuid import uuid4

import yaml
from sqlalchemy.engine import Result

from structmap.decoder import Decoder
from structmap.exceptions import DecodeError
from structmap.logging_config import LogContext, get_logger

logger = get_logger("sources")

R = TypeVar("R")


def _require_mapping(data: Any, path: Path) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise DecodeError(f"{path}: expected a mapping at the top level, got {type(data).__name__}")
    return dict(data)


def load_yaml_mapping(path: Path, encoding: str = "utf-8") -> dict[str, Any]:
    with Path(path).open("r", encoding=encoding) as f:
        return _require_mapping(yaml.safe_load(f), path)


def load_json_mapping(path: Path, encoding: str = "utf-8") -> dict[str, Any]:
    with Path(path).open("r", encoding=encoding) as f:
        return _require_mapping(json.load(f), path)


def iter_rows(decoder: Decoder, result: Result[Any], record_type: type[R]) -> Iterator[R]:
    """Yield one decoded record per result row. Streams the result."""
    for row in result.mappings():
        yield decoder.build(row, record_type)


def decode_rows(
    decoder: Decoder,
    result: Result[Any],
    record_type: type[R],
    correlation_id: str | None = None,
) -> list[R]:
    """Decode every row of `result` into `record_type` instances.

    All log lines of one call share `correlation_id`; a fresh one is
    generated when the caller has none.
    """
    if correlation_id is None:
        correlation_id = LogContext.get_all().get("correlation_id") or str(uuid4())
    with LogContext.bind(source="sql", correlation_id=correlation_id):
        records = list(iter_rows(decoder, result, record_type))
        logger.debug("rows_decoded", extra={"row_count": len(records)})
    return records
