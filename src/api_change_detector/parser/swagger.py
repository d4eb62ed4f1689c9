"""OpenAPI / Swagger document loader.

Parses OpenAPI 3.x and Swagger 2.0 documents into ApiDocument models.
"""

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from api_change_detector.exceptions import DocumentShapeError

from .base import HTTP_METHODS, ApiDocument, ApiOperation, ApiResponse, Param

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def load_document(file_path: Path | str) -> ApiDocument | None:
    """Load an API document, or return None when there is nothing usable.

    A missing file and a file that cannot be parsed both yield None; a
    parseable file of the wrong shape raises DocumentShapeError.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        logger.warning("Spec file not found: %s", file_path)
        return None

    try:
        data = _read(file_path)
    except (yaml.YAMLError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error("Error loading spec %s: %s", file_path, e)
        return None

    if data is None:
        logger.warning("Spec file is empty: %s", file_path)
        return None

    doc = parse_document(data, source=str(file_path))
    logger.debug("Loaded %s: %d paths, %d operations", file_path, len(doc.paths), doc.operation_count)
    return doc


def _read(file_path: Path):
    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() in YAML_SUFFIXES:
        return yaml.safe_load(text)
    return json.loads(text)


def parse_document(data: dict, source: str | None = None) -> ApiDocument:
    """Convert a raw OpenAPI/Swagger tree into an ApiDocument."""
    if not isinstance(data, dict):
        raise DocumentShapeError(f"expected a mapping at top level, got {type(data).__name__}", source)

    paths = data.get("paths")
    if paths is None:
        paths = {}
    if not isinstance(paths, dict):
        raise DocumentShapeError("'paths' must be a mapping", source)

    info = data.get("info") or {}
    parsed: dict[str, dict[str, ApiOperation]] = {}
    try:
        for path, methods in paths.items():
            parsed[str(path)] = _parse_path_item(str(path), methods or {}, source)
        return ApiDocument(
            title=_text(info.get("title")) if isinstance(info, dict) else None,
            version=_text(info.get("version")) if isinstance(info, dict) else None,
            paths=parsed,
        )
    except ValidationError as e:
        raise DocumentShapeError(str(e), source) from e


def _parse_path_item(path: str, methods: dict, source: str | None) -> dict[str, ApiOperation]:
    if not isinstance(methods, dict):
        raise DocumentShapeError(f"path item {path} must be a mapping", source)

    operations = {}
    for method, operation in methods.items():
        method = str(method).lower()
        # Path-level 'parameters', 'summary', 'servers' etc. are not operations.
        if method not in HTTP_METHODS:
            continue
        operation = operation or {}
        if not isinstance(operation, dict):
            raise DocumentShapeError(f"operation {method.upper()} {path} must be a mapping", source)

        operations[method] = ApiOperation(
            method=method,
            path=path,
            summary=_text(operation.get("summary")),
            description=_text(operation.get("description")),
            parameters=_parse_parameters(operation.get("parameters") or [], path, source),
            responses=_parse_responses(operation.get("responses") or {}),
        )
    return operations


def _parse_parameters(params: list, path: str, source: str | None) -> list[Param]:
    if not isinstance(params, list):
        raise DocumentShapeError(f"parameters of {path} must be a list", source)

    result = []
    for p in params:
        if not isinstance(p, dict):
            raise DocumentShapeError(f"parameter entries of {path} must be mappings", source)
        # $ref parameters are kept unresolved: no name, never required.
        result.append(
            Param(
                name=_text(p.get("name")) or "",
                location=_text(p.get("in")) or "",
                required=bool(p.get("required", False)),
            )
        )
    return result


def _parse_responses(responses: dict) -> dict[str, ApiResponse]:
    if not isinstance(responses, dict):
        return {}

    result = {}
    for status_code, resp in responses.items():
        if not isinstance(resp, dict):
            resp = {}
        content = resp.get("content") or {}
        media = {}
        if isinstance(content, dict):
            media = {str(ct): data for ct, data in content.items() if isinstance(data, dict)}
        schema = resp.get("schema")
        result[str(status_code)] = ApiResponse(
            description=_text(resp.get("description")) or "",
            content=media,
            schema_=schema if isinstance(schema, dict) else None,
        )
    return result


def _text(value) -> str | None:
    if value is None:
        return None
    return str(value)
