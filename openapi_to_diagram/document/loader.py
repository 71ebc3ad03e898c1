"""Loading OpenAPI documents from disk."""

from __future__ import annotations

import json
from pathlib import Path

import yaml

from ..log import get_logger
from .nodes import Document
from .parser import parse_document

logger = get_logger(__name__)


class DocumentLoadError(Exception):
    """Raised when an OpenAPI document cannot be read or parsed."""


def load_document(path: str | Path) -> Document:
    """
    Load and parse an OpenAPI document.

    ``.json`` files are read with the json module, anything else as YAML.

    Args:
        path: Path to the document

    Returns:
        Parsed Document

    Raises:
        DocumentLoadError: If the file cannot be read or decoded, or is not a mapping
    """
    path = Path(path)
    logger.info(f"Loading OpenAPI document from {path}")

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except OSError as e:
        raise DocumentLoadError(f"Cannot read {path}: {e}") from e
    except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise DocumentLoadError(f"Cannot parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise DocumentLoadError(f"{path} does not contain an OpenAPI object")

    if "openapi" not in data:
        logger.warning(f"{path} has no 'openapi' version field")

    return parse_document(data, source=str(path))
