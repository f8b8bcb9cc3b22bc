"""
Upload decoding.

Turns uploaded text (or a file on disk) into the decoded JSON document that the
normalizer consumes. Any failure at this stage is reported as a single
"invalid format" condition, distinct from field-level validation errors.

Design:
- Accepts a single JSON object or a JSON array of objects
- BOM and surrounding whitespace are tolerated
- Nothing is partially decoded: the document parses or the upload fails
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from emr_analytics.core.exceptions import InvalidFormatError

logger = logging.getLogger(__name__)

Payload = Union[Dict[str, Any], List[Any]]


def decode_upload(text: Union[str, bytes]) -> Payload:
    """
    Decode uploaded text into a JSON object or array.

    Args:
        text: Raw upload contents

    Returns:
        Decoded dict (single record) or list (batch)

    Raises:
        InvalidFormatError: If the text is not valid JSON or the top-level
            value is neither an object nor an array
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidFormatError("Invalid JSON format") from e

    content = text.lstrip("\ufeff").strip()
    if not content:
        raise InvalidFormatError("Invalid JSON format")

    try:
        document = json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning(f"Upload is not valid JSON: {e}")
        raise InvalidFormatError("Invalid JSON format") from e

    if not isinstance(document, (dict, list)):
        raise InvalidFormatError("Invalid JSON format")

    return document


def read_upload(filepath: Union[str, Path], encoding: str = "utf-8") -> Payload:
    """
    Read and decode an upload from disk.

    Args:
        filepath: Path to the JSON file
        encoding: File encoding (default utf-8)

    Raises:
        InvalidFormatError: If the file is missing, unreadable, or not JSON
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise InvalidFormatError(f"Upload file not found: {filepath}")

    try:
        with open(filepath, "r", encoding=encoding) as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading upload file {filepath}: {e}")
        raise InvalidFormatError("Failed to read file") from e

    return decode_upload(text)
