"""
Schema Loader

Reads JSON documents (schemas, package manifests, builder manifests) through
the workspace host. Hand-written manifests may contain comments and trailing
commas, so documents are parsed in the loose JSON5 dialect.
"""

import logging
from typing import Any

import json5

from core.errors import ArchitectError, ParseFailure, ResourceReadFailure
from core.interfaces import Host

logger = logging.getLogger(__name__)


def parse_json(text: str, path: str = "<string>") -> Any:
    """
    Parse a loose JSON document

    Args:
        text: Document text
        path: Location used in error messages

    Returns:
        Parsed document

    Raises:
        ParseFailure: If the text is not valid JSON5
    """
    try:
        return json5.loads(text)
    except ValueError as e:
        raise ParseFailure(path, str(e)) from e


async def load_json_file(host: Host, path: str) -> Any:
    """
    Read and parse a JSON document

    Args:
        host: Host used to read the bytes
        path: Document location

    Returns:
        Parsed document

    Raises:
        ResourceReadFailure: If the host cannot read the file
        ParseFailure: If decoding or parsing fails
    """
    try:
        buffer = await host.read(path)
    except ArchitectError:
        raise
    except Exception as e:
        raise ResourceReadFailure(path, str(e)) from e

    try:
        text = buffer.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        raise ParseFailure(path, str(e)) from e

    logger.debug(f"Loaded JSON document: {path}")
    return parse_json(text, path)
