"""
Validation Gateway

Thin pass-through to the workspace's schema validation. Whatever the
workspace raises is wrapped into SchemaValidationFailure; the error's own
structure is never inspected.
"""

from typing import Any, Dict

from core.errors import ArchitectError, SchemaValidationFailure
from core.interfaces import Workspace


def schema_identity(schema: Dict[str, Any], fallback: str) -> str:
    """Name a schema by its $id, else its title, else the fallback label"""
    if isinstance(schema, dict):
        return schema.get('$id') or schema.get('id') or schema.get('title') or fallback
    return fallback


async def validate(
    workspace: Workspace,
    value: Any,
    schema: Dict[str, Any],
    label: str = "schema"
) -> Any:
    """
    Validate a value against a schema

    Args:
        workspace: Workspace providing the validator
        value: Value to validate
        schema: JSON schema
        label: Schema name used when the schema has no $id/title

    Returns:
        Validated value (defaults may have been applied)

    Raises:
        SchemaValidationFailure: If validation fails
    """
    try:
        return await workspace.validate(value, schema)
    except ArchitectError:
        raise
    except Exception as e:
        raise SchemaValidationFailure(schema_identity(schema, label), value, [str(e)]) from e
