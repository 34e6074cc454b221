"""
Custom Error Classes

Error taxonomy for target lookup, builder resolution and schema handling.
None of these are retried by the architect; they surface to the caller as-is.
"""

from typing import Any, List, Optional


class ArchitectError(Exception):
    """Base exception for all architect errors"""

    code: str = "ARCHITECT_ERROR"

    def __init__(self, message: str, hint: str = None):
        """
        Initialize architect error

        Args:
            message: Error message
            hint: Optional hint for resolving the error
        """
        self.message = message
        self.hint = hint
        super().__init__(self.message)

    def __str__(self):
        """Format error message with hint"""
        if self.hint:
            return f"{self.message}\n[HINT] {self.hint}"
        return self.message


class ProjectNotFound(ArchitectError):
    """Raised when a project is unknown or its target map was never validated"""

    code = "PROJECT_NOT_FOUND"

    def __init__(self, project: str):
        self.project = project
        super().__init__(
            f"Project '{project}' could not be found in workspace.",
            "Check the project name and make sure the architect was loaded.",
        )


class TargetNotFound(ArchitectError):
    """Raised when a target is absent from a known project's target map"""

    code = "TARGET_NOT_FOUND"

    def __init__(self, project: str, target: str):
        self.project = project
        self.target = target
        super().__init__(f"Target '{target}' could not be found in project '{project}'.")


class ConfigurationNotFound(ArchitectError):
    """Raised when a named configuration is missing from a target"""

    code = "CONFIGURATION_NOT_FOUND"

    def __init__(self, project: str, configuration: str):
        self.project = project
        self.configuration = configuration
        super().__init__(
            f"Configuration '{configuration}' could not be found in project '{project}'."
        )


class BuilderCannotBeResolved(ArchitectError):
    """Raised when a builder id cannot be mapped to a builder entry"""

    code = "BUILDER_CANNOT_BE_RESOLVED"

    def __init__(self, builder: str, reason: str = None):
        self.builder = builder
        self.reason = reason
        super().__init__(f"Builder '{builder}' cannot be resolved.", reason)


class BuilderNotFound(ArchitectError):
    """Raised when a builder constructor is requested before its paths were resolved"""

    code = "BUILDER_NOT_FOUND"

    def __init__(self, builder: str, reason: str = None):
        self.builder = builder
        super().__init__(f"Builder {builder} could not be found.", reason)


class ArchitectNotYetLoaded(ArchitectError):
    """Raised when builder operations run before load_architect() completed"""

    code = "ARCHITECT_NOT_YET_LOADED"

    def __init__(self):
        super().__init__(
            "Architect needs to be loaded before Architect is used.",
            "Call 'await architect.load_architect()' first.",
        )


class SchemaValidationFailure(ArchitectError):
    """Raised when a value does not satisfy a schema"""

    code = "SCHEMA_VALIDATION_FAILURE"

    def __init__(self, schema_id: str, value: Any, errors: Optional[List[str]] = None):
        self.schema_id = schema_id
        self.value = value
        self.errors = errors or []
        if self.errors:
            error_str = "\n".join(f"  - {err}" for err in self.errors)
            message = f"Schema validation failed against '{schema_id}':\n{error_str}"
        else:
            message = f"Schema validation failed against '{schema_id}'"
        super().__init__(message)


class ResourceReadFailure(ArchitectError):
    """Raised when a schema or manifest cannot be read"""

    code = "RESOURCE_READ_FAILURE"

    def __init__(self, path: str, error: str = None):
        self.path = path
        message = f"Failed to read {path}"
        if error:
            message = f"{message}: {error}"
        super().__init__(message)


class ParseFailure(ArchitectError):
    """Raised when a schema or manifest is not a valid (loose) JSON document"""

    code = "PARSE_FAILURE"

    def __init__(self, path: str, error: str = None):
        self.path = path
        message = f"Invalid JSON document in {path}"
        if error:
            message = f"{message}: {error}"
        super().__init__(
            message,
            "Comments and trailing commas are accepted; check quoting and brackets.",
        )


def format_error_for_cli(error: Exception) -> str:
    """
    Format error for CLI display

    Args:
        error: Exception to format

    Returns:
        Formatted error string
    """
    if isinstance(error, ArchitectError):
        return f"[{error.code}] {error}"
    else:
        return f"[ERROR] {str(error)}"
