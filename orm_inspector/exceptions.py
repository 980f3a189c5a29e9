"""
Custom exception hierarchy for ORM Inspector.

Every failure in the reverse-mapping pipeline is fatal for the whole run.
The exceptions carry enough context to locate the offending table, column
or constraint without re-running the introspection.
"""

from typing import Dict, Any, Optional, List


class OrmInspectorError(Exception):
    """
    Base exception for all ORM Inspector errors.

    Provides rich context and error recovery guidance.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        self.error_code = error_code

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [self.message]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class ConfigurationError(OrmInspectorError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = kwargs.get('context', {})
        if config_file:
            context['config_file'] = config_file

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the configuration file syntax",
                "Verify all required fields are present",
                "Check the README for configuration examples"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CONFIG_ERROR"
        )


class SchemaIntrospectionError(OrmInspectorError):
    """Raised when the schema introspector fails or returns unusable data."""

    def __init__(self, message: str, table: str = None, column: str = None, **kwargs):
        context = kwargs.get('context', {})
        if table:
            context['table'] = table
        if column:
            context['column'] = column

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check database connection settings",
                "Verify the table/column exists in the database",
                "Check database user permissions"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="INTROSPECTION_ERROR"
        )


class DanglingReferenceError(OrmInspectorError):
    """Raised when a foreign key targets a table that cannot be fetched."""

    def __init__(self, message: str, table: Any = None, **kwargs):
        context = kwargs.get('context', {})
        if table is not None:
            context['missing_table'] = table

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check that the referenced table exists and is visible to the database user",
                "Exclude the referenced table with the include filter to map it as a plain column",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="DANGLING_REFERENCE"
        )


class AmbiguousColumnReferenceError(OrmInspectorError):
    """Raised when one column participates in more than one foreign key."""

    def __init__(self, message: str, table: Any = None, column: str = None, **kwargs):
        context = kwargs.get('context', {})
        if table is not None:
            context['table'] = table
        if column:
            context['column'] = column

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Drop the redundant foreign key constraint",
                "Exclude one of the referenced tables from mapping",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="AMBIGUOUS_COLUMN_REFERENCE"
        )


class MultipleAutoKeysError(OrmInspectorError):
    """Raised when a table has more than one autoincremented primary key column."""

    def __init__(self, message: str, table: Any = None, columns: Optional[List[Any]] = None, **kwargs):
        context = kwargs.get('context', {})
        if table is not None:
            context['table'] = table
        if columns:
            context['columns'] = columns

        super().__init__(
            message,
            context=context,
            suggestions=kwargs.get('suggestions', []),
            error_code="MULTIPLE_AUTO_KEYS"
        )


class EmptyUniqueCandidateSetError(OrmInspectorError):
    """Raised when a canonical unique is requested from an empty candidate set."""

    def __init__(self, message: str, table: Any = None, **kwargs):
        context = kwargs.get('context', {})
        if table is not None:
            context['table'] = table

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check that the referenced columns are covered by a primary key, unique constraint or unique index",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="EMPTY_UNIQUE_CANDIDATES"
        )


class NotFoundInCollectionError(OrmInspectorError):
    """Raised when an expected name is absent from a collection."""

    def __init__(self, message: str, kind: str = None, name: Any = None, **kwargs):
        context = kwargs.get('context', {})
        if kind:
            context['kind'] = kind
        if name is not None:
            context['name'] = name

        super().__init__(
            message,
            context=context,
            suggestions=kwargs.get('suggestions', []),
            error_code="NOT_FOUND"
        )


class CodeGenerationError(OrmInspectorError):
    """Raised when emitting declarations or mapping documents fails."""

    def __init__(self, message: str, component: str = None, table: Any = None, **kwargs):
        context = kwargs.get('context', {})
        if component:
            context['component'] = component  # e.g., 'declarations', 'mappings'
        if table is not None:
            context['table'] = table

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check for naming conflicts or reserved words",
                "Adjust the reverse naming style",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CODE_GENERATION_ERROR"
        )


def find_one(kind: str, key, value, items):
    """
    Return the single item whose ``key(item)`` equals ``value``.

    Raises:
        NotFoundInCollectionError: If no item matches, or several do.
    """
    found = [item for item in items if key(item) == value]
    if len(found) == 1:
        return found[0]
    if not found:
        raise NotFoundInCollectionError(
            f"{kind} {value!r} not found",
            kind=kind,
            name=value,
            context={'available': [key(item) for item in items]},
        )
    raise NotFoundInCollectionError(
        f"Found more than one {kind} named {value!r}",
        kind=kind,
        name=value,
    )
