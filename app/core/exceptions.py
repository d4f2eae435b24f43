class SourceNotFoundError(FileNotFoundError):
    """A required reconciliation input (schema snapshot or declaration workbook) is missing."""


class DeclarationSourceError(ValueError):
    """The declaration workbook exists but cannot be interpreted."""


class SchemaSnapshotError(ValueError):
    """The schema snapshot file exists but is not a snapshot written by the schema scan."""
