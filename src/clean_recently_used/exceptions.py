"""clean-recently-used custom exceptions."""


class CleanRecentlyUsedError(Exception):
    """Base exception for all clean-recently-used errors."""


class ManifestError(CleanRecentlyUsedError):
    """Errors while locating or replacing the manifest file."""


class FilterError(CleanRecentlyUsedError):
    """Errors while filtering the manifest stream."""


class MissingOrAmbiguousHrefError(FilterError):
    """A bookmark does not carry exactly one href attribute."""


class UnrecognizedSchemeError(FilterError):
    """A bookmark href uses a scheme outside the known allow-list."""

    def __init__(self, href: str) -> None:
        """Initialize with the offending (decoded) href."""
        super().__init__(f"Unrecognized href scheme: {href}")
        self.href = href


class MalformedXmlError(FilterError):
    """The lexer could not tokenize the input."""

    def __init__(self, message: str, line: int, column: int, offset: int) -> None:
        """Initialize with the lexer message and the failure position."""
        super().__init__(f"{message} (line {line}, column {column}, byte {offset})")
        self.line = line
        self.column = column
        self.offset = offset


class StructuralAssumptionViolatedError(FilterError):
    """Text following a removed bookmark was not pure whitespace."""
