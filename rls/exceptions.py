class RlsError(Exception):
    """Base exception for the release name parser."""


class TagInfoError(RlsError):
    """Raised when the vocabulary table cannot be turned into a registry."""

    def __init__(self, message: str, line: int = 0, tag: str = ""):
        super().__init__(f"Line {line}: {message}" if line else message)
        self.line = line
        self.tag = tag


class LexerConfigError(RlsError):
    """Raised when a lexer is declared with an unusable pattern set."""
