"""reviewguard: input validation, sanitization and abuse rate-limiting for review forms."""

__version__ = "0.3.0"
