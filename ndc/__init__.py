"""NDC 21.3 message builders and response parsers for airline distribution."""

__version__ = "0.1.0"
