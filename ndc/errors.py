"""Exceptions raised by message builders and response parsers.

Business errors reported by the airline inside a well-formed response are
not exceptions; parsers return them as data on the result.
"""


class NDCError(Exception):
    """Base error for the NDC correlation layer."""

    def __init__(self, message: str, error_type: str = "UNKNOWN") -> None:
        super().__init__(message)
        self.error_type = error_type


class BuildError(NDCError):
    """A request could not be assembled from the caller's data."""

    def __init__(self, message: str, error_type: str = "INVALID_REQUEST") -> None:
        super().__init__(message, error_type=error_type)


class DistributionChainError(BuildError):
    """The configured distribution chain is missing or malformed."""

    def __init__(self, message: str = "Distribution chain is not configured") -> None:
        super().__init__(message, error_type="DISTRIBUTION_CHAIN")


class UnresolvedReferenceError(BuildError):
    """A passenger, segment, or journey reference does not resolve."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_type="UNRESOLVED_REFERENCE")


class ParseError(NDCError):
    """A response document is not XML or is the wrong message."""

    def __init__(self, message: str, error_type: str = "MALFORMED_XML") -> None:
        super().__init__(message, error_type=error_type)
