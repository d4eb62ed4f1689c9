"""Custom exceptions for api-change-detector."""

import click


class ApiDiffError(Exception):
    """Base exception for all api-change-detector errors."""


class DocumentShapeError(ApiDiffError):
    """A document parsed fine but does not look like an API description."""

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class SpecNotFoundError(ApiDiffError):
    """The main API description could not be found in a spec directory."""


class UsageError(click.UsageError):
    """Invalid command line invocation."""

    exit_code = 1
