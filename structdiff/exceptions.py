"""Exceptions raised by structdiff."""


class StructDiffError(Exception):
    """Base class for structdiff errors."""


class OptionsError(StructDiffError, ValueError):
    """Invalid comparison options."""


class HandlerError(StructDiffError):
    """A custom comparator or type handler failed.

    The whole comparison is aborted; no partial result is produced.
    The original exception is chained as ``__cause__``.
    """

    def __init__(self, path: str, source: object, error: BaseException):
        self.path = path
        self.source = source
        location = path or "(root)"
        super().__init__(
            f"{_describe(source)} failed at {location}: "
            f"{error.__class__.__name__}: {error}"
        )


def _describe(source: object) -> str:
    name = getattr(source, "__qualname__", None)
    if name is None:
        name = type(source).__qualname__
    return name
