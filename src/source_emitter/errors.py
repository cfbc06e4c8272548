"""Exception hierarchy for source emission.

Every error is raised eagerly while the declaration model or the build
configuration is assembled, never while text is being written: once a
SourceFile has been built, every reference in it has a defined rendering.
"""


class SourceEmitterError(Exception):
    """Base class for all errors raised by source_emitter."""


class InvalidNameError(SourceEmitterError, ValueError):
    """A package, simple name or member is not a valid identifier."""


class FormatError(SourceEmitterError, ValueError):
    """A code fragment format string does not match its arguments."""


class SpecError(SourceEmitterError, ValueError):
    """A declaration violates a structural rule of the builder API."""


class DuplicateTypeError(SpecError):
    """Two nested types of the same enclosing type share a simple name."""


class StaticImportConflictError(SourceEmitterError, ValueError):
    """Two explicit static imports bind the same member name to different owners."""


class ModelLoadError(SourceEmitterError):
    """A JSON declaration model could not be read or interpreted."""
