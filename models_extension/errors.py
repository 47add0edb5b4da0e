"""Domain-level exceptions for the models extension."""


class BadRequestError(ValueError):
    """Raised for client-side invalid requests at the domain layer."""


class ExtensionError(Exception):
    """Base class for failures inside the request pipeline."""


class AuthenticationError(ExtensionError):
    """Raised when the request signature or user token cannot be verified."""


class MalformedArgumentsError(ExtensionError):
    """Raised when tool-call arguments do not parse into the expected shape."""


class UnknownCapabilityError(ExtensionError):
    """Raised when the backend names a capability that is not registered."""


class ExecutionError(ExtensionError):
    """Raised when a capability or one of its dependencies fails."""


class NotFoundError(ExecutionError):
    """Raised when a capability references a model missing from the catalog."""


class StreamError(ExtensionError):
    """Raised when the completion stream cannot be opened or breaks."""


class ChannelClosedError(RuntimeError):
    """Raised when writing to a response channel that has been closed."""
