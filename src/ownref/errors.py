class OwnrefError(Exception):
    """Base exception for ownref."""
    pass


class NullDereference(OwnrefError, ReferenceError):
    """Raised when an invalid or null observer is dereferenced."""
    pass


class OutOfRange(OwnrefError, IndexError):
    """Raised when an alias index falls outside its container's bound."""
    pass


class ThreadAffinityViolation(OwnrefError, RuntimeError):
    """Raised in strict mode when a block is checked from a foreign thread."""
    pass


class TemporaryOwnerError(OwnrefError, TypeError):
    """Raised when an observer is built from an owner about to be destroyed."""
    pass


class IncompatibleTypeError(OwnrefError, TypeError):
    """Raised when an observer's target does not satisfy its kind bound."""
    pass


class BlockLifecycleError(OwnrefError, RuntimeError):
    """Raised when a control block would be freed a second time."""
    pass
