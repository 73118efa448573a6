class ConformError(Exception):
    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path

class ConfigError(ConformError):
    pass

class UnknownTypeError(ConformError):
    pass

class UnknownPredicateError(ConformError):
    pass

class UnknownKindError(ConformError):
    pass

class CyclicSupertypeError(ConformError):
    pass

class PredicateContractError(ConformError):
    """A predicate returned something other than True, False, OK or Err."""

class DepthLimitError(ConformError):
    pass

class ValueCycleError(ConformError):
    """A container was reached again while it was still being validated."""
