"""Custom exception hierarchy for titan."""


class TitanError(Exception):
    """Base for all titan errors."""


class WorkerNotFoundError(TitanError, LookupError):
    """No worker with the given ID is registered."""


class RegistryCorruptError(TitanError):
    """The registry file exists but cannot be read back."""
