"""Exception types raised by the pelada services."""


class PeladaError(Exception):
    """Base class for errors raised by the services."""
    pass


class ValidationError(PeladaError):
    """Input rejected; the message is the reason shown to the user."""
    pass


class PlayerValidationError(ValidationError):
    """Custom exception for player validation errors."""
    pass


class SettingsValidationError(ValidationError):
    pass


class ImportValidationError(ValidationError):
    """Imported payload does not have the expected structure."""
    pass


class ExternalServiceError(PeladaError):
    """The AI balancing service failed or returned an unusable answer."""
    pass
