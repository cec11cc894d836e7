"""Exception hierarchy for openapi-synth.

Configuration errors abort a generation run. Metadata errors are raised and
recovered per route. Formatting errors belong to the output boundary.
"""


class SwaggerError(Exception):
    """Base class for every error raised by openapi-synth."""


class ConfigurationError(SwaggerError):
    """Invalid configuration. Fatal for the whole generation run."""

    def __init__(self, message: str, allowed: list[str] | None = None):
        self.allowed = list(allowed or [])
        if self.allowed:
            message = f"{message}, please select from the following: {', '.join(self.allowed)}"
        super().__init__(message)


class InvalidDefinitionError(ConfigurationError):
    """Unknown security definition name."""


class InvalidAuthenticationFlowError(ConfigurationError):
    """Authentication flow not permitted for the security definition."""


class MetadataResolutionError(SwaggerError):
    """Handler metadata could not be resolved or interpreted."""


class DocBlockParseError(MetadataResolutionError):
    """Malformed documentation comment."""


class FormattingError(SwaggerError):
    """Document could not be serialized."""


class InvalidFormatError(FormattingError):
    """Unsupported output format."""
