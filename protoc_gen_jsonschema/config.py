"""
This module holds the set of output-shape options that control how descriptors
are rendered as JSON Schema. The options are resolved once per invocation and
never change while a request is being converted.
"""

# Standard
from typing import Optional
import dataclasses

# First Party
import alog

log = alog.use_channel("P2JCFG")


## Interface ###################################################################


class ConfigurationError(ValueError):
    """Raised when the requested options cannot be honored together"""


@dataclasses.dataclass(frozen=True)
class Config:
    """The immutable set of conversion options

    Attributes:
        allow_null_values:  bool
            Wrap non-null types in a oneOf that also admits null
        disallow_enum_one_of:  bool
            Render enums as strings only, never as their numbers
        disallow_one_of:  bool
            Never emit oneOf. Cannot be combined with allow_null_values.
        disallow_additional_properties:  bool
            Objects reject properties that are not in the schema
        disallow_bigints_as_strings:  bool
            64-bit integers may not be given as strings
    """

    allow_null_values: bool = False
    disallow_enum_one_of: bool = False
    disallow_one_of: bool = False
    disallow_additional_properties: bool = False
    disallow_bigints_as_strings: bool = False

    def __post_init__(self):
        if self.allow_null_values and self.disallow_one_of:
            raise ConfigurationError(
                "flags 'allow_null_values' and 'disallow_one_of' cannot both be on"
            )

    @property
    def allow_one_of(self) -> bool:
        return not self.disallow_one_of

    @property
    def allow_enum_one_of(self) -> bool:
        return not self.disallow_enum_one_of

    @property
    def nullable(self) -> bool:
        """Whether non-null types get wrapped in a oneOf with null"""
        return self.allow_null_values and self.allow_one_of

    @classmethod
    def from_parameter(cls, parameter: Optional[str], **defaults: bool) -> "Config":
        """Build a Config from a comma-separated protoc parameter string.

        Any option named in the string is switched on. Options that are not
        named keep the value given in defaults. Unknown tokens are ignored.

        Args:
            parameter:  Optional[str]
                The raw parameter string from the CodeGeneratorRequest

        Kwargs:
            **defaults:  bool
                Starting values for the options (e.g. from command line flags)

        Returns:
            config:  Config
                The resolved configuration
        """
        values = {name: bool(defaults.get(name, False)) for name in OPTION_NAMES}
        for token in (parameter or "").split(","):
            token = token.strip()
            if token in values:
                log.debug2("Enabling option %s", token)
                values[token] = True
            elif token:
                log.debug3("Ignoring unknown parameter %s", token)
        return cls(**values)


# Names of the boolean options, as they appear both as plugin flags and as
# tokens in the comma-separated protoc parameter string
OPTION_NAMES = [field.name for field in dataclasses.fields(Config)]
