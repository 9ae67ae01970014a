"""
In-memory representation of a (draft-04) JSON Schema document and its
serialization to text
"""

# Standard
from typing import Any, Dict, List, Optional, Union
import dataclasses
import json

# First Party
import alog

log = alog.use_channel("P2JNOD")


## Globals #####################################################################

SCHEMA_VERSION = "http://json-schema.org/draft-04/schema#"

TYPE_ARRAY = "array"
TYPE_BOOLEAN = "boolean"
TYPE_INTEGER = "integer"
TYPE_NULL = "null"
TYPE_NUMBER = "number"
TYPE_OBJECT = "object"
TYPE_STRING = "string"

FORMAT_DATE_TIME = "date-time"

JSON_INDENT = 4


## Interface ###################################################################


class SchemaSerializationError(ValueError):
    """Raised when a schema can not be rendered as JSON"""


@dataclasses.dataclass
class SchemaNode:
    """A single node in a JSON Schema tree. Unset members are left out of the
    serialized document.
    """

    type: Optional[str] = None
    properties: Dict[str, "SchemaNode"] = dataclasses.field(default_factory=dict)
    items: Optional["SchemaNode"] = None
    one_of: List["SchemaNode"] = dataclasses.field(default_factory=list)
    enum: List[Union[str, int]] = dataclasses.field(default_factory=list)
    additional_properties: Optional[bool] = None
    format: Optional[str] = None
    version: Optional[str] = None

    @classmethod
    def union(cls, *types: str) -> "SchemaNode":
        """Make a node that is a oneOf over the given plain types"""
        return cls(one_of=[cls(type=type_name) for type_name in types])

    def to_dict(self) -> Dict[str, Any]:
        """Render this node (and its children) with JSON Schema keywords"""
        rendered = {}
        if self.version:
            rendered["$schema"] = self.version
        if self.items is not None:
            rendered["items"] = self.items.to_dict()
        if self.properties:
            rendered["properties"] = {
                name: prop.to_dict() for name, prop in self.properties.items()
            }
        if self.additional_properties is not None:
            rendered["additionalProperties"] = self.additional_properties
        if self.enum:
            rendered["enum"] = list(self.enum)
        if self.type:
            rendered["type"] = self.type
        if self.one_of:
            rendered["oneOf"] = [member.to_dict() for member in self.one_of]
        if self.format:
            rendered["format"] = self.format
        return rendered

    def to_json(self) -> str:
        """Serialize as a 4-space indented JSON document with sorted keys"""
        try:
            return json.dumps(
                self.to_dict(),
                indent=JSON_INDENT,
                sort_keys=True,
                ensure_ascii=False,
            )
        except (TypeError, ValueError) as err:
            log.error("Failed to encode JSON schema: %s", err)
            raise SchemaSerializationError(
                f"Failed to encode JSON schema: {err}"
            ) from err
