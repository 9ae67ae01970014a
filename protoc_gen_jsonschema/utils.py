"""
Common utilities that are shared across converters
"""

# Third Party
from google.protobuf import descriptor_pb2

# First Party
import alog

log = alog.use_channel("P2JUTL")


def to_json_name(snake_str: str) -> str:
    """Convert a proto field name to the lowerCamelCase name that protoc
    assigns to json_name. Each underscore is dropped and the character that
    follows it is upper-cased.
    """
    parts = []
    capitalize_next = False
    for char in snake_str:
        if char == "_":
            capitalize_next = True
        elif capitalize_next:
            parts.append(char.upper())
            capitalize_next = False
        else:
            parts.append(char)
    return "".join(parts)


def field_json_name(field: descriptor_pb2.FieldDescriptorProto) -> str:
    """Get the JSON-projected name for a field. protoc always fills this in
    for plugins, but hand-built descriptors may leave it unset.
    """
    if field.HasField("json_name"):
        return field.json_name
    json_name = to_json_name(field.name)
    log.debug3("Derived json_name %s for field %s", json_name, field.name)
    return json_name
