"""
This module implements the recursive conversion from protobuf descriptors to
JSON Schema nodes.

The conversion never mutates the descriptors it is given. Enums referenced by
a field are looked up in an explicit tuple of "visible" enum descriptors that
is threaded through the recursion: a message sees its own nested enums, and a
message that declares no enums of its own inherits the enums visible to the
message that referenced it.
"""

# Standard
from typing import Callable, Dict, List, Optional, Sequence, Union
import enum

# Third Party
from google.protobuf import descriptor_pb2

# First Party
import alog

# Local
from .config import Config
from .package_registry import PackageNode, PackageRegistry
from .schema_node import (
    FORMAT_DATE_TIME,
    TYPE_ARRAY,
    TYPE_BOOLEAN,
    TYPE_INTEGER,
    TYPE_NULL,
    TYPE_NUMBER,
    TYPE_OBJECT,
    TYPE_STRING,
    SchemaNode,
)
from .utils import field_json_name

log = alog.use_channel("P2JCVT")

_FieldProto = descriptor_pb2.FieldDescriptorProto

# The enums that a field may refer to by name
VisibleEnums = Sequence[descriptor_pb2.EnumDescriptorProto]


## Globals #####################################################################


class FieldKind(enum.Enum):
    """The closed set of field kinds that have a JSON Schema rendering"""

    NUMBER = "number"
    INTEGER = "integer"
    BIG_INTEGER = "big_integer"
    STRING = "string"
    BOOLEAN = "boolean"
    ENUM = "enum"
    MESSAGE = "message"


FIELD_KINDS = {
    _FieldProto.TYPE_DOUBLE: FieldKind.NUMBER,
    _FieldProto.TYPE_FLOAT: FieldKind.NUMBER,
    _FieldProto.TYPE_INT32: FieldKind.INTEGER,
    _FieldProto.TYPE_UINT32: FieldKind.INTEGER,
    _FieldProto.TYPE_FIXED32: FieldKind.INTEGER,
    _FieldProto.TYPE_SFIXED32: FieldKind.INTEGER,
    _FieldProto.TYPE_SINT32: FieldKind.INTEGER,
    # NOTE: 64 bit values may not fit in a JSON number (e.g. in javascript), so
    #   the protobuf JSON mapping allows them to be written as strings
    _FieldProto.TYPE_INT64: FieldKind.BIG_INTEGER,
    _FieldProto.TYPE_UINT64: FieldKind.BIG_INTEGER,
    _FieldProto.TYPE_FIXED64: FieldKind.BIG_INTEGER,
    _FieldProto.TYPE_SFIXED64: FieldKind.BIG_INTEGER,
    _FieldProto.TYPE_SINT64: FieldKind.BIG_INTEGER,
    _FieldProto.TYPE_STRING: FieldKind.STRING,
    _FieldProto.TYPE_BYTES: FieldKind.STRING,
    _FieldProto.TYPE_BOOL: FieldKind.BOOLEAN,
    _FieldProto.TYPE_ENUM: FieldKind.ENUM,
    _FieldProto.TYPE_MESSAGE: FieldKind.MESSAGE,
    _FieldProto.TYPE_GROUP: FieldKind.MESSAGE,
}

UNION_ITEM_KINDS = (FieldKind.ENUM, FieldKind.BIG_INTEGER)

SCALAR_JSON_TYPES = {
    FieldKind.NUMBER: TYPE_NUMBER,
    FieldKind.INTEGER: TYPE_INTEGER,
    FieldKind.STRING: TYPE_STRING,
    FieldKind.BOOLEAN: TYPE_BOOLEAN,
}

# Message types with a fixed JSON representation that replaces the generic
# object conversion
WELL_KNOWN_TYPES: Dict[str, Callable[[], SchemaNode]] = {
    ".google.protobuf.Timestamp": lambda: SchemaNode(
        type=TYPE_STRING, format=FORMAT_DATE_TIME
    ),
}


## Interface ###################################################################


class UnsupportedFieldTypeError(TypeError):
    """Raised for a field whose declared type has no JSON Schema mapping"""


class RecursiveMessageError(ValueError):
    """Raised when a message contains itself, which would recurse forever"""


class SchemaConverter:
    """Converts message, field and enum descriptors to SchemaNode trees using
    a fixed Config and the PackageRegistry of the current session
    """

    def __init__(self, config: Config, registry: PackageRegistry):
        self.config = config
        self.registry = registry
        # Messages currently being converted, outermost first
        self._active: List[descriptor_pb2.DescriptorProto] = []

    def convert_message_type(
        self,
        package: PackageNode,
        message: descriptor_pb2.DescriptorProto,
        visible_enums: Optional[VisibleEnums] = None,
    ) -> SchemaNode:
        """Convert a message into an object schema with one property per
        field, keyed by the field's JSON name

        Args:
            package:  PackageNode
                The package used to resolve the type names of the fields
            message:  descriptor_pb2.DescriptorProto
                The message to convert

        Kwargs:
            visible_enums:  Optional[VisibleEnums]
                The enums that enum fields may refer to. Defaults to the enums
                nested in the message.

        Returns:
            schema:  SchemaNode
                The object schema for the message
        """
        if visible_enums is None:
            visible_enums = tuple(message.enum_type)
        if message in self._active:
            chain = " -> ".join(active.name for active in self._active + [message])
            raise RecursiveMessageError(f"recursive message type: {chain}")

        log.debug("Converting message: %s", message.name)
        log.debug4("Message descriptor:\n%s", message)
        self._active.append(message)
        try:
            if self.config.nullable:
                schema = SchemaNode.union(TYPE_NULL, TYPE_OBJECT)
            else:
                schema = SchemaNode(type=TYPE_OBJECT)
            schema.additional_properties = (
                not self.config.disallow_additional_properties
            )

            for field in message.field:
                try:
                    field_schema = self.convert_field(
                        package, field, message, visible_enums
                    )
                except (TypeError, ValueError) as err:
                    log.error(
                        "Failed to convert field %s in %s: %s",
                        field.name,
                        message.name,
                        err,
                    )
                    raise
                schema.properties[field_json_name(field)] = field_schema
            return schema
        finally:
            self._active.pop()

    def convert_field(
        self,
        package: PackageNode,
        field: descriptor_pb2.FieldDescriptorProto,
        message: descriptor_pb2.DescriptorProto,
        visible_enums: Optional[VisibleEnums] = None,
    ) -> SchemaNode:
        """Convert a single field of the given enclosing message

        Args:
            package:  PackageNode
                The package used to resolve the field's type name
            field:  descriptor_pb2.FieldDescriptorProto
                The field to convert
            message:  descriptor_pb2.DescriptorProto
                The message that declares the field

        Kwargs:
            visible_enums:  Optional[VisibleEnums]
                The enums the field may refer to. Defaults to the enums nested
                in the enclosing message.

        Returns:
            schema:  SchemaNode
                The schema for the field's value
        """
        if visible_enums is None:
            visible_enums = tuple(message.enum_type)
        kind = FIELD_KINDS.get(field.type)
        if kind is None:
            raise UnsupportedFieldTypeError(
                f"unrecognized field type: {_type_label(field.type)}"
            )
        log.debug3("Converting field %s of kind %s", field.name, kind.name)

        if kind is FieldKind.MESSAGE:
            return self._convert_message_field(package, field, visible_enums)

        repeated = field.label == _FieldProto.LABEL_REPEATED
        # Items of repeated enums and big integers keep their whole union,
        # null included. Plain scalar items are never nullable.
        element = self._convert_element(
            kind,
            field,
            visible_enums,
            nullable=self.config.nullable
            and (not repeated or kind in UNION_ITEM_KINDS),
        )
        if repeated:
            return self._make_array(element)
        return element

    def convert_enum_type(self, enum_proto: descriptor_pb2.EnumDescriptorProto) -> SchemaNode:
        """Convert a standalone enum into a schema listing its values"""
        schema = self._make_enum_node(include_null=False)
        schema.enum = _enum_values(
            enum_proto,
            include_numbers=self.config.allow_enum_one_of and self.config.allow_one_of,
        )
        return schema

    ## Implementation Details ##################################################

    def _convert_element(
        self,
        kind: FieldKind,
        field: descriptor_pb2.FieldDescriptorProto,
        visible_enums: VisibleEnums,
        nullable: bool,
    ) -> SchemaNode:
        """Convert the (single) value of a non-message field"""
        if kind is FieldKind.ENUM:
            return self._convert_enum_field(field, visible_enums, nullable)

        if kind is FieldKind.BIG_INTEGER:
            if not self.config.allow_one_of:
                return SchemaNode(type=TYPE_INTEGER)
            member_types = [TYPE_INTEGER]
            if not self.config.disallow_bigints_as_strings:
                member_types.append(TYPE_STRING)
            if nullable:
                member_types.append(TYPE_NULL)
            return SchemaNode.union(*member_types)

        json_type = SCALAR_JSON_TYPES[kind]
        if nullable:
            return SchemaNode.union(TYPE_NULL, json_type)
        return SchemaNode(type=json_type)

    def _convert_enum_field(
        self,
        field: descriptor_pb2.FieldDescriptorProto,
        visible_enums: VisibleEnums,
        nullable: bool,
    ) -> SchemaNode:
        """Convert an enum-typed field. The enum is found by matching the end
        of the field's type name against the names of the visible enums; the
        first match wins.
        """
        schema = self._make_enum_node(include_null=nullable)
        matched = next(
            (
                enum_proto
                for enum_proto in visible_enums
                if field.type_name.endswith(enum_proto.name)
            ),
            None,
        )
        if matched is None:
            log.warning(
                "could not find matching enum for field %s with type %s",
                field.name,
                field.type_name,
            )
            return schema
        log.debug3("Matched field %s to enum %s", field.name, matched.name)
        schema.enum = _enum_values(
            matched, include_numbers=self.config.allow_enum_one_of
        )
        return schema

    def _make_enum_node(self, include_null: bool) -> SchemaNode:
        if self.config.allow_enum_one_of and self.config.allow_one_of:
            member_types = [TYPE_STRING, TYPE_INTEGER]
            if include_null:
                member_types.append(TYPE_NULL)
            return SchemaNode.union(*member_types)
        return SchemaNode(type=TYPE_STRING)

    def _convert_message_field(
        self,
        package: PackageNode,
        field: descriptor_pb2.FieldDescriptorProto,
        visible_enums: VisibleEnums,
    ) -> SchemaNode:
        """Convert a message or group field, recursing into the referenced
        message unless it is a well-known type
        """
        repeated = field.label == _FieldProto.LABEL_REPEATED
        well_known = WELL_KNOWN_TYPES.get(field.type_name)
        if well_known is not None:
            log.debug3("Using well-known type for %s", field.type_name)
            return self._make_array(well_known()) if repeated else well_known()

        target = self.registry.lookup_type(package, field.type_name)
        # A referenced message that declares no enums of its own can still
        # use the ones visible to the referencing message
        target_enums = tuple(target.enum_type) or tuple(visible_enums)
        converted = self.convert_message_type(package, target, target_enums)

        schema = SchemaNode(additional_properties=self._field_additional_properties(field))
        if repeated:
            schema.type = TYPE_ARRAY
            schema.items = converted
        else:
            schema.type = TYPE_OBJECT
            schema.properties = converted.properties

        if self.config.nullable:
            schema.one_of = [SchemaNode(type=TYPE_NULL), SchemaNode(type=schema.type)]
            schema.type = None
        return schema

    def _field_additional_properties(
        self, field: descriptor_pb2.FieldDescriptorProto
    ) -> Optional[bool]:
        if self.config.disallow_additional_properties:
            return False
        if field.label == _FieldProto.LABEL_OPTIONAL:
            return True
        if field.label == _FieldProto.LABEL_REQUIRED:
            return False
        return None

    def _make_array(self, element: SchemaNode) -> SchemaNode:
        """Wrap the schema of a single value as the array for a repeated field"""
        if self.config.nullable:
            schema = SchemaNode.union(TYPE_NULL, TYPE_ARRAY)
        else:
            schema = SchemaNode(type=TYPE_ARRAY)
        schema.items = element
        return schema


## Impl ########################################################################


def _enum_values(
    enum_proto: descriptor_pb2.EnumDescriptorProto, include_numbers: bool
) -> List[Union[str, int]]:
    """List the allowed literals of an enum in declaration order, as
    (name, number) pairs when numbers are included
    """
    values = []
    for value in enum_proto.value:
        values.append(value.name)
        if include_numbers:
            values.append(value.number)
    return values


def _type_label(field_type: int) -> str:
    try:
        return _FieldProto.Type.Name(field_type)
    except ValueError:
        return str(field_type)
