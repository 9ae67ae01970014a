"""
Common test helpers for building descriptors by hand
"""

# Standard
from typing import Any, Dict, Iterable, List, Optional
import json

# Third Party
from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

# Local
from protoc_gen_jsonschema.schema_node import SchemaNode

FieldProto = descriptor_pb2.FieldDescriptorProto

OPTIONAL = FieldProto.LABEL_OPTIONAL
REQUIRED = FieldProto.LABEL_REQUIRED
REPEATED = FieldProto.LABEL_REPEATED


def make_field(
    name: str,
    field_type: int,
    *,
    label: int = OPTIONAL,
    type_name: Optional[str] = None,
    json_name: Optional[str] = None,
    number: int = 1,
) -> descriptor_pb2.FieldDescriptorProto:
    kwargs = {}
    if type_name is not None:
        kwargs["type_name"] = type_name
    if json_name is not None:
        kwargs["json_name"] = json_name
    return FieldProto(name=name, number=number, type=field_type, label=label, **kwargs)


def make_enum(name: str, *value_names: str) -> descriptor_pb2.EnumDescriptorProto:
    """Make an enum whose values are numbered in declaration order from 0"""
    return descriptor_pb2.EnumDescriptorProto(
        name=name,
        value=[
            descriptor_pb2.EnumValueDescriptorProto(name=value_name, number=number)
            for number, value_name in enumerate(value_names)
        ],
    )


def make_message(
    name: str,
    fields: Iterable[descriptor_pb2.FieldDescriptorProto] = (),
    *,
    nested: Iterable[descriptor_pb2.DescriptorProto] = (),
    enums: Iterable[descriptor_pb2.EnumDescriptorProto] = (),
) -> descriptor_pb2.DescriptorProto:
    """Make a message, renumbering the fields sequentially"""
    fields = list(fields)
    for number, field in enumerate(fields, start=1):
        field.number = number
    return descriptor_pb2.DescriptorProto(
        name=name,
        field=fields,
        nested_type=list(nested),
        enum_type=list(enums),
    )


def make_file(
    name: str,
    package: str = "",
    *,
    messages: Iterable[descriptor_pb2.DescriptorProto] = (),
    enums: Iterable[descriptor_pb2.EnumDescriptorProto] = (),
    dependencies: Iterable[str] = (),
    syntax: str = "proto3",
) -> descriptor_pb2.FileDescriptorProto:
    kwargs = {"package": package} if package else {}
    return descriptor_pb2.FileDescriptorProto(
        name=name,
        message_type=list(messages),
        enum_type=list(enums),
        dependency=list(dependencies),
        syntax=syntax,
        **kwargs,
    )


def load_schema(schema_file: plugin_pb2.CodeGeneratorResponse.File) -> Dict[str, Any]:
    return json.loads(schema_file.content)


def one_of_types(schema: SchemaNode) -> List[Optional[str]]:
    """List the plain types of the members of a oneOf node"""
    return [member.type for member in schema.one_of]
