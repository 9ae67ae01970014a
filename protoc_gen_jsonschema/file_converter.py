"""
Per-file orchestration: turns one FileDescriptorProto into the set of named
JSON Schema documents that protoc should write out for it
"""

# Standard
from typing import List
import posixpath

# Third Party
from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

# First Party
import alog

# Local
from .schema_node import SCHEMA_VERSION, SchemaNode
from .type_converter import SchemaConverter, VisibleEnums

log = alog.use_channel("P2JFIL")


## Globals #####################################################################

SCHEMA_FILE_EXTENSION = "jsonschema"


## Interface ###################################################################


def convert_file(
    converter: SchemaConverter,
    proto_file: descriptor_pb2.FileDescriptorProto,
    visible_enums: VisibleEnums = (),
) -> List[plugin_pb2.CodeGeneratorResponse.File]:
    """Convert a single proto file into JSON Schema documents.

    The given visible enums stand in for the file's own top-level enums. A file
    with no top-level messages yields one document per visible enum. Otherwise
    every top-level message gets its own document and the visible enums are
    only used to resolve enum fields.

    Args:
        converter:  SchemaConverter
            The converter for the current session
        proto_file:  descriptor_pb2.FileDescriptorProto
            The file to convert

    Kwargs:
        visible_enums:  VisibleEnums
            The enums to treat as declared at the top of this file. Within a
            session these are all the top-level enums of the request. Defaults
            to the file's own top-level enums when empty.

    Returns:
        schema_files:  List[plugin_pb2.CodeGeneratorResponse.File]
            One named document per converted enum or message, in declaration
            order
    """
    proto_file_name = posixpath.basename(proto_file.name)
    file_enums = tuple(visible_enums) or tuple(proto_file.enum_type)

    if len(proto_file.message_type) > 1:
        log.info(
            "Creating multiple MESSAGE schemas (%d) from one proto file (%s)",
            len(proto_file.message_type),
            proto_file_name,
        )
    if len(file_enums) > 1:
        log.info(
            "Creating multiple ENUM schemas (%d) from one proto file (%s)",
            len(file_enums),
            proto_file_name,
        )

    schema_files = []

    # Stand-alone enums
    if not proto_file.message_type:
        for enum_proto in file_enums:
            schema_file_name = _schema_file_name(enum_proto.name)
            log.info(
                "Generating JSON schema for stand-alone ENUM (%s) in file [%s] => %s",
                enum_proto.name,
                proto_file_name,
                schema_file_name,
            )
            schema = converter.convert_enum_type(enum_proto)
            schema_files.append(_make_schema_file(schema_file_name, schema))
        return schema_files

    # Messages
    package = converter.registry.lookup_package(proto_file.package)
    for message in proto_file.message_type:
        schema_file_name = _schema_file_name(message.name)
        log.info(
            "Generating JSON schema for MESSAGE (%s) in file [%s] => %s",
            message.name,
            proto_file_name,
            schema_file_name,
        )
        # Enums declared next to the message (rather than inside it) are
        # visible after the message's own
        message_enums = tuple(message.enum_type) + file_enums
        schema = converter.convert_message_type(package, message, message_enums)
        schema_files.append(_make_schema_file(schema_file_name, schema))
    return schema_files


## Impl ########################################################################


def _schema_file_name(type_name: str) -> str:
    return f"{type_name}.{SCHEMA_FILE_EXTENSION}"


def _make_schema_file(
    name: str, schema: SchemaNode
) -> plugin_pb2.CodeGeneratorResponse.File:
    """Mark the schema as a document root and serialize it"""
    schema.version = SCHEMA_VERSION
    return plugin_pb2.CodeGeneratorResponse.File(name=name, content=schema.to_json())
