"""
The session driver converts a whole protoc request. Every file in the request
is loaded into the package registry (so that imported types resolve), but only
the files protoc asked for are turned into documents.
"""

# Standard
from typing import Iterable, List, Sequence

# Third Party
from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

# First Party
import alog

# Local
from .config import Config
from .file_converter import convert_file
from .package_registry import PackageRegistry
from .type_converter import SchemaConverter

log = alog.use_channel("P2JSES")


## Interface ###################################################################


class GenerationError(ValueError):
    """Raised when any requested file fails to convert. No documents are
    produced for the session in that case.
    """

    def __init__(self, file_name: str, message: str):
        super().__init__(message)
        self.file_name = file_name


def generate(
    files_to_generate: Sequence[str],
    proto_files: Iterable[descriptor_pb2.FileDescriptorProto],
    config: Config,
) -> List[plugin_pb2.CodeGeneratorResponse.File]:
    """Convert the requested files into JSON Schema documents

    Args:
        files_to_generate:  Sequence[str]
            Names of the files to produce documents for, in output order
        proto_files:  Iterable[descriptor_pb2.FileDescriptorProto]
            Every file needed to resolve types, including the ones that are
            only imported
        config:  Config
            The conversion options

    Returns:
        schema_files:  List[plugin_pb2.CodeGeneratorResponse.File]
            All documents, grouped by file in the requested order
    """
    proto_files = list(proto_files)
    registry = PackageRegistry(proto_files)
    converter = SchemaConverter(config, registry)

    # Every top-level enum of every file stands in for the top-level enums of
    # each converted file, in forest order
    all_enums = tuple(
        enum_proto for proto_file in proto_files for enum_proto in proto_file.enum_type
    )
    log.debug2("Collected %d top-level enums", len(all_enums))

    files_by_name = {proto_file.name: proto_file for proto_file in proto_files}
    schema_files = []
    for file_name in files_to_generate:
        proto_file = files_by_name.get(file_name)
        if proto_file is None:
            raise GenerationError(
                file_name, f"Failed to convert {file_name}: file not found in request"
            )
        log.debug("Converting file (%s)", file_name)
        try:
            schema_files.extend(convert_file(converter, proto_file, all_enums))
        except (TypeError, ValueError) as err:
            log.error("Failed to convert %s: %s", file_name, err)
            raise GenerationError(
                file_name, f"Failed to convert {file_name}: {err}"
            ) from err
    return schema_files


def convert_request(
    request: plugin_pb2.CodeGeneratorRequest, config: Config
) -> plugin_pb2.CodeGeneratorResponse:
    """Convert a protoc request into a response carrying either every document
    or a single error
    """
    response = plugin_pb2.CodeGeneratorResponse(
        supported_features=plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL,
    )
    try:
        response.file.extend(
            generate(request.file_to_generate, request.proto_file, config)
        )
    except GenerationError as err:
        response.error = str(err)
    return response
