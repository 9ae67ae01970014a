"""
This library converts protobuf descriptors into JSON Schema (draft-04)
documents. It is normally run as a protoc plugin, but the conversion can also be
driven directly from python.

References:
* https://developers.google.com/protocol-buffers/docs/reference/other
* https://json-schema.org/draft-04/json-schema-core.html

Example:

```
from google.protobuf.compiler import plugin_pb2
import protoc_gen_jsonschema

request = plugin_pb2.CodeGeneratorRequest()
with open("request.bin", "rb") as handle:
    request.ParseFromString(handle.read())

for schema_file in protoc_gen_jsonschema.generate(
    request.file_to_generate,
    request.proto_file,
    protoc_gen_jsonschema.Config(allow_null_values=True),
):
    with open(schema_file.name, "w") as handle:
        handle.write(schema_file.content)
```
"""

# Local
from .config import Config, ConfigurationError
from .file_converter import convert_file
from .package_registry import PackageNode, PackageRegistry, UnresolvedTypeError
from .schema_node import SchemaNode, SchemaSerializationError
from .session import GenerationError, convert_request, generate
from .type_converter import (
    RecursiveMessageError,
    SchemaConverter,
    UnsupportedFieldTypeError,
)
