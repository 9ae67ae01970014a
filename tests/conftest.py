"""
Shared fixtures and logging setup for the tests
"""

# Standard
import os

# Third Party
from google.protobuf import descriptor_pb2, timestamp_pb2
import pytest

# First Party
import alog

# Local
from protoc_gen_jsonschema.config import Config
from protoc_gen_jsonschema.package_registry import PackageRegistry
from protoc_gen_jsonschema.type_converter import SchemaConverter

# Global logging config
alog.configure(
    default_level=os.environ.get("LOG_LEVEL", "info"),
    filters=os.environ.get("LOG_FILTERS", ""),
    formatter="json" if os.environ.get("LOG_JSON", "").lower() == "true" else "pretty",
    thread_id=os.environ.get("LOG_THREAD_ID", "").lower() == "true",
)


@pytest.fixture
def timestamp_file():
    """The descriptor for google/protobuf/timestamp.proto, as protoc would
    include it in a request that imports it
    """
    fd_proto = descriptor_pb2.FileDescriptorProto()
    timestamp_pb2.DESCRIPTOR.CopyToProto(fd_proto)
    yield fd_proto


@pytest.fixture
def make_converter():
    """Factory fixture for a converter over the given files and options"""

    def _make_converter(*proto_files, **options):
        return SchemaConverter(Config(**options), PackageRegistry(proto_files))

    yield _make_converter
