"""
protoc-gen-jsonschema: the protoc plugin entry point.

This reads a CodeGeneratorRequest from stdin and writes a CodeGeneratorResponse
to stdout, following the protoc plugin protocol.

Usage:
    protoc --jsonschema_out=path/to/outdir foo.proto
    protoc --jsonschema_out=allow_null_values,debug:path/to/outdir foo.proto
"""

# Standard
from typing import BinaryIO, List, Optional
import argparse
import sys

# Third Party
from google.protobuf.compiler import plugin_pb2

# First Party
import alog

# Local
from .config import OPTION_NAMES, Config, ConfigurationError
from .session import convert_request

log = alog.use_channel("P2JPLG")


## Globals #####################################################################

DEBUG_OPTION = "debug"

OPTION_HELP = {
    "allow_null_values": "Allow NULL values to be validated",
    "disallow_enum_one_of": "Disallows enums to have number value as well as name value",
    "disallow_one_of": "Disallows oneOf types",
    "disallow_additional_properties": "Disallow additional properties",
    "disallow_bigints_as_strings": "Disallow bigints to be strings (eg scientific notation)",
}


## Interface ###################################################################


def main(
    argv: Optional[List[str]] = None,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
) -> int:
    """Run the plugin

    Kwargs:
        argv:  Optional[List[str]]
            Command line arguments (defaults to sys.argv[1:])
        stdin:  Optional[BinaryIO]
            Stream holding the serialized request (defaults to sys.stdin)
        stdout:  Optional[BinaryIO]
            Stream for the serialized response (defaults to sys.stdout)

    Returns:
        exit_code:  int
            0 on success, 1 when the response carries an error
    """
    args = _make_parser().parse_args(argv)
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout.buffer

    request = plugin_pb2.CodeGeneratorRequest()
    request.ParseFromString(stdin.read())

    debug = args.debug or DEBUG_OPTION in _parameter_tokens(request.parameter)
    alog.configure(default_level="debug4" if debug else "warning")
    log.debug("Processing code generator request")

    response = _process(request, args)

    log.debug("Serializing code generator response")
    stdout.write(response.SerializeToString())
    if response.error:
        log.warning(
            "Failed to process code generator but successfully sent the error to protoc"
        )
        return 1
    log.debug("Succeeded to process code generator request")
    return 0


## Impl ########################################################################


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="protoc-gen-jsonschema",
        description="protoc plugin that converts .proto files to JSON Schema",
    )
    for option in OPTION_NAMES:
        parser.add_argument(
            f"--{option}", action="store_true", help=OPTION_HELP.get(option)
        )
    parser.add_argument(
        f"--{DEBUG_OPTION}", action="store_true", help="Log debug messages"
    )
    return parser


def _parameter_tokens(parameter: str) -> List[str]:
    return [token.strip() for token in parameter.split(",")]


def _process(
    request: plugin_pb2.CodeGeneratorRequest, args: argparse.Namespace
) -> plugin_pb2.CodeGeneratorResponse:
    """Resolve the configuration and convert the request"""
    try:
        config = Config.from_parameter(
            request.parameter,
            **{option: getattr(args, option) for option in OPTION_NAMES},
        )
    except ConfigurationError as err:
        log.error("Invalid configuration: %s", err)
        return plugin_pb2.CodeGeneratorResponse(error=str(err))
    log.debug2("Using configuration %s", config)
    return convert_request(request, config)


if __name__ == "__main__":
    sys.exit(main())
