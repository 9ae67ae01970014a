"""A setuptools setup module for protoc_gen_jsonschema"""

# Standard
import os

# Third Party
from setuptools import setup

# Read the README to provide the long description
python_base = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(python_base, "README.md"), "r") as handle:
    long_description = handle.read()

# Read version from the env, falling back to a local dev version
version = os.environ.get("RELEASE_VERSION", "0.0.0.dev0")

# Read in the requirements
with open(os.path.join(python_base, "requirements.txt"), "r") as handle:
    requirements = handle.read()
with open(os.path.join(python_base, "requirements_test.txt"), "r") as handle:
    test_requirements = handle.read()

setup(
    name="protoc-gen-jsonschema",
    version=version,
    description="protoc plugin that converts protobuf definitions into JSON Schema",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords=["json", "json schema", "jsonschema", "protobuf", "proto", "protoc"],
    packages=["protoc_gen_jsonschema"],
    install_requires=requirements,
    extras_require={"test": test_requirements},
    entry_points={
        "console_scripts": [
            "protoc-gen-jsonschema=protoc_gen_jsonschema.plugin:main",
        ],
    },
)
