"""
The package registry is the symbol table used to resolve the type names found
on message fields. It mirrors the dotted proto package names of every file in a
request as a tree of PackageNode objects, each of which knows the top-level
messages declared directly in that package.

Name resolution follows protoc's scoping rules closely enough for fully
qualified names (which is what protoc hands to plugins) as well as relative
names such as `Foo.Bar` or `sibling.pkg.Baz`.
"""

# Standard
from typing import Dict, Iterable, Optional

# Third Party
from google.protobuf import descriptor_pb2

# First Party
import alog

log = alog.use_channel("P2JREG")


## Interface ###################################################################


class UnresolvedTypeError(ValueError):
    """Raised when a type or package name can not be found in the registry"""


class PackageNode:
    """A single segment of a dotted package path"""

    def __init__(self, name: str = "", parent: Optional["PackageNode"] = None):
        """
        Args:
            name:  str
                The full dotted path of this package from the root. The root
                node has the empty name.
            parent:  Optional[PackageNode]
                The enclosing package, None for the root
        """
        self.name = name
        self.parent = parent
        self.children: Dict[str, PackageNode] = {}
        self.types: Dict[str, descriptor_pb2.DescriptorProto] = {}

    def __repr__(self) -> str:
        return f"PackageNode(name={self.name!r}, children={sorted(self.children)}, types={sorted(self.types)})"

    def child(self, segment: str) -> "PackageNode":
        """Get the child node for the given segment, creating it if needed"""
        node = self.children.get(segment)
        if node is None:
            node = PackageNode(name=f"{self.name}.{segment}", parent=self)
            self.children[segment] = node
        return node

    def lookup_type(self, name: str) -> descriptor_pb2.DescriptorProto:
        """Resolve a type name as seen from this package.

        Names with a leading dot are absolute and resolved from the root.
        Otherwise resolution is attempted here and then in each enclosing
        package in turn, and the first match wins.

        Args:
            name:  str
                The (possibly relative) type name to resolve

        Returns:
            message:  descriptor_pb2.DescriptorProto
                The message descriptor for the name
        """
        if name.startswith("."):
            try:
                return self.root.relative_lookup_type(name[1:])
            except UnresolvedTypeError as err:
                raise UnresolvedTypeError(
                    f"no such message type named {name}: {err}"
                ) from err

        pkg = self
        while pkg is not None:
            try:
                return pkg.relative_lookup_type(name)
            except UnresolvedTypeError as err:
                log.debug3("Could not resolve %s in [%s]: %s", name, pkg.name, err)
            pkg = pkg.parent
        raise UnresolvedTypeError(f"no such message type named {name}")

    def relative_lookup_type(self, name: str) -> descriptor_pb2.DescriptorProto:
        """Resolve a type name relative to this package only"""
        if not name:
            raise UnresolvedTypeError("empty message name")

        components = name.split(".", 1)
        if len(components) == 1:
            found = self.types.get(name)
            if found is None:
                raise UnresolvedTypeError(f"no such message {name} in [{self.name}]")
            return found

        head, rest = components
        log.debug4("Looking for %s in %s at [%s]", rest, head, self.name)
        child = self.children.get(head)
        if child is not None:
            return child.relative_lookup_type(rest)
        message = self.types.get(head)
        if message is not None:
            return relative_lookup_nested_type(message, rest)
        raise UnresolvedTypeError(
            f"no such package nor message {head} in [{self.name}]"
        )

    def relative_lookup_package(self, dotted_path: str) -> "PackageNode":
        """Walk the child packages named by the given dotted path. The empty
        path names this package itself.
        """
        pkg = self
        if not dotted_path:
            return pkg
        for segment in dotted_path.split("."):
            if segment not in pkg.children:
                raise UnresolvedTypeError(f"no such package found: {dotted_path}")
            pkg = pkg.children[segment]
        return pkg

    @property
    def root(self) -> "PackageNode":
        pkg = self
        while pkg.parent is not None:
            pkg = pkg.parent
        return pkg


class PackageRegistry:
    """The tree of packages for a single conversion session"""

    def __init__(self, proto_files: Iterable[descriptor_pb2.FileDescriptorProto] = ()):
        """Create the registry and register every top-level message of the
        given files
        """
        self.root = PackageNode()
        for proto_file in proto_files:
            for message in proto_file.message_type:
                log.debug2(
                    "Loading message type %s from package [%s]",
                    message.name,
                    proto_file.package,
                )
                self.register(proto_file.package, message)

    def register(self, package: str, message: descriptor_pb2.DescriptorProto):
        """Store the message under its local name in the node for the given
        dotted package path, creating package nodes along the way
        """
        pkg = self.root
        for segment in package.split(".") if package else []:
            # Skip the empty segment produced by a leading "."
            if pkg is self.root and not segment:
                continue
            pkg = pkg.child(segment)
        pkg.types[message.name] = message

    def lookup_type(
        self, context_package: PackageNode, name: str
    ) -> descriptor_pb2.DescriptorProto:
        """Resolve a type name in the scope of the given package"""
        return context_package.lookup_type(name)

    def lookup_package(self, dotted_path: str) -> PackageNode:
        """Find the node for a file's declared package"""
        return self.root.relative_lookup_package(dotted_path.lstrip("."))


def relative_lookup_nested_type(
    message: descriptor_pb2.DescriptorProto, dotted_name: str
) -> descriptor_pb2.DescriptorProto:
    """Walk the nested messages of the given message following each component
    of the dotted name

    Args:
        message:  descriptor_pb2.DescriptorProto
            The message to start from
        dotted_name:  str
            The remainder of the type name, e.g. "Inner.Innermost"

    Returns:
        nested:  descriptor_pb2.DescriptorProto
            The nested message descriptor
    """
    for component in dotted_name.split("."):
        nested = next(
            (candidate for candidate in message.nested_type if candidate.name == component),
            None,
        )
        if nested is None:
            log.info("no such nested message %s in %s", component, message.name)
            raise UnresolvedTypeError(
                f"no such nested message {component} in {message.name}"
            )
        message = nested
    return message
