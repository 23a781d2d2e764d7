"""Build a nested table of contents from a flat heading list."""

from dataclasses import dataclass, field

from .headings import Heading


@dataclass
class HeadingNode:
    """A node in the heading tree."""
    heading: Heading
    children: list["HeadingNode"] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            **self.heading.to_dict(),
            "children": [child.to_dict() for child in self.children],
        }


def build_heading_tree(headings: list[Heading]) -> list[HeadingNode]:
    """
    Build a tree structure from flat headings.

    Each heading is nested under the closest preceding heading with a
    smaller depth. Returns the list of root nodes.
    """
    roots: list[HeadingNode] = []
    stack: list[HeadingNode] = []

    for heading in headings:
        node = HeadingNode(heading=heading)
        while stack and stack[-1].heading.depth >= heading.depth:
            stack.pop()
        if stack:
            stack[-1].children.append(node)
        else:
            roots.append(node)
        stack.append(node)

    return roots


def flatten_tree(nodes: list[HeadingNode], depth: int = 0) -> list[tuple[Heading, int]]:
    """
    Flatten tree back to list with indent depth.

    Returns list of (heading, indent_depth) tuples.
    """
    result: list[tuple[Heading, int]] = []
    for node in nodes:
        result.append((node.heading, depth))
        result.extend(flatten_tree(node.children, depth + 1))
    return result
