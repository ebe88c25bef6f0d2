"""Graph subpackage containing the store, weights and handle capabilities."""

from .handles import GraphNode
from .model import Direction, EdgeType, Relation
from .query import QueryService
from .store import GraphStore

__all__ = [
    "Direction",
    "EdgeType",
    "GraphNode",
    "GraphStore",
    "QueryService",
    "Relation",
]
