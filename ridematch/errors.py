class StructuralError(Exception):
    """Raised when the city graph is built or queried with invalid data."""


class VertexRangeError(StructuralError, IndexError):
    def __init__(self, vertex: int, vertex_count: int):
        self.vertex = vertex
        self.vertex_count = vertex_count
        super().__init__(f"Invalid vertex index {vertex} (graph has {vertex_count} vertices)")


class NegativeWeightError(StructuralError, ValueError):
    def __init__(self, src: int, dest: int, weight: float):
        self.src = src
        self.dest = dest
        self.weight = weight
        super().__init__(f"Edge weight cannot be negative ({src} -> {dest}: {weight})")
