"""
Vector Index

In-memory nearest-neighbor store for embedded feedback records.

Modules:
    memory: InMemoryVectorIndex (numpy matrix + scipy cosine distance)

Non-goals:
    - Persistence across runs
    - Incremental updates after build
"""

from feedback_rag.index.memory import IndexBuildError, InMemoryVectorIndex

__all__ = ["InMemoryVectorIndex", "IndexBuildError"]
