"""
In-Memory Vector Index

Build-once, read-many cosine similarity index over embedded feedback
records.

All vectors are stacked into one float64 matrix at build time. A query is
a single scipy cdist call against that matrix; entries with several
vectors score as their best-matching vector. Ranking uses a stable sort,
so equal scores keep insertion order (first inserted wins).

The index is never mutated after build(), so concurrent queries from
independent pipeline runs need no locking.

Example:
    >>> index = InMemoryVectorIndex.build(result.pairs, embeddings=provider)
    >>> hits = await index.search("unhappy high-income customers", k=3)
    >>> for hit in hits:
    ...     print(f"{hit.score:.2f} {hit.record.customer_id}")
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import numpy as np
from scipy.spatial.distance import cdist

from feedback_rag.types.results import EmbeddedRecord, RetrievalResult

if TYPE_CHECKING:
    from feedback_rag.providers.base import EmbeddingProvider

# Scores equal to this many decimals count as tied for ranking
SCORE_DECIMALS = 12

class IndexBuildError(ValueError):
    """The (record, embedding) pairs cannot form a consistent index."""


class InMemoryVectorIndex:
    """
    Immutable cosine similarity index.

    Use build() rather than the constructor.

    Attributes:
        entries: Indexed entries in insertion order
        dimensions: Vector dimensionality (0 for an empty index)
    """

    def __init__(
        self,
        entries: tuple[EmbeddedRecord, ...],
        matrix: np.ndarray,
        owners: np.ndarray,
        embeddings: "EmbeddingProvider | None" = None,
    ) -> None:
        self._entries = entries
        self._matrix = matrix
        self._owners = owners
        self._embeddings = embeddings
        self._matrix.setflags(write=False)
        self._owners.setflags(write=False)

    @classmethod
    def build(
        cls,
        pairs: Iterable[EmbeddedRecord],
        *,
        embeddings: "EmbeddingProvider | None" = None,
    ) -> "InMemoryVectorIndex":
        """
        Build an index from embedded records in one pass.

        Duplicate customer ids are kept as separate entries. Empty input
        gives an index that answers every query with [].

        Args:
            pairs: Embedded records (one or more vectors each)
            embeddings: Provider used by search() to embed query text

        Returns:
            A read-only index

        Raises:
            IndexBuildError: An entry has no vectors, vectors differ in
                dimension, or a vector is zero or non-finite
        """
        entries = tuple(pairs)
        vectors: list[list[float]] = []
        owners: list[int] = []
        dimensions: int | None = None

        for position, entry in enumerate(entries):
            if not entry.embeddings:
                raise IndexBuildError(
                    f"Entry {position} ({entry.record.customer_id}) has no embedding"
                )
            for vector in entry.embeddings:
                if dimensions is None:
                    dimensions = len(vector)
                    if dimensions == 0:
                        raise IndexBuildError("Embedding vectors must not be empty")
                elif len(vector) != dimensions:
                    raise IndexBuildError(
                        f"Entry {position} ({entry.record.customer_id}) has a "
                        f"{len(vector)}-dim vector, expected {dimensions}"
                    )
                vectors.append(vector)
                owners.append(position)

        if not vectors:
            return cls((), np.empty((0, 0)), np.empty(0, dtype=np.int64), embeddings)

        matrix = np.asarray(vectors, dtype=np.float64)
        if not np.all(np.isfinite(matrix)):
            raise IndexBuildError("Embedding vectors must be finite")
        zero_rows = np.flatnonzero(np.linalg.norm(matrix, axis=1) == 0)
        if zero_rows.size:
            position = owners[int(zero_rows[0])]
            raise IndexBuildError(
                f"Entry {position} ({entries[position].record.customer_id}) "
                "has a zero vector; cosine similarity is undefined"
            )

        return cls(entries, matrix, np.asarray(owners, dtype=np.int64), embeddings)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[EmbeddedRecord, ...]:
        return self._entries

    @property
    def dimensions(self) -> int:
        return int(self._matrix.shape[1]) if self._entries else 0

    def query(self, query_embedding: list[float], k: int) -> list[RetrievalResult]:
        """
        Rank entries by cosine similarity to a query vector.

        Args:
            query_embedding: Vector with the index's dimensionality
            k: Maximum number of results, >= 1

        Returns:
            Up to k results, highest score first; ties keep insertion order

        Raises:
            ValueError: k < 1, or the query vector is the wrong size, zero,
                or non-finite
        """
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        if not self._entries:
            return []

        query = np.asarray(query_embedding, dtype=np.float64).reshape(1, -1)
        if query.shape[1] != self.dimensions:
            raise ValueError(
                f"Query vector has {query.shape[1]} dimensions, index has {self.dimensions}"
            )
        if not np.all(np.isfinite(query)) or not np.any(query):
            raise ValueError("Query vector must be finite and non-zero")

        # cdist returns distance (1 - similarity)
        vector_scores = np.clip(1.0 - cdist(query, self._matrix, metric="cosine")[0], -1.0, 1.0)

        entry_scores, best_rows = self._best_per_entry(vector_scores)
        # Scaled copies of a vector differ from it only in the last bits
        ranking = np.round(entry_scores, SCORE_DECIMALS)
        order = np.argsort(-ranking, kind="stable")[:k]

        return [
            RetrievalResult(
                score=float(entry_scores[position]),
                embedding=self._matrix[best_rows[position]].tolist(),
                record=self._entries[position].record,
            )
            for position in order
        ]

    def _best_per_entry(self, vector_scores: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Collapse per-vector scores to one score (and row) per entry."""
        if len(vector_scores) == len(self._entries):
            return vector_scores, np.arange(len(vector_scores))

        entry_scores = np.full(len(self._entries), -np.inf)
        best_rows = np.zeros(len(self._entries), dtype=np.int64)
        # Rows are grouped by owner, so the first maximum wins within an entry
        for row, (owner, score) in enumerate(zip(self._owners, vector_scores)):
            if score > entry_scores[owner]:
                entry_scores[owner] = score
                best_rows[owner] = row
        return entry_scores, best_rows

    async def search(self, text: str, k: int) -> list[RetrievalResult]:
        """
        Embed query text and return its k nearest entries.

        The text is embedded on every call; nothing is cached.

        Raises:
            RuntimeError: No embedding provider was bound at build time
            ValueError: See query()
        """
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        if not self._entries:
            return []
        if self._embeddings is None:
            raise RuntimeError("Index has no embedding provider for text search")

        query_embedding = await self._embeddings.embed_single(text)
        return self.query(query_embedding, k)
