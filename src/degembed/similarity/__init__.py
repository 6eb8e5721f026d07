"""Similarity matrices: categories, labeled matrices and data providers."""

from degembed.similarity.categories import PATHWAY_SOURCES, Category
from degembed.similarity.matrix import (
    EmbeddingTable,
    LabeledMatrix,
    SimilarityMatrix,
    cosine_similarity,
    l2_normalize_rows,
)
from degembed.similarity.provider import (
    FileReferenceData,
    InMemoryReferenceData,
    ReferenceDataProvider,
    load_embedding_table,
    read_gene_list,
    read_table,
    select_similarity_matrix,
)

__all__ = [
    "Category",
    "PATHWAY_SOURCES",
    "LabeledMatrix",
    "SimilarityMatrix",
    "EmbeddingTable",
    "cosine_similarity",
    "l2_normalize_rows",
    "ReferenceDataProvider",
    "FileReferenceData",
    "InMemoryReferenceData",
    "load_embedding_table",
    "read_gene_list",
    "read_table",
    "select_similarity_matrix",
]
