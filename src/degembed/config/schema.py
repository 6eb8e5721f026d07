"""Pydantic models for degembed configuration."""

import hashlib
import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class DataFilesConfig(BaseModel):
    """File names of the bundled reference datasets, relative to data_dir."""

    gobp_similarity: str = Field(
        default="gobp_similarity.parquet",
        description="Gene x GO biological process cosine similarity matrix",
    )
    cp_similarity: str = Field(
        default="c2cp_similarity.parquet",
        description="Gene x canonical pathway matrix (columns prefixed by source, e.g. KEGG_)",
    )
    moa_similarity: str = Field(
        default="moa_similarity.parquet",
        description="Gene x mechanism-of-action similarity matrix",
    )
    gene_embedding: str = Field(
        default="gene_embedding.parquet",
        description="Gene description embedding table (one row per gene)",
    )
    gene_list: str = Field(
        default="gene_list.txt",
        description="Canonical gene universe, one symbol per line",
    )


class AnalysisSettings(BaseModel):
    """Parameters of the DEG vs. background comparison."""

    min_degs: int = Field(
        default=15,
        ge=1,
        description="Minimum number of DEGs after intersecting with the universe",
    )
    max_degs: int = Field(
        default=500,
        ge=1,
        description="Maximum number of DEGs after intersecting with the universe",
    )
    top_n: int = Field(
        default=10,
        ge=1,
        description="Number of most similar DEGs reported per function",
    )
    conf_level: float = Field(
        default=0.95,
        gt=0.0,
        lt=1.0,
        description="Confidence level of the Cliff's delta interval",
    )
    ci_method: Literal["t", "normal"] = Field(
        default="t",
        description="Quantile used for the Cliff's delta interval",
    )
    workers: int | None = Field(
        default=None,
        ge=1,
        description="Thread pool size for per-function comparisons (None = min(8, cpu count))",
    )
    significance_level: float = Field(
        default=0.05,
        gt=0.0,
        lt=1.0,
        description="Raw p-value threshold used only for summaries",
    )

    @model_validator(mode="after")
    def check_deg_bounds(self) -> "AnalysisSettings":
        """Ensure the DEG count bounds form a valid range."""
        if self.min_degs > self.max_degs:
            raise ValueError(
                f"min_degs ({self.min_degs}) must not exceed max_degs ({self.max_degs})"
            )
        return self


class OpenAIConfig(BaseModel):
    """Configuration for the description and embedding endpoints."""

    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the OpenAI-compatible API",
    )
    chat_model: str = Field(
        default="gpt-4o-2024-08-06",
        description="Chat model used to write function descriptions",
    )
    embedding_model: str = Field(
        default="text-embedding-3-large",
        description="Embedding model (must match the bundled gene embeddings)",
    )
    temperature: float = Field(
        default=1.0,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for description generation",
    )
    timeout_seconds: int = Field(
        default=60,
        ge=1,
        description="Request timeout in seconds",
    )
    max_retries: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Maximum attempts for failed requests",
    )


class DEGEmbedConfig(BaseModel):
    """Main degembed configuration."""

    data_dir: Path = Field(
        ...,
        description="Directory holding the reference datasets",
    )
    output_dir: Path = Field(
        default=Path("results"),
        description="Directory for result tables and provenance sidecars",
    )
    files: DataFilesConfig = Field(
        default_factory=DataFilesConfig,
        description="Reference dataset file names",
    )
    analysis: AnalysisSettings = Field(
        default_factory=AnalysisSettings,
        description="Statistical comparison settings",
    )
    openai: OpenAIConfig = Field(
        default_factory=OpenAIConfig,
        description="Remote description/embedding endpoint settings",
    )

    @field_validator("output_dir")
    @classmethod
    def create_directory(cls, v: Path) -> Path:
        """Create directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        recorded in provenance sidecars.
        """
        config_dict = self.model_dump(mode="python")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
