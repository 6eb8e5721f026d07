from .loader import load_config, load_config_with_overrides
from .schema import AnalysisSettings, DataFilesConfig, DEGEmbedConfig, OpenAIConfig

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "DEGEmbedConfig",
    "DataFilesConfig",
    "AnalysisSettings",
    "OpenAIConfig",
]
