"""
CSV sources and chart pipeline configuration.

The CSVClient fetches raw text for a SourceConfig; the registry loads
the declared PipelineConfig list.
"""

from .base import PipelineConfig, SourceConfig
from .csv_client import CSVClient, load_rows
from .registry import get_pipeline, list_pipelines, load_pipelines
