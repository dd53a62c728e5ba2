"""
Pipeline registry: loads the declared chart pipelines.

Usage:
    pipelines = load_pipelines()
    summary = get_pipeline("summary")
"""

import logging
from pathlib import Path
from typing import Optional

from core.config import settings

from .base import PipelineConfig

logger = logging.getLogger(__name__)

CONFIGS_DIR = Path(__file__).parent / "configs"


def load_pipelines(config_path: Optional[Path] = None) -> list[PipelineConfig]:
    """
    Load all pipelines from YAML.

    Args:
        config_path: YAML file. Default: settings.PIPELINES_FILE.

    Returns:
        PipelineConfig list in declaration order.
    """
    if config_path is None:
        config_path = settings.PIPELINES_FILE
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"No pipeline config found at {config_path}")

    pipelines = PipelineConfig.list_from_yaml(config_path)
    logger.info(f"Loaded {len(pipelines)} pipelines from {config_path}")
    return pipelines


def get_pipeline(name: str, config_path: Optional[Path] = None) -> PipelineConfig:
    """Get one pipeline by name."""
    pipelines = {p.name: p for p in load_pipelines(config_path)}
    if name not in pipelines:
        raise ValueError(
            f"Unknown pipeline: '{name}'. Available: {list(pipelines.keys())}"
        )
    return pipelines[name]


def list_pipelines(config_path: Optional[Path] = None) -> list[str]:
    """Return the declared pipeline names."""
    return [p.name for p in load_pipelines(config_path)]
