"""
Source descriptors and pipeline configuration.

A pipeline is one (source, aggregation mode, render target) tuple.
Pipelines are declared in YAML (adapters/configs/pipelines.yaml) and
loaded into the dataclasses below.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

MODE_COUNT = "count_by_category"
MODE_LABEL_VALUES = "label_values"
SUPPORTED_MODES = (MODE_COUNT, MODE_LABEL_VALUES)


@dataclass
class SourceConfig:
    """Where a CSV lives and where its header is."""
    url: str                        # http(s) URL, file:// URL, or path
    header_row: int = 0             # leading lines skipped before the header
    encoding: str = "utf-8-sig"

    @classmethod
    def from_dict(cls, data) -> "SourceConfig":
        if isinstance(data, str):
            return cls(url=data)
        header_row = int(data.get("header_row", 0))
        if header_row < 0:
            raise ValueError(f"header_row must be >= 0, got {header_row}")
        return cls(
            url=data["url"],
            header_row=header_row,
            encoding=data.get("encoding", "utf-8-sig"),
        )


@dataclass
class PipelineConfig:
    """Configuration for a single chart pipeline."""
    name: str                       # "world_500", "summary"
    source: SourceConfig
    mode: str                       # one of SUPPORTED_MODES
    target: str                     # render container id, e.g. "mapChart"
    title: str = ""
    series_name: str = ""

    # count_by_category
    category_column: Optional[str] = None
    normalize_categories: bool = False
    visual_max: Optional[int] = None        # None: largest count

    # label_values
    label_column: Optional[str] = None
    value_column: Optional[str] = None
    scale: float = 100.0
    decimals: int = 2
    on_invalid: str = "nan"                 # nan, skip, raise

    # leniency (None: use settings)
    strict_rows: Optional[bool] = None
    strict_labels: Optional[bool] = None

    chart_options: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.mode not in SUPPORTED_MODES:
            raise ValueError(
                f"{self.name}: unknown mode '{self.mode}'. Supported: {list(SUPPORTED_MODES)}"
            )
        if self.mode == MODE_COUNT and not self.category_column:
            raise ValueError(f"{self.name}: category_column required for {MODE_COUNT}")
        if self.mode == MODE_LABEL_VALUES and not (self.label_column and self.value_column):
            raise ValueError(
                f"{self.name}: label_column and value_column required for {MODE_LABEL_VALUES}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "PipelineConfig":
        valid_fields = cls.__dataclass_fields__
        kwargs = {k: v for k, v in data.items() if k in valid_fields and k != "source"}
        unknown = set(data) - set(valid_fields)
        if unknown:
            logger.warning(f"{data.get('name', '?')}: ignoring unknown keys {sorted(unknown)}")
        return cls(source=SourceConfig.from_dict(data["source"]), **kwargs)

    @classmethod
    def list_from_yaml(cls, yaml_path: Path) -> list["PipelineConfig"]:
        """Load every pipeline declared in a YAML file, in file order."""
        with open(yaml_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        pipelines = [cls.from_dict(p) for p in data.get("pipelines", [])]
        names = [p.name for p in pipelines]
        dupes = {n for n in names if names.count(n) > 1}
        if dupes:
            raise ValueError(f"Duplicate pipeline names in {yaml_path}: {sorted(dupes)}")
        return pipelines
