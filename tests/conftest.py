"""Shared test fixtures for the chart pipeline tests.

Sample CSV texts mirror the two shipped sources: the Global 500 list
(header on the first line) and the industry summary (two metadata
lines before the header).
"""

import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.base import PipelineConfig, SourceConfig  # noqa: E402

PROJECT_ROOT = Path(__file__).resolve().parent.parent

WORLD_CSV = (
    "排名,公司名称,国家\n"
    "1,沃尔玛,美国\n"
    "2,国家电网有限公司,中国\n"
    "3,中国石油天然气集团有限公司,中国\n"
    "4,丰田汽车公司,日本\n"
    "5,鸿海精密工业股份有限公司,中国台湾\n"
    "6,冰岛银行,冰岛\n"
)

SUMMARY_CSV = (
    "# 世界五百强行业汇总\n"
    "# 数据来源: 财富世界500强, 2024\n"
    "行业(个人观点),平均利润率,公司数量\n"
    "Tech,0.12,41\n"
    "能源,0.055,72\n"
    "坏行,0.1\n"
    "零售,n/a,28\n"
)


@pytest.fixture()
def world_csv_text():
    return WORLD_CSV


@pytest.fixture()
def summary_csv_text():
    return SUMMARY_CSV


@pytest.fixture()
def data_dir(tmp_path):
    """Temp data dir holding world_500.csv and summary.csv."""
    d = tmp_path / "data"
    d.mkdir()
    (d / "world_500.csv").write_text(WORLD_CSV, encoding="utf-8")
    (d / "summary.csv").write_text(SUMMARY_CSV, encoding="utf-8")
    return d


@pytest.fixture()
def world_pipeline():
    return PipelineConfig(
        name="world_500",
        source=SourceConfig(url="world_500.csv", header_row=0),
        mode="count_by_category",
        category_column="国家",
        normalize_categories=True,
        target="mapChart",
        title="世界五百强企业国家分布",
        series_name="公司数量",
    )


@pytest.fixture()
def summary_pipeline():
    return PipelineConfig(
        name="summary",
        source=SourceConfig(url="summary.csv", header_row=2),
        mode="label_values",
        label_column="行业(个人观点)",
        value_column="平均利润率",
        target="barChart",
        title="各行业平均利润率",
        series_name="平均利润率",
    )
