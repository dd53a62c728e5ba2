"""
Chart builders for the Global 500 pipelines.

build_map_option / build_bar_option return ECharts option dicts that
the page embeds as JSON; the charting library does the drawing.
create_rate_bar_chart writes the same bar data as a static PNG.
"""

import logging
import math
from pathlib import Path
from typing import Optional

import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from core.aggregator import LabelSeries

logger = logging.getLogger(__name__)

MAP_COLOR_RANGE = ["lightskyblue", "yellow", "orangered"]
BAR_GRADIENT = ("#2952A3", "#3398DB")


def build_map_option(
    counts: dict[str, int],
    title: str = "",
    series_name: str = "公司数量",
    visual_max: Optional[int] = None,
    name_map: Optional[dict[str, str]] = None,
) -> dict:
    """
    World map option: one region per category, colored by count.

    Args:
        counts: {map region name: count}, already normalized.
        title: Chart title.
        series_name: Series label shown in the tooltip.
        visual_max: Top of the color scale. Default: the largest count.
        name_map: {region name: display name}. ECharts renames regions
            through nameMap and matches data by the renamed name, so data
            items are keyed by display name when this is given.
    """
    if visual_max is None:
        visual_max = max(counts.values(), default=0)
    name_map = dict(name_map or {})

    series = {
        "name": series_name,
        "type": "map",
        "map": "world",
        "roam": True,
        "data": [
            {"name": name_map.get(name, name), "value": count}
            for name, count in counts.items()
        ],
        "emphasis": {"label": {"show": True}},
    }
    if name_map:
        series["nameMap"] = name_map

    return {
        "title": {"text": title, "left": "center"},
        "tooltip": {
            "trigger": "item",
            "formatter": "{b}<br/>" + series_name + ": {c}",
        },
        "visualMap": {
            "min": 0,
            "max": visual_max,
            "text": ["高", "低"],
            "realtime": False,
            "calculable": True,
            "inRange": {"color": list(MAP_COLOR_RANGE)},
        },
        "series": [series],
    }


def build_bar_option(
    series: LabelSeries,
    title: str = "",
    series_name: str = "平均利润率",
) -> dict:
    """Horizontal bar option: labels on the y axis, percentages on x."""
    start, end = BAR_GRADIENT
    return {
        "title": {"text": title, "left": "center"},
        "tooltip": {
            "trigger": "axis",
            "axisPointer": {"type": "shadow"},
            "formatter": "{b}: {c}%",
        },
        "grid": {"left": "3%", "right": "4%", "bottom": "3%", "containLabel": True},
        "xAxis": {
            "type": "value",
            "name": f"{series_name} (%)",
            "axisLabel": {"formatter": "{value}%"},
        },
        "yAxis": {
            "type": "category",
            "data": list(series.labels),
            "axisLabel": {"interval": 0},
        },
        "series": [
            {
                "name": series_name,
                "type": "bar",
                "data": list(series.values),
                "itemStyle": {
                    "color": {
                        "type": "linear",
                        "x": 0, "y": 0, "x2": 1, "y2": 0,
                        "colorStops": [
                            {"offset": 0, "color": start},
                            {"offset": 1, "color": end},
                        ],
                    }
                },
            }
        ],
    }


def create_rate_bar_chart(
    series: LabelSeries,
    output_path: Optional[Path] = None,
    title: str = "Average profit rate by industry",
) -> Optional[Path]:
    """Static horizontal bar chart of a LabelSeries. NaN values leave a gap."""
    if output_path is None:
        output_path = Path("output") / "profit_rates.png"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if not len(series):
        logger.warning(f"No data for bar chart, skipping {output_path}")
        return None

    values = np.array([float(v) for v in series.values], dtype=float)

    fig, ax = plt.subplots(figsize=(10, max(4, len(values) * 0.5)))
    y = np.arange(len(values))
    ax.barh(y, np.nan_to_num(values, nan=0.0), color=BAR_GRADIENT[1], alpha=0.85)

    for i, v in enumerate(values):
        if not math.isnan(v):
            ax.text(v, i, f" {v:.2f}%", va="center", fontsize=8)

    ax.set_yticks(y)
    ax.set_yticklabels(series.labels)
    ax.set_xlabel("%")
    ax.set_title(title)
    ax.grid(True, axis="x", alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Saved bar chart to {output_path}")
    return output_path
