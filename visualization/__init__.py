"""
Chart descriptions, static charts, and the chart page.
"""

from .chart_builder import (
    build_map_option,
    build_bar_option,
    create_rate_bar_chart,
)
from .page_builder import ChartPanel, build_page, write_page
