"""
Static HTML page holding every chart.

Each chart gets a container div addressed by its render target id.
Charts are initialised once the window has loaded, and a single
resize listener asks ECharts to re-layout every chart instance.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from jinja2 import Template

from core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class ChartPanel:
    """One chart on the page."""
    target: str                     # container element id
    option: dict                    # ECharts option
    height: str = "600px"


PAGE_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="zh-CN">
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
<script src="{{ echarts_url }}"></script>
{% if needs_world_map %}<script src="{{ world_map_url }}"></script>
{% endif %}<style>
  body { font-family: -apple-system, "PingFang SC", "Microsoft YaHei", sans-serif; margin: 0 auto; max-width: 1200px; padding: 16px; }
  h1 { text-align: center; font-size: 1.6em; }
  .chart { width: 100%; margin-bottom: 32px; }
</style>
</head>
<body>
<h1>{{ title }}</h1>
{% for panel in panels %}<div id="{{ panel.target }}" class="chart" style="height: {{ panel.height }}"></div>
{% endfor %}
<script>
var chartOptions = {{ options_json }};

window.onload = function() {
    Object.keys(chartOptions).forEach(function(id) {
        var chart = echarts.init(document.getElementById(id));
        chart.setOption(chartOptions[id]);
    });

    window.addEventListener('resize', function() {
        Object.keys(chartOptions).forEach(function(id) {
            var chart = echarts.getInstanceByDom(document.getElementById(id));
            if (chart) {
                chart.resize();
            }
        });
    });
};
</script>
</body>
</html>
""")


def _script_json(data) -> str:
    # Keep "</script>" inside string values from closing the tag
    return json.dumps(data, ensure_ascii=False, indent=2).replace("</", "<\\/")


def build_page(
    panels: Sequence[ChartPanel],
    title: str = "世界五百强企业数据可视化",
) -> str:
    """Render the page HTML for the given panels, in order."""
    targets = [p.target for p in panels]
    dupes = {t for t in targets if targets.count(t) > 1}
    if dupes:
        raise ValueError(f"Duplicate render targets: {sorted(dupes)}")

    needs_world_map = any(
        s.get("type") == "map" and s.get("map") == "world"
        for p in panels
        for s in p.option.get("series", [])
    )

    return PAGE_TEMPLATE.render(
        title=title,
        panels=panels,
        options_json=_script_json({p.target: p.option for p in panels}),
        echarts_url=settings.ECHARTS_JS_URL,
        world_map_url=settings.WORLD_MAP_JS_URL,
        needs_world_map=needs_world_map,
    )


def write_page(
    panels: Sequence[ChartPanel],
    output_path: Optional[Path] = None,
    title: str = "世界五百强企业数据可视化",
) -> Path:
    """Render and save the page. Returns the output path."""
    if output_path is None:
        output_path = Path("output") / "index.html"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    html = build_page(panels, title=title)
    output_path.write_text(html, encoding="utf-8")
    logger.info(f"Saved chart page with {len(panels)} charts to {output_path}")
    return output_path
