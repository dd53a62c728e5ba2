"""Pipeline configuration via environment variables."""

import os
from pathlib import Path


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Settings loaded from environment variables. CLI flags override these."""

    PROJECT_ROOT: Path = Path(__file__).parent.parent

    # Relative defaults resolve against the working directory at use time
    DATA_DIR: Path = Path(os.environ.get("CHARTS_DATA_DIR", "."))
    OUTPUT_DIR: Path = Path(os.environ.get("CHARTS_OUTPUT_DIR", "output"))
    PIPELINES_FILE: Path = Path(
        os.environ.get(
            "CHARTS_PIPELINES_FILE",
            str(PROJECT_ROOT / "adapters" / "configs" / "pipelines.yaml"),
        )
    )

    # HTTP fetch settings (no retries)
    HTTP_TIMEOUT: float = float(os.environ.get("CHARTS_HTTP_TIMEOUT", "60"))
    USER_AGENT: str = os.environ.get("CHARTS_USER_AGENT", "global500-charts/1.0")

    # Leniency: defaults keep malformed rows dropped and unmapped labels as-is
    STRICT_ROWS: bool = _env_flag("CHARTS_STRICT_ROWS")
    STRICT_LABELS: bool = _env_flag("CHARTS_STRICT_LABELS")

    # Page assets
    ECHARTS_JS_URL: str = "https://cdn.jsdelivr.net/npm/echarts@5/dist/echarts.min.js"
    WORLD_MAP_JS_URL: str = "https://cdn.jsdelivr.net/npm/echarts@4.9.0/map/js/world.js"


settings = Settings()
