"""
Category-name normalization for the world map.

Country labels in the source CSVs are Chinese; the ECharts world map
keys its regions by English names. Rules are (substring, map name)
pairs checked in order, and the first rule whose substring occurs in
the label wins. Longer, more specific substrings must come before the
shorter ones they contain (印度尼西亚 before 印度).
"""

import logging
from typing import Optional, Sequence

from .errors import UnmappedCategoryError

logger = logging.getLogger(__name__)

# Source label substring -> ECharts world.js region name
CATEGORY_NAME_MAP: tuple[tuple[str, str], ...] = (
    ("中国", "China"),
    ("美国", "United States"),
    ("日本", "Japan"),
    ("德国", "Germany"),
    ("法国", "France"),
    ("英国", "United Kingdom"),
    ("韩国", "Korea"),
    ("荷兰", "Netherlands"),
    ("瑞士", "Switzerland"),
    ("加拿大", "Canada"),
    ("意大利", "Italy"),
    ("西班牙", "Spain"),
    ("印度尼西亚", "Indonesia"),
    ("印度", "India"),
    ("巴西", "Brazil"),
    ("俄罗斯", "Russia"),
    ("澳大利亚", "Australia"),
    ("墨西哥", "Mexico"),
    ("沙特阿拉伯", "Saudi Arabia"),
    ("瑞典", "Sweden"),
    ("比利时", "Belgium"),
    ("爱尔兰", "Ireland"),
    ("丹麦", "Denmark"),
    ("新加坡", "Singapore"),
    ("泰国", "Thailand"),
    ("马来西亚", "Malaysia"),
    ("挪威", "Norway"),
    ("芬兰", "Finland"),
    ("奥地利", "Austria"),
    ("土耳其", "Turkey"),
    ("卢森堡", "Luxembourg"),
    ("以色列", "Israel"),
    ("波兰", "Poland"),
    ("阿联酋", "United Arab Emirates"),
    ("阿拉伯联合酋长国", "United Arab Emirates"),
    ("哥伦比亚", "Colombia"),
    ("智利", "Chile"),
    ("阿根廷", "Argentina"),
    ("南非", "South Africa"),
    ("科威特", "Kuwait"),
    ("卡塔尔", "Qatar"),
)


def normalize_category(
    label: str,
    table: Sequence[tuple[str, str]] = CATEGORY_NAME_MAP,
    strict: bool = False,
) -> str:
    """
    Translate one source label to the map's vocabulary.

    Unmapped labels come back unchanged unless strict is set, in which
    case UnmappedCategoryError is raised.
    """
    for substring, name in table:
        if substring in label:
            return name
    if strict:
        raise UnmappedCategoryError(label)
    logger.debug(f"No normalization rule for {label!r}, passing through")
    return label


def normalize_counts(
    counts: dict[str, int],
    table: Sequence[tuple[str, str]] = CATEGORY_NAME_MAP,
    strict: bool = False,
) -> dict[str, int]:
    """Normalize count keys; labels that land on the same name are summed."""
    merged: dict[str, int] = {}
    unmapped = []
    for label, count in counts.items():
        name = normalize_category(label, table=table, strict=strict)
        if name == label and not any(s in label for s, _ in table):
            unmapped.append(label)
        merged[name] = merged.get(name, 0) + count

    if unmapped:
        logger.info(f"{len(unmapped)} categories kept their source label: {unmapped}")
    return merged


def build_name_map(
    table: Sequence[tuple[str, str]] = CATEGORY_NAME_MAP,
    labels: Optional[Sequence[str]] = None,
) -> dict[str, str]:
    """
    Reverse mapping (map name -> source label) for display on the map.

    With labels given, only names reached by one of them are included
    and the first label seen for a name is used.
    """
    name_map: dict[str, str] = {}
    if labels is None:
        for substring, name in table:
            name_map.setdefault(name, substring)
        return name_map

    for label in labels:
        for substring, name in table:
            if substring in label:
                name_map.setdefault(name, label)
                break
    return name_map
