"""
Chart-ready aggregates from parsed rows.

Two modes, chosen per pipeline:
  count_by_category    - rows per distinct value of one column (map chart)
  extract_label_values - (label, scaled percentage) pairs (bar chart)

Numeric cells are read with JavaScript parseFloat semantics: the
longest leading numeric prefix is used, so "0.12%" reads as 0.12 and
"n/a" does not parse at all. What happens to cells that do not parse
is the caller's choice (see INVALID_POLICIES).
"""

import logging
import math
import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional, Sequence

from .csv_parser import Row, rows_to_frame
from .errors import NumericParseError

logger = logging.getLogger(__name__)

# nan   - keep the pair, value formats as "NaN"
# skip  - drop the pair
# raise - NumericParseError on the first bad cell
INVALID_POLICIES = ("nan", "skip", "raise")

DEFAULT_SCALE = 100.0
DEFAULT_DECIMALS = 2

_FLOAT_PREFIX = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)


@dataclass
class ValueOutcome:
    """Extraction result for one row."""
    label: str
    raw: Optional[str]
    value: float                    # scaled; NaN when the cell did not parse
    text: str                       # fixed-decimal rendering of value
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class LabelSeries:
    """Parallel label/value sequences for a category-axis chart."""
    labels: list[str] = field(default_factory=list)
    values: list[str] = field(default_factory=list)
    outcomes: list[ValueOutcome] = field(default_factory=list)

    def pairs(self) -> list[tuple[str, str]]:
        return list(zip(self.labels, self.values))

    def numeric(self) -> list[float]:
        """Scaled values as floats (NaN for cells that did not parse)."""
        return [o.value for o in self.outcomes]

    @property
    def invalid(self) -> list[ValueOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def __len__(self) -> int:
        return len(self.labels)


def parse_float(text: Optional[str]) -> float:
    """Leading-prefix float parse; NaN when no numeric prefix exists."""
    if text is None:
        return math.nan
    m = _FLOAT_PREFIX.match(text)
    if not m:
        return math.nan
    token = m.group(1)
    if token.lstrip("+-") == "Infinity":
        return -math.inf if token.startswith("-") else math.inf
    return float(token)


def format_fixed(value: float, decimals: int = DEFAULT_DECIMALS) -> str:
    """Fixed-decimal string, spelled NaN/Infinity for non-finite values."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "-Infinity" if value < 0 else "Infinity"
    # ties round away from zero on the exact binary value, as toFixed does
    with localcontext() as ctx:
        ctx.prec = 400
        exact = Decimal(value).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    text = format(exact, "f")
    # -0.00 reads as 0.00
    if text.startswith("-") and float(text) == 0:
        text = text[1:]
    return text


def scale_rate(
    text: Optional[str],
    scale: float = DEFAULT_SCALE,
    decimals: int = DEFAULT_DECIMALS,
) -> str:
    """Rate cell to percentage string: "0.055" -> "5.50"."""
    return format_fixed(parse_float(text) * scale, decimals)


def count_by_category(rows: Sequence[Row], column: str) -> dict[str, int]:
    """
    Count rows per value of `column`.

    Rows where the column is absent or empty are skipped. Keys keep the
    order in which each category first appears.
    """
    if not rows:
        return {}

    keys = rows_to_frame(list(rows), headers=[column])[column].fillna("").astype(str)
    keys = keys[keys != ""]
    if keys.empty:
        logger.warning(f"No values found in column {column!r}")
        return {}

    counts = keys.groupby(keys, sort=False).size()
    return {str(k): int(v) for k, v in counts.items()}


def extract_label_values(
    rows: Sequence[Row],
    label_column: str,
    value_column: str,
    scale: float = DEFAULT_SCALE,
    decimals: int = DEFAULT_DECIMALS,
    on_invalid: str = "nan",
) -> LabelSeries:
    """
    Build parallel (label, percentage) sequences from rows.

    Labels are copied verbatim. Values are parsed, multiplied by
    `scale` and rendered with `decimals` places.

    Args:
        rows: Parsed rows in source order.
        label_column: Column holding the category label.
        value_column: Column holding the fractional rate.
        scale: Multiplier applied before formatting (100 for percent).
        decimals: Places in the rendered value.
        on_invalid: One of INVALID_POLICIES.

    Returns:
        LabelSeries with one outcome per row (skipped rows included
        in outcomes but not in labels/values).
    """
    if on_invalid not in INVALID_POLICIES:
        raise ValueError(
            f"Unknown on_invalid policy {on_invalid!r}. Options: {INVALID_POLICIES}"
        )

    series = LabelSeries()
    for row in rows:
        label = row.get(label_column, "")
        raw = row.get(value_column)
        value = parse_float(raw) * scale
        outcome = ValueOutcome(
            label=label,
            raw=raw,
            value=value,
            text=format_fixed(value, decimals),
        )
        if math.isnan(value):
            outcome.error = f"{value_column}={raw!r} is not numeric"
            if on_invalid == "raise":
                raise NumericParseError(f"{label!r}: {outcome.error}")

        series.outcomes.append(outcome)
        if outcome.ok or on_invalid == "nan":
            series.labels.append(label)
            series.values.append(outcome.text)

    bad = series.invalid
    if bad:
        logger.warning(
            f"{len(bad)} of {len(rows)} rows have a non-numeric {value_column!r} "
            f"({'dropped' if on_invalid == 'skip' else 'kept as NaN'}): "
            f"{[o.label for o in bad]}"
        )
    return series
