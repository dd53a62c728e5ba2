"""
Parsing and aggregation core.

Modules:
  csv_parser - CSV text to ordered row records with a header offset
  aggregator - Counts per category and scaled label/value series
  normalizer - Source-locale category labels to map region names
  config     - Environment-driven settings
  errors     - Exceptions raised by the pipeline stages
"""

from .csv_parser import ParseResult, RowOutcome, parse_csv_text, iter_row_outcomes
from .aggregator import LabelSeries, count_by_category, extract_label_values
from .normalizer import normalize_category, normalize_counts
