"""
CSV resource client.

Fetches raw CSV text from http(s) URLs (requests), file:// URLs, or
plain paths, and hands it to core.csv_parser. There is no retry: a
failed fetch raises SourceFetchError and fails the calling pipeline.
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from core.config import settings
from core.csv_parser import ParseResult, parse_csv_text
from core.errors import SourceFetchError

from .base import SourceConfig

logger = logging.getLogger(__name__)


class CSVClient:
    """Reads CSV text from the web or the local filesystem."""

    def __init__(
        self,
        base_dir: Optional[Path] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.base_dir = Path(base_dir) if base_dir is not None else settings.DATA_DIR
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent or settings.USER_AGENT})

    def resolve_path(self, location: str) -> Path:
        """Local path for a file:// URL or a plain path (relative to base_dir)."""
        parsed = urlparse(location)
        if parsed.scheme == "file":
            return Path(unquote(parsed.path))
        path = Path(location)
        if not path.is_absolute():
            path = self.base_dir / path
        return path

    def fetch_bytes(self, location: str) -> bytes:
        scheme = urlparse(location).scheme.lower()
        if scheme in ("http", "https"):
            logger.info(f"Fetching {location}")
            try:
                resp = self.session.get(location, timeout=self.timeout)
                resp.raise_for_status()
            except requests.RequestException as e:
                raise SourceFetchError(location, str(e)) from e
            return resp.content

        path = self.resolve_path(location)
        logger.info(f"Reading {path}")
        try:
            return path.read_bytes()
        except OSError as e:
            raise SourceFetchError(location, str(e)) from e

    def fetch_text(self, source: SourceConfig) -> str:
        data = self.fetch_bytes(source.url)
        try:
            return data.decode(source.encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise SourceFetchError(source.url, f"cannot decode as {source.encoding}: {e}") from e


def load_rows(
    source: SourceConfig,
    client: Optional[CSVClient] = None,
    strict: bool = False,
) -> ParseResult:
    """Fetch a source and parse it into rows."""
    if client is None:
        client = CSVClient()

    text = client.fetch_text(source)
    result = parse_csv_text(text, header_row=source.header_row, strict=strict)

    if result.rejected:
        logger.warning(
            f"{source.url}: dropped {len(result.rejected)} malformed lines "
            f"(lines {[o.line_number for o in result.rejected]})"
        )
    logger.info(
        f"{source.url}: {len(result.rows)} rows, {len(result.headers)} columns"
    )
    return result
