"""CSV source loading for ingestion.

This module reads CSV text from local files or http(s) URLs and hands it to the
analyzer. Remote sources that cannot be fetched degrade to synthetic metadata;
local files and malformed content always fail loudly.
"""

from pathlib import Path
from typing import Iterable, NamedTuple, Optional

import requests

from utils import (
    PathValidationError,
    get_logger,
    is_remote_source,
    is_supported_dataset_format,
    validate_path_safe,
)

from .analyzer import (
    CSVInputError,
    CSVMetadataAnalyzer,
    UnsupportedContentError,
    build_synthetic_metadata,
)
from .metadata import CSVMetadata, DataLoadResult

logger = get_logger(__name__)

DEFAULT_FETCH_TIMEOUT = 10.0


class CSVLoadError(Exception):
    """Raised when a local CSV file cannot be read."""

    pass


class FetchError(Exception):
    """Raised when remote CSV content cannot be fetched."""

    pass


class CSVFileInfo(NamedTuple):
    """A CSV source to analyze: display name plus path or URL."""

    filename: str
    url: str


TEMPLATE_KEYWORDS = [
    ("social", ("social", "instagram", "tiktok")),
    ("business", ("business", "sales", "revenue")),
    ("sports", ("sports", "game", "competition")),
    ("educational", ("education", "school", "university")),
    ("demo", ("test", "sample", "demo")),
    ("gaming", ("dramatic", "extreme")),
]


def decode_csv_bytes(data: bytes, name: str) -> str:
    """Decode raw CSV bytes as UTF-8, tolerating a byte order mark.

    Raises:
        UnsupportedContentError: If the bytes are not UTF-8 text
    """
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise UnsupportedContentError(
            f"Unsupported content in {name}: not UTF-8 text ({e})"
        ) from e


def read_csv_file(file_path: str | Path) -> str:
    """Read a local CSV file as text.

    Args:
        file_path: Path to the CSV file

    Returns:
        File content

    Raises:
        CSVLoadError: If the file doesn't exist or cannot be read
        UnsupportedContentError: If the file is not UTF-8 text
    """
    try:
        resolved = validate_path_safe(file_path, must_exist=True, must_be_file=True)
    except PathValidationError as e:
        raise CSVLoadError(f"Invalid CSV path: {e}") from e
    except FileNotFoundError as e:
        raise CSVLoadError(f"CSV file not found: {file_path}") from e

    logger.info(f"Loading CSV from: {resolved}")
    try:
        data = resolved.read_bytes()
    except OSError as e:
        raise CSVLoadError(f"Failed to read CSV file {resolved}: I/O error: {e}") from e

    return decode_csv_bytes(data, resolved.name)


def fetch_csv_text(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> str:
    """Fetch CSV text from an http(s) URL.

    Args:
        url: Source URL
        timeout: Request timeout in seconds

    Returns:
        Response body as text

    Raises:
        FetchError: On transport errors or a non-success HTTP status
    """
    logger.debug(f"Fetching CSV from: {url}")
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch {url}: {e}") from e

    if not response.ok:
        raise FetchError(
            f"Failed to fetch {url}: {response.status_code} {response.reason}"
        )
    return decode_csv_bytes(response.content, url)


def infer_template_type(filename: str) -> str:
    """Infer a chart template type from keywords in the filename."""
    name = filename.lower()
    for template_type, keywords in TEMPLATE_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return template_type
    return "default"


class CSVDataLoader:
    """Loads and analyzes CSV sources.

    Remote sources fall back to synthetic metadata when they cannot be fetched.
    Empty or unsupported content is never recovered.
    """

    def __init__(
        self,
        analyzer: Optional[CSVMetadataAnalyzer] = None,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
    ):
        """Initialize the loader.

        Args:
            analyzer: Analyzer to use (defaults to a fresh CSVMetadataAnalyzer)
            fetch_timeout: Timeout in seconds for remote fetches
        """
        self.analyzer = analyzer or CSVMetadataAnalyzer()
        self.fetch_timeout = fetch_timeout

    def analyze_file(self, file_path: str | Path, filename: Optional[str] = None) -> CSVMetadata:
        """Read and analyze a local CSV file.

        The file name is used as the metadata filename unless one is given.

        Raises:
            CSVLoadError: If the file cannot be read
            CSVInputError: If the content is empty or unsupported
        """
        path = Path(file_path)
        content = read_csv_file(path)
        return self.analyzer.analyze(filename or path.name, str(file_path), content)

    def analyze_url(self, filename: str, url: str) -> CSVMetadata:
        """Fetch and analyze a remote CSV source.

        A fetch failure is logged as a warning and replaced by synthetic metadata.

        Raises:
            CSVInputError: If fetched content is empty or unsupported
        """
        try:
            content = fetch_csv_text(url, timeout=self.fetch_timeout)
        except FetchError as e:
            logger.warning(f"Could not load {filename}, using synthetic metadata: {e}")
            return build_synthetic_metadata(filename, url)
        return self.analyzer.analyze(filename, url, content)

    def analyze_source(self, source: str, filename: Optional[str] = None) -> CSVMetadata:
        """Analyze a path or URL, dispatching on the source kind."""
        if is_remote_source(source):
            name = filename or source.rstrip("/").rsplit("/", 1)[-1] or source
            return self.analyze_url(name, source)
        return self.analyze_file(source, filename=filename)

    def scan(self, sources: Iterable[CSVFileInfo]) -> DataLoadResult:
        """Analyze a batch of CSV sources.

        Per-source failures are collected in ``errors``; results are sorted by filename.
        """
        result = DataLoadResult()
        for info in sources:
            result.total_files += 1
            try:
                metadata = self.analyze_source(info.url, filename=info.filename)
            except (CSVInputError, CSVLoadError) as e:
                message = f"Failed to analyze {info.filename}: {e}"
                result.errors.append(message)
                logger.error(message)
                continue
            result.csv_files.append(metadata)
            result.valid_files += 1

        result.csv_files.sort(key=lambda metadata: metadata.filename)
        logger.info(f"Analyzed {result.valid_files}/{result.total_files} CSV files")
        return result

    def scan_directory(self, data_dir: str | Path) -> DataLoadResult:
        """Analyze every CSV file in a directory."""
        directory = Path(data_dir)
        if not directory.is_dir():
            result = DataLoadResult()
            result.errors.append(f"Data directory not found: {directory}")
            logger.error(result.errors[-1])
            return result

        sources = [
            CSVFileInfo(filename=path.name, url=str(path))
            for path in sorted(directory.iterdir())
            if path.is_file() and is_supported_dataset_format(path)
        ]
        logger.info(f"Found {len(sources)} CSV files in {directory}")
        return self.scan(sources)
