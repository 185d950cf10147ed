"""CSV ingestion: row parsing, bank adapters and the import pipeline."""

from .adapters import BankAdapter, default_adapters
from .csv_rows import CsvRow, locate_header, read_csv_rows
from .pipeline import FileImportOutcome, FormatInfo, ImportPipeline

__all__ = [
    "BankAdapter",
    "CsvRow",
    "FileImportOutcome",
    "FormatInfo",
    "ImportPipeline",
    "default_adapters",
    "locate_header",
    "read_csv_rows",
]
