"""
Per-file loading: CSV/XLSX decoding, chunked reads, batch isolation.
"""
from __future__ import annotations

import gzip
import io
import zipfile
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from coinsdash.config import CHUNK_SIZE, SUPPORTED_EXTENSIONS
from coinsdash.data.errors import IngestionError
from coinsdash.data.normalize import normalize_frame


@dataclass
class LoadedFile:
    """A file that parsed and validated; becomes one report."""
    filename: str
    name: str
    records: pd.DataFrame


@dataclass
class BatchResult:
    loaded: list[LoadedFile] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)    # [{"file": ..., "error": ...}]
    report_ids: list[str] = field(default_factory=list)  # one per loaded file, set once stored

    @property
    def ok(self) -> bool:
        return not self.errors


def display_name_for(filename: str) -> str:
    """Report name for a file: its name without extension."""
    return Path(filename).stem


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _read_csv(filename: str, content: bytes, chunk_size: int) -> pd.DataFrame:
    try:
        with pd.read_csv(
            io.BytesIO(content),
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            chunksize=chunk_size,
        ) as reader:
            chunks = [chunk for chunk in reader]
    except pd.errors.EmptyDataError:
        raise IngestionError(filename, "File is empty")
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise IngestionError(filename, f"Could not parse CSV: {exc}")

    if not chunks:
        raise IngestionError(filename, "File has no data rows")
    return pd.concat(chunks, ignore_index=True)


def _read_xlsx(filename: str, content: bytes) -> pd.DataFrame:
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=str, engine="openpyxl")
    except (ValueError, KeyError, zipfile.BadZipFile) as exc:
        raise IngestionError(filename, f"Could not read workbook: {exc}")
    return df.fillna("")


def read_table(filename: str, content: bytes, chunk_size: int = CHUNK_SIZE) -> pd.DataFrame:
    """Decode an uploaded file into a string-typed DataFrame (headers as-is)."""
    ext = Path(filename).suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise IngestionError(filename, "Only .xlsx or .csv files are supported.")
    if not content or not content.strip():
        raise IngestionError(filename, "File is empty")

    if ext == ".csv":
        df = _read_csv(filename, content, chunk_size)
    else:
        df = _read_xlsx(filename, content)

    if df.empty:
        raise IngestionError(filename, "File has no data rows")
    return df


def load_upload(filename: str, content: bytes, chunk_size: int = CHUNK_SIZE) -> LoadedFile:
    """Decode + normalise one file. Raises IngestionError on any problem."""
    if filename.lower().endswith(".gz"):
        try:
            content = gzip.decompress(content)
        except (OSError, EOFError) as exc:
            raise IngestionError(filename, f"Could not decompress: {exc}")
        filename = filename[:-3]

    raw = read_table(filename, content, chunk_size)
    records = normalize_frame(raw, filename)
    return LoadedFile(filename=filename, name=display_name_for(filename), records=records)


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------

def load_batch(files: list[tuple[str, bytes]], chunk_size: int = CHUNK_SIZE) -> BatchResult:
    """Load every file independently; one bad file never stops the others."""
    result = BatchResult()
    for i, (filename, content) in enumerate(files, 1):
        try:
            loaded = load_upload(filename, content, chunk_size)
        except IngestionError as exc:
            print(f"  Warning: skipping {filename}: {exc.message}")
            result.errors.append({"file": filename, "error": exc.message})
            continue
        except Exception as exc:
            print(f"  Warning: skipping {filename}: {exc}")
            result.errors.append({"file": filename, "error": f"Failed to parse file: {exc}"})
            continue

        result.loaded.append(loaded)
        users = loaded.records["user_id"].nunique()
        print(f"  [{i}/{len(files)}] {filename}: {len(loaded.records):,} records, {users:,} users")
    return result


def load_paths(paths: list[Path], chunk_size: int = CHUNK_SIZE) -> BatchResult:
    """Read files from disk and load them as one batch."""
    files = []
    missing = []
    for p in paths:
        p = Path(p)
        if not p.is_file():
            missing.append({"file": p.name, "error": "File not found"})
            print(f"  Warning: skipping {p.name}: file not found")
            continue
        files.append((p.name, p.read_bytes()))

    result = load_batch(files, chunk_size)
    result.errors = missing + result.errors
    return result
