"""Tabular I/O plus helpers for downloading archives and tracking cache metadata."""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import pandas as pd
import requests

from ..errors import RequestFailed
from .flatten import records_to_frame
from .records import RECORD_COLUMNS, IndicatorRecord

METADATA_SUFFIX = ".meta.json"


# ---------------------------------------------------------------------------
# Datasets on disk


def write_records(records: Iterable[IndicatorRecord], path: Path) -> pd.DataFrame:
    """Write flattened records to CSV and return the frame that was written."""
    df = records_to_frame(records)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return df


def read_dataset(path: Path) -> pd.DataFrame:
    """Read a records CSV, keeping codes and dates as strings."""
    df = pd.read_csv(
        path,
        dtype={"country": str, "region": str, "date": str, "indicator": str},
        keep_default_na=False,
        na_values={"predicted": [""], "predicted_error": [""]},
    )
    missing = [column for column in RECORD_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"{path} is missing record columns: {', '.join(missing)}")
    # Empty region strings stand for national rows.
    df["region"] = [value if value else None for value in df["region"]]
    df["predicted"] = pd.to_numeric(df["predicted"], errors="coerce")
    df["predicted_error"] = pd.to_numeric(df["predicted_error"], errors="coerce")
    return df


# ---------------------------------------------------------------------------
# Downloads


def sha256sum(path: Path) -> str:
    """Compute the SHA256 checksum for a file."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def read_metadata(path: Path) -> Mapping[str, Any]:
    """Load metadata JSON attached to an archive, returning an empty mapping on failure."""
    if not path.exists():
        return {}
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError:
        return {}


def write_metadata(path: Path, payload: Mapping[str, Any]) -> None:
    """Persist metadata next to the archive to skip redundant downloads."""
    path.write_text(json.dumps(payload, indent=2, sort_keys=True))


def needs_download(archive: Path, expected_sha: Optional[str]) -> bool:
    """Determine whether the archive must be re-downloaded."""
    if not archive.exists():
        return True
    if not expected_sha:
        return False
    return sha256sum(archive) != expected_sha


def download_stream(url: str, dest: Path, timeout: float = 60.0) -> None:
    """Stream a remote file to disk atomically."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    partial: Optional[Path] = None
    try:
        with requests.get(url, stream=True, timeout=timeout) as response:
            if response.status_code != 200:
                raise RequestFailed(
                    f"Download from {url} returned HTTP {response.status_code}",
                    url=url,
                    status_code=response.status_code,
                )
            with tempfile.NamedTemporaryFile(delete=False, dir=dest.parent) as tmp:
                partial = Path(tmp.name)
                for chunk in response.iter_content(chunk_size=8192):
                    if chunk:
                        tmp.write(chunk)
        os.replace(partial, dest)
    except requests.RequestException as exc:
        raise RequestFailed(f"Download from {url} failed: {exc}", url=url) from exc
    finally:
        # Left over only when the transfer did not complete.
        if partial is not None and partial.exists():
            partial.unlink()


def unzip(archive: Path, target_dir: Path) -> None:
    """Extract a zip archive to the provided directory."""
    target_dir.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive) as zipped:
        zipped.extractall(target_dir)


__all__ = [
    "METADATA_SUFFIX",
    "download_stream",
    "needs_download",
    "read_dataset",
    "read_metadata",
    "sha256sum",
    "unzip",
    "write_metadata",
    "write_records",
]
