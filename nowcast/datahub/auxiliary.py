"""World Bank WDI downloads and joins against indicator estimates."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd

from .config import WORLD_BANK_WDI
from .io import (
    METADATA_SUFFIX,
    download_stream,
    needs_download,
    read_metadata,
    sha256sum,
    unzip,
    write_metadata,
)

WDI_ID_COLUMNS = ["Country Name", "Country Code", "Indicator Name", "Indicator Code"]


def download_wdi_indicator(raw_root: Path, indicator: str, force: bool = False) -> Path:
    """
    Download a World Bank indicator archive and return the path of its data CSV.

    Parameters
    ----------
    raw_root:
        Directory used to store raw downloads (default: ``data/raw``).
    indicator:
        WDI indicator code, e.g. ``NY.GDP.PCAP.CD``.
    force:
        If True, redownload the archive even if it already exists locally.
    """
    target_root = raw_root / WORLD_BANK_WDI["folder_name"]
    target_root.mkdir(parents=True, exist_ok=True)

    archive_path = target_root / f"{indicator}.zip"
    meta_path = archive_path.with_suffix(METADATA_SUFFIX)
    meta = read_metadata(meta_path)

    if force or needs_download(archive_path, meta.get("sha256")):
        url = WORLD_BANK_WDI["url_template"].format(indicator=indicator)
        print(f"[auxiliary] Downloading WDI {indicator} from {url}")
        download_stream(url, archive_path)
        updated = dict(meta)
        updated["sha256"] = sha256sum(archive_path)
        updated["indicator"] = indicator
        write_metadata(meta_path, updated)
    else:
        print(f"[auxiliary] WDI {indicator} archive present; skipping download.")

    extract_dir = target_root / indicator
    unzip(archive_path, extract_dir)
    return find_wdi_csv(extract_dir, indicator)


def find_wdi_csv(directory: Path, indicator: str) -> Path:
    """Locate the data file inside an extracted WDI archive (skipping Metadata_*.csv)."""
    candidates = sorted(
        path for path in directory.glob("*.csv") if not path.name.startswith("Metadata")
    )
    for path in candidates:
        if indicator in path.name:
            return path
    if candidates:
        return candidates[0]
    raise FileNotFoundError(f"No WDI data CSV for {indicator} under {directory}")


def load_wdi_indicator(path: Path, value_name: Optional[str] = None) -> pd.DataFrame:
    """
    Load a WDI CSV export (years as columns) into long format.

    Returns a frame with columns ``country`` (ISO3), ``year`` (int) and
    ``value_name`` (defaults to the indicator code).
    """
    df = pd.read_csv(path, skiprows=WORLD_BANK_WDI["skiprows"])
    year_cols = [c for c in df.columns if c not in WDI_ID_COLUMNS]
    indicator_codes = df["Indicator Code"].dropna().unique()
    column = value_name or (str(indicator_codes[0]) if len(indicator_codes) else "value")

    df_long = df.melt(
        id_vars=WDI_ID_COLUMNS,
        value_vars=year_cols,
        var_name="year",
        value_name=column,
    )
    df_long["year"] = pd.to_numeric(df_long["year"], errors="coerce")
    # Trailing "Unnamed" columns in WDI exports melt into non-numeric years.
    df_long = df_long.dropna(subset=["year", column])
    df_long["year"] = df_long["year"].astype(int)
    df_long = df_long.rename(columns={"Country Code": "country"})
    return df_long[["country", "year", column]].reset_index(drop=True)


def join_auxiliary(
    estimates: pd.DataFrame,
    auxiliary: pd.DataFrame,
    *,
    on_country: str = "country",
    on_year: str = "year",
) -> pd.DataFrame:
    """Left-join estimates with an auxiliary country-year table.

    The estimates ``date`` label (``YYYY`` or ``YYYY-MM``) is reduced to a year
    for the join key.
    """
    if on_country not in auxiliary.columns or on_year not in auxiliary.columns:
        raise ValueError(
            f"Auxiliary frame needs '{on_country}' and '{on_year}' columns, got {list(auxiliary.columns)}"
        )
    left = estimates.copy()
    left["year"] = pd.to_numeric(left["date"].astype(str).str.slice(0, 4), errors="coerce").astype("Int64")
    right = auxiliary.rename(columns={on_country: "country", on_year: "year"}).copy()
    right["year"] = pd.to_numeric(right["year"], errors="coerce").astype("Int64")
    return left.merge(right, on=["country", "year"], how="left")


__all__ = [
    "download_wdi_indicator",
    "find_wdi_csv",
    "join_auxiliary",
    "load_wdi_indicator",
]
