"""Join retrieved estimates with a World Bank indicator for exploration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd

from nowcast.datahub.auxiliary import download_wdi_indicator, join_auxiliary, load_wdi_indicator
from nowcast.datahub.config import DEFAULT_RAW_ROOT
from nowcast.datahub.io import read_dataset


def build_exploration_table(
    estimates_csv: Path,
    wdi_indicator: str,
    *,
    raw_root: Path = DEFAULT_RAW_ROOT,
    wdi_csv: Optional[Path] = None,
    force: bool = False,
) -> pd.DataFrame:
    """Read estimates, fetch (or reuse) a WDI indicator and left-join them."""
    estimates = read_dataset(estimates_csv)
    csv_path = wdi_csv or download_wdi_indicator(raw_root, wdi_indicator, force=force)
    auxiliary = load_wdi_indicator(csv_path, value_name=wdi_indicator)
    joined = join_auxiliary(estimates, auxiliary)

    matched = int(joined[wdi_indicator].notna().sum())
    print(f"[auxiliary] Joined {len(joined)} estimate rows; {matched} matched a {wdi_indicator} value.")
    return joined
