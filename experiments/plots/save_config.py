"""Where nowcasting figures go on disk, and how they get there."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import plotly.graph_objects as go

_UNSAFE = re.compile(r"[^A-Za-z0-9_-]+")


def slugify(name: str) -> str:
    """File-system friendly slug; indicator codes like ``NY.GDP.PCAP.CD`` keep their parts."""
    slug = _UNSAFE.sub("_", name).strip("_")
    return slug or "figure"


@dataclass(frozen=True)
class PlotSaveDestinations:
    """Output files for one figure: ``<directory>/<slug>.{png,html}``."""

    directory: Path
    slug: str
    save_static: bool
    save_html: bool

    @property
    def png_path(self) -> Path:
        return self.directory / f"{self.slug}.png"

    @property
    def html_path(self) -> Path:
        return self.directory / f"{self.slug}.html"

    def enabled_paths(self) -> List[Path]:
        paths = []
        if self.save_static:
            paths.append(self.png_path)
        if self.save_html:
            paths.append(self.html_path)
        return paths


@dataclass(frozen=True)
class PlotSaveConfig:
    """One run's plot folder; every figure of the run lands in ``run_dir``."""

    base_dir: Path
    run_tag: str
    save_static: bool = True
    save_html: bool = True

    @property
    def run_dir(self) -> Path:
        return self.base_dir / self.run_tag

    def for_plot(self, name: str) -> PlotSaveDestinations:
        return PlotSaveDestinations(self.run_dir, slugify(name), self.save_static, self.save_html)


def emit_figure(fig: go.Figure, save_to: Optional[PlotSaveDestinations]) -> List[Path]:
    """Write ``fig`` to its destinations and return the files written.

    Without destinations the figure opens in the default Plotly renderer.
    """
    if save_to is None:
        fig.show()
        return []

    written = save_to.enabled_paths()
    if written:
        save_to.directory.mkdir(parents=True, exist_ok=True)
    for path in written:
        if path.suffix == ".png":
            fig.write_image(str(path), engine="kaleido")
        else:
            fig.write_html(str(path), include_plotlyjs="cdn", full_html=True)
    return written


__all__ = ["PlotSaveConfig", "PlotSaveDestinations", "emit_figure", "slugify"]
