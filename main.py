from datetime import datetime
from pathlib import Path
from typing import List, Optional

import pandas as pd
import typer

from experiments.explore import build_exploration_table
from experiments.nowcast import SCHEMES, run_nowcast, summaries_to_frame
from experiments.plots import (
    PlotSaveConfig,
    plot_estimates_vs_auxiliary,
    plot_observed_vs_predicted,
    plot_partition_metrics,
)
from nowcast.datahub import EstimatesRequest, prepare_estimates
from nowcast.datahub.config import DEFAULT_AGE_RANGES, DEFAULT_PROCESSED_ROOT, DEFAULT_RAW_ROOT
from nowcast.datahub.marketing import AudienceClient, MarketingCredentials, build_query_grid
from nowcast.errors import NowcastError

app = typer.Typer()


def _parse_age_ranges(values: List[str]) -> List[tuple]:
    ranges = []
    for value in values:
        lo, sep, hi = value.partition("-")
        if not sep:
            raise typer.BadParameter(f"Age range '{value}' must look like 18-24.")
        try:
            ranges.append((int(lo), int(hi)))
        except ValueError as exc:
            raise typer.BadParameter(f"Age range '{value}' must contain integers.") from exc
    return ranges


def _save_config(plots_root: Optional[Path], plots_tag: Optional[str], scope: str, save_static: bool, save_html: bool):
    if not plots_root:
        return None
    tag = plots_tag or datetime.utcnow().strftime("%Y%m%d-%H%M%S")
    base_dir = plots_root / scope
    print(f"[plots] Saving figures under {base_dir / tag}")
    return PlotSaveConfig(base_dir=base_dir, run_tag=tag, save_static=save_static, save_html=save_html)


@app.command("estimates")
def estimates(
    codes: List[str] = typer.Argument(..., help="Country (ISO3) or GADM1 region codes."),
    level: str = typer.Option("national", "--level", help="national or subnational."),
    start_date: Optional[str] = typer.Option(None, "--start-date", help="First month, YYYY-MM."),
    end_date: Optional[str] = typer.Option(None, "--end-date", help="Last month, YYYY-MM."),
    output: Path = typer.Option(
        DEFAULT_PROCESSED_ROOT / "estimates.csv",
        "--output",
        dir_okay=False,
        help="CSV file receiving the flattened records.",
    ),
    strict: bool = typer.Option(False, "--strict", help="Exit non-zero if any code fails."),
) -> None:
    """
    Retrieve precomputed indicator estimates and flatten them into a CSV.
    """
    try:
        request = EstimatesRequest.from_flags(level=level, codes=codes, start_date=start_date, end_date=end_date)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    result = prepare_estimates(request, output_path=output)
    if strict and not result.ok:
        raise typer.Exit(code=1)


@app.command("audience")
def audience(
    countries: List[str] = typer.Argument(..., help="ISO2 country codes to target."),
    genders: List[str] = typer.Option(["male", "female"], "--gender", help="all, male or female."),
    age_ranges: List[str] = typer.Option(
        [f"{lo}-{hi}" for lo, hi in DEFAULT_AGE_RANGES],
        "--age-range",
        help="Age bands such as 18-24 (65 means 65+).",
    ),
    pause: float = typer.Option(1.0, "--pause", help="Seconds to wait between requests."),
    output: Path = typer.Option(DEFAULT_PROCESSED_ROOT / "audience.csv", "--output", dir_okay=False),
) -> None:
    """
    Query monthly-active-user audience counts from the marketing API.
    """
    try:
        credentials = MarketingCredentials.from_env()
        queries = build_query_grid(countries, genders, _parse_age_ranges(age_ranges))
    except NowcastError as exc:
        raise typer.BadParameter(str(exc)) from exc

    df = AudienceClient(credentials).collect(queries, pause=pause)
    output.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output, index=False)
    print(f"[audience] Saved {len(df)} rows → {output}")


@app.command("auxiliary")
def auxiliary(
    estimates_csv: Path = typer.Argument(..., exists=True, dir_okay=False, help="Output of `estimates`."),
    wdi_indicator: str = typer.Option("NY.GDP.PCAP.CD", "--wdi", help="World Bank indicator code."),
    indicator: str = typer.Option("internet_fm_ratio", "--indicator", help="Estimate indicator to plot."),
    raw_root: Path = typer.Option(DEFAULT_RAW_ROOT, "--raw-root", file_okay=False, help="Download cache."),
    force: bool = typer.Option(False, "--force", help="Redownload even if files exist."),
    output: Path = typer.Option(DEFAULT_PROCESSED_ROOT / "estimates_joined.csv", "--output", dir_okay=False),
    plots_root: Optional[Path] = typer.Option(None, "--plots-root", help="Directory where plots should be saved."),
    plots_tag: Optional[str] = typer.Option(None, "--plots-tag", help="Folder suffix for this run."),
    save_static: bool = typer.Option(True, help="Write static PNG snapshots when saving plots."),
    save_html: bool = typer.Option(True, help="Write interactive HTML plots when saving."),
) -> None:
    """
    Join retrieved estimates with a World Bank indicator and plot them.
    """
    try:
        joined = build_exploration_table(estimates_csv, wdi_indicator, raw_root=raw_root, force=force)
    except (NowcastError, ValueError, OSError) as exc:
        raise typer.BadParameter(str(exc)) from exc
    output.parent.mkdir(parents=True, exist_ok=True)
    joined.to_csv(output, index=False)
    print(f"[auxiliary] Saved joined table → {output}")

    save_config = _save_config(plots_root, plots_tag, "auxiliary", save_static, save_html)
    plot_estimates_vs_auxiliary(
        joined,
        indicator,
        wdi_indicator,
        save_to=save_config.for_plot(f"{indicator}_vs_{wdi_indicator}") if save_config else None,
    )


@app.command("nowcast")
def nowcast(
    data: Path = typer.Argument(..., exists=True, dir_okay=False, help="Training table (CSV)."),
    target: str = typer.Option(..., "--target", help="Observed indicator column to nowcast."),
    features: List[str] = typer.Option(..., "--feature", help="Predictor column (repeatable)."),
    scheme: str = typer.Option("kfold", "--scheme", help=f"Resampling scheme: {', '.join(SCHEMES)}."),
    models: List[str] = typer.Option(["ols", "random-forest"], "--model", help="Regressor key (repeatable)."),
    folds: int = typer.Option(10, "--folds", help="Number of folds for --scheme kfold."),
    group_key: Optional[str] = typer.Option(None, "--group-key", help="Column held out by --scheme logo."),
    test_size: float = typer.Option(0.2, "--test-size", help="Hold-out share for --scheme holdout."),
    seed: int = typer.Option(42, "--seed", help="Seed for partition shuffles and forests."),
    tune_trials: int = typer.Option(0, "--tune-trials", help="Optuna trials for the random forest, tuned once on all rows (optimistic scores; 0 disables)."),
    summary_output: Optional[Path] = typer.Option(None, "--summary-output", dir_okay=False),
    plots_root: Optional[Path] = typer.Option(None, "--plots-root", help="Directory where plots should be saved."),
    plots_tag: Optional[str] = typer.Option(None, "--plots-tag", help="Folder suffix for this run."),
    save_static: bool = typer.Option(True, help="Write static PNG snapshots when saving plots."),
    save_html: bool = typer.Option(True, help="Write interactive HTML plots when saving."),
) -> None:
    """
    Cross-validate OLS and random forest nowcasts of an indicator.
    """
    dataset = pd.read_csv(data)
    try:
        reports = run_nowcast(
            dataset,
            target,
            features,
            scheme=scheme,
            models=models,
            folds=folds,
            group_key=group_key,
            test_size=test_size,
            seed=seed,
            tune_trials=tune_trials,
        )
    except (NowcastError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    if summary_output:
        summary_output.parent.mkdir(parents=True, exist_ok=True)
        summaries_to_frame(reports).to_csv(summary_output, index=False)
        print(f"[nowcast] Saved summaries → {summary_output}")

    save_config = _save_config(plots_root, plots_tag, f"nowcast/{target}", save_static, save_html)
    plot_partition_metrics(
        {name: report.results for name, report in reports.items()},
        metric="rmse",
        save_to=save_config.for_plot(f"{scheme}_rmse") if save_config else None,
    )
    for name, report in reports.items():
        plot_observed_vs_predicted(
            report.predictions,
            name,
            target,
            save_to=save_config.for_plot(f"{scheme}_{name}_observed_vs_predicted") if save_config else None,
        )


if __name__ == "__main__":
    app()
