from pathlib import Path
from typing import Iterable

import pandas as pd

from .classifier import StatusGroup, classify, filter_by_group
from .metrics import UrlStatusResult

RESULTS_DIR_NAME = "results"

EXPORT_FORMATS = ("csv", "txt", "json")

def results_to_df(results: Iterable[UrlStatusResult]) -> pd.DataFrame:
    """
    One row per result, using the display column names, plus its status group.
    """
    rows = [{**r.to_dict(), "Group": classify(r).value} for r in results]
    return pd.DataFrame(rows)

def save_df(df: pd.DataFrame, name: str, fmt: str = "csv", results_dir: Path | None = None) -> Path | None:
    """
    Persist a DataFrame under <results_dir>/<name>.<fmt>, where results_dir
    defaults to ./results in the working directory.

    This intentionally keeps the storage layer minimal, but centralizes
    the filesystem layout so it can be replaced later.
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt!r}")
    if df.empty:
        return None

    out_dir = Path(results_dir) if results_dir else Path.cwd() / RESULTS_DIR_NAME
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"{name}.{fmt}"

    if fmt == "csv":
        df.to_csv(out_path, index=False)
    elif fmt == "json":
        df.to_json(out_path, orient="records", indent=2)
    else:
        # Plain list of the URLs as they were supplied
        out_path.write_text("\n".join(df["Original URL"].astype(str)), encoding="utf-8")

    print(f"Saved {out_path}")
    return out_path

def save_results(
    results: Iterable[UrlStatusResult],
    name: str = "url-status-results",
    fmt: str = "csv",
    group: StatusGroup | str | None = None,
    results_dir: Path | None = None,
) -> Path | None:
    selected = filter_by_group(results, group)
    return save_df(results_to_df(selected), name, fmt=fmt, results_dir=results_dir)
