"""Diagnostic export of intermediate scan lines.

When a debug directory is configured on the extractor, each non-empty
scan line and the original cloud are written as Parquet files into a
timestamped subdirectory.  These files exist purely for inspection:
any failure is logged and extraction carries on.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from ..utils.logging import get_logger

logger = get_logger(__name__)

TIMESTAMP_FORMAT = "%Y_%m_%d_%H_%M_%S_%f"


def cloud_to_dataframe(points: np.ndarray) -> pd.DataFrame:
    """Convert a structured (or plain ``(N, M)``) cloud to a DataFrame.

    Subarray fields such as ``normal`` of shape ``(3,)`` are split into
    one column per element (``normal_0``, ``normal_1``, ...).
    """
    if points.dtype.names is not None:
        columns = {}
        for name in points.dtype.names:
            values = points[name]
            if values.ndim == 1:
                columns[name] = values
                continue
            flat = values.reshape(len(values), -1)
            for i in range(flat.shape[1]):
                columns[f"{name}_{i}"] = flat[:, i]
        return pd.DataFrame(columns)
    col_names = ["x", "y", "z"] + [f"col_{i}" for i in range(3, points.shape[1])]
    return pd.DataFrame(points, columns=col_names[:points.shape[1]])


def _write(points: np.ndarray, path: Path) -> bool:
    # diagnostics only: any conversion or write error is logged, never raised
    try:
        cloud_to_dataframe(points).to_parquet(path, index=False)
    except Exception as exc:
        logger.error("Unable to save cloud to %s. Reason: %s", path, exc)
        return False
    return True


def dump_scan_lines(
    scan_lines: List[np.ndarray],
    original: np.ndarray,
    output_dir: Path,
    now: Optional[datetime] = None,
) -> Optional[Path]:
    """Write the scan lines and the original cloud for inspection.

    Parameters
    ----------
    scan_lines : list of numpy.ndarray
        Canonical per-beam clouds; empty ones are skipped.
    original : numpy.ndarray
        The cloud as handed to the extractor.
    output_dir : Path
        Existing directory under which a timestamped folder is created.
    now : datetime, optional
        Timestamp used for the folder name (defaults to the current time).

    Returns
    -------
    Path or None
        The folder that was written, or None if nothing was written.
    """
    output_dir = Path(output_dir)
    if len(original) == 0:
        return None
    if not output_dir.is_dir():
        logger.error(
            "Output directory for scan lines does not exist, not outputting. Input: %s",
            output_dir,
        )
        return None

    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    save_dir = output_dir / stamp
    try:
        save_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("Unable to create debug directory %s. Reason: %s", save_dir, exc)
        return None

    for i, line in enumerate(scan_lines):
        if len(line) == 0:
            continue
        _write(line, save_dir / f"scan{i}.parquet")
    _write(original, save_dir / "scan_orig.parquet")
    return save_dir
