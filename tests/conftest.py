"""Pytest configuration and shared fixtures for medianplots tests."""

from __future__ import annotations

import base64
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
import pytest


def pytest_configure() -> None:
    # Ensure `src/` is importable when running tests from the repo root.
    repo_root = Path(__file__).resolve().parents[1]
    src_dir = repo_root / "src"
    if src_dir.exists() and str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


GROUP_NAMES = ["Group 1", "Group 2", "Group 3", "Group 4", "Group 5"]


def make_groups_wide(n_rows: int = 10, seed: int = 0) -> pd.DataFrame:
    """Five groups, one column each, n_rows values per group."""
    rng = np.random.default_rng(seed)
    return pd.DataFrame({
        name: np.round(rng.normal(loc=10.0 * (i + 1), scale=2.0, size=n_rows), 2)
        for i, name in enumerate(GROUP_NAMES)
    })


# median(Treated - Control) = 1.0, median(Treated) - median(Control) = 3.0
PAIRED_WIDE = pd.DataFrame({
    "Subject": ["S1", "S2", "S3", "S4", "S5", "S6", "S7", "S8"],
    "Control": [10.0, 12.0, 9.0, 14.0, 11.0, 13.0, 8.0, 15.0],
    "Treated": [18.0, 12.0, 15.0, 14.0, 20.0, 12.0, 9.0, 16.0],
})

GENOTYPES_WIDE = pd.DataFrame({
    "Subject": [f"M{i}" for i in range(1, 13)],
    "Genotype": ["WT", "KO"] * 6,
    "Control": [5.0, 6.0, 5.5, 6.5, 4.8, 7.0, 5.2, 6.1, 5.9, 6.8, 5.1, 6.3],
    "Treated": [7.0, 6.2, 7.5, 6.0, 6.9, 7.4, 7.1, 5.8, 8.0, 6.6, 6.7, 6.9],
})


@pytest.fixture
def groups_wide() -> pd.DataFrame:
    return make_groups_wide()


@pytest.fixture
def paired_wide() -> pd.DataFrame:
    return PAIRED_WIDE.copy()


@pytest.fixture
def genotypes_wide() -> pd.DataFrame:
    return GENOTYPES_WIDE.copy()


@pytest.fixture
def workbook_path(tmp_path: Path) -> Path:
    """Workbook with the sheets used by the figure catalog plus an offset sheet.

    Offset sheet layout: a title in A1, row 2 blank, a 2-column table with its
    header in B3:C3 and three data rows (the middle one blank).
    """
    path = tmp_path / "sample_data.xlsx"
    offset_table = pd.DataFrame({"Before": [1.0, np.nan, 3.0], "After": [2.0, np.nan, 4.0]})
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        make_groups_wide().to_excel(writer, sheet_name="Groups", index=False)
        PAIRED_WIDE.to_excel(writer, sheet_name="Paired", index=False)
        GENOTYPES_WIDE.to_excel(writer, sheet_name="Genotypes", index=False)
        pd.DataFrame([["Figure 2 raw data"]]).to_excel(
            writer, sheet_name="Offset", header=False, index=False
        )
        offset_table.to_excel(writer, sheet_name="Offset", index=False, startrow=2, startcol=1)
    return path


# -----------------------------------------------------------------------------
# Plotly figure dict helpers
# -----------------------------------------------------------------------------

def decode_plotly_array(obj: Any) -> np.ndarray:
    """Decode plotly binary serialization (dtype + bdata) if present."""
    if isinstance(obj, dict) and "bdata" in obj and "dtype" in obj:
        b = base64.b64decode(obj["bdata"])
        dtype = np.dtype(obj["dtype"])
        return np.frombuffer(b, dtype=dtype).copy()
    return np.asarray(obj)


def traces_by_layer(fig_dict: dict[str, Any], layer: str) -> list[dict[str, Any]]:
    """Traces whose meta tag is layer ("points", "paired" or "summary")."""
    return [t for t in fig_dict.get("data", []) if t.get("meta") == layer]
