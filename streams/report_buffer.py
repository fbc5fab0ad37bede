"""
streams/report_buffer.py
Fixed-size circular buffer of StateReports with DataFrame export.

The buffer holds at most `maxlen` reports (default 500). When full, the
oldest report is evicted on push.

Usage:
    buf = ReportBuffer(maxlen=500)
    buf.push(report)
    history = buf.to_frame()
    history.to_csv("Results/churn_history.csv", index=False)
"""
__author__ = "Rahul Rajesh 2360445"

from collections import deque

import pandas as pd

from config.simulation_config import CONSTANTS
from qpu.report import StateReport

BASE_COLUMNS: list[str] = [
    "operation_count",
    "misprediction_score",
    "entropy_bits",
    "trace_distance",
]


class ReportBuffer:
    """Circular buffer of StateReport snapshots, oldest first."""

    def __init__(self, maxlen: int = int(CONSTANTS['history_window'])) -> None:
        self._buf: deque[StateReport] = deque(maxlen=maxlen)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def push(self, report: StateReport) -> None:
        """Append one report (evicts oldest if full)."""
        self._buf.append(report)

    @property
    def is_ready(self) -> bool:
        """True when the buffer holds exactly `maxlen` reports."""
        return len(self._buf) == self._buf.maxlen

    @property
    def fill_level(self) -> int:
        """Current number of reports stored (0 … maxlen)."""
        return len(self._buf)

    @property
    def latest(self) -> StateReport | None:
        return self._buf[-1] if self._buf else None

    def to_frame(self) -> pd.DataFrame:
        """
        One row per stored report, oldest first.

        Columns: BASE_COLUMNS followed by `qubit_<k>_distance` for each qubit.
        An empty buffer yields an empty frame with BASE_COLUMNS.
        """
        if not self._buf:
            return pd.DataFrame(columns=BASE_COLUMNS)
        return pd.DataFrame([r.as_row() for r in self._buf])
