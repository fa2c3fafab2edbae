import logging
import operator
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence, Union

import numpy as np

from .config import LOGGER_NAME, load_settings
from .errors import MalformedSBox
from .schemas import SBOX_SIZE, AnalysisReport, MetricBundle, ValidSBox, sbox_table_problem

logger = logging.getLogger(LOGGER_NAME)

SBoxLike = Union[ValidSBox, Sequence[int]]


def _entries(sbox: SBoxLike) -> Sequence:
    if isinstance(sbox, ValidSBox):
        return sbox.table
    return sbox


def _to_array(sbox: SBoxLike) -> Optional[np.ndarray]:
    """256-entry int array, or None when the table is mis-sized, non-integer or out of range."""
    values = _entries(sbox)
    try:
        if len(values) != SBOX_SIZE:
            return None
        ints = []
        for value in values:
            if isinstance(value, bool):
                return None
            ints.append(operator.index(value))
    except TypeError:
        return None
    table = np.array(ints, dtype=np.int64)
    if table.min() < 0 or table.max() > 255:
        return None
    return table


class SBoxMath:
    """Cryptographic strength metrics for 8-bit S-Boxes.

    `is_bijective` and `is_balanced` accept anything and answer False for
    malformed tables. The numeric metrics need 256 entries in 0-255 and raise
    MalformedSBox otherwise.
    """

    def _require_table(self, sbox: SBoxLike) -> np.ndarray:
        table = _to_array(sbox)
        if table is None:
            raise MalformedSBox("Metric needs 256 integer entries in range 0-255")
        return table

    def is_bijective(self, sbox: SBoxLike) -> bool:
        return sbox_table_problem(_entries(sbox)) is None

    def is_balanced(self, sbox: SBoxLike) -> bool:
        """
        Check if each output bit is balanced (has 128 zeros and 128 ones).
        """
        table = _to_array(sbox)
        if table is None:
            return False
        for i in range(8):
            count_ones = int(((table >> i) & 1).sum())
            if count_ones != SBOX_SIZE // 2:
                return False
        return True

    # --- METRICS IMPLEMENTATION ---

    def _walsh_transform(self, truth_table: np.ndarray) -> np.ndarray:
        fwht = np.array(truth_table, dtype=np.int64)
        h = 1
        while h < fwht.size:
            blocks = fwht.reshape(-1, 2, h)
            x = blocks[:, 0, :].copy()
            y = blocks[:, 1, :]
            blocks[:, 0, :] = x + y
            blocks[:, 1, :] = x - y
            h *= 2
        return fwht

    def component_nonlinearities(self, sbox: SBoxLike) -> List[int]:
        table = self._require_table(sbox)
        nl_values = []
        for i in range(8):  # For each output bit function
            # (-1)^f(x)
            truth_table = 1 - 2 * ((table >> i) & 1)
            fwht = self._walsh_transform(truth_table)
            max_walsh = int(np.max(np.abs(fwht)))
            nl_values.append(SBOX_SIZE // 2 - max_walsh // 2)
        return nl_values

    def nonlinearity(self, sbox: SBoxLike) -> int:
        """Nonlinearity: worst (minimum) over the 8 output-bit components."""
        return min(self.component_nonlinearities(sbox))

    def sac_matrix(self, sbox: SBoxLike) -> np.ndarray:
        """P(output bit j flips | input bit i flipped) for every (i, j)."""
        table = self._require_table(sbox)
        xs = np.arange(SBOX_SIZE)
        sac = np.zeros((8, 8))
        for i in range(8):  # input bit flipped
            diff = table ^ table[xs ^ (1 << i)]
            for j in range(8):  # output bit changed
                sac[i][j] = ((diff >> j) & 1).sum() / float(SBOX_SIZE)
        return sac

    def sac(self, sbox: SBoxLike) -> float:
        """Strict Avalanche Criterion score, 1.0 is ideal."""
        deviation = np.abs(self.sac_matrix(sbox) - 0.5)
        return float(1.0 - 2.0 * np.mean(deviation))

    def dap(self, sbox: SBoxLike) -> float:
        """Differential Approximation Probability"""
        table = self._require_table(sbox)
        xs = np.arange(SBOX_SIZE)
        max_diff = 0
        for dx in range(1, SBOX_SIZE):  # input diff
            dy = table ^ table[xs ^ dx]
            max_diff = max(max_diff, int(np.bincount(dy, minlength=SBOX_SIZE).max()))
        return max_diff / float(SBOX_SIZE)

    def metrics(self, sbox: SBoxLike) -> MetricBundle:
        return MetricBundle(
            nonlinearity=self.nonlinearity(sbox),
            sac=self.sac(sbox),
            dap=self.dap(sbox),
        )

    def analyze(self, sbox: SBoxLike) -> AnalysisReport:
        bijective = self.is_bijective(sbox)
        balanced = self.is_balanced(sbox)
        metrics = None
        if _to_array(sbox) is not None:
            metrics = self.metrics(sbox)
        logger.info(f"S-Box analysis: bijective={bijective}, balanced={balanced}, metrics={metrics}")
        return AnalysisReport(is_bijective=bijective, is_balanced=balanced, metrics=metrics)

    def analyze_many(self, sboxes: Iterable[SBoxLike], max_workers: Optional[int] = None) -> List[AnalysisReport]:
        """Analyze independent S-Boxes concurrently; reports keep input order."""
        workers = max_workers or load_settings().analysis_workers
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self.analyze, sboxes))


sbox_math = SBoxMath()

is_bijective = sbox_math.is_bijective
is_balanced = sbox_math.is_balanced
nonlinearity = sbox_math.nonlinearity
sac = sbox_math.sac
dap = sbox_math.dap
analyze = sbox_math.analyze
analyze_many = sbox_math.analyze_many
