import operator
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import MalformedSBox

SBOX_SIZE = 256


def sbox_table_problem(values: Sequence) -> Optional[str]:
    """Describe why `values` is not a permutation of 0..255, or None if it is."""
    try:
        size = len(values)
    except TypeError:
        return "S-Box must be a sequence of integers"
    if size != SBOX_SIZE:
        return f"S-Box must have {SBOX_SIZE} entries, got {size}"

    seen = set()
    for index, value in enumerate(values):
        if isinstance(value, bool):
            return f"Entry {index} is not an integer: {value!r}"
        try:
            value = operator.index(value)
        except TypeError:
            return f"Entry {index} is not an integer: {value!r}"
        if value < 0 or value > 255:
            return f"Entry {index} is out of range 0-255: {value}"
        if value in seen:
            return f"Value {value} appears more than once"
        seen.add(value)
    return None


class ValidSBox(BaseModel):
    """A 256-entry table that passed the bijectivity check."""
    model_config = ConfigDict(frozen=True)

    table: Tuple[int, ...]

    def __init__(self, **data: Any):
        if "table" in data:
            problem = sbox_table_problem(data["table"])
            if problem:
                raise MalformedSBox(problem)
        super().__init__(**data)

    @field_validator("table")
    @classmethod
    def check_permutation(cls, table: Tuple[int, ...]) -> Tuple[int, ...]:
        problem = sbox_table_problem(table)
        if problem:
            raise ValueError(problem)
        return table

    @classmethod
    def from_table(cls, values: Sequence[int]) -> "ValidSBox":
        problem = sbox_table_problem(values)
        if problem:
            raise MalformedSBox(problem)
        return cls(table=tuple(int(v) for v in values))

    def model_copy(self, *, update: Optional[Mapping[str, Any]] = None, deep: bool = False) -> "ValidSBox":
        """Copies are re-validated; pydantic skips validators on `update`."""
        copied = super().model_copy(update=update, deep=deep)
        return type(self).from_table(copied.table)

    def inverse_table(self) -> List[int]:
        inv_sbox = [0] * SBOX_SIZE
        for i, val in enumerate(self.table):
            inv_sbox[val] = i
        return inv_sbox


class SBoxCandidate(BaseModel):
    """Unchecked S-Box, as supplied by an upload or a caller."""
    values: List[int]

    def problem(self) -> Optional[str]:
        return sbox_table_problem(self.values)

    def validate_sbox(self) -> ValidSBox:
        return ValidSBox.from_table(self.values)


RATINGS = ("Excellent", "Good", "Moderate", "Weak")

# Lower bounds for NL and SAC, upper bounds for DAP, best rating first.
NL_THRESHOLDS = (100, 80, 60)
SAC_THRESHOLDS = (0.95, 0.85, 0.7)
DAP_THRESHOLDS = (0.02, 0.05, 0.1)


def rate_nonlinearity(value: int) -> str:
    for label, bound in zip(RATINGS, NL_THRESHOLDS):
        if value >= bound:
            return label
    return RATINGS[-1]


def rate_sac(value: float) -> str:
    for label, bound in zip(RATINGS, SAC_THRESHOLDS):
        if value >= bound:
            return label
    return RATINGS[-1]


def rate_dap(value: float) -> str:
    for label, bound in zip(RATINGS, DAP_THRESHOLDS):
        if value <= bound:
            return label
    return RATINGS[-1]


class MetricRatings(BaseModel):
    model_config = ConfigDict(frozen=True)

    nonlinearity: str
    sac: str
    dap: str


class MetricBundle(BaseModel):
    model_config = ConfigDict(frozen=True)

    nonlinearity: int = Field(ge=0, le=128)
    sac: float = Field(ge=0.0, le=1.0)
    dap: float = Field(ge=0.0, le=1.0)

    def rate(self) -> MetricRatings:
        """Qualitative label per metric: Excellent, Good, Moderate or Weak."""
        return MetricRatings(
            nonlinearity=rate_nonlinearity(self.nonlinearity),
            sac=rate_sac(self.sac),
            dap=rate_dap(self.dap),
        )


class AnalysisReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_bijective: bool
    is_balanced: bool
    metrics: Optional[MetricBundle] = None

    def ratings(self) -> Optional[MetricRatings]:
        return self.metrics.rate() if self.metrics else None


class SBoxRecord(BaseModel):
    """Export artifact for a generated S-Box."""
    sbox: List[int]
    matrix: List[List[int]]
    vector: List[int]
    timestamp: datetime

    @field_validator("sbox")
    @classmethod
    def check_sbox_size(cls, sbox: List[int]) -> List[int]:
        if len(sbox) != SBOX_SIZE:
            raise ValueError(f"S-Box must have {SBOX_SIZE} entries")
        return sbox

    @field_validator("matrix")
    @classmethod
    def check_matrix_shape(cls, matrix: List[List[int]]) -> List[List[int]]:
        if len(matrix) != 8 or any(len(row) != 8 for row in matrix):
            raise ValueError("Affine matrix must be 8x8")
        return matrix

    @field_validator("vector")
    @classmethod
    def check_vector_size(cls, vector: List[int]) -> List[int]:
        if len(vector) != 8:
            raise ValueError("Affine vector must have 8 bits")
        return vector
