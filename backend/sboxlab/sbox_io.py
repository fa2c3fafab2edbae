"""Upload parsing and export of S-Boxes.

Uploads may be a JSON array, a JSON record with an ``sbox`` field,
comma-separated or whitespace-separated integers. Parsing only turns text
into an SBoxCandidate; length, range and bijectivity are checked by
``SBoxCandidate.validate_sbox``.

Exports are the JSON record produced for download and an Excel workbook
with the 16x16 table and its metrics.
"""
import io
import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Union

import pandas as pd

from .config import LOGGER_NAME
from .errors import MalformedSBox
from .generator import GeneratedSBox
from .schemas import MetricBundle, SBoxCandidate, SBoxRecord

logger = logging.getLogger(LOGGER_NAME)

FORMATS = ("json", "csv", "txt")


def _parse_token(token: str) -> int:
    token = token.strip()
    try:
        if token.lower().startswith("0x"):
            return int(token, 16)
        return int(token, 10)
    except ValueError as e:
        raise MalformedSBox(f"Not an integer: {token!r}") from e


def _detect_format(content: str) -> str:
    stripped = content.lstrip()
    if stripped.startswith(("[", "{")):
        return "json"
    if "," in content:
        return "csv"
    return "txt"


def _values_from_json(content: str) -> List[int]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedSBox(f"Invalid JSON: {e}") from e

    if isinstance(data, dict):
        if "sbox" not in data:
            raise MalformedSBox("JSON record has no 'sbox' field")
        data = data["sbox"]
    if not isinstance(data, list):
        raise MalformedSBox("Expected a JSON array of integers")

    values = []
    for item in data:
        if isinstance(item, bool) or not isinstance(item, int):
            raise MalformedSBox(f"Not an integer: {item!r}")
        values.append(item)
    return values


def parse_sbox_text(content: str, fmt: Optional[str] = None) -> SBoxCandidate:
    fmt = fmt or _detect_format(content)
    if fmt not in FORMATS:
        raise MalformedSBox(f"Unsupported S-Box format {fmt!r}, expected one of {FORMATS}")

    if fmt == "json":
        values = _values_from_json(content)
    elif fmt == "csv":
        tokens = [t for t in re.split(r"[,\s]+", content) if t]
        values = [_parse_token(t) for t in tokens]
    else:
        values = [_parse_token(t) for t in content.split()]

    logger.debug(f"Parsed {len(values)} S-Box values from {fmt} text")
    return SBoxCandidate(values=values)


def load_sbox_file(path: Union[str, Path]) -> SBoxCandidate:
    path = Path(path)
    suffix = path.suffix.lower().lstrip(".")
    fmt = suffix if suffix in FORMATS else None
    return parse_sbox_text(path.read_text(encoding="utf-8"), fmt)


def build_record(generated: GeneratedSBox, timestamp: datetime) -> SBoxRecord:
    return SBoxRecord(
        sbox=list(generated.sbox),
        matrix=[list(row) for row in generated.matrix],
        vector=list(generated.vector),
        timestamp=timestamp,
    )


def record_to_json(record: SBoxRecord) -> bytes:
    return record.model_dump_json(indent=2).encode("utf-8")


def record_from_json(data: Union[str, bytes]) -> SBoxRecord:
    return SBoxRecord.model_validate_json(data)


def sbox_to_frame(sbox: Sequence[int]) -> pd.DataFrame:
    df_sbox = pd.DataFrame([list(sbox[i:i+16]) for i in range(0, 256, 16)])
    # Hex formatting
    return df_sbox.apply(lambda col: col.map(lambda x: f"{x:02X}"))


def export_excel(sbox: Sequence[int], metrics: Optional[MetricBundle] = None) -> bytes:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        sbox_to_frame(sbox).to_excel(writer, sheet_name='S-Box', header=False, index=False)
        if metrics:
            ratings = metrics.rate().model_dump()
            df_metrics = pd.DataFrame(
                [(name, value, ratings[name]) for name, value in metrics.model_dump().items()],
                columns=['Metric', 'Value', 'Rating'],
            )
            df_metrics.to_excel(writer, sheet_name='Metrics', index=False)
    return output.getvalue()
