import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class EvidenceType(str, Enum):
    """Column types understood by the Evidence host."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"


class TypeFidelity(str, Enum):
    # Schemas are always guessed from data, never declared by the user.
    INFERRED = "inferred"


# Values of these types are replaced by their JSON text when a record is flattened.
STRUCTURED_TYPES = (dict, list, tuple, datetime, date)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    # Kept as text so amounts are not rounded through float
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_value(value: Any) -> str:
    """
    Converts a structured value into its compact JSON text.
    Dates are rendered as quoted ISO 8601 strings, Decimals as quoted digits.
    Circular structures raise ValueError; callers are not expected to recover.
    """
    return json.dumps(
        value, separators=(",", ":"), ensure_ascii=False, default=_json_default
    )


def flatten_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replace every non-null structured value of a record with its JSON text.
    Scalars (str, numbers, booleans, None) are kept as they are.
    """
    flattened = {}
    for key, value in record.items():
        if isinstance(value, STRUCTURED_TYPES):
            flattened[key] = serialize_value(value)
        else:
            flattened[key] = value
    return flattened


def flatten_records(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [flatten_record(record) for record in records]


def classify_value(value: Any) -> EvidenceType:
    # bool is a subclass of int, but the host treats booleans as text here
    if isinstance(value, bool):
        return EvidenceType.STRING
    if isinstance(value, (int, float, Decimal)):
        return EvidenceType.NUMBER
    if isinstance(value, (datetime, date)):
        return EvidenceType.DATE
    return EvidenceType.STRING


def infer_column_types(rows: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Guess one column type per field of the first row.

    Later rows are not inspected: a field missing from row 0, or holding a
    different type further down, keeps whatever row 0 says.

    Args:
        rows: Flattened records.

    Returns:
        A list of column descriptors in row 0's key order, each a dict with
        keys name, evidenceType and typeFidelity.
    """
    if not rows:
        return []

    sample_row = rows[0]
    return [
        {
            "name": key,
            "evidenceType": classify_value(value).value,
            "typeFidelity": TypeFidelity.INFERRED.value,
        }
        for key, value in sample_row.items()
    ]


def build_row_batch(
    name: str, records: List[Dict[str, Any]], content: str
) -> Optional[Dict[str, Any]]:
    """
    Package a fetched collection into a row batch for the host.

    Args:
        name: Resource name the batch is published under.
        records: Raw records as returned by the source API.
        content: Cache key surrogate handed to the host as-is.

    Returns:
        The row batch, or None when there are no records to emit.
    """
    rows = flatten_records(records)
    if not rows:
        return None

    return {
        "rows": rows,
        "columnTypes": infer_column_types(rows),
        "expectedRowCount": len(rows),
        "name": name,
        "content": content,
    }
