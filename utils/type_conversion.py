"""
Value conversion to declared attribute types.

Conversion table (None always converts to None):

    string    str as is; bool → "true"/"false"; int/float/Decimal → str();
              date/datetime → ISO-8601
    int/long  int as is; integral float/Decimal → int; str → int()
    float/double  int/float/Decimal → float; str → float()
    decimal   int/Decimal/str → Decimal; float → Decimal(repr)
    boolean   bool as is; "true"/"false" (any case) → bool
    date      date as is; datetime → date(); str → date.fromisoformat
    datetime  datetime as is; str → datetime.fromisoformat ("Z" = UTC)
    any       identity

bool is never accepted where a number is expected and numbers are never
accepted as booleans.
"""

from collections import Counter
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable

from exceptions import ValueConversionError
from models.mapping import AttributeType


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("boolean is not a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value} is not integral")
        return int(value)
    if isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise ValueError(f"{value} is not integral")
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("boolean is not a number")
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise TypeError("boolean is not a number")
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation as e:
            raise ValueError(f"invalid decimal {value!r}") from e
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise ValueError(f"invalid boolean {value!r}")
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip())
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    raise TypeError(f"unsupported source type {type(value).__name__}")


CONVERTERS: dict[AttributeType, Callable[[Any], Any]] = {
    AttributeType.STRING: _to_string,
    AttributeType.INT: _to_int,
    AttributeType.LONG: _to_int,
    AttributeType.FLOAT: _to_float,
    AttributeType.DOUBLE: _to_float,
    AttributeType.DECIMAL: _to_decimal,
    AttributeType.BOOLEAN: _to_boolean,
    AttributeType.DATE: _to_date,
    AttributeType.DATETIME: _to_datetime,
    AttributeType.ANY: lambda value: value,
}


def convert_value(value: Any, target_type: AttributeType) -> Any:
    """
    Convert a value to the declared attribute type.

    Args:
        value: Raw value read from a record
        target_type: Declared type of the target attribute

    Returns:
        Converted value, or None for None

    Raises:
        ValueConversionError: If the value cannot be converted
    """
    if value is None:
        return None
    try:
        return CONVERTERS[target_type](value)
    except (TypeError, ValueError, ArithmeticError) as e:
        raise ValueConversionError(value, target_type.value, reason=str(e)) from e


def normalize_value(value: Any, target_type: AttributeType) -> Any:
    """Convert if possible, otherwise return the value unchanged."""
    try:
        return convert_value(value, target_type)
    except ValueConversionError:
        return value


def _key(value: Any) -> tuple:
    # True == 1 == 1.0 in Python; a boolean must only match a boolean
    return (isinstance(value, bool), value)


def unordered_equals(left: Iterable[Any], right: Iterable[Any]) -> bool:
    """
    Compare two collections as multisets: order ignored, duplicate counts kept.

    Booleans never equal numbers. Falls back to pairwise matching when
    values are not hashable.
    """
    left = [_key(v) for v in left]
    right = [_key(v) for v in right]
    if len(left) != len(right):
        return False
    try:
        return Counter(left) == Counter(right)
    except TypeError:
        remaining = list(right)
        for item in left:
            for index, candidate in enumerate(remaining):
                if candidate == item:
                    del remaining[index]
                    break
            else:
                return False
        return not remaining
