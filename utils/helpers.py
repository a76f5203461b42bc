# utils/helpers.py
import logging
from typing import Any, Union, Optional

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def to_float(v: Any, default: float = 0.0) -> float:
    """
    Lenient numeric coercion for lookup/backend records.

    None, empty strings and unparsable values become `default`.
    """
    if v is None or v == "":
        return default
    try:
        return float(v)
    except (TypeError, ValueError):
        _log.debug("to_float: %r is not numeric, using %r", v, default)
        return default


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError on parse failures.
    """
    try:
        x = float(v)
    except Exception as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"
