# utils/validators.py

# ---- Numeric parsing ----

def try_parse_float(x):
    """
    Best-effort parse to float. Accepts thousands separators ("1,250.00").

    Returns:
        (ok: bool, value: float|None)

    ok == False means parsing failed and value is None.
    """
    if isinstance(x, str):
        x = x.replace(",", "").strip()
    try:
        return True, float(x)
    except (TypeError, ValueError):
        return False, None
