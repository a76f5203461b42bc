"""
settlement/line_calculator.py

Per-line allocation math. Given one outstanding line and the amount being
settled against it, derive the local-currency amounts and the FX difference
between the document's original rate and the settlement rate.
"""
from __future__ import annotations

from dataclasses import replace

from .calculations import DecimalSettings, math_round, multiply, subtract
from .lines import OutstandingDocumentLine

__all__ = ["calculate_line"]


def calculate_line(
    line: OutstandingDocumentLine,
    alloc_amt: float,
    exh_rate: float,
    decimals: DecimalSettings,
) -> OutstandingDocumentLine:
    """
    Return a copy of `line` allocated with `alloc_amt`.

      alloc_local_amt     = alloc_amt * exh_rate        (settlement rate)
      doc_alloc_amt       = alloc_amt
      doc_alloc_local_amt = alloc_amt * doc_exh_rate    (document rate)
      cent_diff           = doc_alloc_local_amt - alloc_local_amt
      exh_gain_loss       = cent_diff

    No validation: callers clamp alloc_amt to the line balance first.
    """
    amt = math_round(alloc_amt, decimals.amt_dec)
    alloc_local = multiply(amt, exh_rate, decimals.loc_amt_dec)
    doc_alloc_local = multiply(amt, line.doc_exh_rate, decimals.loc_amt_dec)
    cent_diff = subtract(doc_alloc_local, alloc_local, decimals.loc_amt_dec)
    return replace(
        line,
        alloc_amt=amt,
        alloc_local_amt=alloc_local,
        doc_alloc_amt=amt,
        doc_alloc_local_amt=doc_alloc_local,
        cent_diff=cent_diff,
        exh_gain_loss=cent_diff,
    )
