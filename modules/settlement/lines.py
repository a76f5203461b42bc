"""
settlement/lines.py

Value types for a settlement document (AP set-off / AR receipt):

- OutstandingDocumentLine: one open invoice / credit note / debit note picked
  from the outstanding-transaction lookup, plus the allocation made against it.
- SettlementHeader: the document being created; owns the ordered detail lines
  (`data_details`, unique by item_no) and the header totals derived from them.

Both are frozen dataclasses. The engine never mutates them; it returns new
values built with dataclasses.replace().

Payload keys are camelCase to match the backend; Python attributes are snake_case.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Iterable, Optional, Tuple

from utils.helpers import to_float

__all__ = [
    "OutstandingDocumentLine",
    "SettlementHeader",
    "ALLOCATION_FIELDS",
    "lowest_amount",
    "camel",
]

# Per-line fields the engine derives from alloc_amt (and zeroes on reset)
ALLOCATION_FIELDS: tuple[str, ...] = (
    "alloc_amt",
    "alloc_local_amt",
    "doc_alloc_amt",
    "doc_alloc_local_amt",
    "cent_diff",
    "exh_gain_loss",
)


def camel(name: str) -> str:
    """snake_case -> camelCase ('doc_bal_amt' -> 'docBalAmt')."""
    head, *rest = name.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def _get(record: Dict[str, Any], name: str, default: Any = None) -> Any:
    """Read a lookup/payload value by snake_case or camelCase key."""
    if name in record and record[name] is not None:
        return record[name]
    c = camel(name)
    if c in record and record[c] is not None:
        return record[c]
    return default


def lowest_amount(tot_amt: float, bal_amt: float) -> float:
    """
    Balance used for an AP set-off line.

    - both negative: the smaller magnitude (less negative)
    - both positive: the smaller one
    - mixed signs:   the negative one
    - one is zero:   the non-zero one (0 if both are zero)
    """
    if tot_amt < 0 and bal_amt < 0:
        return max(tot_amt, bal_amt)
    if tot_amt > 0 and bal_amt > 0:
        return min(tot_amt, bal_amt)
    if tot_amt < 0 or bal_amt < 0:
        return tot_amt if tot_amt < 0 else bal_amt
    return tot_amt if tot_amt != 0 else bal_amt


@dataclass(frozen=True)
class OutstandingDocumentLine:
    item_no: int
    document_id: str
    document_no: str = ""
    reference_no: str = ""
    transaction_id: int = 0
    doc_currency_id: int = 0
    doc_currency_code: str = ""
    doc_exh_rate: float = 1.0
    doc_account_date: Optional[str] = None
    doc_due_date: Optional[str] = None
    doc_tot_amt: float = 0.0
    doc_tot_local_amt: float = 0.0
    doc_bal_amt: float = 0.0          # signed; negative for credit notes
    doc_bal_local_amt: float = 0.0
    alloc_amt: float = 0.0
    alloc_local_amt: float = 0.0
    doc_alloc_amt: float = 0.0
    doc_alloc_local_amt: float = 0.0
    cent_diff: float = 0.0
    exh_gain_loss: float = 0.0
    edit_version: int = 0

    @classmethod
    def from_outstanding(
        cls,
        record: Dict[str, Any],
        item_no: int,
        *,
        use_lowest_balance: bool = False,
    ) -> "OutstandingDocumentLine":
        """
        Build a fresh line from an outstanding-transaction lookup record.

        Lookup records carry `totAmt`/`balAmt`/`exhRate`/`currencyId`; stored
        payload rows carry the `doc*` names. Missing values are defaulted here
        once, and every allocation field starts at zero.
        """
        tot_amt = to_float(_get(record, "doc_tot_amt", _get(record, "tot_amt")))
        bal_amt = to_float(_get(record, "doc_bal_amt", _get(record, "bal_amt")))
        if use_lowest_balance:
            bal_amt = lowest_amount(tot_amt, bal_amt)

        return cls(
            item_no=int(item_no),
            document_id=str(_get(record, "document_id", "")),
            document_no=str(_get(record, "document_no", "")),
            reference_no=str(_get(record, "reference_no", "")),
            transaction_id=int(to_float(_get(record, "transaction_id"))),
            doc_currency_id=int(to_float(_get(record, "doc_currency_id", _get(record, "currency_id")))),
            doc_currency_code=str(_get(record, "doc_currency_code", _get(record, "currency_code", ""))),
            doc_exh_rate=to_float(_get(record, "doc_exh_rate", _get(record, "exh_rate")), 1.0),
            doc_account_date=_get(record, "doc_account_date", _get(record, "account_date")),
            doc_due_date=_get(record, "doc_due_date", _get(record, "due_date")),
            doc_tot_amt=tot_amt,
            doc_tot_local_amt=to_float(_get(record, "doc_tot_local_amt", _get(record, "tot_local_amt"))),
            doc_bal_amt=bal_amt,
            doc_bal_local_amt=to_float(_get(record, "doc_bal_local_amt", _get(record, "bal_local_amt"))),
        )

    def cleared(self) -> "OutstandingDocumentLine":
        """Copy with every allocation field set to zero."""
        return replace(self, **{f: 0.0 for f in ALLOCATION_FIELDS})

    @property
    def is_allocated(self) -> bool:
        return self.alloc_amt != 0

    def to_payload(self) -> Dict[str, Any]:
        return {camel(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class SettlementHeader:
    settlement_type: str
    document_id: str = "0"
    document_no: str = ""
    tot_amt: float = 0.0              # 0 means "settle everything"
    tot_local_amt: float = 0.0
    exh_rate: float = 1.0
    pay_exh_rate: float = 1.0         # payExhRate (AP) / recExhRate (AR)
    bal_tot_amt: float = 0.0
    alloc_tot_amt: float = 0.0
    alloc_tot_local_amt: float = 0.0
    un_alloc_tot_amt: float = 0.0
    un_alloc_tot_local_amt: float = 0.0
    exh_gain_loss: float = 0.0
    data_details: Tuple[OutstandingDocumentLine, ...] = field(default_factory=tuple)

    # ---- line access ------------------------------------------------------

    def line(self, item_no: int) -> Optional[OutstandingDocumentLine]:
        for ln in self.data_details:
            if ln.item_no == item_no:
                return ln
        return None

    def item_nos(self) -> list[int]:
        return [ln.item_no for ln in self.data_details]

    def document_ids(self) -> set[str]:
        return {ln.document_id for ln in self.data_details}

    def next_item_no(self) -> int:
        return max(self.item_nos(), default=0) + 1

    def with_lines(self, lines: Iterable[OutstandingDocumentLine]) -> "SettlementHeader":
        return replace(self, data_details=tuple(lines))

    # ---- payload ----------------------------------------------------------

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready document: header fields plus the detail rows."""
        hd = {
            camel(f.name): getattr(self, f.name)
            for f in fields(self)
            if f.name != "data_details"
        }
        return {
            "header": hd,
            "data_details": [ln.to_payload() for ln in self.data_details],
        }
