from __future__ import annotations

from typing import List, Optional

from .diagnostics import Diagnostic, Span
from .extract import FunctionRecord

MISMATCH_CODE = "E-OP-MISMATCH"
MISSING_CODE = "E-OP-MISSING"


def check_mismatch(record: FunctionRecord, filename: Optional[str] = None) -> Optional[Diagnostic]:
    """Report an op constant whose value is not the function's canonical name."""
    op = record.op_constant
    if op is None or not op.value:
        return None
    canonical = record.canonical_name
    if op.value == canonical:
        return None
    return Diagnostic(
        message=f"{op.name} constant value ({op.value}) does not match function name ({canonical})",
        code=MISMATCH_CODE,
        span=Span.from_loc(op.name_loc, file=filename),
    )


def check_missing(record: FunctionRecord, filename: Optional[str] = None) -> Optional[Diagnostic]:
    """Report an error-returning function that declares no usable op constant."""
    if not record.has_error_result:
        return None
    if record.op_constant is not None and record.op_constant.value:
        return None
    return Diagnostic(
        message=f"{record.canonical_name} returns an error but does not define an op constant",
        code=MISSING_CODE,
        span=Span.from_loc(record.loc, file=filename),
    )


def evaluate(
    record: FunctionRecord,
    *,
    report_missing: bool = False,
    filename: Optional[str] = None,
) -> List[Diagnostic]:
    diags: List[Diagnostic] = []
    mismatch = check_mismatch(record, filename)
    if mismatch is not None:
        diags.append(mismatch)
    elif report_missing:
        missing = check_missing(record, filename)
        if missing is not None:
            diags.append(missing)
    return diags
