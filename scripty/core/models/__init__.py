"""
Domain models — Pydantic types for generation runs.

All models are re-exported here for convenient access:

    from scripty.core.models import EvaluationResult, OutputDescriptor, ItemOp
"""

from scripty.core.models.evaluation import (
    GENERATE_ONLY,
    Diagnostic,
    EvaluationResult,
    InputIdentity,
    OutputDescriptor,
    Severity,
    canonical_path,
)
from scripty.core.models.item_op import ItemOp, ItemOpKind, ItemReceipt

__all__ = [
    # evaluation.py
    "Diagnostic",
    "EvaluationResult",
    "GENERATE_ONLY",
    "InputIdentity",
    # item_op.py
    "ItemOp",
    "ItemOpKind",
    "ItemReceipt",
    "OutputDescriptor",
    "Severity",
    "canonical_path",
]
