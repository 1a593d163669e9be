"""
Reconciliation engine — bring the item tree in line with the current outputs.

Given what the script produced this run and what it produced last run
(the output log), plan the item-tree mutations, apply them, and compute
the new output log.

Flow:
    current outputs + previous log → plan (registration, pruning) → apply → receipts

Identity policy: a descriptor and an item refer to the same file if and
only if their canonical absolute paths (see ``canonical_path``) are equal
strings. There is no other matching.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from scripty.adapters.base import ProjectItem, ProjectItemTree
from scripty.core.models.evaluation import OutputDescriptor, canonical_path
from scripty.core.models.item_op import ItemOp, ItemOpKind, ItemReceipt

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationPlan:
    """The item-tree mutations for one run, plus the log to persist."""

    ops: list[ItemOp] = field(default_factory=list)
    new_log: list[str] = field(default_factory=list)

    @property
    def total_ops(self) -> int:
        return len(self.ops)

    def ops_of(self, kind: ItemOpKind) -> list[ItemOp]:
        return [op for op in self.ops if op.kind == kind]

    @property
    def added(self) -> list[str]:
        return [op.path for op in self.ops_of(ItemOpKind.ADD_ITEM_FROM_FILE)]

    @property
    def updated(self) -> list[str]:
        return [op.path for op in self.ops_of(ItemOpKind.UPDATE_ITEM_TYPE)]

    @property
    def deleted(self) -> list[str]:
        return [op.path for op in self.ops_of(ItemOpKind.DELETE_ITEM)]

    def to_dict(self) -> dict:
        return {
            "ops": [op.model_dump(mode="json") for op in self.ops],
            "new_log": self.new_log,
        }


@dataclass
class ApplyReport:
    """Result of applying a plan to an item tree."""

    receipts: list[ItemReceipt] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.receipts if r.ok)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.receipts if r.status == "skipped")

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "skipped": self.skipped,
            "failed": self.failed,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


def reconcile(
    current_outputs: Sequence[OutputDescriptor],
    previous_log: Iterable[str],
    items: ProjectItemTree,
) -> ReconciliationPlan:
    """Plan the item-tree mutations for a run.

    1. Registration: for each non-GenerateOnly descriptor, in emission
       order, retype the existing item (only if its type differs) or add
       the file and set its type.
    2. Pruning: delete every previously logged path that is no longer
       produced, whatever its build action was.
    3. The new log is every current path, GenerateOnly included.

    The item tree is only read here; nothing is mutated until
    ``apply_plan``.
    """
    plan = ReconciliationPlan()
    current: set[str] = set()
    registered: set[str] = set()

    # ── Registration pass ───────────────────────────────────────
    for descriptor in current_outputs:
        path = descriptor.canonical
        if path not in current:
            current.add(path)
            plan.new_log.append(path)

        if descriptor.generate_only or path in registered:
            continue
        registered.add(path)

        existing = items.find_item_by_path(path)
        if existing is None:
            plan.ops.append(ItemOp.add(path))
            plan.ops.append(ItemOp.set_type(path, descriptor.build_action))
        elif existing.item_type != descriptor.build_action:
            plan.ops.append(ItemOp.update_type(path, descriptor.build_action))

    # ── Pruning pass ────────────────────────────────────────────
    pruned: set[str] = set()
    for logged in previous_log:
        path = canonical_path(logged)
        if path in current or path in pruned:
            continue
        pruned.add(path)
        plan.ops.append(ItemOp.delete(path))

    logger.debug(
        "Planned %d op(s): %d add, %d update, %d delete",
        plan.total_ops,
        len(plan.added),
        len(plan.updated),
        len(plan.deleted),
    )
    return plan


def apply_plan(plan: ReconciliationPlan, items: ProjectItemTree) -> ApplyReport:
    """Apply planned ops in order, one receipt per op.

    Item-tree failures are recorded and logged at debug level; they never
    raise and never stop the remaining ops.
    """
    report = ApplyReport()
    added: dict[str, ProjectItem] = {}

    for op in plan.ops:
        try:
            receipt = _apply_op(op, items, added)
        except Exception as e:
            logger.debug("Item tree rejected %s: %s", op, e)
            receipt = ItemReceipt.failure(op, error=str(e))
        report.receipts.append(receipt)

    logger.debug(
        "Applied %d op(s): %d ok, %d skipped, %d failed",
        report.total,
        report.succeeded,
        report.skipped,
        report.failed,
    )
    return report


def _apply_op(
    op: ItemOp,
    items: ProjectItemTree,
    added: dict[str, ProjectItem],
) -> ItemReceipt:
    if op.kind == ItemOpKind.ADD_ITEM_FROM_FILE:
        added[op.path] = items.add_item_from_file(op.path)
        return ItemReceipt.success(op)

    if op.kind in (ItemOpKind.SET_ITEM_TYPE, ItemOpKind.UPDATE_ITEM_TYPE):
        assert op.build_action is not None
        item = added.get(op.path) or items.find_item_by_path(op.path)
        if item is None:
            logger.debug("No item for %s — skipping %s", op.path, op.kind.value)
            return ItemReceipt.skip(op, reason="item not found")
        items.set_item_build_action(item, op.build_action)
        return ItemReceipt.success(op)

    if op.kind == ItemOpKind.DELETE_ITEM:
        if items.delete_item(op.path):
            return ItemReceipt.success(op)
        logger.debug("Nothing to delete at %s", op.path)
        return ItemReceipt.skip(op, reason="item not found")

    return ItemReceipt.failure(op, error=f"Unknown op kind: {op.kind}")
