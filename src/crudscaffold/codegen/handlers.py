"""Emit ``manage_<object>_handler`` adapters from the generic operation envelope.

Each handler is a flat chain of ``isinstance`` arms, one per envelope
variant. An arm runs its precondition checks first and only then calls the
generated interface, so a rejected request never reaches storage. Which arm
body an object gets is decided by ``ARM_BUILDERS`` keyed on its kind.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from crudscaffold.codegen.render import render_template
from crudscaffold.codegen.surface import ModuleSurface, ObjectSurface
from crudscaffold.config.logging import get_logger
from crudscaffold.naming import placeholder_name
from crudscaffold.schema.ast import ObjectKind

logger = get_logger(__name__)

VARIANTS = (
    "List",
    "Create",
    "CreateBatch",
    "Read",
    "ReadBatch",
    "Update",
    "Delete",
    "DeleteBatch",
    "DeleteAll",
    "ReplaceAll",
)


@dataclass(frozen=True)
class HandlerArm:
    """Body lines run when the envelope is an instance of ``ops.<variant>``."""

    variant: str
    lines: Tuple[str, ...]


@dataclass(frozen=True)
class HandlerPlan:
    surface: ObjectSurface
    arms: Tuple[HandlerArm, ...]

    @property
    def name(self) -> str:
        return self.surface.handler

    @property
    def record(self) -> str:
        return self.surface.record

    @property
    def interface(self) -> str:
        return self.surface.interface

    @property
    def impl(self) -> str:
        return self.surface.impl

    @property
    def description(self) -> str:
        return self.surface.description

    def arm(self, variant: str) -> Optional[HandlerArm]:
        for arm in self.arms:
            if arm.variant == variant:
                return arm
        return None


class _ArmWriter:
    """Writes arm bodies for one object, checking every call against its surface."""

    def __init__(self, surface: ObjectSurface):
        self.surface = surface
        self.obj = surface.obj
        self.label = f'"{surface.record}"'

    def scoped(self, name: str) -> str:
        """Method name of a parent-scoped operation for this object's scope."""
        return name if self.obj.is_root else f"unchecked_{name}"

    def call(self, name: str, *args: str) -> str:
        op = self.surface.operation(name)
        return f"await crud.{op.name}({', '.join(('ctx',) + args)})"

    def scope_check(self, bind: bool = True) -> List[str]:
        if self.obj.is_root:
            return [f"ops.forbid_parent_id(operation, {self.label})"]
        check = f"ops.require_parent_id(operation, {self.label})"
        return [f"parent_id = {check}" if bind else check]

    def parent_args(self) -> Tuple[str, ...]:
        return () if self.obj.is_root else ("parent_id",)

    def cursor(self) -> Tuple[List[str], Tuple[str, ...]]:
        """Lines and extra call arguments handling ``operation.after``."""
        if self.obj.kind == ObjectKind.ORDERED_CHILD:
            factory = placeholder_name(self.obj.name)
            return (
                [f"after = {factory}(operation.after) if operation.after is not None else None"],
                ("after",),
            )
        return [f"ops.forbid_after(operation, {self.label})"], ()

    def non_recursive_check(self) -> List[str]:
        if self.obj.has_children():
            return [f"ops.require_non_recursive(operation, {self.label})"]
        return []

    def reject(self, helper: str) -> List[str]:
        return [f"raise ops.{helper}(operation, {self.label})"]


def _arms(bodies: Dict[str, Sequence[str]]) -> Tuple[HandlerArm, ...]:
    return tuple(HandlerArm(variant, tuple(bodies[variant])) for variant in VARIANTS if variant in bodies)


def collection_arms(w: _ArmWriter) -> Tuple[HandlerArm, ...]:
    """Roots and ordered/unordered children."""
    children = w.obj.has_children()
    cursor_lines, cursor_args = w.cursor()
    fetch_many = "items = await ops.fan_out(crud.get(ctx, item_id) for item_id in operation.ids)"
    return _arms(
        {
            "List": w.scope_check()
            + [f"return ItemsResult(items={w.call(w.scoped('list'), *w.parent_args())})"],
            "Create": w.scope_check()
            + cursor_lines
            + [
                f"created = {w.call(w.scoped('add'), *w.parent_args(), 'operation.data', *cursor_args)}",
                "return CreatedResult(created_id=created.id)",
            ],
            "CreateBatch": w.scope_check()
            + cursor_lines
            + [
                f"created = {w.call(w.scoped('batch_add'), *w.parent_args(), 'operation.data', *cursor_args)}",
                "return CreatedBatchResult(created_ids=[record.id for record in created])",
            ],
            "Read": [f"return ItemResult(item={w.call('get', 'operation.id')})"],
            "ReadBatch": [fetch_many, "return ItemsResult(items=items)"],
            "Update": [w.call("update", "operation.item"), "return UnitResult()"],
            "Delete": [
                f"item = {w.call('get', 'operation.id')}",
                w.call("delete_recursive" if children else "delete", "item"),
                "return UnitResult()",
            ],
            "DeleteBatch": w.non_recursive_check()
            + [
                fetch_many,
                w.call("batch_delete_non_recursive_DANGEROUS" if children else "batch_delete", "items"),
                "return UnitResult()",
            ],
            "DeleteAll": w.scope_check()
            + w.non_recursive_check()
            + [
                w.call(
                    w.scoped("batch_delete_all_non_recursive_DANGEROUS" if children else "batch_delete_all"),
                    *w.parent_args(),
                ),
                "return UnitResult()",
            ],
            "ReplaceAll": w.scope_check(bind=False)
            + [
                f"raise ops.unsupported(operation, {w.label}, "
                f'"only batch collections support replace_all")'
            ],
        }
    )


def batch_arms(w: _ArmWriter) -> Tuple[HandlerArm, ...]:
    """Batch collections: item-level variants are rejected before any other check."""
    bodies: Dict[str, Sequence[str]] = {
        variant: w.reject("unsupported_for_batch")
        for variant in ("Create", "CreateBatch", "Read", "ReadBatch", "Update", "Delete", "DeleteBatch")
    }
    bodies["List"] = w.scope_check() + [
        f"return ItemsResult(items={w.call(w.scoped('list'), *w.parent_args())})"
    ]
    bodies["DeleteAll"] = w.scope_check() + [
        w.call(w.scoped("batch_delete_all"), *w.parent_args()),
        "return UnitResult()",
    ]
    bodies["ReplaceAll"] = w.scope_check() + [
        w.call(w.scoped("batch_replace_all"), *w.parent_args(), "operation.data"),
        "return UnitResult()",
    ]
    return _arms(bodies)


def singleton_arms(w: _ArmWriter) -> Tuple[HandlerArm, ...]:
    bodies: Dict[str, Sequence[str]] = {
        variant: w.reject("unsupported_for_singleton")
        for variant in ("CreateBatch", "Read", "ReadBatch", "Update", "Delete", "DeleteBatch", "ReplaceAll")
    }
    bodies["List"] = w.scope_check() + [
        f"return ItemsResult(items=[{w.call(w.scoped('get'), *w.parent_args())}])"
    ]
    bodies["Create"] = w.scope_check() + [
        f"ops.forbid_after(operation, {w.label})",
        f"created = {w.call(w.scoped('set'), *w.parent_args(), 'operation.data')}",
        "return CreatedResult(created_id=created.id)",
    ]
    bodies["DeleteAll"] = w.scope_check() + [
        w.call(w.scoped("delete"), *w.parent_args()),
        "return UnitResult()",
    ]
    return _arms(bodies)


def singleton_family_arms(w: _ArmWriter) -> Tuple[HandlerArm, ...]:
    bodies: Dict[str, Sequence[str]] = {
        variant: w.reject("unsupported_for_singleton")
        for variant in ("Read", "ReadBatch", "Update", "Delete", "DeleteBatch", "ReplaceAll")
    }
    bodies["List"] = w.scope_check() + [
        f"return ItemsResult(items={w.call(w.scoped('list'), *w.parent_args())})"
    ]
    bodies["Create"] = w.scope_check() + [
        f"ops.forbid_after(operation, {w.label})",
        f"created = {w.call(w.scoped('set'), *w.parent_args(), 'operation.data')}",
        "return CreatedResult(created_id=created.id)",
    ]
    bodies["CreateBatch"] = w.scope_check() + [
        f"ops.forbid_after(operation, {w.label})",
        f"created = {w.call(w.scoped('batch_set'), *w.parent_args(), 'operation.data')}",
        "return CreatedBatchResult(created_ids=[record.id for record in created])",
    ]
    bodies["DeleteAll"] = w.scope_check() + [
        w.call(w.scoped("batch_delete_all"), *w.parent_args()),
        "return UnitResult()",
    ]
    return _arms(bodies)


ARM_BUILDERS: Dict[ObjectKind, Callable[[_ArmWriter], Tuple[HandlerArm, ...]]] = {
    ObjectKind.ROOT: collection_arms,
    ObjectKind.ORDERED_CHILD: collection_arms,
    ObjectKind.UNORDERED_CHILD: collection_arms,
    ObjectKind.BATCH: batch_arms,
    ObjectKind.SINGLETON: singleton_arms,
    ObjectKind.SINGLETON_FAMILY: singleton_family_arms,
}


def plan_handler(surface: ObjectSurface) -> HandlerPlan:
    """Decide the arm bodies of one object's handler."""
    arms = ARM_BUILDERS[surface.obj.kind](_ArmWriter(surface))
    return HandlerPlan(surface=surface, arms=arms)


def render_handlers(module: ModuleSurface) -> str:
    """
    Render every handler plus the ``HANDLERS`` name -> handler mapping.

    Args:
        module: Resolved module surface

    Returns:
        Python source for the handler section
    """
    plans = [plan_handler(surface) for surface in module.objects]
    logger.debug(f"Rendering {len(plans)} handlers for {module.repository_name}")
    return render_template("handlers.py.jinja2", handlers=plans)
