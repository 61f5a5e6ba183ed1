"""Operation surface: which methods each object's interface exposes.

The rules are tables, not branches. ``OWN_OPERATIONS`` lists the methods an
object gets for itself, ``DELETE_OPERATIONS`` picks the delete surface by
whether the object has children, and ``ACCESSOR_OPERATIONS`` lists the
methods an owner gets for each object in one of its child lists. Resolving a
row against an object yields an :class:`Operation`, which every emitter reads
so the interface, implementation and handler can never disagree on a name.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from crudscaffold.config.logging import get_logger
from crudscaffold.errors import Diagnostic, SchemaError
from crudscaffold.ir.model import CollectionModel, ConfigModel, ObjectModel
from crudscaffold.naming import (
    data_type_name,
    handler_name,
    helper_identifier,
    impl_name,
    interface_name,
    manager_accessor,
    marker_name,
    marker_placeholder_name,
    placeholder_name,
)
from crudscaffold.schema.ast import ObjectKind

logger = get_logger(__name__)


@dataclass(frozen=True)
class OpSpec:
    """One row of an operation table.

    ``name`` is the method name for an object's own operations and the verb
    for owner accessors. ``params`` and ``returns`` are keys into
    ``PARAM_SHAPES`` and ``RETURN_SHAPES``; arguments are forwarded to the
    manager primitive ``call`` in parameter order.
    """

    name: str
    params: Tuple[str, ...]
    returns: str
    call: str
    doc: str
    scoped: bool = False  # parent-scoped; becomes unchecked_<name>(parent_id, ...) on children
    cursor: bool = False  # takes ``after`` when the target is an ordered collection
    plural: bool = False  # accessor name uses the pluralized base
    dangerous: bool = False


# key -> (parameter name, annotation template, default)
PARAM_SHAPES: Dict[str, Tuple[str, str, Optional[str]]] = {
    "item_id": ("item_id", "PkSk", None),
    "item": ("item", "{T}", None),
    "items": ("items", "List[{T}]", None),
    "data": ("data", "{D}", None),
    "data_list": ("data", "List[{D}]", None),
    "key": ("key", "str", None),
    "keys": ("keys", "List[str]", None),
    "after": ("after", "Optional[{T}]", "None"),
    "owner": ("item", "{O}", None),
    "parent_id": ("parent_id", "PkSk", None),
}

RETURN_SHAPES: Dict[str, str] = {
    "record": "{T}",
    "records": "List[{T}]",
    "data": "{D}",
    "data_list": "List[{D}]",
    "none": "None",
}

COLLECTION_OPS = (
    OpSpec("get", ("item_id",), "record", "get", "Fetch the `{T}` with the given ID."),
    OpSpec("update", ("item",), "none", "update", "Persist changes to an existing `{T}`."),
    OpSpec("list", (), "records", "query_all", "List every `{T}`.", scoped=True),
    OpSpec("add", ("data",), "record", "add", "Create a `{T}`.", scoped=True, cursor=True),
    OpSpec("batch_add", ("data_list",), "records", "batch_add", "Create several `{T}` records.", scoped=True, cursor=True),
)

LEAF_DELETE_OPS = (
    OpSpec("delete", ("item",), "data", "delete", "Delete one `{T}` and return its data."),
    OpSpec("batch_delete", ("items",), "data_list", "batch_delete", "Delete several `{T}` records."),
    OpSpec("batch_delete_all", (), "none", "batch_delete_all", "Delete every `{T}`.", scoped=True),
)

RECURSIVE_DELETE_OPS = (
    OpSpec(
        "delete_recursive",
        ("item",),
        "data",
        "delete_recursive",
        "Delete one `{T}` together with everything stored beneath it.",
    ),
    OpSpec(
        "delete_non_recursive_DANGEROUS",
        ("item",),
        "data",
        "delete_non_recursive",
        "Delete one `{T}` but leave its children in storage, orphaned.",
        dangerous=True,
    ),
    OpSpec(
        "batch_delete_non_recursive_DANGEROUS",
        ("items",),
        "data_list",
        "batch_delete_non_recursive",
        "Delete several `{T}` records, orphaning their children.",
        dangerous=True,
    ),
    OpSpec(
        "batch_delete_all_non_recursive_DANGEROUS",
        (),
        "none",
        "batch_delete_all_non_recursive",
        "Delete every `{T}`, orphaning their children.",
        scoped=True,
        dangerous=True,
    ),
)

BATCH_OPS = (
    OpSpec("list", (), "records", "query_all", "List every `{T}`.", scoped=True),
    OpSpec("batch_delete_all", (), "none", "batch_delete_all", "Delete every `{T}`.", scoped=True),
    OpSpec(
        "batch_replace_all",
        ("data_list",),
        "none",
        "batch_replace_all_ordered",
        "Replace every `{T}` with ``data``, keeping its order.",
        scoped=True,
    ),
)

SINGLETON_OPS = (
    OpSpec("get", (), "record", "get", "Fetch the `{T}`.", scoped=True),
    OpSpec("set", ("data",), "record", "set", "Create or overwrite the `{T}`.", scoped=True),
    OpSpec("delete", (), "none", "delete", "Delete the `{T}`.", scoped=True),
)

SINGLETON_FAMILY_OPS = (
    OpSpec("get", ("key",), "record", "get", "Fetch the `{T}` stored under ``key``.", scoped=True),
    OpSpec("set", ("data",), "record", "set", "Create or overwrite one `{T}`.", scoped=True),
    OpSpec("batch_set", ("data_list",), "records", "batch_set", "Create or overwrite several `{T}` records.", scoped=True),
    OpSpec("delete", ("key",), "none", "delete", "Delete the `{T}` stored under ``key``.", scoped=True),
    OpSpec("batch_delete", ("keys",), "none", "batch_delete", "Delete the `{T}` records stored under ``keys``.", scoped=True),
    OpSpec("list", (), "records", "query_all", "List every `{T}`.", scoped=True),
    OpSpec("batch_delete_all", (), "none", "batch_delete_all", "Delete every `{T}`.", scoped=True),
)

OWN_OPERATIONS: Dict[ObjectKind, Tuple[OpSpec, ...]] = {
    ObjectKind.ROOT: COLLECTION_OPS,
    ObjectKind.ORDERED_CHILD: COLLECTION_OPS,
    ObjectKind.UNORDERED_CHILD: COLLECTION_OPS,
    ObjectKind.BATCH: BATCH_OPS,
    ObjectKind.SINGLETON: SINGLETON_OPS,
    ObjectKind.SINGLETON_FAMILY: SINGLETON_FAMILY_OPS,
}

# Collections only; keyed on has_children()
DELETE_OPERATIONS: Dict[bool, Tuple[OpSpec, ...]] = {
    False: LEAF_DELETE_OPS,
    True: RECURSIVE_DELETE_OPS,
}

_CHILD_COLLECTION_ACCESSORS = (
    OpSpec("add", ("data",), "record", "add", "Create a `{T}` under ``item``.", cursor=True),
    OpSpec(
        "batch_add",
        ("data_list",),
        "records",
        "batch_add",
        "Create several `{T}` records under ``item``.",
        cursor=True,
        plural=True,
    ),
    OpSpec("list", (), "records", "query_all", "List every `{T}` under ``item``.", plural=True),
)

ACCESSOR_OPERATIONS: Dict[str, Tuple[OpSpec, ...]] = {
    "ordered_children": _CHILD_COLLECTION_ACCESSORS,
    "unordered_children": _CHILD_COLLECTION_ACCESSORS,
    "batch_children": (
        OpSpec("list", (), "records", "query_all", "List every `{T}` under ``item``.", plural=True),
        OpSpec("batch_delete_all", (), "none", "batch_delete_all", "Delete every `{T}` under ``item``.", plural=True),
        OpSpec(
            "batch_replace_all",
            ("data_list",),
            "none",
            "batch_replace_all_ordered",
            "Replace every `{T}` under ``item`` with ``data``.",
            plural=True,
        ),
    ),
    "singleton_children": (
        OpSpec("get", (), "record", "get", "Fetch the `{T}` of ``item``."),
        OpSpec("set", ("data",), "record", "set", "Create or overwrite the `{T}` of ``item``."),
        OpSpec("delete", (), "none", "delete", "Delete the `{T}` of ``item``."),
    ),
    "singleton_family_children": (
        OpSpec("get", ("key",), "record", "get", "Fetch the `{T}` of ``item`` stored under ``key``."),
        OpSpec("set", ("data",), "record", "set", "Create or overwrite one `{T}` of ``item``."),
        OpSpec("batch_set", ("data_list",), "records", "batch_set", "Create or overwrite several `{T}` records of ``item``.", plural=True),
        OpSpec("delete", ("key",), "none", "delete", "Delete the `{T}` of ``item`` stored under ``key``."),
        OpSpec("batch_delete", ("keys",), "none", "batch_delete", "Delete the `{T}` records of ``item`` under ``keys``.", plural=True),
        OpSpec("list", (), "records", "query_all", "List every `{T}` of ``item``.", plural=True),
        OpSpec("batch_delete_all", (), "none", "batch_delete_all", "Delete every `{T}` of ``item``.", plural=True),
    ),
}

# (kind, is_root, has_children) -> manager protocol name
MANAGER_TABLE: Dict[Tuple[ObjectKind, bool, bool], str] = {
    (ObjectKind.ROOT, True, False): "ManageRoot",
    (ObjectKind.ROOT, True, True): "ManageRootWithChildren",
    (ObjectKind.ORDERED_CHILD, False, False): "ManageOrderedChild",
    (ObjectKind.ORDERED_CHILD, False, True): "ManageOrderedChildWithChildren",
    (ObjectKind.UNORDERED_CHILD, False, False): "ManageUnorderedChild",
    (ObjectKind.UNORDERED_CHILD, False, True): "ManageUnorderedChildWithChildren",
    (ObjectKind.BATCH, False, False): "ManageBatchChild",
    (ObjectKind.SINGLETON, True, False): "ManageRootSingleton",
    (ObjectKind.SINGLETON, False, False): "ManageSingletonChild",
    (ObjectKind.SINGLETON_FAMILY, True, False): "ManageRootSingletonFamily",
    (ObjectKind.SINGLETON_FAMILY, False, False): "ManageSingletonFamilyChild",
}

KIND_DESCRIPTIONS: Dict[ObjectKind, str] = {
    ObjectKind.ROOT: "root collection",
    ObjectKind.ORDERED_CHILD: "ordered child collection",
    ObjectKind.UNORDERED_CHILD: "unordered child collection",
    ObjectKind.BATCH: "batch collection",
    ObjectKind.SINGLETON: "singleton",
    ObjectKind.SINGLETON_FAMILY: "singleton family",
}


@dataclass(frozen=True)
class Param:
    name: str
    annotation: str
    default: Optional[str] = None

    def render(self) -> str:
        if self.default is None:
            return f"{self.name}: {self.annotation}"
        return f"{self.name}: {self.annotation} = {self.default}"


@dataclass(frozen=True)
class Operation:
    """A resolved interface method and the manager call it forwards to."""

    name: str
    params: Tuple[Param, ...]
    returns: str
    manager: str  # repository accessor, e.g. ``manage_order_line``
    call: str  # manager primitive
    args: Tuple[str, ...]
    doc: str
    placeholder: Optional[str] = None  # builds ``parent`` from ``parent_id`` before the call
    dangerous: bool = False

    @property
    def signature(self) -> str:
        return ", ".join(["self", "ctx: CrudContext"] + [p.render() for p in self.params])

    @property
    def param_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.params)


@dataclass(frozen=True)
class ObjectSurface:
    """Everything the emitters need to know about one object."""

    obj: ObjectModel
    operations: Tuple[Operation, ...]
    parent_type: Optional[str] = None  # record or marker type of the parent placeholder
    placeholder: Optional[str] = None  # factory for the parent placeholder

    @property
    def name(self) -> str:
        return self.obj.name

    @property
    def record(self) -> str:
        return self.obj.name

    @property
    def data(self) -> str:
        return data_type_name(self.obj.name)

    @property
    def interface(self) -> str:
        return interface_name(self.obj.name)

    @property
    def impl(self) -> str:
        return impl_name(self.obj.name)

    @property
    def manager(self) -> str:
        return manager_accessor(self.obj.name)

    @property
    def handler(self) -> str:
        return handler_name(self.obj.name)

    @property
    def description(self) -> str:
        scope = "repository-scoped" if self.obj.is_root else f"owned by {', '.join(self.obj.parents)}"
        return f"{KIND_DESCRIPTIONS[self.obj.kind]}, {scope}"

    def operation(self, name: str) -> Operation:
        """Look up a resolved operation by method name.

        Raises:
            KeyError: If the interface has no such method
        """
        for op in self.operations:
            if op.name == name:
                return op
        raise KeyError(f"{self.interface} has no operation {name!r}")

    def operation_names(self) -> List[str]:
        return [op.name for op in self.operations]


@dataclass(frozen=True)
class Placeholder:
    """A ``placeholder_*`` factory for an identifier-only parent or cursor."""

    name: str
    returns: str
    record: str
    delegate: Optional[str] = None  # marker placeholders forward to a record placeholder

    @property
    def data(self) -> str:
        return data_type_name(self.record)


@dataclass(frozen=True)
class Marker:
    """Protocol shared by every record type allowed to own ``child``."""

    name: str
    child: str
    parents: Tuple[str, ...]


@dataclass(frozen=True)
class ManagerBinding:
    """A ``manage_<object>()`` accessor on the generated repository."""

    accessor: str
    protocol: str
    record: str
    type_args: Tuple[str, ...]

    @property
    def annotation(self) -> str:
        return f"managers.{self.protocol}[{', '.join(self.type_args)}]"


@dataclass(frozen=True)
class ModuleSurface:
    """The complete surface of one generated module."""

    repository_name: str
    objects: Tuple[ObjectSurface, ...]
    placeholders: Tuple[Placeholder, ...] = ()
    markers: Tuple[Marker, ...] = ()
    managers: Tuple[ManagerBinding, ...] = ()
    record_types: Tuple[str, ...] = field(default=())

    def get(self, name: str) -> ObjectSurface:
        for surface in self.objects:
            if surface.name == name:
                return surface
        raise KeyError(f"no object named {name!r} in {self.repository_name}")


def _fill(template: str, record: str, owner: Optional[str] = None) -> str:
    return template.format(T=record, D=data_type_name(record), O=owner or "")


def _params(spec: OpSpec, record: str, ordered: bool, owner: Optional[str] = None) -> List[Param]:
    keys = list(spec.params)
    if spec.cursor and ordered:
        keys.append("after")
    params = []
    for key in keys:
        name, annotation, default = PARAM_SHAPES[key]
        params.append(Param(name, _fill(annotation, record, owner), default))
    return params


def _parent_placeholder(obj: ObjectModel) -> Tuple[Optional[str], Optional[str]]:
    """(parent annotation, placeholder factory) used by unchecked operations."""
    if obj.is_root:
        return None, None
    if obj.is_multi_parent:
        return marker_name(obj.name), marker_placeholder_name(obj.name)
    return obj.first_parent, placeholder_name(obj.first_parent)


def _is_ordered(obj: ObjectModel) -> bool:
    return obj.kind == ObjectKind.ORDERED_CHILD


def resolve_own(obj: ObjectModel, spec: OpSpec) -> Operation:
    """Resolve one of an object's own operation rows."""
    params = _params(spec, obj.name, _is_ordered(obj))
    args = [p.name for p in params]
    name = spec.name
    doc = _fill(spec.doc, obj.name)
    placeholder = None
    if spec.scoped and not obj.is_root:
        name = f"unchecked_{spec.name}"
        _, placeholder = _parent_placeholder(obj)
        parent_param, parent_annotation, _ = PARAM_SHAPES["parent_id"]
        params.insert(0, Param(parent_param, parent_annotation))
        args.insert(0, "parent")
        doc = f"{doc} ``parent_id`` is trusted as-is; the parent is never loaded."
    if spec.dangerous:
        doc = f"{doc} Dangerous: use only when the children are removed some other way."
    return Operation(
        name=name,
        params=tuple(params),
        returns=_fill(RETURN_SHAPES[spec.returns], obj.name),
        manager=manager_accessor(obj.name),
        call=spec.call,
        args=tuple(args),
        doc=doc,
        placeholder=placeholder,
        dangerous=spec.dangerous,
    )


def resolve_accessor(owner: ObjectModel, child: ObjectModel, spec: OpSpec) -> Operation:
    """Resolve an accessor row placed on ``owner``'s interface for ``child``."""
    owner_param, owner_annotation, _ = PARAM_SHAPES["owner"]
    params = [Param(owner_param, _fill(owner_annotation, child.name, owner.name))]
    params += _params(spec, child.name, _is_ordered(child), owner.name)
    return Operation(
        name=helper_identifier(spec.name, child.name, owner.name, spec.plural),
        params=tuple(params),
        returns=_fill(RETURN_SHAPES[spec.returns], child.name),
        manager=manager_accessor(child.name),
        call=spec.call,
        args=tuple(p.name for p in params),
        doc=_fill(spec.doc, child.name),
    )


def own_specs(obj: ObjectModel) -> Tuple[OpSpec, ...]:
    """Rows of the operation table that apply to ``obj`` itself."""
    specs = OWN_OPERATIONS[obj.kind]
    if obj.kind.is_collection:
        specs = specs + DELETE_OPERATIONS[obj.has_children()]
    return specs


def build_object_surface(model: ConfigModel, obj: ObjectModel) -> ObjectSurface:
    """
    Resolve every operation ``obj``'s interface exposes.

    Args:
        model: Validated model (children are looked up by name)
        obj: Object to build the surface for

    Returns:
        ObjectSurface with own operations followed by child accessors

    Raises:
        SchemaError: If two derived method names collide
    """
    operations = [resolve_own(obj, spec) for spec in own_specs(obj)]
    if isinstance(obj, CollectionModel):
        for key, children in obj.child_lists().items():
            for child_name in children:
                child = model.get(child_name)
                operations.extend(resolve_accessor(obj, child, spec) for spec in ACCESSOR_OPERATIONS[key])

    seen: Dict[str, Operation] = {}
    issues: List[Diagnostic] = []
    for op in operations:
        if op.name in seen:
            issues.append(
                Diagnostic(
                    code="METHOD_COLLISION",
                    message=(
                        f"derived method `{op.name}` appears twice on `{interface_name(obj.name)}` "
                        f"(from `{seen[op.name].manager}` and `{op.manager}`); rename one of the children"
                    ),
                    location=obj.location,
                    details={"object": obj.name, "method": op.name},
                )
            )
        seen.setdefault(op.name, op)
    if issues:
        raise SchemaError(issues)

    parent_type, placeholder = _parent_placeholder(obj)
    return ObjectSurface(
        obj=obj,
        operations=tuple(operations),
        parent_type=parent_type,
        placeholder=placeholder,
    )


def _manager_binding(obj: ObjectModel) -> ManagerBinding:
    protocol = MANAGER_TABLE[(obj.kind, obj.is_root, obj.has_children())]
    type_args = [obj.name, data_type_name(obj.name)]
    if not obj.is_root:
        type_args.append(marker_name(obj.name) if obj.is_multi_parent else obj.first_parent)
    return ManagerBinding(
        accessor=manager_accessor(obj.name),
        protocol=protocol,
        record=obj.name,
        type_args=tuple(type_args),
    )


def build_module_surface(model: ConfigModel) -> ModuleSurface:
    """
    Resolve the surface of every object plus the placeholders, markers and
    manager bindings the generated module needs.

    The model must already have passed ``validate_model``.
    """
    objects = list(model.all_objects())
    issues: List[Diagnostic] = []
    surfaces: List[ObjectSurface] = []
    for obj in objects:
        try:
            surfaces.append(build_object_surface(model, obj))
        except SchemaError as e:
            issues.extend(e.diagnostics)
    if issues:
        raise SchemaError(issues)

    record_placeholders = set()
    markers: List[Marker] = []
    marker_placeholders: List[Placeholder] = []
    for obj in objects:
        if obj.is_root:
            continue
        record_placeholders.add(obj.first_parent)
        if obj.is_multi_parent:
            markers.append(Marker(name=marker_name(obj.name), child=obj.name, parents=obj.parents))
            marker_placeholders.append(
                Placeholder(
                    name=marker_placeholder_name(obj.name),
                    returns=marker_name(obj.name),
                    record=obj.first_parent,
                    delegate=placeholder_name(obj.first_parent),
                )
            )
        if _is_ordered(obj):
            record_placeholders.add(obj.name)

    placeholders = [
        Placeholder(name=placeholder_name(obj.name), returns=obj.name, record=obj.name)
        for obj in objects
        if obj.name in record_placeholders
    ]

    surface = ModuleSurface(
        repository_name=model.repository_name,
        objects=tuple(surfaces),
        placeholders=tuple(placeholders + marker_placeholders),
        markers=tuple(markers),
        managers=tuple(_manager_binding(obj) for obj in objects),
        record_types=tuple(name for obj in objects for name in (obj.name, data_type_name(obj.name))),
    )
    logger.debug(
        f"Resolved {sum(len(s.operations) for s in surfaces)} operations across "
        f"{len(surfaces)} objects of {model.repository_name}"
    )
    return surface
