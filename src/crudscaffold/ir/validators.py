"""Cross-object validation of a built model.

The builder only checks each declaration on its own. These checks look at
references between objects and run before any code is emitted.
"""

import keyword
from typing import Dict, List, Set

from crudscaffold.config.logging import get_logger
from crudscaffold.errors import Diagnostic, SchemaError
from crudscaffold.ir.model import ConfigModel, ObjectModel
from crudscaffold.naming import (
    data_type_name,
    impl_name,
    interface_name,
    marker_name,
    repository_impl_name,
    to_snake_case,
)
from crudscaffold.schema.ast import CHILD_LIST_KINDS

logger = get_logger(__name__)

# Module-level names of a generated module that an object name must not shadow
RESERVED_NAMES = {
    "ABC",
    "AutoFields",
    "Awaitable",
    "Callable",
    "CreatedBatchResult",
    "CreatedResult",
    "CrudContext",
    "CrudOperationResult",
    "Dict",
    "HANDLERS",
    "ItemResult",
    "ItemsResult",
    "List",
    "ManagerFactory",
    "Optional",
    "PkSk",
    "Protocol",
    "UnitResult",
    "abstractmethod",
    "annotations",
    "managers",
    "ops",
    "runtime_checkable",
}


def _issue(obj: ObjectModel, code: str, message: str, **details) -> Diagnostic:
    return Diagnostic(code=code, message=message, location=obj.location, details={"object": obj.name, **details})


def validate_names(model: ConfigModel) -> List[Diagnostic]:
    """Check object names are unique and usable as Python class names."""
    issues: List[Diagnostic] = []
    repository = model.repository_name
    if keyword.iskeyword(repository) or repository in RESERVED_NAMES or model.get(repository) is not None:
        issues.append(
            Diagnostic(
                code="RESERVED_NAME",
                message=(
                    f"repository name `{repository}` clashes with a Python keyword, an object "
                    f"name or a name the generated module already defines; pick another"
                ),
                location=model.location,
            )
        )

    derived = _derived_names(model)
    if repository in derived:
        issues.append(
            Diagnostic(
                code="NAME_COLLISION",
                message=(
                    f"repository name `{repository}` is also generated for `{derived[repository]}`; "
                    f"pick another"
                ),
                location=model.location,
            )
        )

    seen: Set[str] = set()
    snake_owners: Dict[str, str] = {}
    for obj in model.all_objects():
        if obj.name in seen:
            issues.append(_issue(obj, "DUPLICATE_OBJECT", f"`{obj.name}` is declared more than once"))
            continue
        seen.add(obj.name)
        if keyword.iskeyword(obj.name) or obj.name in RESERVED_NAMES:
            issues.append(
                _issue(
                    obj,
                    "RESERVED_NAME",
                    f"`{obj.name}` cannot be used as an object name; it clashes with a Python "
                    f"keyword or a name the generated module already defines",
                )
            )
        if obj.name in derived:
            issues.append(
                _issue(
                    obj,
                    "NAME_COLLISION",
                    f"`{obj.name}` is also the name generated for `{derived[obj.name]}`; rename one of them",
                    other=derived[obj.name],
                )
            )

        snake = to_snake_case(obj.name)
        other = snake_owners.setdefault(snake, obj.name)
        if other != obj.name:
            issues.append(
                _issue(
                    obj,
                    "NAME_COLLISION",
                    f"`{obj.name}` and `{other}` both derive `manage_{snake}`; "
                    f"object names must differ after conversion to snake_case",
                    other=other,
                )
            )
    return issues


def _derived_names(model: ConfigModel) -> Dict[str, str]:
    """Map every class name the generated module defines to what it is generated for."""
    derived = {repository_impl_name(model.repository_name): f"repository `{model.repository_name}`"}
    for obj in model.all_objects():
        for name in (interface_name(obj.name), impl_name(obj.name), data_type_name(obj.name), marker_name(obj.name)):
            derived.setdefault(name, f"object `{obj.name}`")
    return derived


def validate_references(model: ConfigModel) -> List[Diagnostic]:
    """
    Check that parent and child references resolve and agree with each other.

    Args:
        model: Built ConfigModel

    Returns:
        List of Diagnostic objects (empty if validation passes)
    """
    issues: List[Diagnostic] = []
    objects: Dict[str, ObjectModel] = {}
    for obj in model.all_objects():
        objects.setdefault(obj.name, obj)

    for obj in model.all_objects():
        for parent_name in obj.parents or ():
            parent = objects.get(parent_name)
            if parent is None:
                issues.append(
                    _issue(
                        obj,
                        "DANGLING_PARENT",
                        f"`{obj.name}` names parent `{parent_name}`, which is not declared",
                        parent=parent_name,
                    )
                )
            elif not parent.kind.is_collection:
                issues.append(
                    _issue(
                        obj,
                        "PARENT_NOT_COLLECTION",
                        f"`{obj.name}` names parent `{parent_name}`, but `{parent.kind.value}` "
                        f"objects cannot own children",
                        parent=parent_name,
                    )
                )
            elif obj.name not in parent.child_lists().get(_list_key(obj), ()):
                logger.warning(
                    f"{obj.name} names parent {parent_name}, but {parent_name} does not list it; "
                    f"no accessor methods will be generated on {parent_name}Crud"
                )

    for owner in model.collections:
        listed: Set[str] = set()
        for key, children in owner.child_lists().items():
            for child_name in children:
                if child_name in listed:
                    issues.append(
                        _issue(
                            owner,
                            "DUPLICATE_CHILD",
                            f"`{owner.name}` lists `{child_name}` more than once",
                            child=child_name,
                        )
                    )
                    continue
                listed.add(child_name)
                issues.extend(_check_child(owner, key, child_name, objects))

    return issues


def _list_key(obj: ObjectModel) -> str:
    for key, kind in CHILD_LIST_KINDS.items():
        if kind == obj.kind:
            return key
    return ""


def _check_child(owner: ObjectModel, key: str, child_name: str, objects: Dict[str, ObjectModel]) -> List[Diagnostic]:
    child = objects.get(child_name)
    if child is None:
        return [
            _issue(
                owner,
                "DANGLING_CHILD",
                f"`{owner.name}` lists `{child_name}` in `{key}`, but `{child_name}` is not declared",
                child=child_name,
            )
        ]
    expected = CHILD_LIST_KINDS[key]
    if child.kind != expected:
        return [
            _issue(
                owner,
                "CHILD_KIND_MISMATCH",
                f"`{owner.name}` lists `{child_name}` in `{key}`, but `{child_name}` is declared as "
                f"`{child.kind.value}`; entries of `{key}` must be `{expected.value}` objects",
                child=child_name,
            )
        ]
    if owner.name not in (child.parents or ()):
        return [
            _issue(
                owner,
                "PARENT_MISMATCH",
                f"`{owner.name}` lists `{child_name}` as a child, but `{child_name}` does not name "
                f"`{owner.name}` as a parent; add it to `{child_name}`'s `parent` property",
                child=child_name,
            )
        ]
    return []


def validate_model(model: ConfigModel) -> List[Diagnostic]:
    """Run every cross-object check and return all issues found."""
    issues = validate_names(model) + validate_references(model)
    if issues:
        logger.debug(f"Model {model.repository_name} has {len(issues)} validation issues")
    return issues


def ensure_valid(model: ConfigModel) -> None:
    """Raise SchemaError if ``validate_model`` reports anything."""
    issues = validate_model(model)
    if issues:
        raise SchemaError(issues)
