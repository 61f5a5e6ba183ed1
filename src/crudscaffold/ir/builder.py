"""Fold a parsed schema into the semantic model, enforcing per-kind shape rules."""

from typing import List, Optional, Tuple

from crudscaffold.config.logging import get_logger
from crudscaffold.errors import Diagnostic, SchemaError
from crudscaffold.ir.model import (
    BatchModel,
    CollectionModel,
    ConfigModel,
    SingletonFamilyModel,
    SingletonModel,
)
from crudscaffold.schema.ast import CHILD_LIST_KINDS, ConfigAst, ObjectDecl, ObjectKind

logger = get_logger(__name__)

_CHILD_KEYS = ", ".join(f"`{key}`" for key in CHILD_LIST_KINDS)


def _error(decl: ObjectDecl, code: str, message: str) -> Diagnostic:
    return Diagnostic(code=code, message=message, location=decl.location, details={"object": decl.name})


def _required_parents(decl: ObjectDecl, diagnostics: List[Diagnostic]) -> Optional[Tuple[str, ...]]:
    parents = decl.parent
    if parents is None:
        diagnostics.append(
            _error(
                decl,
                "MISSING_PARENT",
                f"`{decl.kind.value}` objects require a `parent` property "
                f"(e.g., `parent: Owner`); `{decl.name}` has none",
            )
        )
        return None
    if not parents:
        diagnostics.append(
            _error(
                decl,
                "EMPTY_PARENT",
                f"`{decl.kind.value}` objects require at least one `parent` when `parent` is specified",
            )
        )
        return None
    return tuple(parents)


def _optional_parents(decl: ObjectDecl, diagnostics: List[Diagnostic]) -> Optional[Tuple[str, ...]]:
    parents = decl.parent
    if parents is not None and not parents:
        diagnostics.append(
            _error(
                decl,
                "EMPTY_PARENT",
                f"`{decl.kind.value}` objects require at least one `parent` when `parent` is specified",
            )
        )
        return None
    return None if parents is None else tuple(parents)


def _reject_children(decl: ObjectDecl, diagnostics: List[Diagnostic]) -> bool:
    if not decl.declares_children:
        return True
    if decl.kind == ObjectKind.BATCH:
        message = f"`batch` objects cannot have children ({_CHILD_KEYS}); remove them from `{decl.name}`"
    else:
        message = (
            f"`{decl.kind.value}` objects cannot have child properties; "
            f"remove {_CHILD_KEYS} from `{decl.name}`"
        )
    diagnostics.append(_error(decl, "LEAF_HAS_CHILDREN", message))
    return False


def build_model(ast: ConfigAst) -> ConfigModel:
    """
    Build the semantic model from a parsed schema.

    Every declaration is checked even after an earlier one failed, so all
    shape errors are reported together.

    Args:
        ast: Parsed schema

    Returns:
        Frozen ConfigModel

    Raises:
        SchemaError: If any declaration violates the rules of its kind
    """
    diagnostics: List[Diagnostic] = []
    collections: List[CollectionModel] = []
    batches: List[BatchModel] = []
    singletons: List[SingletonModel] = []
    families: List[SingletonFamilyModel] = []

    for decl in ast.objects:
        if decl.kind == ObjectKind.ROOT:
            if decl.parent is not None:
                diagnostics.append(
                    _error(
                        decl,
                        "ROOT_HAS_PARENT",
                        f"`root` objects cannot have a `parent` property; "
                        f"declare `{decl.name}` as `ordered_child` or `unordered_child` to give it one",
                    )
                )
                continue
            collections.append(_collection(decl, None))

        elif decl.kind in (ObjectKind.ORDERED_CHILD, ObjectKind.UNORDERED_CHILD):
            parents = _required_parents(decl, diagnostics)
            if parents is not None:
                collections.append(_collection(decl, parents))

        elif decl.kind == ObjectKind.BATCH:
            parents = _required_parents(decl, diagnostics)
            leaf = _reject_children(decl, diagnostics)
            if parents is not None and leaf:
                batches.append(BatchModel(name=decl.name, parents=parents, location=decl.location))

        elif decl.kind == ObjectKind.SINGLETON:
            parents = _optional_parents(decl, diagnostics)
            if _reject_children(decl, diagnostics):
                singletons.append(SingletonModel(name=decl.name, parents=parents, location=decl.location))

        elif decl.kind == ObjectKind.SINGLETON_FAMILY:
            parents = _optional_parents(decl, diagnostics)
            if _reject_children(decl, diagnostics):
                families.append(
                    SingletonFamilyModel(name=decl.name, parents=parents, location=decl.location)
                )

    if diagnostics:
        raise SchemaError(diagnostics)

    model = ConfigModel(
        repository_name=ast.repository_name,
        location=ast.repository_location,
        collections=tuple(collections),
        batches=tuple(batches),
        singletons=tuple(singletons),
        singleton_families=tuple(families),
    )
    logger.debug(
        f"Built model for {model.repository_name}: {len(collections)} collections, "
        f"{len(batches)} batches, {len(singletons)} singletons, {len(families)} singleton families"
    )
    return model


def _collection(decl: ObjectDecl, parents: Optional[Tuple[str, ...]]) -> CollectionModel:
    return CollectionModel(
        kind=decl.kind,
        name=decl.name,
        parents=parents,
        location=decl.location,
        **{key: tuple(decl.child_list(key)) for key in CHILD_LIST_KINDS},
    )
