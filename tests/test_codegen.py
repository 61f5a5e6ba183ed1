"""Tests for the generated module: structure, imports and forwarding behaviour."""

import inspect

import pytest

from crudscaffold import GenerationOptions, compile_schema
from crudscaffold.runtime.records import AutoFields

from conftest import EXAMPLE_SCHEMA, MODELS_MODULE, SHOP_SCHEMA, load_generated, make_records, pk, record_of


def _source(text: str = SHOP_SCHEMA, **options) -> str:
    options.setdefault("models_module", MODELS_MODULE)
    result = compile_schema(text, options=GenerationOptions(**options))
    assert result.ok, [str(d) for d in result.diagnostics]
    return result.source


def test_example_schema_generates_all_artifacts():
    """Test the root/child example produces interfaces, impls and handlers."""
    source = _source(EXAMPLE_SCHEMA)
    for fragment in (
        "class Repo(Protocol):",
        "class RepoImpl:",
        "class ACrud(ABC):",
        "class ACrudImpl(ACrud):",
        "class BCrud(ABC):",
        "class BCrudImpl(BCrud):",
        "async def manage_a_handler(",
        "async def manage_b_handler(",
        "def placeholder_a(item_id: PkSk) -> A:",
    ):
        assert fragment in source
    compile(source, "generated.py", "exec")


def test_generated_source_is_valid_python_for_every_kind():
    """Test the full kind matrix compiles."""
    compile(_source(), "generated.py", "exec")


def test_generation_is_deterministic():
    """Test identical input gives byte-identical output."""
    assert _source() == _source()


def test_models_module_is_required():
    """Test generation fails without a module providing the record types."""
    result = compile_schema(EXAMPLE_SCHEMA)
    assert [d.code for d in result.diagnostics] == ["MISSING_MODELS_MODULE"]
    assert "`models_module`" in result.diagnostics[0].message
    assert result.source is None


def test_models_module_import():
    """Test every record and data type is imported from the configured module."""
    source = _source(EXAMPLE_SCHEMA, models_module="myapp.models")
    assert "from myapp.models import (\n    A,\n    AData,\n    B,\n    BData,\n)" in source


def test_invalid_options_are_rejected():
    """Test accessor and module names are validated."""
    with pytest.raises(ValueError):
        GenerationOptions(context_accessor="not valid")
    with pytest.raises(ValueError):
        GenerationOptions(models_module="my-app.models")


def test_interface_methods_are_abstract(shop_module):
    """Test interfaces cannot be instantiated and declare the full surface."""
    assert inspect.isabstract(shop_module.StoreCrud)
    with pytest.raises(TypeError):
        shop_module.StoreCrud()
    assert "add_shelf" in shop_module.StoreCrud.__abstractmethods__
    assert not inspect.isabstract(shop_module.StoreCrudImpl)


async def test_impl_forwards_to_manager(shop_module, ctx, repo, shop_records):
    """Test implementations delegate 1:1 to the object's manager."""
    store = record_of(shop_records, "Store", "s1")
    repo.manage_store().returns["query_all"] = [store]

    listed = await shop_module.StoreCrudImpl().list(ctx)

    assert listed == [store]
    assert repo.manage_store().calls == [("query_all", ())]


async def test_owner_accessor_passes_owner_as_parent(shop_module, ctx, repo, shop_records):
    """Test accessor methods call the child's manager with the owner record."""
    store = record_of(shop_records, "Store", "s1")
    data = shop_records["StoreShelfData"](value="top")

    await shop_module.StoreCrudImpl().add_shelf(ctx, store, data)

    assert repo.manage_store_shelf().calls == [("add", (store, data, None))]
    assert "manage_store" not in repo.managers


async def test_unchecked_operation_builds_placeholder_parent(shop_module, ctx, repo):
    """Test unchecked operations pass an identifier-only parent record."""
    await shop_module.StoreShelfCrudImpl().unchecked_list(ctx, pk("s1"))

    (primitive, (parent,)), = repo.manage_store_shelf().calls
    assert primitive == "query_all"
    assert type(parent).__name__ == "Store"
    assert parent.id == pk("s1")
    assert parent.data.value is None
    assert parent.auto_fields == AutoFields()


async def test_multi_parent_placeholder_satisfies_marker(shop_module, ctx, repo):
    """Test multi-parent children build their parent through the marker factory."""
    parent = shop_module.placeholder_tag_parent(pk("c1"))
    assert isinstance(parent, shop_module.TagParent)

    await shop_module.TagCrudImpl().unchecked_batch_delete_all(ctx, pk("c1"))
    (primitive, (passed,)), = repo.manage_tag().calls
    assert primitive == "batch_delete_all"
    assert passed.id == pk("c1")


async def test_singleton_family_forwarding(shop_module, ctx, repo):
    """Test keyed singleton operations forward the key."""
    await shop_module.LocaleCrudImpl().unchecked_get(ctx, pk("s1"), "en")
    (primitive, (parent, key)), = repo.manage_locale().calls
    assert (primitive, key) == ("get", "en")
    assert parent.id == pk("s1")


async def test_root_singleton_has_no_parent(shop_module, ctx, repo):
    """Test repository-scoped singletons take no parent."""
    await shop_module.BannerCrudImpl().delete(ctx)
    assert repo.manage_banner().calls == [("delete", ())]


def test_repository_impl_builds_every_manager(shop_module):
    """Test the repository implementation asks the factory once per object."""
    requested = []

    def factory(kind, record_type):
        requested.append((kind, record_type.__name__))
        return object()

    repository = shop_module.ShopImpl(factory)

    assert ("ManageRootWithChildren", "Store") in requested
    assert ("ManageBatchChild", "StorePrice") in requested
    assert len(requested) == 9
    assert repository.manage_store() is repository.manage_store()


def test_custom_context_accessor(shop_records):
    """Test the repository accessor name on ctx is configurable."""
    source = _source(EXAMPLE_SCHEMA, context_accessor="get_repo")
    assert "repository = await ctx.get_repo()" in source
    assert "ctx.repository()" not in source
    records = make_records(["A", "B"])
    module = load_generated(source, records)
    assert module.A is records["A"]
    assert module.placeholder_a(pk("a1")).id == pk("a1")
