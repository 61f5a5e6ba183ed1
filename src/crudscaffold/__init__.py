"""crudscaffold: generate typed CRUD interfaces and request handlers from a schema."""

from crudscaffold.codegen import GenerationOptions
from crudscaffold.compiler import CompileResult, compile_schema, generate_source, load_model
from crudscaffold.errors import CrudScaffoldError, Diagnostic, Location, SchemaError

__version__ = "0.1.0"

__all__ = [
    "CompileResult",
    "CrudScaffoldError",
    "Diagnostic",
    "GenerationOptions",
    "Location",
    "SchemaError",
    "compile_schema",
    "generate_source",
    "load_model",
]
