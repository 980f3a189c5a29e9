"""
Python declaration emitter.

Renders generated record declarations as a module of ``@dataclass``
classes. Phantom types for unique keys become empty subclasses of
``UniqueMarker``. The module is assembled as an ``ast.Module`` and
formatted with black.
"""

import ast
import keyword
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Set

from orm_inspector.codegen_utils import format_python_code_using_black
from orm_inspector.data_gen import GeneratedData
from orm_inspector.domain.declarations import DataDeclaration, UniquePhantom
from orm_inspector.domain.models import QualifiedName
from orm_inspector.domain.type_mapping import KEYS_MODULE
from orm_inspector.emitters.base import (
    add_location, create_ann_assign, create_annotation, create_class_def, create_docstring,
    create_import_from, create_name, create_string_constant, create_subscript,
)
from orm_inspector.exceptions import CodeGenerationError


logger = logging.getLogger(__name__)

MODULE_DOCSTRING = "Record declarations generated by orm-inspector."


def is_valid_python_identifier(name: str) -> bool:
    """Check if a string is a valid Python identifier and not a keyword."""
    return isinstance(name, str) and name.isidentifier() and not keyword.iskeyword(name)


def _check_identifier(name: str, what: str, table: QualifiedName) -> None:
    if not is_valid_python_identifier(name):
        raise CodeGenerationError(
            f"Generated {what} name {name!r} is not a valid Python identifier",
            component="declarations",
            table=str(table),
        )


def _collect_imports(generated: Iterable[GeneratedData]) -> Dict[str, Set[str]]:
    imports: Dict[str, Set[str]] = defaultdict(set)
    for data in generated:
        for data_field in data.declaration.fields:
            for type_ref in data_field.type.walk():
                if type_ref.module and type_ref.module != "builtins":
                    imports[type_ref.module].add(type_ref.name)
        if data.phantoms:
            imports[KEYS_MODULE].add("UniqueMarker")
    return imports


def create_phantom_class(phantom: UniquePhantom) -> ast.ClassDef:
    """``class CustomerEmail(UniqueMarker["Customer"]): ...``"""
    base = create_subscript("UniqueMarker", [create_string_constant(phantom.entity)])
    return create_class_def(
        name=phantom.name,
        bases=[base],
        body=[create_docstring(f"Unique key marker of {phantom.entity}.")],
    )


def create_record_class(table: QualifiedName, declaration: DataDeclaration) -> ast.ClassDef:
    """Creates the ``@dataclass`` record of one table."""
    _check_identifier(declaration.name, "record", table)
    body: List[ast.stmt] = [create_docstring(f"Row of table {table}.")]
    for data_field in declaration.fields:
        _check_identifier(data_field.name, "field", table)
        body.append(create_ann_assign(data_field.name, create_annotation(data_field.type)))
    return create_class_def(
        name=declaration.name,
        bases=[],
        body=body,
        decorator_list=[create_name("dataclass")],
    )


def generate_declarations_ast(generated: Mapping[QualifiedName, GeneratedData]) -> ast.Module:
    """Generates the complete AST Module for the declarations file."""
    seen: Dict[str, QualifiedName] = {}
    classes: List[ast.stmt] = []
    for table, data in generated.items():
        names = [p.name for p in data.phantoms] + [data.declaration.name]
        for name in names:
            _check_identifier(name, "class", table)
            if name in seen:
                raise CodeGenerationError(
                    f"Class name {name!r} generated for both {seen[name]} and {table}",
                    component="declarations",
                    table=str(table),
                )
            seen[name] = table
        classes.extend(create_phantom_class(p) for p in data.phantoms)
        classes.append(create_record_class(table, data.declaration))

    imports: List[ast.stmt] = [
        create_import_from("__future__", ["annotations"]),
        create_import_from("dataclasses", ["dataclass"]),
    ]
    for module, names in sorted(_collect_imports(generated.values()).items()):
        imports.append(create_import_from(module, sorted(names)))

    module_body = [create_docstring(MODULE_DOCSTRING)] + imports + classes
    return add_location(ast.Module(body=module_body, type_ignores=[]))


def generate_declarations_code(generated: Mapping[QualifiedName, GeneratedData]) -> str:
    """Generates the Python source of the declarations module, formatted with black."""
    module_ast = ast.fix_missing_locations(generate_declarations_ast(generated))
    code = ast.unparse(module_ast) + "\n"
    logger.debug(f"Rendered {len(generated)} record declarations")
    return format_python_code_using_black("declarations", code)
