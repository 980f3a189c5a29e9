import ast
from typing import List, Optional, Union

from orm_inspector.domain.declarations import TypeRef


def add_location(node):
    """Add location info to AST nodes"""
    node.lineno = 1
    node.col_offset = 0
    return node


def create_docstring(content: str) -> ast.Expr:
    """Creates an AST node for a docstring."""
    return add_location(ast.Expr(value=ast.Constant(value=content)))


def create_import_from(module: str, names: List[str]) -> ast.ImportFrom:
    """Creates an AST node for a ``from module import names`` statement."""
    return add_location(ast.ImportFrom(
        module=module,
        names=[ast.alias(name=name, lineno=1, col_offset=0) for name in names],
        level=0,
    ))


def create_name(name: str) -> ast.Name:
    return add_location(ast.Name(id=name, ctx=ast.Load()))


def create_string_constant(value: str) -> ast.Constant:
    """Creates an AST Constant node for a string."""
    return add_location(ast.Constant(value=value))


def create_subscript(name: str, args: List[ast.expr]) -> ast.Subscript:
    """Creates ``name[arg]`` or ``name[arg1, arg2, ...]``."""
    if len(args) == 1:
        slice_node = args[0]
    else:
        slice_node = add_location(ast.Tuple(elts=args, ctx=ast.Load()))
    return add_location(ast.Subscript(value=create_name(name), slice=slice_node, ctx=ast.Load()))


def create_annotation(type_ref: TypeRef) -> ast.expr:
    """Creates the annotation expression for a type reference."""
    if not type_ref.args:
        return create_name(type_ref.name)
    return create_subscript(type_ref.name, [create_annotation(arg) for arg in type_ref.args])


def create_ann_assign(target: str, annotation: ast.expr) -> ast.AnnAssign:
    """Creates an annotated class attribute without value, e.g. ``name: str``."""
    return add_location(ast.AnnAssign(
        target=add_location(ast.Name(id=target, ctx=ast.Store())),
        annotation=annotation,
        value=None,
        simple=1,
    ))


def create_class_def(
    name: str,
    bases: List[Union[str, ast.expr]],
    body: List[ast.stmt],
    decorator_list: Optional[List[ast.expr]] = None,
) -> ast.ClassDef:
    """Creates an AST node for a class definition."""
    node = ast.ClassDef(
        name=name,
        bases=[create_name(base) if isinstance(base, str) else base for base in bases],
        keywords=[],
        body=body or [add_location(ast.Pass())],
        decorator_list=decorator_list or [],
    )
    # Python 3.12 added type parameters to class definitions
    if 'type_params' in ast.ClassDef._fields:
        node.type_params = []
    return add_location(node)
