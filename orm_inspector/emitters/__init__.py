"""
Output emitters.

Each emitter renders the neutral declaration and mapping models in one
target format.
"""

from .declarations import generate_declarations_ast, generate_declarations_code
from .mappings import show_mappings


__all__ = [
    'generate_declarations_ast',
    'generate_declarations_code',
    'show_mappings',
]
