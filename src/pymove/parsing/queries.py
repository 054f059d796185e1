"""Tree-sitter queries for the Python grammar."""

IDENTIFIER_QUERY = "(identifier) @id"

TYPE_ANNOTATION_QUERY = "(type) @type_annotation"

DEFAULT_VALUE_QUERY = """
(default_parameter value: (_) @default_value)
(typed_default_parameter value: (_) @default_value)
"""

CALL_TARGET_QUERY = """
(call function: (identifier) @call_target)
(call function: (attribute object: (identifier) @call_object))
"""

CLASS_QUERY = "(class_definition) @class"

# Module names of both import forms. Relative modules of ``from`` imports
# are matched by the second pattern.
IMPORT_MODULE_QUERY = """
(import_from_statement module_name: (dotted_name) @module_name)
(import_from_statement module_name: (relative_import) @module_name)
(import_statement name: (dotted_name) @module_name)
(import_statement name: (aliased_import name: (dotted_name) @module_name))
"""
