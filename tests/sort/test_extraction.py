"""Tests for declaration extraction."""

from __future__ import annotations

import pytest

from pymove.core.errors import ScopeRewriteError
from pymove.parsing.treesitter import PythonParser
from pymove.sort.extraction import (
    class_at_line,
    class_enclosing,
    extract_class_methods,
    extract_module_functions,
    extract_module_objects,
    find_classes,
    qualified_class_name,
)
from pymove.sort.models import DeclarationKind

MODULE = '''"""Doc."""

import os

MAX = 10


# helper comment
@decorator(arg)
def helper(x: Config = DEFAULT) -> Result:
    return compute(x)


class Widget(Base):
    def method(self, item: Item) -> None:
        self.run()


_cache = {}
'''


class TestExtractModuleObjects:
    """Module-level functions, classes and constants."""

    def test_finds_declarations_in_source_order(self, parser: PythonParser) -> None:
        objects = extract_module_objects(parser, parser.parse(MODULE))
        assert [o.name for o in objects] == ["MAX", "helper", "Widget", "_cache"]
        assert [o.kind for o in objects] == [
            DeclarationKind.CONSTANT,
            DeclarationKind.FUNCTION,
            DeclarationKind.CLASS,
            DeclarationKind.CONSTANT,
        ]
        assert [o.category for o in objects] == ["constants", "public", "public", "utility"]

    def test_span_includes_attached_comment_and_decorator(self, parser: PythonParser) -> None:
        helper = extract_module_objects(parser, parser.parse(MODULE))[1]
        assert helper.declared_range == (8, 11)
        assert helper.node_start_line == 9
        assert helper.raw_text == (
            "# helper comment",
            "@decorator(arg)",
            "def helper(x: Config = DEFAULT) -> Result:",
            "    return compute(x)",
        )
        assert helper.decorators == ("decorator",)

    def test_function_dependencies(self, parser: PythonParser) -> None:
        helper = extract_module_objects(parser, parser.parse(MODULE))[1]
        assert helper.dependency_names >= {
            "decorator",
            "arg",
            "Config",
            "DEFAULT",
            "Result",
            "compute",
        }
        assert "x" not in helper.dependency_names

    def test_class_dependencies_include_bases_and_method_signatures(
        self, parser: PythonParser
    ) -> None:
        widget = extract_module_objects(parser, parser.parse(MODULE))[2]
        assert widget.dependency_names >= {"Base", "Item", "self"}

    def test_statements_between_declarations_are_anchored(self, parser: PythonParser) -> None:
        source = 'def b():\n    pass\n\nprint("hi")\n\ndef a():\n    pass\n'
        objects = extract_module_objects(parser, parser.parse(source))
        assert [o.kind for o in objects] == [
            DeclarationKind.FUNCTION,
            DeclarationKind.STATEMENT,
            DeclarationKind.FUNCTION,
        ]
        assert objects[1].category == "statement"
        assert objects[1].raw_text == ('print("hi")',)

    def test_floating_comment_is_a_statement(self, parser: PythonParser) -> None:
        source = "def b():\n    pass\n\n# floating\n\ndef a():\n    pass\n"
        objects = extract_module_objects(parser, parser.parse(source))
        assert [o.name for o in objects] == ["b", "<comment:4>", "a"]

    def test_trailing_comment_is_not_a_statement(self, parser: PythonParser) -> None:
        source = "B = A + 1  # uses A\nA = 1\n"
        objects = extract_module_objects(parser, parser.parse(source))
        assert [o.name for o in objects] == ["B", "A"]
        assert objects[0].raw_text == ("B = A + 1  # uses A",)

    def test_statements_sharing_a_line_raise(self, parser: PythonParser) -> None:
        with pytest.raises(ScopeRewriteError) as exc_info:
            extract_module_objects(parser, parser.parse("Y = X; Z = 2\nX = 1\n"))
        assert exc_info.value.details == {"line": 1}

    def test_statements_outside_declarations_are_ignored(self, parser: PythonParser) -> None:
        source = "import os\n\ndef a():\n    pass\n\nif __name__ == '__main__':\n    a()\n"
        objects = extract_module_objects(parser, parser.parse(source))
        assert [o.name for o in objects] == ["a"]

    def test_lowercase_assignment_is_not_a_constant(self, parser: PythonParser) -> None:
        objects = extract_module_objects(parser, parser.parse("logger = get()\n"))
        assert objects == []

    def test_constant_dependencies(self, parser: PythonParser) -> None:
        objects = extract_module_objects(parser, parser.parse("LIMIT = compute(BASE) * 2\n"))
        assert objects[0].dependency_names == frozenset({"compute", "BASE"})

    def test_empty_module(self, parser: PythonParser) -> None:
        assert extract_module_objects(parser, parser.parse("")) == []


class TestExtractMethods:
    """Methods and module functions."""

    SOURCE = '''class A:
    """Doc."""

    def __init__(self):
        pass

    @property
    def value(self):
        return 1

    @value.setter
    def value(self, v):
        pass


def outside():
    pass
'''

    def test_class_methods(self, parser: PythonParser) -> None:
        result = parser.parse(self.SOURCE)
        class_node = find_classes(parser, result)[0].node
        methods = extract_class_methods(parser, result, class_node)
        assert [m.name for m in methods] == ["__init__", "value", "value"]
        assert methods[1].decorators == ("property",)
        assert methods[2].decorators == ("value.setter",)
        assert [m.category for m in methods] == ["dunder", "public", "public"]

    def test_module_functions_exclude_methods(self, parser: PythonParser) -> None:
        functions = extract_module_functions(parser, parser.parse(self.SOURCE))
        assert [f.name for f in functions] == ["outside"]
        assert functions[0].declared_range == (16, 17)


class TestClassLookup:
    """Class discovery by name and position."""

    SOURCE = """class Outer:
    class Inner:
        def m(self):
            pass

    def f(self):
        pass


def free():
    pass
"""

    def test_find_classes_qualified_names(self, parser: PythonParser) -> None:
        classes = find_classes(parser, parser.parse(self.SOURCE))
        assert [c.qualified_name for c in classes] == ["Outer", "Outer.Inner"]
        assert (classes[1].start_line, classes[1].end_line) == (2, 4)

    def test_class_at_line_returns_innermost(self, parser: PythonParser) -> None:
        result = parser.parse(self.SOURCE)
        assert qualified_class_name(class_at_line(parser, result, 3)) == "Outer.Inner"
        assert qualified_class_name(class_at_line(parser, result, 6)) == "Outer"

    def test_class_at_line_outside_classes(self, parser: PythonParser) -> None:
        result = parser.parse(self.SOURCE)
        assert class_at_line(parser, result, 10) is None
        assert class_at_line(parser, result, 99) is None

    def test_class_enclosing_range(self, parser: PythonParser) -> None:
        result = parser.parse(self.SOURCE)
        assert qualified_class_name(class_enclosing(parser, result, 3, 4)) == "Outer.Inner"
        assert qualified_class_name(class_enclosing(parser, result, 2, 7)) == "Outer"
        assert class_enclosing(parser, result, 6, 11) is None
