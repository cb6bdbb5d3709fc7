"""
Tests for the language state machines.
"""

import pytest
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from complexityscanner.core.analyzer import ComplexityAnalyzer
from complexityscanner.core.conditions import conditions_for
from complexityscanner.core.context import FunctionContext
from complexityscanner.core.errors import UnsupportedLanguageError
from complexityscanner.core.types import Language
from complexityscanner.machines import (
    GoStateMachine,
    PythonStateMachine,
    TypeScriptStateMachine,
    create_state_machine,
    list_supported_languages,
)


def analyze(code, language):
    result = ComplexityAnalyzer(language).analyze(code)
    assert result.mode == "function"
    return result


def by_name(result):
    return {f.name: f for f in result.functions}


class TestRegistry:
    """Tests for the state machine registry."""

    def test_all_languages_registered(self):
        """Test that every language has a machine."""
        assert set(list_supported_languages()) == set(Language)

    def test_machine_per_language(self):
        """Test that each language resolves to its variant."""
        context = FunctionContext()
        cases = {
            Language.GO: GoStateMachine,
            Language.TYPESCRIPT: TypeScriptStateMachine,
            Language.JAVASCRIPT: TypeScriptStateMachine,
            Language.PYTHON: PythonStateMachine,
        }
        for language, machine_class in cases.items():
            machine = create_state_machine(language, context, conditions_for(language))
            assert isinstance(machine, machine_class)

    def test_unknown_language(self):
        """Test that an unregistered key raises."""
        with pytest.raises(UnsupportedLanguageError):
            create_state_machine("cobol", FunctionContext(), conditions_for(Language.GO))


class TestTypeScriptMachine:
    """Tests for TypeScript and JavaScript function detection."""

    def test_function_declaration(self):
        """Test a plain function with an if/else."""
        result = analyze(
            "function foo(x) { if (x) { return 1; } else { return 2; } }",
            Language.TYPESCRIPT,
        )
        assert len(result.functions) == 1
        assert result.functions[0].name == "foo"
        assert result.functions[0].cyclomatic_complexity == 2
        assert result.functions[0].parameter_count == 1

    def test_expression_arrow(self):
        """Test an arrow function with an expression body."""
        result = analyze("const add = (a, b) => a + b;\n", Language.TYPESCRIPT)
        assert len(result.functions) == 1
        add = result.functions[0]
        assert add.name == "add"
        assert add.parameter_count == 2
        assert add.cyclomatic_complexity == 1

    def test_block_arrow(self):
        """Test an arrow function with a block body."""
        code = (
            "const check = (x) => {\n"
            "  if (x > 0) {\n"
            "    return true;\n"
            "  }\n"
            "  return false;\n"
            "};\n"
        )
        result = analyze(code, Language.TYPESCRIPT)
        check = by_name(result)["check"]
        assert check.start_line == 1
        assert check.end_line == 6
        assert check.cyclomatic_complexity == 2

    def test_class_method_excludes_control_keywords(self):
        """Test that if/for parentheses are not mistaken for methods."""
        code = (
            "class Foo {\n"
            "  bar(x) {\n"
            "    for (const i of x) {\n"
            "      if (i) { return i; }\n"
            "    }\n"
            "    return null;\n"
            "  }\n"
            "}\n"
        )
        result = analyze(code, Language.TYPESCRIPT)
        assert [f.name for f in result.functions] == ["bar"]
        assert result.functions[0].cyclomatic_complexity == 3
        assert result.functions[0].start_line == 2
        assert result.functions[0].end_line == 7

    def test_nested_functions(self):
        """Test that decisions accrue to the innermost function."""
        code = (
            "function outer() {\n"
            "  function inner(a) {\n"
            "    return a && 1;\n"
            "  }\n"
            "  return inner(1) || 0;\n"
            "}\n"
        )
        result = analyze(code, Language.TYPESCRIPT)
        assert [f.name for f in result.functions] == ["inner", "outer"]
        functions = by_name(result)
        assert functions["inner"].cyclomatic_complexity == 2
        assert functions["outer"].cyclomatic_complexity == 2
        assert functions["inner"].nesting_depth == 1
        assert result.total_ccn == 4

    def test_optional_parameters_are_not_decisions(self):
        """Test that '?' marking optional parameters is not a ternary."""
        result = analyze(
            "function f(a?: string, b?: number) { return a ? 1 : 2; }",
            Language.TYPESCRIPT,
        )
        f = result.functions[0]
        assert f.parameter_count == 2
        assert f.cyclomatic_complexity == 2

    def test_return_type_annotation(self):
        """Test a function with a return type before its body."""
        code = (
            "function g(x: number): string {\n"
            "  return x > 0 ? \"a\" : \"b\";\n"
            "}\n"
        )
        result = analyze(code, Language.TYPESCRIPT)
        g = result.functions[0]
        assert g.name == "g"
        assert g.parameter_count == 1
        assert g.cyclomatic_complexity == 2

    def test_callback_arrows(self):
        """Test expression arrows passed as call arguments."""
        result = analyze(
            "items.map((x) => x * 2).filter(y => y > 1);\n",
            Language.TYPESCRIPT,
        )
        assert len(result.functions) == 2
        assert all(f.name == "(anonymous)" for f in result.functions)
        assert all(f.parameter_count == 1 for f in result.functions)

    def test_object_literal_members(self):
        """Test arrow properties and shorthand methods in an object literal."""
        code = (
            "const handlers = {\n"
            "  onClick: (e) => {\n"
            "    if (e) { return 1; }\n"
            "  },\n"
            "  render() {\n"
            "    return 2;\n"
            "  },\n"
            "};\n"
        )
        functions = by_name(analyze(code, Language.TYPESCRIPT))
        assert set(functions) == {"onClick", "render"}
        assert functions["onClick"].cyclomatic_complexity == 2
        assert functions["render"].cyclomatic_complexity == 1

    def test_generic_generator(self):
        """Test a generator function with type parameters."""
        code = (
            "function* gen<T>(items: T[]) {\n"
            "  for (const i of items) { yield i; }\n"
            "}\n"
        )
        result = analyze(code, Language.TYPESCRIPT)
        gen = result.functions[0]
        assert gen.name == "gen"
        assert gen.parameter_count == 1
        assert gen.cyclomatic_complexity == 2

    def test_declaration_without_body(self):
        """Test that a signature ending in ';' is abandoned."""
        code = (
            "declare function foo(a: string): void;\n"
            "function bar() {}\n"
        )
        result = analyze(code, Language.TYPESCRIPT)
        assert [f.name for f in result.functions] == ["bar"]

    def test_switch_cases(self):
        """Test that each case adds a decision."""
        code = (
            "function s(x) {\n"
            "  switch (x) {\n"
            "    case 1: return \"a\";\n"
            "    case 2: return \"b\";\n"
            "    default: return \"c\";\n"
            "  }\n"
            "}\n"
        )
        result = analyze(code, Language.TYPESCRIPT)
        assert result.functions[0].cyclomatic_complexity == 3

    def test_javascript_catch_and_logical(self):
        """Test JavaScript catch clauses and logical operators."""
        code = (
            "function t() {\n"
            "  try { a(); } catch (e) { b(); }\n"
            "  return c || d;\n"
            "}\n"
        )
        result = analyze(code, Language.JAVASCRIPT)
        assert result.functions[0].name == "t"
        assert result.functions[0].cyclomatic_complexity == 3

    def test_decisions_in_strings_and_comments_ignored(self):
        """Test that keywords inside strings and comments do not count."""
        code = (
            "function q() {\n"
            "  // if (a && b)\n"
            "  return \"if || while\";\n"
            "}\n"
        )
        result = analyze(code, Language.TYPESCRIPT)
        assert result.functions[0].cyclomatic_complexity == 1

    def test_unmatched_closing_brace_ignored(self):
        """Test that a stray '}' at depth 0 does not break tracking."""
        result = analyze("}\nfunction f() { if (a) {} }\n", Language.TYPESCRIPT)
        assert result.functions[0].cyclomatic_complexity == 2

    def test_function_nloc_includes_closing_line(self):
        """Test that the closing brace line belongs to the function."""
        result = analyze("function f() {\n  return 1;\n}\n", Language.TYPESCRIPT)
        f = result.functions[0]
        assert (f.start_line, f.end_line) == (1, 3)
        assert f.nloc == 3

    def test_signature_comment_lines_not_counted(self):
        """Test that comment and blank lines in a signature are not NLOC."""
        code = (
            "function g(\n"
            "  a,\n"
            "  // note\n"
            "\n"
            "  b,\n"
            ") {\n"
            "  return a;\n"
            "}\n"
        )
        g = analyze(code, Language.TYPESCRIPT).functions[0]
        assert g.parameter_count == 2
        assert (g.start_line, g.end_line) == (1, 8)
        assert g.nloc == 6

    def test_default_parameter_decisions(self):
        """Test that decisions in parameter defaults count for the function."""
        result = analyze("function k(a = b ? 1 : 2) {}\n", Language.TYPESCRIPT)
        assert result.functions[0].cyclomatic_complexity == 2
        assert result.total_ccn == 2

    def test_arrow_default_parameter_decisions(self):
        """Test that decisions in arrow parameter defaults count for the arrow."""
        result = analyze("const h = (a = x || y) => a;\n", Language.TYPESCRIPT)
        h = result.functions[0]
        assert h.name == "h"
        assert h.cyclomatic_complexity == 2

    def test_call_argument_decisions(self):
        """Test that decisions in call arguments go to the enclosing function."""
        code = (
            "function c(x) {\n"
            "  log(x ? 1 : 2);\n"
            "}\n"
        )
        result = analyze(code, Language.TYPESCRIPT)
        assert result.functions[0].cyclomatic_complexity == 2

    def test_top_level_call_decisions_not_attached_to_next_function(self):
        """Test that a top-level call's decisions stay outside later functions."""
        code = (
            "setup(a && b)\n"
            "function f() {}\n"
        )
        result = analyze(code, Language.TYPESCRIPT)
        assert result.functions[0].name == "f"
        assert result.functions[0].cyclomatic_complexity == 1


class TestGoMachine:
    """Tests for Go function detection."""

    def test_function(self):
        """Test a plain function with a logical operator."""
        result = analyze(
            "func f(a, b int) bool { if a > 0 && b > 0 { return true }; return false }",
            Language.GO,
        )
        assert len(result.functions) == 1
        f = result.functions[0]
        assert f.name == "f"
        assert f.parameter_count == 2
        assert f.cyclomatic_complexity == 3

    def test_method(self):
        """Test a method with a pointer receiver."""
        code = (
            "func (s *Server) Handle(w http.ResponseWriter, r *http.Request) {\n"
            "\tif r == nil {\n"
            "\t\treturn\n"
            "\t}\n"
            "}\n"
        )
        result = analyze(code, Language.GO)
        handle = result.functions[0]
        assert handle.name == "Handle"
        assert handle.parameter_count == 2
        assert handle.cyclomatic_complexity == 2
        assert handle.end_line == 5

    def test_function_literal(self):
        """Test a function literal nested in a function."""
        code = (
            "func main() {\n"
            "\tf := func(x int) int {\n"
            "\t\tfor i := range x {\n"
            "\t\t}\n"
            "\t\treturn x\n"
            "\t}\n"
            "\t_ = f\n"
            "}\n"
        )
        result = analyze(code, Language.GO)
        assert [f.name for f in result.functions] == ["(anonymous)", "main"]
        literal, main = result.functions
        assert literal.cyclomatic_complexity == 3
        assert literal.start_line == 2
        assert main.cyclomatic_complexity == 1
        assert result.total_ccn == 4

    def test_function_type_is_not_a_function(self):
        """Test that a func type declaration is abandoned at the newline."""
        code = (
            "type Handler func(int) error\n"
            "\n"
            "func run() error {\n"
            "\treturn nil\n"
            "}\n"
        )
        result = analyze(code, Language.GO)
        assert [f.name for f in result.functions] == ["run"]
        assert result.functions[0].start_line == 3

    def test_interface_result_type(self):
        """Test that braces of an interface result type are not the body."""
        result = analyze("func New() interface{} {\n\treturn nil\n}\n", Language.GO)
        new = result.functions[0]
        assert new.name == "New"
        assert new.start_line == 1
        assert new.end_line == 3

    def test_switch_cases(self):
        """Test that case clauses add decisions."""
        code = (
            "func k(x int) string {\n"
            "\tswitch x {\n"
            "\tcase 1:\n"
            "\t\treturn \"a\"\n"
            "\tcase 2:\n"
            "\t\treturn \"b\"\n"
            "\t}\n"
            "\treturn \"\"\n"
            "}\n"
        )
        result = analyze(code, Language.GO)
        assert result.functions[0].cyclomatic_complexity == 3

    def test_generic_function(self):
        """Test type parameters and function-typed parameters."""
        code = (
            "func Map[T any, U any](xs []T, f func(T) U) []U {\n"
            "\treturn nil\n"
            "}\n"
        )
        result = analyze(code, Language.GO)
        m = result.functions[0]
        assert m.name == "Map"
        assert m.parameter_count == 2

    def test_function_nloc_includes_closing_line(self):
        """Test that the closing brace line belongs to the function."""
        result = analyze("func f() {\n\treturn\n}\n", Language.GO)
        assert result.functions[0].nloc == 3


class TestPythonMachine:
    """Tests for Python function detection."""

    def test_function(self):
        """Test a function ending at its last code line."""
        result = analyze(
            "def f(x):\n    if x:\n        return 1\n    return 0\n",
            Language.PYTHON,
        )
        assert len(result.functions) == 1
        f = result.functions[0]
        assert f.name == "f"
        assert f.start_line == 1
        assert f.end_line == 4
        assert f.cyclomatic_complexity == 2
        assert f.parameter_count == 1

    def test_methods_and_nested_functions(self):
        """Test that dedent closes functions innermost first."""
        code = (
            "class A:\n"
            "    def m(self, x):\n"
            "        def helper(y):\n"
            "            return y or x\n"
            "        return helper(x)\n"
            "\n"
            "def top():\n"
            "    pass\n"
        )
        result = analyze(code, Language.PYTHON)
        assert [f.name for f in result.functions] == ["helper", "m", "top"]
        helper, m, top = result.functions
        assert (helper.start_line, helper.end_line) == (3, 4)
        assert (m.start_line, m.end_line) == (2, 5)
        assert (top.start_line, top.end_line) == (7, 8)
        assert helper.cyclomatic_complexity == 2
        assert helper.nesting_depth == 1
        assert m.parameter_count == 2

    def test_parameter_markers_not_counted(self):
        """Test that bare '*' and '/' are not parameters."""
        result = analyze("def f(a, /, b, *, c, **kw):\n    return a\n", Language.PYTHON)
        assert result.functions[0].parameter_count == 4

    def test_async_multiline_signature(self):
        """Test an async def whose header spans several lines."""
        code = (
            "async def fetch(\n"
            "    url: str,\n"
            "    retries: int = 3,\n"
            ") -> Dict[str, int]:\n"
            "    while retries:\n"
            "        retries -= 1\n"
            "    return {}\n"
        )
        result = analyze(code, Language.PYTHON)
        fetch = result.functions[0]
        assert fetch.name == "fetch"
        assert fetch.parameter_count == 2
        assert fetch.start_line == 1
        assert fetch.end_line == 7
        assert fetch.cyclomatic_complexity == 2

    def test_decision_tokens(self):
        """Test elif, except, comprehensions and boolean operators."""
        code = (
            "def g(items):\n"
            "    try:\n"
            "        result = [i for i in items if i]\n"
            "    except ValueError:\n"
            "        return None\n"
            "    if not result:\n"
            "        return 0\n"
            "    elif len(result) > 1 and result[0]:\n"
            "        return 1\n"
            "    return 2\n"
        )
        result = analyze(code, Language.PYTHON)
        assert result.functions[0].cyclomatic_complexity == 7

    def test_match_case(self):
        """Test that case clauses count only as statements."""
        code = (
            "def h(cmd):\n"
            "    match cmd:\n"
            "        case \"a\":\n"
            "            return 1\n"
            "        case _:\n"
            "            return 0\n"
            "\n"
            "def k(case):\n"
            "    return case\n"
        )
        functions = by_name(analyze(code, Language.PYTHON))
        assert functions["h"].cyclomatic_complexity == 3
        assert functions["k"].cyclomatic_complexity == 1

    def test_docstring_keywords_ignored(self):
        """Test that keywords in a docstring do not count."""
        result = analyze('def d():\n    """if and or for"""\n    return 1\n', Language.PYTHON)
        d = result.functions[0]
        assert d.cyclomatic_complexity == 1
        assert d.end_line == 3

    def test_single_line_function(self):
        """Test a def with its body on the header line."""
        result = analyze("def one(): return 1\nx = 2\n", Language.PYTHON)
        one = result.functions[0]
        assert (one.start_line, one.end_line) == (1, 1)

    def test_nloc_counts_multi_line_strings(self):
        """Test that every line of a triple-quoted string counts for the function."""
        code = (
            "def f():\n"
            "    x = '''a\n"
            "b\n"
            "c'''\n"
            "    return x\n"
        )
        f = analyze(code, Language.PYTHON).functions[0]
        assert (f.start_line, f.end_line) == (1, 5)
        assert f.nloc == 5

    def test_dedent_token_not_counted_for_closed_function(self):
        """Test that the line that ends a function by dedent is not its NLOC."""
        result = analyze("def f():\n    return 1\nx = 2\n", Language.PYTHON)
        f = result.functions[0]
        assert f.end_line == 2
        assert f.nloc == 2

    def test_signature_comment_lines_not_counted(self):
        """Test that comment and blank lines in a header are not NLOC."""
        code = (
            "def f(\n"
            "    a,\n"
            "    # note\n"
            "\n"
            "    b,\n"
            "):\n"
            "    return a\n"
        )
        f = analyze(code, Language.PYTHON).functions[0]
        assert f.parameter_count == 2
        assert (f.start_line, f.end_line) == (1, 7)
        assert f.nloc == 5

    def test_default_parameter_decisions(self):
        """Test that decisions in parameter defaults count for the function."""
        result = analyze("def f(a=x if c else d):\n    return a\n", Language.PYTHON)
        assert result.functions[0].cyclomatic_complexity == 2

    def test_unclosed_bracket_falls_back(self):
        """Test that an unterminated bracket degrades to aggregate mode."""
        result = ComplexityAnalyzer(Language.PYTHON).analyze("def f(:\n    if x:\n")
        assert result.mode == "aggregate"
        assert result.functions == []
        assert result.total_ccn == 2
