"""Tests for symbol pattern construction and generic line tests."""

import pytest

from define_extractor.scanning.patterns import SymbolPattern, build_symbol_pattern
from define_extractor.scanning.types import Dialect


class TestBraceSymbolTests:
    """Tests for brace-dialect symbol recognition."""

    @pytest.fixture()
    def pattern(self) -> SymbolPattern:
        return build_symbol_pattern("FOO", Dialect.BRACE)

    @pytest.mark.parametrize(
        "line",
        [
            "#ifdef FOO",
            "#ifndef FOO",
            "#if defined(FOO)",
            "#if defined( FOO )",
            "#if defined (FOO)",
            "#if defined FOO",
            "#if FOO",
            "#if (FOO)",
            "#if(FOO)",
            "#elif defined(FOO)",
            "#elif defined FOO",
            "#elif FOO",
            "   #ifdef FOO",
            "#  ifdef   FOO",
            "#ifdef FOO // enabled in release",
            "#if FOO && BAR",
        ],
    )
    def test_recognized_forms(self, pattern: SymbolPattern, line: str) -> None:
        assert pattern.tests_symbol(line) is True

    @pytest.mark.parametrize(
        "line",
        [
            "#if 0 // FOO disabled",
            "#ifdef FOOBAR",
            "#ifdef BAR_FOO",
            "#if FOO_EXTRA",
            "#define FOO 1",
            "#endif // FOO",
            "int FOO = 1;",
            "#else",
            "// #ifdef FOO",
            "#include \"FOO.h\"",
        ],
    )
    def test_rejected_lines(self, pattern: SymbolPattern, line: str) -> None:
        assert pattern.tests_symbol(line) is False

    def test_symbol_is_escaped(self) -> None:
        pattern = build_symbol_pattern("A.B", Dialect.BRACE)
        assert pattern.tests_symbol("#ifdef A.B") is True
        assert pattern.tests_symbol("#ifdef AxB") is False


class TestIndentSymbolTests:
    """Tests for indent-dialect symbol recognition."""

    @pytest.fixture()
    def pattern(self) -> SymbolPattern:
        return build_symbol_pattern("DEBUG", Dialect.INDENT)

    @pytest.mark.parametrize(
        "line",
        [
            "if app.DEBUG:",
            "    if app.DEBUG:",
            "elif app.DEBUG:",
            "if (app.DEBUG):",
            "if(app.DEBUG):",
            "if app.DEBUG and verbose:",
            "        elif ( app.DEBUG ):",
        ],
    )
    def test_recognized_forms(self, pattern: SymbolPattern, line: str) -> None:
        assert pattern.tests_symbol(line) is True

    @pytest.mark.parametrize(
        "line",
        [
            "if app.DEBUG_LEVEL:",
            "if DEBUG:",
            "if config.DEBUG:",
            "x = app.DEBUG",
            "while app.DEBUG:",
            "# if app.DEBUG:",
            "if not app.DEBUG:",
            "#ifdef DEBUG",
        ],
    )
    def test_rejected_lines(self, pattern: SymbolPattern, line: str) -> None:
        assert pattern.tests_symbol(line) is False


class TestGenericLineTests:
    """Tests for symbol-independent recognizers."""

    @pytest.fixture()
    def pattern(self) -> SymbolPattern:
        return build_symbol_pattern("FOO", Dialect.BRACE)

    @pytest.mark.parametrize("line", ["#if X", "#ifdef X", "#ifndef X", "  #  if 1"])
    def test_directive_start(self, pattern: SymbolPattern, line: str) -> None:
        assert pattern.is_directive_start(line) is True

    @pytest.mark.parametrize("line", ["#elif X", "#else", "#endif", "#include <x>", "#define X"])
    def test_not_directive_start(self, pattern: SymbolPattern, line: str) -> None:
        assert pattern.is_directive_start(line) is False

    @pytest.mark.parametrize("line", ["#endif", "  # endif", "#endif // FOO"])
    def test_directive_end(self, pattern: SymbolPattern, line: str) -> None:
        assert pattern.is_directive_end(line) is True

    def test_endif_prefix_is_not_directive_end(self, pattern: SymbolPattern) -> None:
        assert pattern.is_directive_end("#endiffy") is False

    @pytest.mark.parametrize(
        ("line", "trailer"),
        [
            ("void f() {", "{"),
            ("static inline int compute(int a, int b) {", "{"),
            ("std::string Foo::name() const", None),
            ("bool Foo::Bar(int x)", ""),
            ("int* make_buffer(size_t n)", ""),
            ("void declared(int x);", ";"),
            ("  virtual void Update(float dt) {", "{"),
        ],
    )
    def test_function_head(self, pattern: SymbolPattern, line: str, trailer: str | None) -> None:
        assert pattern.function_head(line) == trailer

    @pytest.mark.parametrize(
        "line",
        [
            "else if (x) {",
            "if (x) {",
            "x = y;",
            "#ifdef FOO",
            "int value;",
        ],
    )
    def test_not_function_head(self, pattern: SymbolPattern, line: str) -> None:
        assert pattern.function_head(line) is None

    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("def handler():", True),
            ("    def method(self, x):", True),
            ("async def fetch(url):", True),
            ("define = 1", False),
            ("# def commented():", False),
        ],
    )
    def test_def_start(self, pattern: SymbolPattern, line: str, expected: bool) -> None:
        assert pattern.is_def_start(line) is expected


class TestBuildSymbolPattern:
    """Tests for build_symbol_pattern validation."""

    def test_accepts_dialect_string(self) -> None:
        pattern = build_symbol_pattern("FOO", "indent")
        assert pattern.dialect is Dialect.INDENT
        assert pattern.symbol == "FOO"

    def test_strips_symbol(self) -> None:
        assert build_symbol_pattern("  FOO ", Dialect.BRACE).symbol == "FOO"

    def test_empty_symbol_raises(self) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            build_symbol_pattern("   ", Dialect.BRACE)

    def test_unknown_dialect_raises(self) -> None:
        with pytest.raises(ValueError):
            build_symbol_pattern("FOO", "ruby")

    def test_patterns_compare_by_symbol_and_dialect(self) -> None:
        assert build_symbol_pattern("FOO", Dialect.BRACE) == build_symbol_pattern(
            "FOO", Dialect.BRACE
        )
