"""Tests for removal of inline tests from source text."""

import pytest

from inline_tests.config import InlineConfig
from inline_tests.scanning import scan
from inline_tests.stripping import BalanceValidator, normalize, strip


FIXTURE_NAMES = [
    "BracedNamespaces.php",
    "Calculator.php",
    "Counter.php",
    "Formatter.php",
    "Greeter.php",
    "Ledger.php",
    "ServiceHooks.php",
    "Tricky.php",
]

CALCULATOR_STRIPPED = """<?php

declare(strict_types=1);

namespace App;

final class Calculator
{
    public function add(int $a, int $b): int
    {
        return $a + $b;
    }

    public function describe(): string
    {
        return "sum { of } values";
    }
}
"""

GREETER_STRIPPED = """<?php

namespace Acme\\Service;

final class Greeter
{
    public function greet(string $name): string
    {
        return "Hello, {$name}!";
    }
}
"""


class TestStripRules:
    """Tests for the removal rules."""

    def test_calculator_is_stripped_exactly(self, load_fixture):
        assert strip(load_fixture("Calculator.php")) == CALCULATOR_STRIPPED

    def test_production_bodies_are_byte_identical(self, load_fixture):
        text = load_fixture("Calculator.php")
        production = [d for d in scan(text).declarations if d.name in ("add", "describe")]

        stripped = strip(text)

        for decl in production:
            assert text[decl.start : decl.end] in stripped

    def test_non_braced_sentinel_namespace_runs_to_end_of_file(self, load_fixture):
        assert strip(load_fixture("Greeter.php")) == GREETER_STRIPPED

    def test_braced_sentinel_namespace_is_removed(self, load_fixture):
        stripped = strip(load_fixture("BracedNamespaces.php"))

        assert "Tests" not in stripped
        assert "userHasName" not in stripped
        assert stripped.endswith("        }\n    }\n}\n")

    def test_namespace_containing_sentinel_segment_is_removed(self):
        text = (
            "<?php\n\nnamespace App;\n\nfunction keep() {}\n\n"
            "namespace App\\Tests\\Unit;\n\nfunction helper() {}\n"
        )

        assert strip(text) == "<?php\n\nnamespace App;\n\nfunction keep() {}\n"

    def test_similar_names_are_not_sentinels(self):
        text = "<?php\n\nnamespace App\\TestsHelper;\n\nfunction helper() {}\n"

        assert strip(text) == text

    def test_lifecycle_factory_and_state_markers_are_removed(self, load_fixture):
        counter = strip(load_fixture("Counter.php"))
        ledger = strip(load_fixture("Ledger.php"))

        for name in ("setUpClass", "reset", "testIncrement", "tearDown", "tearDownClass"):
            assert f"function {name}(" not in counter
        assert "private int $count = 0;" in counter
        assert "public function increment(): int" in counter
        assert "initState" not in ledger
        assert "public function total(array $entries): int" in ledger

    def test_named_factory_target_is_kept(self, load_fixture):
        stripped = strip(load_fixture("Formatter.php"))

        assert "testWithFactory" not in stripped
        assert "private static function createCustom(): self" in stripped
        assert "Attributes\\Factory;" not in stripped

    def test_free_function_data_source_is_removed(self):
        text = (
            "<?php\n"
            "\n"
            "function rows(): array\n"
            "{\n"
            "    return [[1]];\n"
            "}\n"
            "\n"
            "function keep(): int\n"
            "{\n"
            "    return 1;\n"
            "}\n"
            "\n"
            "#[Test]\n"
            "#[DataProvider('rows')]\n"
            "function checksRows(int $n): void\n"
            "{\n"
            "}\n"
        )

        assert strip(text) == "<?php\n\nfunction keep(): int\n{\n    return 1;\n}\n"

    def test_comments_and_strings_survive(self, load_fixture):
        stripped = strip(load_fixture("Tricky.php"))

        assert "testTemplate" not in stripped
        assert "return '}' . \"{\" . '\\'}' . \"\\\"{\";" in stripped
        assert "# a hash comment with a brace }" in stripped
        assert BalanceValidator().check_text(stripped).ok


class TestImportRemoval:
    """Tests for removal of test-only use statements."""

    def test_exact_and_aliased_imports(self):
        text = (
            "<?php\n"
            "use App\\Models\\User;\n"
            "use PHPUnit\\Framework\\Attributes\\Test;\n"
            "use PHPUnit\\Framework\\Attributes\\DataProvider as Rows;\n"
            "use function test;\n"
            "use function NSRosenqvist\\PHPUnitInline\\state;\n"
            "\n"
            "function f() {}\n"
            "#[Test]\n"
            "function t() {}\n"
        )

        assert strip(text) == "<?php\nuse App\\Models\\User;\n\nfunction f() {}\n"

    def test_same_named_functions_from_other_namespaces_are_kept(self):
        production = (
            "<?php\nnamespace App;\n"
            "use function App\\Util\\state;\n"
            "use function App\\Http\\test;\n"
            "\n"
            "function keep() { return state(); }\n"
        )

        assert strip(f"{production}#[Test]\nfunction t() {{}}\n") == production

    def test_grouped_import_only_removed_when_all_members_are_test_only(self):
        test_only = "use PHPUnit\\Framework\\Attributes\\{Test, DataProvider};\n"
        mixed = "use App\\Models\\{User, Test};\n"
        text = f"<?php\n{test_only}{mixed}\n#[Test]\nfunction t() {{}}\n"

        assert strip(text) == f"<?php\n{mixed}"

    def test_import_vocabulary_is_configurable(self):
        config = InlineConfig(test_only_imports=["Acme\\Spec\\It"])
        text = "<?php\nuse Acme\\Spec\\It;\nuse PHPUnit\\Framework\\Attributes\\Test;\n"

        assert strip(text, config) == "<?php\nuse PHPUnit\\Framework\\Attributes\\Test;\n"


class TestNormalization:
    """Tests for whitespace and brace normalization."""

    def test_collapses_blank_runs_and_trailing_whitespace(self):
        assert normalize("a;  \n\n\n\nb;\t\n") == "a;\n\nb;\n"

    def test_moves_glued_closing_brace_to_own_line(self):
        assert normalize("    if ($x) { return 1;}\n") == "    if ($x) { return 1;\n    }\n"

    def test_braces_in_strings_are_not_moved(self):
        text = "$s = \"a}\";\n"

        assert normalize(text) == text

    def test_empty_braces_are_left_alone(self):
        assert normalize("function f() {}\n") == "function f() {}\n"


class TestStripProperties:
    """Tests for properties every stripped text holds."""

    @pytest.mark.parametrize("name", FIXTURE_NAMES)
    def test_idempotent(self, load_fixture, name):
        once = strip(load_fixture(name))

        assert strip(once) == once

    @pytest.mark.parametrize("name", FIXTURE_NAMES)
    def test_output_is_balanced(self, load_fixture, name):
        assert BalanceValidator().check_text(strip(load_fixture(name))).ok

    @pytest.mark.parametrize("name", FIXTURE_NAMES)
    def test_no_test_only_markers_remain(self, load_fixture, name):
        stripped = strip(load_fixture(name))

        for marker in ("#[Test", "#[Before", "#[After", "#[State", "#[DefaultFactory"):
            assert marker not in stripped

    def test_incomplete_scan_leaves_text_unchanged(self):
        text = "<?php\n#[Test]\nfunction t() {\n    $s = 'unterminated;\n}\n"

        assert strip(text) == text

    def test_crlf_text_keeps_its_line_endings(self):
        text = "<?php\r\nfunction f() {}\r\n\r\n#[Test]\r\nfunction t() {}\r\n"

        assert strip(text) == "<?php\r\nfunction f() {}\r\n"

    def test_mixed_line_endings_without_tests_are_unchanged(self):
        text = "<?php\r\nfunction f() {}\nfunction g() {}\r\n"

        assert strip(text) == text

    def test_source_without_tests_is_unchanged(self):
        text = "<?php\nclass Plain\n{\n    public function run() { return 1;}   \n}\n"

        assert strip(text) == text
