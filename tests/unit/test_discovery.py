"""Tests for grouping tests and resolving their dependencies."""

from inline_tests.errors import ConfigurationError
from inline_tests.scanning import scan
from inline_tests.testing import discover, discover_file, discover_paths


def names(decls):
    return [d.name for d in decls]


class TestDiscover:
    """Tests for grouping tests and resolving hooks."""

    def test_groups_tests_by_scope(self, load_fixture):
        (group,) = discover(scan(load_fixture("Calculator.php")))

        assert group.name == "App\\Calculator"
        assert [u.name for u in group.units] == ["testAdd", "testBraceInString"]
        assert [u.full_name for u in group.units][0] == "App\\Calculator::testAdd"

    def test_resolves_data_source_in_same_scope(self, load_fixture):
        (group,) = discover(scan(load_fixture("Calculator.php")))
        test_add, brace = group.units

        assert test_add.data_source.name == "additions"
        assert test_add.error is None
        assert brace.data_source is None

    def test_lifecycle_hooks(self, load_fixture):
        (group,) = discover(scan(load_fixture("Counter.php")))

        assert names(group.before_all) == ["setUpClass"]
        assert names(group.before_each) == ["reset"]
        assert names(group.after_each) == ["tearDown"]
        assert names(group.after_all) == ["tearDownClass"]
        assert group.units[0].before_each == group.before_each

    def test_enclosing_free_function_hooks_wrap_scope_hooks(self, load_fixture):
        (group,) = discover(scan(load_fixture("ServiceHooks.php")))

        assert group.name == "App\\Tests\\ServiceTests"
        assert names(group.before_each) == ["openConnection", "setUpService"]
        assert names(group.after_each) == ["tearDownService", "closeConnection"]

    def test_after_hooks_keep_declaration_order_within_a_scope(self):
        text = (
            "<?php\nnamespace App;\n"
            "#[After]\nfunction closeFirst() {}\n"
            "#[After]\nfunction closeSecond() {}\n"
            "class A {\n"
            "    #[After]\n    public function first() {}\n"
            "    #[After]\n    public function second() {}\n"
            "    #[AfterClass]\n    public static function dropFirst() {}\n"
            "    #[AfterClass]\n    public static function dropSecond() {}\n"
            "    #[Test]\n    public function t() {}\n"
            "}\n"
        )
        (group,) = discover(scan(text))

        assert names(group.after_each) == ["first", "second", "closeFirst", "closeSecond"]
        assert names(group.after_all) == ["dropFirst", "dropSecond"]

    def test_free_function_tests_group_under_namespace(self, load_fixture):
        (group,) = discover(scan(load_fixture("Greeter.php")))

        assert group.name == "Acme\\Service\\Tests"
        assert group.constructor is None
        assert [u.name for u in group.units] == ["itGreets"]

    def test_factory_and_constructor(self, load_fixture):
        (group,) = discover(scan(load_fixture("Formatter.php")))
        without, with_factory = group.units

        assert without.factory is None
        assert with_factory.factory.name == "createCustom"
        assert group.constructor.name == "__construct"
        assert group.default_factory is None

    def test_state_initializer(self, load_fixture):
        (group,) = discover(scan(load_fixture("Ledger.php")))

        assert group.state_initializer.name == "initState"
        assert group.units[0].state_initializer is group.state_initializer

    def test_missing_data_source_is_a_per_test_error(self):
        text = (
            "<?php\nclass A {\n"
            "    #[Test]\n    #[DataProvider('nowhere')]\n    public function t1() {}\n"
            "    #[Test]\n    public function t2() {}\n"
            "}\n"
        )
        (group,) = discover(scan(text))
        broken, fine = group.units

        assert isinstance(broken.error, ConfigurationError)
        assert "data source 'nowhere' not found" in str(broken.error)
        assert broken.error.test_name == "A::t1"
        assert fine.error is None

    def test_missing_factory_is_a_per_test_error(self):
        text = "<?php\nclass A {\n    #[Test]\n    #[Factory('make')]\n    public function t() {}\n}\n"
        (group,) = discover(scan(text))

        assert "factory 'make' not found" in str(group.units[0].error)

    def test_default_factory(self):
        text = (
            "<?php\nclass A {\n"
            "    #[DefaultFactory]\n    public static function make(): self { return new self(1); }\n"
            "    #[Test]\n    public function t() {}\n"
            "}\n"
        )
        (group,) = discover(scan(text))

        assert group.default_factory.name == "make"

    def test_data_source_resolves_through_enclosing_scope(self):
        text = (
            "<?php\nnamespace App {\n"
            "    function rows() { return [[1]]; }\n"
            "    class A {\n"
            "        #[Test]\n        #[DataProvider('rows')]\n        public function t($n) {}\n"
            "    }\n"
            "}\n"
        )
        (group,) = discover(scan(text))

        assert group.units[0].data_source.name == "rows"
        assert not group.units[0].data_source.is_method

    def test_incomplete_source_yields_nothing(self):
        assert discover(scan("<?php\nclass A {\n    #[Test]\n    public function t() {}\n")) == []

    def test_source_without_tests_yields_nothing(self):
        assert discover(scan("<?php\nclass A { public function f() {} }\n")) == []


class TestGroupKey:
    """Tests for the group identity used by the cache."""

    def test_key_is_stable_across_scans(self, load_fixture):
        text = load_fixture("Counter.php")

        (first,) = discover(scan(text))
        (second,) = discover(scan(text))

        assert first.key == second.key

    def test_key_changes_when_declarations_move(self, load_fixture):
        text = load_fixture("Counter.php")

        (before,) = discover(scan(text))
        (after,) = discover(scan(text.replace("class Counter\n{", "class Counter\n{\n")))

        assert before.key != after.key


class TestDiscoverPaths:
    """Tests for discovery over files and directories."""

    def test_discover_file_records_path(self, fixtures_dir):
        path = fixtures_dir / "Ledger.php"
        (group,) = discover_file(path)

        assert group.path == path

    def test_walks_directories_and_skips_missing_roots(self, fixtures_dir, tmp_path):
        groups = list(discover_paths([fixtures_dir, tmp_path / "missing"]))

        assert sorted(g.name for g in groups) == [
            "Acme\\Service\\Tests",
            "App\\Calculator",
            "App\\Counter",
            "App\\Formatter",
            "App\\Ledger",
            "App\\Models\\Tests",
            "App\\Tests\\ServiceTests",
            "App\\Tricky",
        ]

    def test_unreadable_file_is_skipped(self, tmp_path):
        (tmp_path / "Bad.php").write_bytes(b"\xff\xfe")
        (tmp_path / "Good.php").write_text("<?php\n#[Test]\nfunction t() {}\n", encoding="utf-8")

        groups = list(discover_paths([tmp_path]))

        assert [g.name for g in groups] == ["Good"]
