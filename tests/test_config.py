"""
Tests for formula loading — formula.yml parsing, validation, and checks.
"""

import textwrap
from pathlib import Path

import pytest
import yaml

from pqrs_bin.core.config.loader import (
    ConfigError,
    default_cache_dir,
    default_prefix,
    dump_descriptor,
    find_formula_file,
    load_descriptor,
    resolve_descriptor,
)
from pqrs_bin.core.data import builtin_descriptor
from pqrs_bin.core.use_cases.config_check import check_formula

FORMULA = textwrap.dedent("""\
    formula:
      name: pqrs
      description: "Apache Parquet command-line tools and utilities"
      homepage: "https://github.com/manojkarthick/pqrs"
      url: "https://github.com/manojkarthick/pqrs/releases/download/v0.2.0/pqrs-mac.tar.gz"
      sha256: "0000000000000000000000000000000000000000000000000000000000000000"
      version: "0.2.0"
""")


@pytest.fixture
def formula_yml(tmp_path: Path) -> Path:
    path = tmp_path / "formula.yml"
    path.write_text(FORMULA)
    return path


class TestLoadDescriptor:
    def test_wrapped(self, formula_yml: Path):
        d = load_descriptor(formula_yml)
        assert d.name == "pqrs"
        assert d.version == "0.2.0"
        assert d.sha256 == "0" * 64

    def test_flat(self, tmp_path: Path):
        path = tmp_path / "flat.yml"
        path.write_text(textwrap.dedent("""\
            name: pqrs
            url: "https://example.com/pqrs.zip"
            sha256: "1111111111111111111111111111111111111111111111111111111111111111"
            version: "1.0.0"
        """))
        d = load_descriptor(path)
        assert d.archive_name == "pqrs.zip"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_descriptor(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "formula.yml"
        path.write_text("formula: [unclosed")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_descriptor(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "formula.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_descriptor(path)

    def test_invalid_fields(self, tmp_path: Path):
        path = tmp_path / "formula.yml"
        path.write_text(FORMULA.replace('"0.2.0"', '"latest"'))
        with pytest.raises(ConfigError, match="Invalid formula"):
            load_descriptor(path)


class TestFindFormulaFile:
    def test_walks_up(self, formula_yml: Path):
        nested = formula_yml.parent / "a" / "b"
        nested.mkdir(parents=True)
        assert find_formula_file(nested) == formula_yml.resolve()

    def test_none_when_absent(self, tmp_path: Path):
        empty = tmp_path / "empty"
        empty.mkdir()
        # tmp dirs never sit under a formula.yml
        assert find_formula_file(empty) is None


class TestResolveDescriptor:
    def test_builtin_fallback(self):
        assert resolve_descriptor() == builtin_descriptor()

    def test_explicit_path(self, formula_yml: Path):
        assert resolve_descriptor(formula_yml).version == "0.2.0"

    def test_found_in_cwd(self, formula_yml: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(formula_yml.parent)
        assert resolve_descriptor().version == "0.2.0"


class TestDumpDescriptor:
    def test_roundtrip(self, formula_yml: Path, tmp_path: Path):
        original = load_descriptor(formula_yml)
        out = tmp_path / "out" / "formula.yml"
        dump_descriptor(original, out)

        assert load_descriptor(out) == original
        data = yaml.safe_load(out.read_text())
        assert list(data) == ["formula"]
        assert list(tmp_path.joinpath("out").glob(".formula_*")) == []


class TestEnvironment:
    def test_prefix_from_env(self, tmp_path: Path):
        assert default_prefix() == tmp_path / "default-prefix"

    def test_prefix_default(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("PQRS_BIN_PREFIX")
        assert default_prefix() == Path("/usr/local")

    def test_cache_from_env(self, tmp_path: Path):
        assert default_cache_dir() == tmp_path / "cache"


class TestCheckFormula:
    def test_builtin_is_valid_with_latest_warning(self):
        result = check_formula()
        assert result.valid
        assert result.builtin
        assert any("latest" in w for w in result.warnings)

    def test_pinned_formula_has_no_warnings(self, formula_yml: Path):
        result = check_formula(formula_yml)
        assert result.valid
        assert not result.builtin
        assert result.warnings == []

    def test_invalid_formula(self, tmp_path: Path):
        path = tmp_path / "formula.yml"
        path.write_text(FORMULA.replace("sha256: ", "sha256: xx"))
        result = check_formula(path)
        assert not result.valid
        assert result.errors
        assert result.to_dict()["formula"] is None

    def test_http_warning(self, tmp_path: Path):
        path = tmp_path / "formula.yml"
        path.write_text(FORMULA.replace("https://github.com/manojkarthick/pqrs/releases", "http://mirror"))
        result = check_formula(path)
        assert result.valid
        assert "Download URL is not HTTPS." in result.warnings
