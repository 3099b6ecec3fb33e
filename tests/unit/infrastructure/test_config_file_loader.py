"""Unit tests for ConfigFileLoader."""

from pathlib import Path

from bugscope.infrastructure.config_file_loader import ConfigFileLoader


class TestConfigFileLoader:

    def test_reads_tool_section_from_nearest_pyproject(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            "[tool.bugscope]\nmax_workers = 2\ndisabled_rules = [\"RandomModInteger\"]\n"
        )
        nested = tmp_path / "src" / "pkg"
        nested.mkdir(parents=True)
        assert ConfigFileLoader.load_config_from_fs(nested) == {
            "max_workers": 2,
            "disabled_rules": ["RandomModInteger"],
        }

    def test_pyproject_without_section(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[project]\nname = \"x\"\n")
        assert ConfigFileLoader.load_config_from_fs(tmp_path) == {}

    def test_invalid_toml_yields_empty_config(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[tool.bugscope\n")
        assert ConfigFileLoader.load_config_from_fs(tmp_path) == {}

    def test_nested_rule_sections(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            "[tool.bugscope.random-mod-integer]\nrandom_type = \"rngs.Random\"\n"
        )
        config = ConfigFileLoader.load_config_from_fs(tmp_path)
        assert config == {"random-mod-integer": {"random_type": "rngs.Random"}}
