"""
Unit tests for TextFileConfiguration and load_configuration.
"""

import pytest

from apphost.utils.config import load_configuration
from apphost.utils.errors import ConfigurationError
from apphost.utils.text_config import TextFileConfiguration


class TestArguments:

    def test_parses_dash_arguments(self):
        configuration = TextFileConfiguration(["-AppName=ticker", "--port=8080", "-testnet", "positional"])

        assert configuration["appname"] == "ticker"
        assert configuration["PORT"] == "8080"
        assert configuration["testnet"] == "1"
        assert "positional" not in configuration
        assert len(configuration) == 3

    def test_value_keeps_extra_equal_signs(self):
        configuration = TextFileConfiguration(["-connection=host=localhost;port=1"])

        assert configuration["connection"] == "host=localhost;port=1"

    def test_repeated_keys_keep_all_values(self):
        configuration = TextFileConfiguration(["-peer=a", "-peer=b"])

        assert configuration.get_all("peer") == ["a", "b"]
        assert configuration["peer"] == "b"

    def test_missing_key_is_none(self):
        assert TextFileConfiguration()["missing"] is None


class TestFileContent:

    def test_from_text_skips_comments_and_blank_lines(self):
        configuration = TextFileConfiguration.from_text("# comment\n\nappname = ticker\nport=8080\n")

        assert configuration.as_dict() == {"appname": "ticker", "port": "8080"}

    def test_line_without_value_fails_with_line_number(self):
        with pytest.raises(ConfigurationError, match="Line 2"):
            TextFileConfiguration.from_text("appname=ticker\nbroken\n")

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="does not exist"):
            TextFileConfiguration.from_file(tmp_path / "missing.conf")

    def test_from_mapping(self):
        configuration = TextFileConfiguration.from_mapping({"port": 8080, "empty": None})

        assert configuration["port"] == "8080"
        assert configuration["empty"] == ""


class TestTypedAccess:

    @pytest.mark.parametrize("raw,expected", [
        ("1", True), ("true", True), ("Yes", True), ("on", True),
        ("0", False), ("false", False), ("no", False), ("off", False),
    ])
    def test_bool_values(self, raw, expected):
        configuration = TextFileConfiguration([f"-flag={raw}"])

        assert configuration.get_or_default("flag", cast=bool) is expected

    def test_default_when_missing(self):
        assert TextFileConfiguration().get_or_default("port", 80, cast=int) == 80

    def test_cast_to_int(self):
        assert TextFileConfiguration(["-port=8080"]).get_or_default("port", cast=int) == 8080

    def test_invalid_value_raises_configuration_error(self):
        configuration = TextFileConfiguration(["-port=eighty"])

        with pytest.raises(ConfigurationError, match="Error parsing the value 'eighty' of setting 'port'"):
            configuration.get_or_default("port", cast=int)

    def test_sections(self):
        configuration = TextFileConfiguration(["--telegram:proxy=true", "--telegram:token=abc", "-port=1"])

        assert configuration.get_section("telegram") == {"proxy": "true", "token": "abc"}

    def test_set_replaces_and_removes(self):
        configuration = TextFileConfiguration(["-peer=a", "-peer=b"])

        configuration["peer"] = "c"
        assert configuration.get_all("peer") == ["c"]

        configuration.set("peer", None)
        assert "peer" not in configuration

    def test_merge_into_keeps_existing_keys(self):
        arguments = TextFileConfiguration(["-port=9090"])
        file_values = TextFileConfiguration.from_text("port=8080\nappname=ticker")

        file_values.merge_into(arguments)

        assert arguments["port"] == "9090"
        assert arguments["appname"] == "ticker"


class TestLoadConfiguration:

    def test_arguments_only(self):
        configuration = load_configuration(["-appname=ticker"])

        assert configuration["appname"] == "ticker"

    def test_arguments_win_over_file(self, tmp_path):
        conf = tmp_path / "app.conf"
        conf.write_text("appname=fromfile\nport=8080\n")

        configuration = load_configuration([f"-conf={conf}", "-port=9090"])

        assert configuration["appname"] == "fromfile"
        assert configuration["port"] == "9090"

    def test_relative_conf_resolved_against_datadir(self, tmp_path):
        (tmp_path / "app.conf").write_text("appname=indatadir\n")

        configuration = load_configuration([f"-datadir={tmp_path}", "-conf=app.conf"])

        assert configuration["appname"] == "indatadir"

    def test_missing_conf_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_configuration([f"-conf={tmp_path / 'missing.conf'}"])

    def test_no_arguments(self):
        assert len(load_configuration()) == 0
