"""Tests for the command-line interface."""

import json
from pathlib import Path
from unittest import mock

import pytest
import responses

from cliscore import cli
from cliscore.cli import _build_parser, _parse_pages, main
from cliscore.config import Config

BASE = "https://api.test"


@pytest.fixture
def config(tmp_path):
    cfg = Config(
        base_url=BASE,
        api_key="secret",
        results_dir=tmp_path / "results",
        spinner_style="none",
    )
    with mock.patch.object(cli, "load_config", return_value=cfg):
        yield cfg


def _answers(*values):
    return mock.patch("builtins.input", side_effect=list(values))


def _request_body(index=0):
    return json.loads(responses.calls[index].request.body)


class TestParser:
    def test_verbose_before_command(self):
        args = _build_parser().parse_args(["--verbose", "credits"])
        assert args.verbose is True
        assert args.command == "credits"

    def test_verbose_after_command(self):
        args = _build_parser().parse_args(["search", "x", "--verbose"])
        assert args.verbose is True

    def test_search_defaults(self):
        args = _build_parser().parse_args(["search", "a@b.com", "c.com"])
        assert args.terms == ["a@b.com", "c.com"]
        assert args.source == "xkeyscore"
        assert args.wildcard is False
        assert args.save is None
        assert args.spinner is True

    def test_save_flags_are_exclusive(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["count", "x", "--save", "--no-save"])

    def test_operator_choices(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["search", "x", "--operator", "OR"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args([])


class TestParsePages:
    def test_list(self):
        assert _parse_pages("1,2,3") == [1, 2, 3]

    def test_range(self):
        assert _parse_pages("1-5") == [1, 2, 3, 4, 5]

    def test_mixed_and_clamped(self):
        assert _parse_pages("9-12, 2, x, 2, 0") == [9, 10, 2]

    def test_non_decimal_digits_skipped(self):
        assert _parse_pages("²") == []
        assert _parse_pages("1-², ²-3, 4") == [4]

    def test_huge_range_clamped_before_iterating(self):
        assert _parse_pages("1-300000000000") == list(range(1, 11))
        assert _parse_pages("0-3") == [1, 2, 3]
        assert _parse_pages("5-2") == []


class TestSearchCommand:
    @responses.activate
    def test_explicit_types_skip_detection(self, config, capsys):
        responses.add(
            responses.POST, f"{BASE}/search",
            json={"results": {"email": [{"login": "a@b.com"}]}}, status=200,
        )
        with mock.patch("builtins.input") as prompt:
            main(["search", "a@b.com", "--types", "login,password"])
            prompt.assert_not_called()

        body = _request_body()
        assert body["types"] == ["email", "password"]
        assert body["terms"] == ["a@b.com"]
        out = capsys.readouterr().out
        assert "Found 1 results" in out
        assert '"login": "a@b.com"' in out

    @responses.activate
    def test_detected_types_confirmed(self, config, capsys):
        responses.add(responses.POST, f"{BASE}/search", json={"results": {}}, status=200)
        with _answers(""):
            main(["search", "admin@example.com", "example.org"])
        assert sorted(_request_body()["types"]) == ["domain", "email"]
        assert "Detected types: domain, email" in capsys.readouterr().out

    @responses.activate
    def test_detected_types_rejected_uses_menu(self, config):
        responses.add(responses.POST, f"{BASE}/search", json={"results": {}}, status=200)
        with _answers("n", "1,9"):
            main(["search", "example.org"])
        assert _request_body()["types"] == ["email", "uuid"]

    @responses.activate
    def test_paginated_output(self, config, capsys):
        responses.add(
            responses.POST, f"{BASE}/search",
            json={"pages": {"1": {"url": []}, "2": {"url": []}}, "size": 1234},
            status=200,
        )
        main(["search", "x.com", "--types", "url", "--pages", "1-2", "--page-size", "50"])
        body = _request_body()
        assert body["pages"] == [1, 2]
        assert body["pageSize"] == 50
        out = capsys.readouterr().out
        assert "Total results: 1,234" in out
        assert "=== Page 1 ===" in out
        assert "=== Page 2 ===" in out

    @responses.activate
    def test_quiet_prints_count_only(self, config, capsys):
        responses.add(
            responses.POST, f"{BASE}/search",
            json={"results": {"a": 1, "b": 2}}, status=200,
        )
        main(["search", "x", "--types", "url", "--quiet"])
        assert capsys.readouterr().out == "2\n"

    @responses.activate
    def test_save_writes_results(self, config, capsys):
        responses.add(responses.POST, f"{BASE}/search", json={"results": {"a": 1}}, status=200)
        main(["search", "x.com", "--types", "domain", "--save"])
        saved = list(Path(config.results_dir).glob("search_x_com_domain_*.json"))
        assert len(saved) == 1
        assert json.loads(saved[0].read_text())["results"] == {"a": 1}
        assert f"Full response saved to: {saved[0]}" in capsys.readouterr().out

    @responses.activate
    def test_http_error_exits(self, config, capsys):
        responses.add(responses.POST, f"{BASE}/search", body="boom", status=500)
        with pytest.raises(SystemExit) as exc:
            main(["search", "x", "--types", "url"])
        assert exc.value.code == 1
        assert "Error: HTTP 500: boom" in capsys.readouterr().err


class TestCountCommand:
    @responses.activate
    def test_prints_total_and_breakdown(self, config, capsys):
        responses.add(
            responses.POST, f"{BASE}/count/detailed",
            json={"counts": {"email": 1500, "url": 2}, "total_count": 1502, "took": 3},
            status=200,
        )
        main(["count", "x", "--types", "login,url", "--operator", "AND"])
        body = _request_body()
        assert body["types"] == ["email", "url"]
        assert body["operator"] == "AND"
        out = capsys.readouterr().out
        assert "Count Results: 1,502" in out
        assert "  email: 1,500" in out

    @responses.activate
    def test_quiet(self, config, capsys):
        responses.add(
            responses.POST, f"{BASE}/count/detailed",
            json={"counts": {}, "total_count": 7, "took": 1}, status=200,
        )
        main(["count", "x", "--types", "url", "--quiet"])
        assert capsys.readouterr().out == "7\n"


class TestMachineInfoCommand:
    @responses.activate
    def test_prints_json_and_tree(self, config, capsys):
        responses.add(
            responses.GET, f"{BASE}/machineinfo",
            json={"data": {"hwid": "H", "fileTree": ["b/x", "a/y"]}}, status=200,
        )
        main(["machineinfo", "ce1869f2-b922-456b-882c-58aa4ad5f266"])
        out = capsys.readouterr().out
        assert out.startswith("Machine Information:\n{")
        assert '"hwid": "H"' in out
        assert "fileTree" not in out
        assert "📁 File Structure:\n├── a/\n│   └── y\n└── b/\n    └── x\n" in out

    @responses.activate
    def test_error_in_body_exits(self, config, capsys):
        responses.add(
            responses.GET, f"{BASE}/machineinfo", json={"error": "not found"}, status=200,
        )
        with pytest.raises(SystemExit):
            main(["machineinfo", "u-1"])
        assert "Error: not found" in capsys.readouterr().err


class TestDownloadCommand:
    @responses.activate
    def test_downloads_to_output(self, config, tmp_path, capsys):
        responses.add(responses.GET, f"{BASE}/download", body="zip", status=200)
        target = tmp_path / "log.zip"
        main(["download", "u-1", "--output", str(target)])
        assert target.read_text() == "zip"
        assert f"File downloaded successfully: {target}" in capsys.readouterr().out


class TestCreditsCommand:
    @responses.activate
    def test_prints_credits(self, config, capsys):
        responses.add(
            responses.POST, f"{BASE}/credits",
            json={"credits": 12000, "message": "Hi"}, status=200,
        )
        main(["credits"])
        assert capsys.readouterr().out == "Hi\nCredits remaining: 12,000\n"

    def test_requires_api_key(self, tmp_path, capsys):
        cfg = Config(base_url=BASE, api_key="", spinner_style="none")
        with mock.patch.object(cli, "load_config", return_value=cfg):
            with pytest.raises(SystemExit) as exc:
                main(["credits"])
        assert exc.value.code == 1
        assert "API key is required" in capsys.readouterr().err

    @responses.activate
    def test_api_key_flag(self, tmp_path, capsys):
        responses.add(responses.POST, f"{BASE}/credits", json={"credits": 5}, status=200)
        cfg = Config(base_url=BASE, api_key="", spinner_style="none")
        with mock.patch.object(cli, "load_config", return_value=cfg):
            main(["credits", "--api-key", "flag-key", "--quiet"])
        assert _request_body() == {"apiKey": "flag-key"}
        assert capsys.readouterr().out == "5\n"


class TestConfigCommand:
    def test_masks_key(self, config, capsys):
        main(["config"])
        out = capsys.readouterr().out
        assert f"Base URL: {BASE}" in out
        assert "API key: ********" in out
        assert "secret" not in out
        assert "Spinner style: none" in out


class TestSetupCommand:
    @responses.activate
    def test_validates_and_saves(self, config, capsys):
        responses.add(responses.POST, "https://new.test/validate", status=200)
        with _answers("https://new.test", "new-key", "y", "", "3"), \
             mock.patch.object(cli, "save_config") as save:
            main(["setup"])

        saved = save.call_args.args[0]
        assert saved.base_url == "https://new.test"
        assert saved.api_key == "new-key"
        assert saved.save_results is True
        assert saved.results_dir == config.results_dir
        assert saved.spinner_style == "arrows"
        assert save.call_args.kwargs == {"store_key_in_keychain": False}
        assert "Configuration saved successfully" in capsys.readouterr().out

    @responses.activate
    def test_keeps_current_values_on_empty_input(self, config):
        responses.add(responses.POST, f"{BASE}/validate", status=200)
        with _answers("", "", "", ""), mock.patch.object(cli, "save_config") as save:
            main(["setup"])
        assert save.call_args.args[0] == config

    @responses.activate
    def test_odd_spinner_choice_keeps_current(self, config, capsys):
        responses.add(responses.POST, f"{BASE}/validate", status=200)
        with _answers("", "", "", "²"), mock.patch.object(cli, "save_config") as save:
            main(["setup"])
        assert save.call_args.args[0].spinner_style == config.spinner_style
        assert "Invalid choice, using default: none" in capsys.readouterr().out

    @responses.activate
    def test_invalid_key_exits_without_saving(self, config, capsys):
        responses.add(responses.POST, f"{BASE}/validate", status=401)
        with _answers("", "bad-key"), mock.patch.object(cli, "save_config") as save:
            with pytest.raises(SystemExit) as exc:
                main(["setup"])
        assert exc.value.code == 1
        save.assert_not_called()
        assert "API key validation failed: invalid API key" in capsys.readouterr().err


class TestSpinnerCommand:
    def test_lists_styles(self, capsys):
        main(["spinner"])
        out = capsys.readouterr().out
        for name in ("default", "dots", "arrows", "bounce", "simple", "none"):
            assert name in out
