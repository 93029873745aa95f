"""CLI tests for cv -- exercises ext:list, api and cli via Click's CliRunner.

Extension services are injected through ``obj["system_factory"]`` so no
network or site database is touched unless a test builds a real site.
"""

from __future__ import annotations

import json

import pytest
import yaml
from click.testing import CliRunner

from cv.cli import cli


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def runner():
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _no_output_env(monkeypatch):
    monkeypatch.delenv("CV_OUTPUT", raising=False)


@pytest.fixture
def invoke(runner, tmp_path):
    """Invoke the CLI against *services*, recording the feed URL requested."""

    def _invoke(services, args, *, input=None):
        booted: list[str | None] = []

        def factory(config, repository_url=None):
            booted.append(repository_url)
            return services

        result = runner.invoke(
            cli,
            ["--root", str(tmp_path), *args],
            obj={"system_factory": factory},
            input=input,
        )
        result.booted = booted
        return result

    return _invoke


# ---------------------------------------------------------------------------
# ext:list
# ---------------------------------------------------------------------------

class TestExtListCommand:
    """Tests for cv ext:list."""

    def test_table_output(self, invoke, scenario_services):
        result = invoke(scenario_services, ["ext:list"])
        assert result.exit_code == 0, result.output
        assert 'Using extension feed "https://feed.example.org/extdir/' in result.output
        header = next(line for line in result.output.splitlines() if "location" in line)
        for column in ("key", "name", "version", "status"):
            assert column in header
        assert "org.civicrm.foo" in result.output
        assert "installed" in result.output
        assert result.output.index("org.civicrm.foo") < result.output.index("bar.xml")
        assert scenario_services.closed

    def test_json_output_scenario(self, invoke, scenario_services):
        result = invoke(scenario_services, ["ext:list", "--out", "json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [
            {"location": "remote", "key": "org.civicrm.foo", "name": "foo.xml", "version": "1.0", "status": ""},
            {"location": "local", "key": "bar", "name": "bar.xml", "version": "2.0", "status": "installed"},
        ]

    def test_columns_projection(self, invoke, scenario_services):
        result = invoke(scenario_services, ["ext:list", "--out", "yaml", "--columns", "status,key"])
        assert result.exit_code == 0, result.output
        assert yaml.safe_load(result.output) == [
            {"status": "", "key": "org.civicrm.foo"},
            {"status": "installed", "key": "bar"},
        ]

    def test_table_columns_header(self, invoke, scenario_services):
        result = invoke(scenario_services, ["ext:list", "--columns", "key,status"])
        assert result.exit_code == 0, result.output
        assert "location" not in result.output
        assert "version" not in result.output

    def test_local_only(self, invoke, scenario_services):
        result = invoke(scenario_services, ["ext:list", "-L", "--out", "json"])
        assert result.exit_code == 0, result.output
        assert [r["key"] for r in json.loads(result.output)] == ["bar"]
        assert scenario_services.calls["fetch_catalog"] == 0
        assert "Using extension feed" not in result.output

    def test_remote_only(self, invoke, scenario_services):
        result = invoke(scenario_services, ["ext:list", "--remote", "--out", "json"])
        assert result.exit_code == 0, result.output
        assert [r["location"] for r in json.loads(result.output)] == ["remote"]
        assert scenario_services.calls["list_local_keys"] == 0

    def test_regex_argument(self, invoke, four_row_services):
        result = invoke(four_row_services, ["ext:list", "--out", "json", "/local1$/"])
        assert result.exit_code == 0, result.output
        assert [r["key"] for r in json.loads(result.output)] == ["org.example.local1"]

    def test_sorted_output(self, invoke, four_row_services):
        result = invoke(four_row_services, ["ext:list", "--out", "json", "--columns", "location,name,key"])
        assert [tuple(r.values()) for r in json.loads(result.output)] == [
            ("remote", "alpha", "org.example.zeta"),
            ("remote", "beta", "org.example.beta"),
            ("local", "beta", "org.example.local1"),
            ("local", "beta", "org.example.local2"),
        ]

    def test_invalid_regex(self, invoke, scenario_services):
        result = invoke(scenario_services, ["ext:list", "/(/"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_feed_failure(self, invoke, make_services, feed_error):
        services = make_services(catalog_error=feed_error)
        result = invoke(services, ["ext:list"])
        assert result.exit_code == 1
        assert "HTTP 503" in result.output
        assert services.closed

    def test_refresh(self, invoke, scenario_services):
        result = invoke(scenario_services, ["ext:list", "-r", "--out", "json"])
        assert result.exit_code == 0, result.output
        assert scenario_services.refresh_args == [(True, True)]
        assert len(json.loads(result.output)) == 2

    def test_refresh_uses_selected_locations(self, invoke, scenario_services):
        result = invoke(scenario_services, ["ext:list", "-R", "--refresh", "--out", "none"])
        assert result.exit_code == 0, result.output
        assert scenario_services.refresh_args == [(False, True)]

    def test_refresh_failure_exits_before_listing(self, invoke, make_services, feed_error):
        services = make_services(refresh_error=feed_error)
        result = invoke(services, ["ext:list", "--refresh"])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert services.listing_calls == 0

    def test_default_feed(self, invoke, scenario_services):
        result = invoke(scenario_services, ["ext:list", "--out", "none"])
        assert result.exit_code == 0, result.output
        assert result.booted == [None]

    def test_repo_options_select_feed(self, invoke, scenario_services):
        result = invoke(scenario_services, ["ext:list", "--out", "none", "--repo", "https://x.example/feed", "--dev"])
        assert result.exit_code == 0, result.output
        assert result.booted == ["https://x.example/feed/ver=5.0|uf=Standalone|status=|ready="]

    def test_out_from_environment(self, invoke, scenario_services, monkeypatch):
        monkeypatch.setenv("CV_OUTPUT", "json")
        result = invoke(scenario_services, ["ext:list"])
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.output)) == 2

    def test_unknown_out_in_environment_falls_back_to_table(self, invoke, scenario_services, monkeypatch):
        monkeypatch.setenv("CV_OUTPUT", "xml")
        result = invoke(scenario_services, ["ext:list"])
        assert result.exit_code == 0, result.output
        assert "Using extension feed" in result.output
        assert "org.civicrm.foo" in result.output

    def test_missing_site_root(self, runner, tmp_path, scenario_services):
        result = runner.invoke(
            cli,
            ["--root", str(tmp_path / "missing"), "ext:list"],
            obj={"system_factory": lambda config, repository_url=None: scenario_services},
        )
        assert result.exit_code == 1
        assert "Site root not found" in result.output


class TestExtListOnSite:
    """ext:list against a real on-disk site with a mocked feed."""

    def test_local_listing(self, runner, site, feed_client):
        from cv.extension.system import ExtensionSystem

        def factory(config, repository_url=None):
            return ExtensionSystem.boot(config, repository_url=repository_url, http_client=feed_client())

        result = runner.invoke(
            cli,
            ["--root", str(site.root), "ext:list", "--out", "json"],
            obj={"system_factory": factory},
        )
        assert result.exit_code == 0, result.output
        rows = json.loads(result.output)
        assert [(r["location"], r["name"], r["status"]) for r in rows] == [
            ("remote", "donate", ""),
            ("remote", "mail", ""),
            ("local", "mail", "installed"),
            ("local", "reports", "uninstalled"),
        ]

    def test_local_listing_without_database_leaves_site_untouched(self, runner, tmp_path, write_extension):
        from cv.extension.system import ExtensionSystem

        root = tmp_path / "bare"
        write_extension(root / "ext", "org.example.mail", "mail", "1.2")
        result = runner.invoke(
            cli,
            ["--root", str(root), "ext:list", "-L", "--out", "json"],
            obj={"system_factory": ExtensionSystem.boot},
        )
        assert result.exit_code == 0, result.output
        assert [r["status"] for r in json.loads(result.output)] == ["uninstalled"]
        assert sorted(p.name for p in root.iterdir()) == ["ext"]


# ---------------------------------------------------------------------------
# api
# ---------------------------------------------------------------------------

class TestApiCommand:
    """Tests for cv api."""

    def test_system_get(self, invoke, scenario_services):
        result = invoke(scenario_services, ["api", "system.get"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["is_error"] == 0
        assert payload["values"][0]["repository_url"] == scenario_services.repository_url

    def test_key_value_params(self, invoke, four_row_services):
        result = invoke(four_row_services, ["api", "extension.get", "status=installed", "--out", "json"])
        assert result.exit_code == 0, result.output
        assert [v["key"] for v in json.loads(result.output)["values"]] == ["org.example.local1"]

    def test_json_input(self, invoke, scenario_services):
        result = invoke(scenario_services, ["api", "extension.refresh", "--in", "json"], input='{"local": false}')
        assert result.exit_code == 0, result.output
        assert scenario_services.refresh_args == [(False, True)]

    def test_error_envelope_exits_1(self, invoke, scenario_services):
        result = invoke(scenario_services, ["api", "contact.get", "--out", "json"])
        assert result.exit_code == 1
        assert json.loads(result.output)["is_error"] == 1

    def test_bad_param(self, invoke, scenario_services):
        result = invoke(scenario_services, ["api", "system.get", "oops"])
        assert result.exit_code == 2
        assert "key=value" in result.output

    def test_bad_target(self, invoke, scenario_services):
        result = invoke(scenario_services, ["api", "system"])
        assert result.exit_code == 2

    def test_table_out_in_environment_is_ignored(self, invoke, scenario_services, monkeypatch):
        monkeypatch.setenv("CV_OUTPUT", "table")
        result = invoke(scenario_services, ["api", "system.get"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["is_error"] == 0

    def test_out_from_environment(self, invoke, scenario_services, monkeypatch):
        monkeypatch.setenv("CV_OUTPUT", "yaml")
        result = invoke(scenario_services, ["api", "system.get"])
        assert result.exit_code == 0, result.output
        assert yaml.safe_load(result.output)["is_error"] == 0


# ---------------------------------------------------------------------------
# cli (interactive shell)
# ---------------------------------------------------------------------------

class TestShellCommand:
    """Tests for cv cli."""

    def test_namespace(self, invoke, scenario_services):
        result = invoke(scenario_services, ["cli"], input='print("rows:", len(inventory()))\n')
        assert result.exit_code == 0, result.output
        assert "rows: 2" in result.output

    def test_api_in_shell(self, invoke, scenario_services):
        result = invoke(scenario_services, ["cli"], input='print("err:", api("System", "get")["is_error"])\n')
        assert "err: 0" in result.output

    def test_run_subcommand(self, invoke, scenario_services):
        result = invoke(scenario_services, ["cli"], input='cv("ext:list", "-L", "--out", "json")\n')
        assert result.exit_code == 0, result.output
        assert '"key":"bar"' in result.output
