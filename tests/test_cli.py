"""Tests for argument parsing, run configuration and the top level run."""

import asyncio
import logging
from pathlib import Path

import pytest
from aiohttp import web
import aiohttp.test_utils

from args import parse_args
from cli_config import RunConfig, load_config_file
from constants import Constants, ExitCodes, OutputFormat
from ghworkflows import collect_workflow_files, main, run

WORKFLOW = """\
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v3
      - uses: docker://lpenz/omnilint:0.8.0
"""

UP_TO_DATE = """\
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
"""


class TestParseArgs:
    """Tests for parse_args."""

    def test_defaults(self):
        args = parse_args([])
        assert args.paths == []
        assert args.DRY_RUN is False
        assert args.ERROR_ON_OUTDATED is False
        assert args.OUTPUT_FORMAT is None
        assert args.LOG_LEVEL is None

    def test_flags(self):
        args = parse_args([
            "-n", "-f", "GitHub-Warning", "--error-on-outdated",
            "--timeout", "7", "--loglevel", "debug", "a.yml", "b.yml",
        ])
        assert args.paths == ["a.yml", "b.yml"]
        assert args.DRY_RUN is True
        assert args.OUTPUT_FORMAT == "github-warning"
        assert args.ERROR_ON_OUTDATED is True
        assert args.REQUEST_TIMEOUT == 7
        assert args.LOG_LEVEL == "DEBUG"

    def test_unknown_output_format_is_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["-f", "json"])


class TestRunConfig:
    """Tests for RunConfig.from_args precedence."""

    def test_defaults(self):
        config = RunConfig.from_args(parse_args([]))
        assert config.paths == [Constants.WORKFLOWS_DIR]
        assert config.output_format == OutputFormat.STANDARD
        assert config.docker_hub_url == Constants.DOCKER_HUB_URL
        assert config.github_api_url == Constants.GITHUB_API_BASE
        assert config.request_timeout == Constants.REQUEST_TIMEOUT

    def test_config_file_then_cli(self, tmp_path):
        cfg = tmp_path / "config.yml"
        cfg.write_text(
            "github_workflows_update:\n"
            "  github_api_url: http://ghe.example/api/v3\n"
            "  request_timeout: 9\n"
            "  workflows_dir: wf\n"
            "  output_format: github-warning\n",
            encoding="utf-8",
        )
        config = RunConfig.from_args(parse_args(["-c", str(cfg)]))
        assert config.paths == ["wf"]
        assert config.github_api_url == "http://ghe.example/api/v3"
        assert config.request_timeout == 9
        assert config.output_format == OutputFormat.GITHUB_WARNING

        config = RunConfig.from_args(parse_args([
            "-c", str(cfg), "--timeout", "3", "-f", "standard", "x.yml",
        ]))
        assert config.paths == ["x.yml"]
        assert config.request_timeout == 3
        assert config.output_format == OutputFormat.STANDARD

    def test_invalid_values_are_ignored(self, tmp_path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("request_timeout: soon\noutput_format: xml\n", encoding="utf-8")
        assert load_config_file(str(cfg)) == {}

    def test_missing_config_file(self, tmp_path):
        assert load_config_file(str(tmp_path / "nope.yml")) == {}


class TestCollectWorkflowFiles:
    """Tests for collect_workflow_files."""

    def test_directory_is_expanded(self, tmp_path):
        (tmp_path / "b.yaml").write_text(UP_TO_DATE, encoding="utf-8")
        (tmp_path / "a.yml").write_text(UP_TO_DATE, encoding="utf-8")
        (tmp_path / "README.md").write_text("docs", encoding="utf-8")
        files = collect_workflow_files([str(tmp_path)])
        assert files == [str(tmp_path / "a.yml"), str(tmp_path / "b.yaml")]

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            collect_workflow_files([str(tmp_path / "missing")])


def _make_app(calls):
    async def docker_tags(request):
        calls.append(request.path)
        return web.json_response({
            "count": 2,
            "next": None,
            "results": [{"name": "0.8.0"}, {"name": "0.9.0"}],
        })

    async def github_tags(request):
        calls.append(request.path)
        return web.json_response([
            {"ref": "refs/tags/v3"},
            {"ref": "refs/tags/v4"},
        ])

    app = web.Application()
    app.router.add_get("/v2/repositories/{ns}/{name}/tags", docker_tags)
    app.router.add_get("/repos/{owner}/{repo}/git/matching-refs/tags", github_tags)
    return app


def _run(files, calls, **kwargs):
    async def _main():
        async with aiohttp.test_utils.TestServer(_make_app(calls)) as ts:
            base = f"http://{ts.host}:{ts.port}"
            config = RunConfig(
                paths=files, docker_hub_url=base, github_api_url=base, request_timeout=5, **kwargs
            )
            return await run(config, files)

    return asyncio.run(_main())


class TestRun:
    """End-to-end runs against a local API server."""

    @pytest.fixture(autouse=True)
    def _no_token(self, monkeypatch):
        monkeypatch.delenv(Constants.ENV_GITHUB_TOKEN, raising=False)
        monkeypatch.delenv(Constants.ENV_PERSONAL_TOKEN, raising=False)

    def test_updates_files_and_shares_lookups(self, tmp_path, capsys):
        files = []
        for name in ("a.yml", "b.yml"):
            path = tmp_path / name
            path.write_text(WORKFLOW, encoding="utf-8")
            files.append(str(path))
        calls = []

        assert _run(files, calls) == ExitCodes.SUCCESS.value

        # One lookup per resource across both files.
        assert sorted(calls) == [
            "/repos/actions/checkout/git/matching-refs/tags",
            "/v2/repositories/lpenz/omnilint/tags",
        ]
        for path in files:
            written = Path(path).read_text(encoding="utf-8")
            assert "actions/checkout@v4" in written
            assert "docker://lpenz/omnilint:0.9.0" in written
        assert len(capsys.readouterr().out.splitlines()) == 4

    def test_error_on_outdated(self, tmp_path, capsys):
        path = tmp_path / "ci.yml"
        path.write_text(WORKFLOW, encoding="utf-8")

        code = _run([str(path)], [], dry_run=True, error_on_outdated=True)

        assert code == ExitCodes.OUTDATED.value
        assert "Found outdated entities" in capsys.readouterr().err
        assert path.read_text(encoding="utf-8") == WORKFLOW

    def test_error_on_outdated_github_format(self, tmp_path, capsys):
        path = tmp_path / "ci.yml"
        path.write_text(WORKFLOW, encoding="utf-8")

        code = _run([str(path)], [], dry_run=True, error_on_outdated=True,
                    output_format=OutputFormat.GITHUB_WARNING)

        assert code == ExitCodes.OUTDATED.value
        assert "::error ::outdated entities found" in capsys.readouterr().out

    def test_up_to_date_with_error_on_outdated(self, tmp_path):
        path = tmp_path / "ci.yml"
        path.write_text(UP_TO_DATE, encoding="utf-8")
        assert _run([str(path)], [], error_on_outdated=True) == ExitCodes.SUCCESS.value

    def test_bad_file_fails_run_but_others_proceed(self, tmp_path):
        bad = tmp_path / "bad.yml"
        bad.write_text("name: no jobs\n", encoding="utf-8")
        good = tmp_path / "good.yml"
        good.write_text(WORKFLOW, encoding="utf-8")

        code = _run([str(bad), str(good)], [], error_on_outdated=True)

        assert code == ExitCodes.FILE_ERROR.value
        assert "actions/checkout@v4" in good.read_text(encoding="utf-8")


class TestMain:
    """Tests for main."""

    @pytest.fixture(autouse=True)
    def _restore_logging(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_missing_path(self, tmp_path):
        assert main([str(tmp_path / "missing.yml")]) == ExitCodes.FILE_ERROR.value

    def test_empty_directory(self, tmp_path):
        assert main([str(tmp_path)]) == ExitCodes.SUCCESS.value
