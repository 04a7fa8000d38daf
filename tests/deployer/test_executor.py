"""Tests for per-job deployment."""

from __future__ import annotations

import logging
import subprocess
import threading

import pytest

from magento_static_deploy.deployer import executor
from magento_static_deploy.deployer.executor import (
    delegate_to_magento,
    deploy_theme,
    output_path,
    read_deployed_version,
)
from magento_static_deploy.deployer.state import DeployJob, DeployStats, DeployStatus
from magento_static_deploy.errors import (
    CreateDirFailedError,
    DelegationFailedError,
    DeployIOError,
)
from magento_static_deploy.scanner.discovery import discover_all_themes
from magento_static_deploy.theme.models import Area, LocaleCode, ThemeType

EN_US = LocaleCode("en_US")


@pytest.fixture()
def cancel():
    return threading.Event()


@pytest.fixture()
def stats():
    return DeployStats()


def _themes(magento):
    return {t.full_name(): t for t in discover_all_themes(magento.root, [Area.FRONTEND, Area.ADMINHTML])}


class FakeRun:
    """Stands in for subprocess.run and records each call."""

    def __init__(self, returncode=0, stdout="", stderr=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls = []

    def __call__(self, command, **kwargs):
        self.calls.append((command, kwargs))
        return subprocess.CompletedProcess(command, self.returncode, stdout=self.stdout, stderr=self.stderr)


def test_output_path(make_theme, tmp_path):
    theme = make_theme("Custom/shop", area=Area.ADMINHTML)
    assert output_path(tmp_path, theme, EN_US) == tmp_path / "pub" / "static" / "adminhtml" / "Custom" / "shop" / "en_US"


class TestHyvaDeployment:
    def test_single_web_file(self, magento, cancel, stats):
        magento.add_theme("Custom", "hyva", hyva_marker=True)
        magento.write("app/design/frontend/Custom/hyva/web/css/styles.css", "body{}")
        themes = _themes(magento)
        theme = themes["Custom/hyva"]

        result = deploy_theme(DeployJob(theme, EN_US), list(themes.values()), magento.root, cancel, stats)

        assert result.status is DeployStatus.SUCCESS
        assert result.file_count == 1
        assert result.error is None
        deployed = magento.output("Custom", "hyva") / "css" / "styles.css"
        assert deployed.read_text() == "body{}"
        assert deployed.as_posix().endswith("pub/static/frontend/Custom/hyva/en_US/css/styles.css")
        assert stats.files_copied == 1
        assert stats.bytes_copied == 6

    def test_child_layer_wins_over_parent(self, magento, cancel, stats):
        magento.add_theme("Hyva", "default", hyva_marker=True)
        magento.add_theme("Custom", "child", parent="Hyva/default")
        magento.write("app/design/frontend/Hyva/default/web/css/a.css", "parent a")
        magento.write("app/design/frontend/Hyva/default/web/css/b.css", "parent b")
        magento.write("app/design/frontend/Custom/child/web/css/a.css", "child a")
        themes = _themes(magento)

        result = deploy_theme(
            DeployJob(themes["Custom/child"], EN_US), list(themes.values()), magento.root, cancel, stats
        )

        out = magento.output("Custom", "child")
        assert result.status is DeployStatus.SUCCESS
        assert result.file_count == 2
        assert (out / "css" / "a.css").read_text() == "child a"
        assert (out / "css" / "b.css").read_text() == "parent b"

    def test_module_override_beats_vendor_module(self, magento, cancel, stats):
        magento.add_theme("Custom", "shop", hyva_marker=True)
        magento.write("app/design/frontend/Custom/shop/Magento_Catalog/web/js/list.js", "theme")
        package = magento.add_module("magento", "module-catalog", "Magento_Catalog")
        rel = package.relative_to(magento.root)
        magento.write(rel / "view/frontend/web/js/list.js", "vendor frontend")
        magento.write(rel / "view/frontend/web/js/grid.js", "vendor grid")
        magento.write(rel / "view/base/web/js/grid.js", "vendor base grid")
        magento.write(rel / "view/base/web/js/base-only.js", "base")
        magento.write("lib/web/mage/utils.js", "lib")
        themes = _themes(magento)

        result = deploy_theme(
            DeployJob(themes["Custom/shop"], EN_US), list(themes.values()), magento.root, cancel, stats
        )

        out = magento.output("Custom", "shop")
        assert result.file_count == 4
        assert (out / "Magento_Catalog" / "js" / "list.js").read_text() == "theme"
        assert (out / "Magento_Catalog" / "js" / "grid.js").read_text() == "vendor grid"
        assert (out / "Magento_Catalog" / "js" / "base-only.js").read_text() == "base"
        assert (out / "mage" / "utils.js").read_text() == "lib"

    def test_development_files_skipped_unless_included(self, magento, cancel):
        magento.add_theme("Custom", "hyva", hyva_marker=True)
        magento.write("app/design/frontend/Custom/hyva/web/tailwind/package.json", "{}")
        magento.write("app/design/frontend/Custom/hyva/web/tailwind/node_modules/x/index.js", "")
        magento.write("app/design/frontend/Custom/hyva/web/js/app.js", "")
        themes = _themes(magento)
        job = DeployJob(themes["Custom/hyva"], EN_US)

        default = deploy_theme(job, list(themes.values()), magento.root, cancel, DeployStats())
        dev_job = DeployJob(themes["Custom/hyva"], LocaleCode("de_DE"))
        with_dev = deploy_theme(dev_job, list(themes.values()), magento.root, cancel, DeployStats(), include_dev=True)

        assert default.file_count == 1
        assert with_dev.file_count == 3

    def test_cancelled_before_start(self, magento, cancel, stats):
        magento.add_theme("Custom", "hyva", hyva_marker=True)
        magento.write("app/design/frontend/Custom/hyva/web/a.js", "a")
        themes = _themes(magento)
        cancel.set()

        result = deploy_theme(DeployJob(themes["Custom/hyva"], EN_US), list(themes.values()), magento.root, cancel, stats)

        assert result.status is DeployStatus.CANCELLED
        assert result.file_count == 0
        assert stats.files_copied == 0
        assert not magento.output("Custom", "hyva").exists()

    def test_copy_failure_becomes_failed_result(self, magento, cancel, stats):
        magento.add_theme("Custom", "hyva", hyva_marker=True)
        magento.write("app/design/frontend/Custom/hyva/web/css/a.css", "a")
        magento.write("pub/static/frontend/Custom/hyva/en_US/css", "a file where a directory belongs")
        themes = _themes(magento)

        result = deploy_theme(DeployJob(themes["Custom/hyva"], EN_US), list(themes.values()), magento.root, cancel, stats)

        assert result.status is DeployStatus.FAILED
        assert isinstance(result.error, CreateDirFailedError)
        assert stats.errors == 1


class TestDelegation:
    def test_luma_theme_is_delegated(self, magento, cancel, stats, monkeypatch):
        magento.add_theme("Magento", "luma", parent="Magento/blank")
        themes = _themes(magento)
        fake = FakeRun()
        monkeypatch.setattr(executor.subprocess, "run", fake)
        theme = themes["Magento/luma"]
        assert theme.theme_type is ThemeType.LUMA

        result = deploy_theme(DeployJob(theme, LocaleCode("de_DE")), list(themes.values()), magento.root, cancel, stats)

        assert result.status is DeployStatus.DELEGATED
        assert result.file_count == 0
        command, kwargs = fake.calls[0]
        assert command == [
            str(magento.root / "bin" / "magento"),
            "setup:static-content:deploy",
            "--area",
            "frontend",
            "--theme",
            "Magento/luma",
            "de_DE",
        ]
        assert kwargs["cwd"] == magento.root
        assert kwargs["capture_output"] is True

    def test_non_zero_exit_fails_with_code_and_stderr(self, magento, make_theme, cancel, stats, monkeypatch):
        theme = make_theme("Magento/luma", theme_type=ThemeType.LUMA)
        monkeypatch.setattr(executor.subprocess, "run", FakeRun(returncode=3, stderr="boom\n"))

        result = deploy_theme(DeployJob(theme, EN_US), [theme], magento.root, cancel, stats)

        assert result.status is DeployStatus.FAILED
        assert isinstance(result.error, DelegationFailedError)
        assert result.error.code == 3
        assert result.error.stderr == "boom\n"
        assert "exit code 3: boom" in str(result.error)
        assert stats.errors == 1

    def test_verbose_logs_magento_output(self, magento, make_theme, cancel, stats, monkeypatch, caplog):
        theme = make_theme("Magento/luma", theme_type=ThemeType.LUMA)
        monkeypatch.setattr(
            executor.subprocess, "run", FakeRun(stdout="Deploy using quick strategy\n", stderr="notice\n")
        )
        caplog.set_level(logging.DEBUG, logger="magento_static_deploy.deployer.executor")

        result = deploy_theme(DeployJob(theme, EN_US), [theme], magento.root, cancel, stats, verbose=True)

        assert result.status is DeployStatus.DELEGATED
        messages = [record.getMessage() for record in caplog.records]
        assert "bin/magento stdout for Magento/luma/en_US:\nDeploy using quick strategy" in messages
        assert "bin/magento stderr for Magento/luma/en_US:\nnotice" in messages

    def test_quiet_run_does_not_log_magento_output(self, magento, make_theme, cancel, stats, monkeypatch, caplog):
        theme = make_theme("Magento/luma", theme_type=ThemeType.LUMA)
        monkeypatch.setattr(executor.subprocess, "run", FakeRun(stdout="Deploy using quick strategy\n"))
        caplog.set_level(logging.DEBUG, logger="magento_static_deploy.deployer.executor")

        deploy_theme(DeployJob(theme, EN_US), [theme], magento.root, cancel, stats)

        assert not any("quick strategy" in record.getMessage() for record in caplog.records)

    def test_missing_binary_is_io_error(self, magento, make_theme):
        theme = make_theme("Magento/luma", theme_type=ThemeType.LUMA)
        with pytest.raises(DeployIOError):
            delegate_to_magento(magento.root, theme, EN_US)

    def test_missing_binary_fails_the_job(self, magento, make_theme, cancel, stats):
        theme = make_theme("Magento/luma", theme_type=ThemeType.LUMA)

        result = deploy_theme(DeployJob(theme, EN_US), [theme], magento.root, cancel, stats)

        assert result.status is DeployStatus.FAILED
        assert isinstance(result.error, DeployIOError)


class TestDeployedVersion:
    def test_absent(self, magento):
        assert read_deployed_version(magento.root) is None

    def test_stripped(self, magento):
        magento.write("pub/static/deployed_version.txt", "1700000000\n")
        assert read_deployed_version(magento.root) == "1700000000"
