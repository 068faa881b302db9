from __future__ import annotations

from threading import Event

import pytest

from coral_counts import main as main_module
from coral_counts.config import DEFAULT_BATCH_SIZE, RecountConfig
from coral_counts.domain.recount import RecountResult, SourceError

REQUIRED = ["--tenant-id", "t1", "--site-id", "site-1", "--mongodb-uri", "mongodb://db/coral"]
ENV_VARS = (
    "TENANT_ID",
    "SITE_ID",
    "MONGODB_URI",
    "DRY_RUN",
    "DISABLE_WATCHER",
    "BATCH_SIZE",
    "MONGODB_CONNECT_TIMEOUT",
    "STRICT_STATUS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> dict[str, object]:
    captured: dict[str, object] = {}

    def fake_recount(config: RecountConfig, *, cancel: Event | None = None) -> RecountResult:
        captured["config"] = config
        captured["cancel"] = cancel
        return RecountResult(converged=True)

    monkeypatch.setattr(main_module, "recount_site", fake_recount)
    return captured


def test_main_cli_defaults(captured: dict[str, object]) -> None:
    main_module.main(REQUIRED)

    config = captured["config"]
    assert isinstance(config, RecountConfig)
    assert config.tenant_id == "t1"
    assert config.site_id == "site-1"
    assert config.mongo.database_name == "coral"
    assert config.mongo.connect_timeout_seconds == 60.0
    assert config.batch_size == DEFAULT_BATCH_SIZE
    assert not config.dry_run
    assert not config.disable_watcher
    assert not config.strict_statuses
    assert isinstance(captured["cancel"], Event)


def test_main_cli_with_flags(captured: dict[str, object]) -> None:
    cancel = Event()

    main_module.main(
        [
            *REQUIRED,
            "--dry-run",
            "--disable-watcher",
            "--strict-status",
            "--batch-size",
            "50",
            "--connect-timeout",
            "1m30s",
        ],
        cancel=cancel,
    )

    config = captured["config"]
    assert isinstance(config, RecountConfig)
    assert config.dry_run
    assert config.disable_watcher
    assert config.strict_statuses
    assert config.batch_size == 50
    assert config.mongo.connect_timeout_seconds == 90.0
    assert captured["cancel"] is cancel


def test_main_cli_reads_environment(
    monkeypatch: pytest.MonkeyPatch, captured: dict[str, object]
) -> None:
    monkeypatch.setenv("TENANT_ID", "env-tenant")
    monkeypatch.setenv("SITE_ID", "env-site")
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/talk?replicaSet=rs0")
    monkeypatch.setenv("DRY_RUN", "true")
    monkeypatch.setenv("BATCH_SIZE", "10")
    monkeypatch.setenv("MONGODB_CONNECT_TIMEOUT", "5s")

    main_module.main([])

    config = captured["config"]
    assert isinstance(config, RecountConfig)
    assert (config.tenant_id, config.site_id) == ("env-tenant", "env-site")
    assert config.mongo.database_name == "talk"
    assert config.dry_run
    assert config.batch_size == 10
    assert config.mongo.connect_timeout_seconds == 5.0


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["--tenant-id", "t1", "--site-id", "site-1"],
        [*REQUIRED, "--batch-size", "0"],
        [*REQUIRED, "--batch-size", "lots"],
        [*REQUIRED, "--connect-timeout", "soon"],
    ],
)
def test_main_cli_invalid_arguments(captured: dict[str, object], argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main_module.main(argv)

    assert excinfo.value.code == 2
    assert "config" not in captured


def test_main_cli_uri_without_database(captured: dict[str, object]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["--tenant-id", "t1", "--site-id", "s1", "--mongodb-uri", "mongodb://db"])

    assert excinfo.value.code == 2


def test_main_cli_invalid_boolean_env(
    monkeypatch: pytest.MonkeyPatch, captured: dict[str, object]
) -> None:
    monkeypatch.setenv("DRY_RUN", "maybe")

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(REQUIRED)

    assert excinfo.value.code == 2


def test_main_cli_recount_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_recount(config: RecountConfig, *, cancel: Event | None = None) -> RecountResult:
        raise SourceError("Cannot ping MongoDB")

    monkeypatch.setattr(main_module, "recount_site", failing_recount)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(REQUIRED)

    assert excinfo.value.code == 1


def test_sigint_handler_cancels_then_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    cancel = Event()
    monkeypatch.setattr(main_module, "_CANCEL", cancel)

    main_module.sigint_handler(2, None)
    assert cancel.is_set()

    with pytest.raises(SystemExit) as excinfo:
        main_module.sigint_handler(2, None)
    assert excinfo.value.code == 0


def test_main_cli_invalid_log_level(
    monkeypatch: pytest.MonkeyPatch, captured: dict[str, object]
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "chatty")

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(REQUIRED)

    assert excinfo.value.code == 2


def test_main_cli_names_missing_settings(
    captured: dict[str, object], caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level("ERROR"), pytest.raises(SystemExit) as excinfo:
        main_module.main(["--tenant-id", "t1"])

    assert excinfo.value.code == 2
    assert "--mongodb-uri (MONGODB_URI), --site-id (SITE_ID)" in caplog.text
