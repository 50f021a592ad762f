"""
Notely Backend — Bootstrap Tests
=================================

What:  Tests for bootstrap() and the main() entrypoint.

What we test:
    ✅ No DATABASE_URL → degraded mode, SQLAlchemy never touched
    ✅ Reachable database → pinged handle, optional table creation
    ✅ Malformed / unreachable database → fatal startup errors
    ✅ main() exits with status 1 before serving on startup failure
"""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import inspect

from notely.bootstrap import ServiceMode, bootstrap, service_mode
from notely.config import Settings, load_settings
from notely.database import Database
from notely.exceptions import ConfigurationError, DatabaseConnectionError


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestBootstrap:

    @pytest.mark.asyncio
    async def test_no_database_url_means_degraded(self):
        with patch("notely.bootstrap.Database") as database_cls:
            database = await bootstrap(make_settings(database_url=None))

        assert database is None
        database_cls.assert_not_called()
        assert service_mode(database) is ServiceMode.DEGRADED

    @pytest.mark.asyncio
    async def test_empty_database_url_means_degraded(self):
        settings = make_settings(database_url="  ")

        assert settings.database_url is None
        assert await bootstrap(settings) is None

    @pytest.mark.asyncio
    async def test_reachable_database_returns_handle(self, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'boot.db'}"

        database = await bootstrap(make_settings(database_url=url))
        try:
            assert isinstance(database, Database)
            assert "parseTime=true" in database.url
            assert service_mode(database) is ServiceMode.FULL
            # Handle stays usable after the bootstrap dispose
            await database.ping()
        finally:
            await database.dispose()

    @pytest.mark.asyncio
    async def test_create_tables_option(self, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'boot.db'}"

        database = await bootstrap(make_settings(database_url=url, database_create_tables=True))
        try:
            async with database.engine.connect() as conn:
                tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
            assert {"users", "notes"} <= set(tables)
        finally:
            await database.dispose()

    @pytest.mark.asyncio
    async def test_malformed_url_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            await bootstrap(make_settings(database_url="user:pw@localhost:notaport/notely"))

    @pytest.mark.asyncio
    async def test_unreachable_database_is_connection_error(self, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'missing-dir' / 'nested' / 'boot.db'}"

        with pytest.raises(DatabaseConnectionError):
            await bootstrap(make_settings(database_url=url))


class TestMain:

    def test_startup_failure_exits_before_serving(self, monkeypatch):
        from notely import main as main_module

        monkeypatch.setenv("DATABASE_URL", "user:pw@localhost:notaport/notely")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        run = MagicMock()
        monkeypatch.setattr(main_module.uvicorn, "run", run)

        with pytest.raises(SystemExit) as exc_info:
            main_module.main()

        assert exc_info.value.code == 1
        run.assert_not_called()

    def test_degraded_mode_serves_on_configured_port(self, monkeypatch):
        from notely import main as main_module

        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("PORT", "9191")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        run = MagicMock()
        monkeypatch.setattr(main_module.uvicorn, "run", run)

        main_module.main()

        run.assert_called_once()
        app = run.call_args.args[0]
        assert app.state.mode is ServiceMode.DEGRADED
        assert run.call_args.kwargs["port"] == 9191

    @pytest.mark.parametrize("name,value", [("PORT", "abc"), ("PORT", "0"), ("LOG_LEVEL", "chatty")])
    def test_invalid_environment_exits_before_serving(self, monkeypatch, name, value):
        from notely import main as main_module

        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv(name, value)
        run = MagicMock()
        monkeypatch.setattr(main_module.uvicorn, "run", run)

        with pytest.raises(SystemExit) as exc_info:
            main_module.main()

        assert exc_info.value.code == 1
        run.assert_not_called()


class TestSettings:

    def test_port_defaults_to_8080(self, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)

        assert make_settings().port == 8080

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValueError):
            make_settings(log_level="chatty")

    def test_load_settings_wraps_invalid_values(self, monkeypatch):
        monkeypatch.setenv("PORT", "abc")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings()

        assert "PORT" in exc_info.value.message
