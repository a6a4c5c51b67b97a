"""
Tests for environment driven settings
"""

from sitemapper.config import OrchestratorConfig, ServerConfig, Settings


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ('SITEMAPPER_MAX_ATTEMPTS', 'SITEMAPPER_RETRY_DELAY', 'SITEMAPPER_PORT',
                 'SITEMAPPER_RETENTION_SECONDS', 'SITEMAPPER_SWEEP_INTERVAL', 'SITEMAPPER_ALLOWED_ORIGINS',
                 'SITEMAPPER_MAX_PAGES', 'SITEMAPPER_HEADLESS'):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env(env_file=str(tmp_path / 'missing.env'))

    assert settings.orchestrator == OrchestratorConfig()
    assert settings.orchestrator.max_attempts == 3
    assert settings.orchestrator.retry_delay == 2.0
    assert settings.crawler.max_pages == 20
    assert settings.crawler.headless is True
    assert settings.server.port == 8000
    assert settings.server.allowed_origins == ['http://localhost:3000']


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv('SITEMAPPER_MAX_ATTEMPTS', '5')
    monkeypatch.setenv('SITEMAPPER_RETRY_DELAY', '0.5')
    monkeypatch.setenv('SITEMAPPER_HEADLESS', 'false')
    monkeypatch.setenv('SITEMAPPER_PORT', '9000')
    monkeypatch.setenv('SITEMAPPER_ALLOWED_ORIGINS', 'https://a.example, https://b.example')

    settings = Settings.from_env(env_file=str(tmp_path / 'missing.env'))

    assert settings.orchestrator.max_attempts == 5
    assert settings.orchestrator.retry_delay == 0.5
    assert settings.crawler.headless is False
    assert settings.server.port == 9000
    assert settings.server.allowed_origins == ['https://a.example', 'https://b.example']


def test_env_file_does_not_override_process_environment(monkeypatch, tmp_path):
    env_file = tmp_path / '.env'
    env_file.write_text('SITEMAPPER_MAX_PAGES=7\nSITEMAPPER_PORT=7000\n')
    monkeypatch.delenv('SITEMAPPER_MAX_PAGES', raising=False)
    monkeypatch.setenv('SITEMAPPER_PORT', '9100')

    settings = Settings.from_env(env_file=str(env_file))

    assert settings.crawler.max_pages == 7
    assert settings.server.port == 9100


def test_server_config_default_origins_not_shared():
    first = ServerConfig()
    first.allowed_origins.append('https://x.example')

    assert ServerConfig().allowed_origins == ['http://localhost:3000']
