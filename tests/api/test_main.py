import pytest

from school_api.core import config


def test_root_reports_running(client) -> None:
    response = client.get('/')

    assert response.status_code == 200
    assert response.json() == {'status': 'School Management API Running'}


def test_status_reports_database_connection(client, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('school_api.main.check_connection', lambda: False)

    response = client.get('/status')

    assert response.json() == {'database': 'Not connected'}


def test_unknown_route_uses_message_body(client) -> None:
    response = client.get('/api/nowhere')

    assert response.status_code == 404
    assert response.json() == {'message': 'Not Found'}


def test_validate_runtime_config_rejects_placeholder_secret_in_production(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'APP_ENV', 'production')
    monkeypatch.setattr(config, 'JWT_SECRET_KEY', 'change-me')

    with pytest.raises(RuntimeError):
        config.validate_runtime_config()


def test_get_auth_settings_reads_configured_values() -> None:
    settings = config.get_auth_settings()

    assert settings.secret_key == config.JWT_SECRET_KEY
    assert settings.expires_minutes == config.JWT_EXPIRES_MINUTES
