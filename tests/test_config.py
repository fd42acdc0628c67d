from podofo import config


def test_parse_origins():
    assert config.parse_origins(" http://a.test , ,https://b.test ") == ["http://a.test", "https://b.test"]
    assert config.parse_origins("") == []


def test_default_gs_command(monkeypatch):
    monkeypatch.setattr(config.sys, "platform", "win32")
    assert config.default_gs_command() == "gswin64c"
    monkeypatch.setattr(config.sys, "platform", "linux")
    assert config.default_gs_command() == "gs"


def test_limits_defaults():
    assert config.MAX_FILE_BYTES == config.MAX_FILE_MB * 1024 * 1024
    assert config.DEFAULT_DPI > 0
