import importlib

import pytest

from config import get_settings_module
from src.attendance_reconciler.attendance_reconciler.core.exceptions import ValidationError
from src.attendance_reconciler.attendance_reconciler.reconciliation.model import ReconciliationSettings


@pytest.mark.parametrize(
    "env, module",
    [("production", "config.production"), ("test", "config.testing"), ("anything", "config.development")],
)
def test_settings_module_follows_app_env(monkeypatch, env, module):
    monkeypatch.setenv("APP_ENV", env)

    assert get_settings_module() == module


def test_every_settings_module_has_valid_reconciliation_settings():
    for name in ("config.development", "config.testing", "config.production"):
        settings = importlib.import_module(name)
        parsed = ReconciliationSettings.from_dict(settings.RECONCILIATION)
        assert parsed.max_workers >= 1
        assert "database" in settings.DB_CONFIG


def test_defaults():
    settings = ReconciliationSettings.from_dict(None)

    assert settings.default_grace_minutes == 15
    assert settings.tail_window_minutes == 240
    assert settings.undertime_threshold_minutes == 60
    assert settings.grouping_settings().double_punch_minutes == 10


def test_values_are_coerced():
    settings = ReconciliationSettings.from_dict({"half_day_ratio": "0.4", "max_workers": "3"})

    assert settings.half_day_ratio == pytest.approx(0.4)
    assert settings.max_workers == 3
    assert settings.strategy_factory().half_day_ratio == pytest.approx(0.4)


@pytest.mark.parametrize(
    "data",
    [{"tail_window": 10}, {"max_workers": 0}, {"grace": "x"}, {"lead_window_minutes": -5}, {"double_punch_minutes": "x"}],
)
def test_bad_values_are_rejected(data):
    with pytest.raises(ValidationError):
        ReconciliationSettings.from_dict(data)
