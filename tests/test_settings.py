from __future__         import annotations
from electives.classes  import Quota
from electives.settings import Settings
from pydantic           import ValidationError

import pytest

def test_defaults():
  config = Settings(_env_file=None)
  assert config.shortfall_sentinel == 'max'
  assert config.max_workers is None
  assert config.default_quota == Quota(1, 100)
  assert 'on leave' in config.on_leave_markers

def test_environment_overrides(monkeypatch: pytest.MonkeyPatch):
  monkeypatch.setenv('ELECTIVES_ENVIRONMENT', ' Production ')
  monkeypatch.setenv('ELECTIVES_MAX_WORKERS', '3')
  monkeypatch.setenv('ELECTIVES_SHORTFALL_SENTINEL', 'MIN')
  config = Settings(_env_file=None)
  assert config.environment == 'production'
  assert config.max_workers == 3
  assert config.shortfall_sentinel == 'min'

def test_markers_are_normalized():
  config = Settings(_env_file=None, on_leave_markers=[' Leave ', ' '])
  assert config.on_leave_markers == ['leave']

def test_invalid_values_are_rejected():
  with pytest.raises(ValidationError):
    Settings(_env_file=None, default_quota_min=5, default_quota_max=2)
  with pytest.raises(ValidationError):
    Settings(_env_file=None, shortfall_sentinel='median')
  with pytest.raises(ValidationError):
    Settings(_env_file=None, max_workers=0)
