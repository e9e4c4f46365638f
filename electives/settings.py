from __future__        import annotations
from electives.classes import Quota
from pydantic          import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing            import Literal, Optional

class Settings(BaseSettings):
  model_config = SettingsConfigDict(
    env_prefix='ELECTIVES_',
    env_file='.env',
    env_file_encoding='utf-8',
    extra='ignore')

  # Runtime
  environment     : str = 'development'
  result_directory: str = 'output'

  # Engine
  # None lets the thread pool pick its own size.
  max_workers       : Optional[int]         = Field(default=None, ge=1)
  # Boundary of the change pass shortfall repair: 'max' keeps the historical
  # check, 'min' lets a discipline that emptied completely stay closed.
  shortfall_sentinel: Literal['max', 'min'] = 'max'

  # Quota of disciplines whose normative is missing or malformed
  default_quota_min: int = Field(default=1, ge=0)
  default_quota_max: int = Field(default=100, ge=0)

  # Roster status values meaning the student is on academic leave
  on_leave_markers: list[str] = Field(
    default_factory=lambda: ['прер', 'on-leave', 'on leave'])

  @field_validator('environment')
  @classmethod
  def _normalize_environment(cls, v: str) -> str:
    return (v or 'development').strip().lower()

  @field_validator('shortfall_sentinel', mode='before')
  @classmethod
  def _normalize_shortfall_sentinel(cls, v: object) -> object:
    return v.strip().lower() if isinstance(v, str) else v

  @field_validator('on_leave_markers')
  @classmethod
  def _normalize_on_leave_markers(cls, v: list[str]) -> list[str]:
    return [marker.strip().lower() for marker in v if marker.strip()]

  @model_validator(mode='after')
  def _check_default_quota(self) -> Settings:
    if self.default_quota_min > self.default_quota_max:
      raise ValueError(
        'ELECTIVES_DEFAULT_QUOTA_MIN must not exceed '
        'ELECTIVES_DEFAULT_QUOTA_MAX')
    return self

  @property
  def default_quota(self):
    return Quota(self.default_quota_min, self.default_quota_max)

settings = Settings()
