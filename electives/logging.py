from __future__       import annotations
from logging.handlers import RotatingFileHandler
from pathlib          import Path
from typing           import Union

import logging

FORMATTER = logging.Formatter(
  fmt='%(asctime)s %(levelname)s %(threadName)s %(name)s %(message)s',
  datefmt='%Y-%m-%dT%H:%M:%S%z')

def named(handler: logging.Handler, name: str, level: int):
  handler.set_name(f'electives.{name}')
  handler.setLevel(level)
  handler.setFormatter(FORMATTER)
  return handler

def setup_logging(
  *, environment: str, directory: Union[str, Path, None] = None):
  """Attach the console handler, plus a rotating file in production.

  The file lands in `directory/electives.log`. Calling again is a no-op.
  """
  root = logging.getLogger()
  if any(h.get_name() == 'electives.console' for h in root.handlers):
    return

  production = (environment or '').strip().lower() == 'production'
  level      = logging.INFO if production else logging.DEBUG
  root.addHandler(named(logging.StreamHandler(), 'console', level))
  if production:
    directory = Path(directory or 'logs')
    directory.mkdir(parents=True, exist_ok=True)
    root.addHandler(named(RotatingFileHandler(
      directory / 'electives.log',
      maxBytes=10 * 1024 * 1024,
      backupCount=5,
      encoding='utf-8'), 'file', level))
  root.setLevel(level)
