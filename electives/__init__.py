from __future__             import annotations
from argparse               import ArgumentParser
from datetime               import date
from electives.classes      import *
from electives.logging      import setup_logging
from electives.orchestrator import AllocationOrchestrator, AllocationResult
from electives.settings     import settings
from electives.utilities    import encode, find_filepath, to_xlsx
from os.path                import exists
from pathlib                import Path
from typing                 import Any, Optional, Sequence

import logging

logger = logging.getLogger(__name__)

RESULT_FILENAME = f'{date.today()} Result {"{}"}.xlsx'

def export(path: str, result: AllocationResult):
  sheet: list[list[Any]] = [['Reason', 'Student']]
  for student, reason in sorted(
    result.unresolved, key=lambda placement: (
      list(ReasonCode).index(placement[1]), placement[0].full_name)):
    sheet.append([reason.description, student])
  for block, failure in sorted(result.failures.items()):
    sheet.append([f'Block {block} was not processed: {failure}', ''])
  if len(sheet) == 1:
    sheet.append(['All applications were processed.', ''])
  to_xlsx(path, 'Review', sheet)

  for block, placements in sorted(result.distribution.items()):
    sheet = list(list() for _ in range(max(
      [len(students) for students in placements.values()], default=0) + 1))
    for discipline, students in placements.items():
      sheet[0].append(discipline)
      for i, (student, reason) in enumerate(
        sorted(students, key=lambda placement: placement[0]), 1):
        sheet[i].append(
          student if reason is ReasonCode.OK else f'{student} ({reason.value})')
      for j in range(len(students) + 1, len(sheet)):
        sheet[j].append('')
    to_xlsx(path, str(block), sheet)
  logger.info('Result written to %s', path)
  return path

def main(argv: Optional[Sequence[str]] = None):
  parser = ArgumentParser(
    prog='electives',
    description='Distribute students among the elective disciplines.')
  parser.add_argument('workbook', help='input workbook (.xlsx)')
  parser.add_argument(
    '--mode', choices=['choice', 'change'], default='choice',
    help='process choice applications or change applications')
  parser.add_argument(
    '--output', default=settings.result_directory,
    help='directory for the result workbook')
  args = parser.parse_args(argv)

  setup_logging(
    environment=settings.environment,
    directory=Path(args.output) / 'logs')
  if not exists(args.workbook):
    parser.error(f'\'{args.workbook}\' does not exist')

  data = encode(args.workbook, settings)
  orchestrator = AllocationOrchestrator(
    data.curriculum, data.roster.students, settings)
  match args.mode:
    case 'choice':
      result = orchestrator.allocate(data.choices)
    case 'change':
      initial = orchestrator.collect(data.choices)
      result  = orchestrator.reconcile(initial.distribution, data.changes)
      for placement in initial.unresolved:
        result.report(*placement)
    case _:
      raise ValueError(f'Mode \'{args.mode}\' not supported')

  for block, failure in result.failures.items():
    logger.error('%s: %s', block, failure)
  return export(find_filepath(args.output, RESULT_FILENAME), result)
