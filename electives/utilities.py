from __future__                    import annotations
from collections                   import defaultdict
from electives.classes             import *
from electives.settings            import Settings, settings as default_settings
from openpyxl                      import load_workbook
from openpyxl.utils                import get_column_letter
from openpyxl.worksheet._read_only import ReadOnlyWorksheet
from openpyxl.worksheet.worksheet  import Worksheet
from os                            import makedirs, walk
from os.path                       import exists
from typing                        import Any, Optional
from xlsxwriter                    import Workbook

import logging
import re

logger = logging.getLogger(__name__)

STATUSES = {
  'new'       : Status.NEW,
  'approved'  : Status.APPROVED,
  'rejected'  : Status.REJECTED,
  'новая'     : Status.NEW,
  'утверждена': Status.APPROVED,
  'отклонена' : Status.REJECTED,
}

def as_text(value: Any):
  if value is None:
    return None
  if isinstance(value, bool):
    return str(value)
  if isinstance(value, float):
    return int(value) if value.is_integer() else value
  if isinstance(value, int) or isinstance(value, str) and value.isdigit():
    return int(value)
  return str(value)

def as_number(value: Any, default: float = 0):
  value = as_text(value)
  if value is None or value == '':
    return default
  if isinstance(value, str):
    return float(value.replace(',', '.'))
  return value

def sheet_names(path: str):
  workbook = load_workbook(path, read_only=True)
  names = list(workbook.sheetnames)
  workbook.close()
  return names

def read_xlsx(path: str, sheet_name: str):
  workbook = load_workbook(path)
  worksheet = workbook[sheet_name]
  data = list[list[Any]]()
  if isinstance(worksheet, Worksheet):
    for row in worksheet.rows:
      data.append(list(as_text(cell.value) for cell in row))
  workbook.close()
  return data

def rows(sheet: list[list[Any]], width: int):
  """Non-empty data rows padded to width, with their spreadsheet row number."""
  for number, row in enumerate(sheet[1:], 2):
    if any(cell not in {None, ''} for cell in row):
      yield number, (row + [None] * width)[:width]

def parse_quota(
  discipline: str, minimum: Any, maximum: Any, settings: Settings):
  try:
    return Quota(int(as_number(minimum)), int(as_number(maximum)))
  except (TypeError, ValueError) as error:
    logger.warning(
      'Quota of %s is malformed (%s), using %s',
      discipline, error, settings.default_quota)
    return settings.default_quota

def parse_status(value: Any):
  status = str(value or 'new').strip().lower()
  if status not in STATUSES:
    raise ValueError(f'Unexpected application status \'{value}\'')
  return STATUSES[status]

def encode_curriculum(path: str, settings: Settings):
  code = str(read_xlsx(path, 'Curriculum')[1][0])
  blocks = defaultdict[tuple[int, int, Optional[str]], list[Discipline]](list)
  for number, row in rows(read_xlsx(path, 'Disciplines'), 7):
    semester, block, specialization, name, alias, minimum, maximum = row
    try:
      key = (int(semester), int(block), specialization or None)
    except (TypeError, ValueError) as error:
      logger.warning('Disciplines row %d skipped: %s', number, error)
      continue
    blocks[key].append(Discipline(
      str(name), str(alias or ''),
      parse_quota(name, minimum, maximum, settings)))
  return Curriculum(code, list(
    ElectivesBlock(semester, block, tuple(disciplines), specialization)
    for (semester, block, specialization), disciplines in blocks.items()))

def encode_roster(path: str, curriculum: Curriculum, settings: Settings):
  students = list[Student]()
  for number, row in rows(read_xlsx(path, 'Students'), 5):
    name, code, specialization, score, status = row
    try:
      score = as_number(score)
    except ValueError as error:
      # Applications of a skipped student surface as StudentNotInRoster
      logger.warning('Students row %d skipped: %s', number, error)
      continue
    students.append(Student(
      ' '.join(str(name).split()),
      str(code or curriculum.code),
      score,
      EnrollmentStatus.ON_LEAVE
      if str(status or '').strip().lower() in settings.on_leave_markers
      else EnrollmentStatus.ACTIVE,
      str(specialization) if specialization else None))
  return Roster(curriculum.code, students)

def find_discipline(curriculum: Curriculum, name: Any):
  discipline = curriculum.discipline(str(name))
  if discipline:
    return discipline, ReasonCode.OK
  return Discipline(str(name)), ReasonCode.STUDENT_APPLIED_TO_UNKNOWN_DISCIPLINE

def worst(*reasons: ReasonCode):
  return next(
    (reason for reason in reversed(reasons) if reason is not ReasonCode.OK),
    ReasonCode.OK)

def encode(path: str, settings: Optional[Settings] = None):
  settings   = settings or default_settings
  curriculum = encode_curriculum(path, settings)
  data       = Data(curriculum, encode_roster(path, curriculum, settings))

  for number, row in rows(read_xlsx(path, 'Choices'), 4):
    name, discipline_name, priority, status = row
    student, reason = data.roster.resolve(str(name))
    discipline, known = find_discipline(curriculum, discipline_name)
    malformed = ReasonCode.OK
    try:
      priority, status = int(as_number(priority)), parse_status(status)
    except (OverflowError, ValueError) as error:
      logger.warning('Choices row %d is malformed: %s', number, error)
      priority, status = 0, Status.NEW
      malformed = ReasonCode.MALFORMED_APPLICATION
    data.choices.append(ChoiceApplication(
      student, discipline, priority, status,
      worst(reason, known, malformed), curriculum.block_of(discipline)))

  if 'Changes' in sheet_names(path):
    for number, row in rows(read_xlsx(path, 'Changes'), 4):
      name, source_name, target_name, status = row
      student, reason = data.roster.resolve(str(name))
      source, source_known = find_discipline(curriculum, source_name)
      target, target_known = find_discipline(curriculum, target_name)
      malformed = ReasonCode.OK
      try:
        status = parse_status(status)
      except ValueError as error:
        logger.warning('Changes row %d is malformed: %s', number, error)
        status, malformed = Status.NEW, ReasonCode.MALFORMED_APPLICATION
      data.changes.append(ChangeApplication(
        student, source, target, status,
        worst(reason, source_known, target_known, malformed)))
  logger.info(
    'Encoded %d block(s), %d student(s), %d choice(s), %d change(s), '
    '%d applicant(s) missing from the roster',
    len(curriculum.blocks), len(data.roster.students),
    len(data.choices), len(data.changes), len(data.roster.strays))
  return data

def find_filepath(directory: str, template: str):
  makedirs(directory, exist_ok=True)
  path_template = f'{directory}/{template}'
  for index in range(len(next(walk(directory))[2]) + 1):
    if not exists(path_template.format(index)):
      return path_template.format(index)
  return path_template.format(0)

def sheet_title(value: Any):
  return re.sub(r'[\[\]:*?/\\]', '-', str(value))[:31]

def generate_xlsx(path: str):
  workbook = Workbook(path)
  workbook.close()

def delete_default_sheet(path: str):
  workbook = load_workbook(path)
  if 'Sheet1' in workbook.sheetnames:
    worksheet = workbook['Sheet1']
    if not isinstance(worksheet, ReadOnlyWorksheet):
      workbook.remove(worksheet)
  workbook.save(path)
  workbook.close()

def realign_columns(path: str, sheet: str):
  workbook = load_workbook(path)
  worksheet = workbook[sheet]
  if isinstance(worksheet, Worksheet):
    for column_cells in worksheet.columns:
      worksheet.column_dimensions[
        get_column_letter(column_cells[0].column)
      ].width = max(len(repr(cell.value)) for cell in column_cells)
  workbook.save(path)
  workbook.close()

def to_xlsx(path: str, sheet: str, data: list[list]):
  if not exists(path):
    generate_xlsx(path)

  sheet = sheet_title(sheet)
  workbook = load_workbook(path)
  worksheet = workbook.create_sheet(sheet)
  for row in data:
    worksheet.append(
      cell if cell is None or isinstance(cell, (int, float)) else str(cell)
      for cell in row)
  workbook.save(path)
  workbook.close()

  delete_default_sheet(path)
  realign_columns(path, sheet)
