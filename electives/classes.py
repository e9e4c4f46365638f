from __future__  import annotations
from dataclasses import dataclass, field
from enum        import Enum
from typing      import Callable, Iterable, Optional, TypeVar

T = TypeVar('T')

class AllocationError(Exception):
  pass

class BlockContractError(AllocationError, LookupError):
  pass

class RepairDidNotConverge(AllocationError):
  pass

class QuotaError(AllocationError, ValueError):
  pass

class Status(Enum):
  NEW      = 'New'
  APPROVED = 'Approved'
  REJECTED = 'Rejected'

class EnrollmentStatus(Enum):
  ACTIVE   = 'active'
  ON_LEAVE = 'on-leave'

class ReasonCode(Enum):
  OK                                    = 'Ok'
  STUDENT_NOT_IN_ROSTER                 = 'StudentNotInRoster'
  STUDENT_CURRICULUM_MISMATCH           = 'StudentCurriculumMismatch'
  STUDENT_APPLIED_TO_UNKNOWN_DISCIPLINE = 'StudentAppliedToUnknownDiscipline'
  STUDENT_HAS_DUPLICATE_APPROVAL_IN_BLOCK = (
    'StudentHasDuplicateApprovalInBlock')
  STUDENT_HAD_NO_APPLICATION            = 'StudentHadNoApplication'
  STUDENT_LEFT_UNASSIGNED               = 'StudentLeftUnassigned'
  MALFORMED_APPLICATION                 = 'MalformedApplication'

  @property
  def description(self):
    return DESCRIPTIONS[self]

DESCRIPTIONS = {
  ReasonCode.OK: '',
  ReasonCode.STUDENT_NOT_IN_ROSTER:
    'Not listed in the roster. Add the student to the roster if they '
    'should be there, otherwise ignore this entry.',
  ReasonCode.STUDENT_CURRICULUM_MISMATCH:
    'Enrolled in a different curriculum according to the roster. Check '
    'that the roster record is up to date.',
  ReasonCode.STUDENT_APPLIED_TO_UNKNOWN_DISCIPLINE:
    'Applied to a discipline missing from the processed curriculum.',
  ReasonCode.STUDENT_HAS_DUPLICATE_APPROVAL_IN_BLOCK:
    'Approved for several disciplines of the same block. Pick one '
    'manually using the applications.',
  ReasonCode.STUDENT_HAD_NO_APPLICATION: 'Assigned arbitrarily.',
  ReasonCode.STUDENT_LEFT_UNASSIGNED:
    'No discipline of the block could take the student within its quota.',
  ReasonCode.MALFORMED_APPLICATION:
    'The application row could not be read. Check its priority and status.',
}

@dataclass(frozen=True, repr=False)
class Student:
  full_name     : str
  curriculum    : str
  average_score : float            = field(default=0.0, compare=False)
  status        : EnrollmentStatus = field(
    default=EnrollmentStatus.ACTIVE, compare=False)
  specialization: Optional[str]    = field(default=None, compare=False)
  synthesized   : bool             = field(default=False, compare=False)

  def __repr__(self):
    return self.full_name

  def __lt__(self, other: Student):
    return (self.full_name, self.curriculum) < (
      other.full_name, other.curriculum)

  @property
  def active(self):
    return self.status is EnrollmentStatus.ACTIVE

def weakest_first(
  items: Iterable[T], student: Callable[[T], Student] = lambda item: item):
  return sorted(items, key=lambda item: (
    student(item).average_score,
    student(item).full_name,
    student(item).curriculum))

def strongest_first(
  items: Iterable[T], student: Callable[[T], Student] = lambda item: item):
  return sorted(items, key=lambda item: (
    -student(item).average_score,
    student(item).full_name,
    student(item).curriculum))

def clear_code(code: str):
  return code.replace('/', '').replace('\\', '').strip()

@dataclass(frozen=True)
class Quota:
  minimum: int
  maximum: int

  def __post_init__(self):
    if self.minimum < 0 or self.maximum < 0:
      raise QuotaError(f'Negative quota ({self.minimum}, {self.maximum})')
    if self.minimum > self.maximum:
      raise QuotaError(
        f'Quota minimum {self.minimum} exceeds maximum {self.maximum}')

  @property
  def midpoint(self):
    return (self.minimum + self.maximum) // 2

@dataclass(frozen=True, repr=False)
class Discipline:
  name : str
  code : str   = ''
  quota: Quota = field(default=Quota(1, 100), compare=False)

  def __repr__(self):
    return self.name

  def __lt__(self, other: Discipline):
    return (self.code, self.name) < (other.code, other.name)

@dataclass(frozen=True, repr=False)
class ElectivesBlock:
  semester      : int
  number        : int
  disciplines   : tuple[Discipline, ...] = field(compare=False)
  specialization: Optional[str]          = None

  def __repr__(self):
    return 'S{:02d}_{}{}'.format(
      self.semester,
      self.number,
      f' {self.specialization}' if self.specialization else '')

  def __lt__(self, other: ElectivesBlock):
    return str(self) < str(other)

  def __contains__(self, discipline: Discipline):
    return discipline in self.disciplines

  def position(self, discipline: Discipline):
    return self.disciplines.index(discipline)

  def admits(self, student: Student):
    return student.active and (
      not self.specialization
      or student.specialization == self.specialization)

class Curriculum:
  code  : str
  blocks: list[ElectivesBlock]

  def __init__(self, code: str, blocks: Iterable[ElectivesBlock] = ()):
    self.code   = code
    self.blocks = list(blocks)

  def __repr__(self):
    return self.code

  @property
  def disciplines(self):
    return list(dict.fromkeys(
      discipline
      for block in self.blocks for discipline in block.disciplines))

  def discipline(self, name: str):
    for discipline in self.disciplines:
      if name in {discipline.name, discipline.code}:
        return discipline
    return None

  def block_of(self, *disciplines: Discipline):
    for block in self.blocks:
      if all(discipline in block for discipline in disciplines):
        return block
    return None

class Roster:
  curriculum: str
  students  : list[Student]
  contingent: list[Student]
  __strays  : dict[str, Student]

  def __init__(self, curriculum: str, contingent: Iterable[Student]):
    self.curriculum = curriculum
    self.contingent = list(contingent)
    self.students   = list(
      student for student in self.contingent
      if clear_code(student.curriculum) == clear_code(curriculum))
    self.__strays   = dict()

  def resolve(self, full_name: str) -> tuple[Student, ReasonCode]:
    full_name = ' '.join(full_name.split())
    members = [s for s in self.students if s.full_name == full_name]
    if len(members) == 1:
      return members[0], ReasonCode.OK
    others = [s for s in self.contingent if s.full_name == full_name]
    if len(others) == 1:
      return others[0], ReasonCode.STUDENT_CURRICULUM_MISMATCH
    if full_name not in self.__strays:
      self.__strays[full_name] = Student(
        full_name, self.curriculum, synthesized=True)
    return self.__strays[full_name], ReasonCode.STUDENT_NOT_IN_ROSTER

  @property
  def strays(self):
    return list(self.__strays.values())

class ChoiceApplication:
  student   : Student
  discipline: Discipline
  priority  : int
  status    : Status
  reason    : ReasonCode
  block     : Optional[ElectivesBlock]

  def __init__(
    self,
    student   : Student,
    discipline: Discipline,
    priority  : int,
    status    : Status                   = Status.NEW,
    reason    : ReasonCode               = ReasonCode.OK,
    block     : Optional[ElectivesBlock] = None):
    self.student    = student
    self.discipline = discipline
    self.priority   = priority
    self.status     = status
    self.reason     = reason
    self.block      = block

  def __repr__(self):
    return f'{self.student} -> {self.discipline} #{self.priority} ' \
      f'[{self.status.value}]'

  @property
  def actionable(self):
    return all([
      self.priority > 0,
      self.reason is ReasonCode.OK,
      self.student.active])

class ChangeApplication:
  student: Student
  source : Discipline
  target : Discipline
  status : Status
  reason : ReasonCode
  block  : Optional[ElectivesBlock]

  def __init__(
    self,
    student: Student,
    source : Discipline,
    target : Discipline,
    status : Status                   = Status.NEW,
    reason : ReasonCode               = ReasonCode.OK,
    block  : Optional[ElectivesBlock] = None):
    self.student = student
    self.source  = source
    self.target  = target
    self.status  = status
    self.reason  = reason
    self.block   = block

  def __repr__(self):
    return f'{self.student}: {self.source} -> {self.target} ' \
      f'[{self.status.value}]'

Placement    = tuple[Student, ReasonCode]
Distribution = dict[ElectivesBlock, dict[Discipline, list[Placement]]]

class Data:
  curriculum: Curriculum
  roster    : Roster
  choices   : list[ChoiceApplication]
  changes   : list[ChangeApplication]

  def __init__(self, curriculum: Curriculum, roster: Roster):
    self.curriculum = curriculum
    self.roster     = roster
    self.choices    = list()
    self.changes    = list()
