from __future__        import annotations
from electives.classes import (
  ChangeApplication, ChoiceApplication, Discipline, ElectivesBlock,
  EnrollmentStatus, Quota, Student)
from electives.ledger  import CapacityLedger
from typing            import Optional

CURRICULUM = 'CS/21'

def student(
  name          : str,
  score         : float = 0.0,
  curriculum    : str = CURRICULUM,
  on_leave      : bool = False,
  specialization: Optional[str] = None):
  return Student(
    name, curriculum, score,
    EnrollmentStatus.ON_LEAVE if on_leave else EnrollmentStatus.ACTIVE,
    specialization)

def discipline(name: str, minimum: int = 1, maximum: int = 100):
  return Discipline(name, name.lower(), Quota(minimum, maximum))

def block(
  *disciplines  : Discipline,
  semester      : int = 5,
  number        : int = 1,
  specialization: Optional[str] = None):
  return ElectivesBlock(semester, number, tuple(disciplines), specialization)

def choices(who: Student, *disciplines: Discipline):
  """Applications of one student ranked in the given order."""
  return list(
    ChoiceApplication(who, target, priority)
    for priority, target in enumerate(disciplines, 1))

def change(who: Student, source: Discipline, target: Discipline):
  return ChangeApplication(who, source, target)

def enroll(ledger: CapacityLedger, target: Discipline, *students: Student):
  applications = list(ChoiceApplication(s, target, 1) for s in students)
  ledger.approve_all(applications)
  return applications

def names(placements):
  return sorted(who.full_name for who, _ in placements)

def within_quota(placements: dict):
  return all(
    target.quota.minimum <= len(students) <= target.quota.maximum
    or not students
    for target, students in placements.items())

class CheckedLedger(CapacityLedger):
  """Ledger that verifies its counters against the roster after each change."""

  def approve(self, application):
    super().approve(application)
    assert self.consistent(), f'{self!r} after approving {application!r}'

  def reject(self, application):
    super().reject(application)
    assert self.consistent(), f'{self!r} after rejecting {application!r}'
