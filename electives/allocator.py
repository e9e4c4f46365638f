from __future__           import annotations
from electives.classes    import (
  ChoiceApplication, Discipline, ElectivesBlock, Status, Student,
  strongest_first, weakest_first)
from electives.gap_filler import popular_disciplines
from electives.ledger     import CapacityLedger
from typing               import Iterable, Optional

import logging

logger = logging.getLogger(__name__)

class PriorityAllocator:
  block       : ElectivesBlock
  students    : list[Student]
  applications: list[ChoiceApplication]
  ledger      : CapacityLedger
  closed      : list[Discipline]
  popular     : list[Discipline]

  def __init__(
    self,
    block       : ElectivesBlock,
    students    : Iterable[Student],
    applications: list[ChoiceApplication],
    ledger      : Optional[CapacityLedger] = None):
    self.block        = block
    self.students     = list(students)
    self.applications = applications
    self.ledger       = ledger or CapacityLedger(block.disciplines)
    self.closed       = list()
    self.popular      = list()

  def applications_of(self, student: Student):
    return sorted(
      (a for a in self.applications
       if a.student == student and a.priority > 0),
      key=lambda a: a.priority)

  def approved(self, discipline: Optional[Discipline] = None):
    return list(
      a for a in self.applications
      if a.status is Status.APPROVED
      and discipline in {a.discipline, None})

  def unassigned(self):
    approved = set(a.student for a in self.approved())
    return list(s for s in self.students if s not in approved)

  def grant_first_priorities(self):
    self.ledger.approve_all(a for a in self.applications if a.priority == 1)

  def expel_overhead(self):
    expelled = list[Student]()
    for discipline in self.block.disciplines:
      overhead = self.ledger.overhead[discipline]
      if overhead > 0:
        expelled.extend(weakest_first(
          a.student for a in self.approved(discipline))[:overhead])
    expelled = list(dict.fromkeys(expelled))
    self.ledger.reject_all(
      a for a in self.applications
      if a.priority == 1 and a.student in expelled)
    logger.debug('%s: expelled %s', self.block, expelled)
    return expelled

  def missed_first_priority(self):
    applied = dict[Student, list[int]]()
    for application in self.applications:
      if application.priority > 0:
        applied.setdefault(application.student, list()).append(
          application.priority)
    return list(
      student for student, priorities in applied.items()
      if 1 not in priorities)

  def place(
    self, student: Student, applications: Iterable[ChoiceApplication]):
    for application in applications:
      if self.ledger.overhead[application.discipline] < 0:
        self.ledger.approve(application)
        return True
      self.ledger.reject(application)
    logger.debug('%s: no ranked choice left for %s', self.block, student)
    return False

  def rank_lower_priorities(self, students: Iterable[Student]):
    for student in strongest_first(students):
      self.place(student, list(
        a for a in self.applications_of(student) if a.priority > 1))

  def close_unviable(self):
    self.closed = list(
      d for d in self.block.disciplines if not self.ledger.enrolled(d))
    candidates = sorted(
      (d for d in self.block.disciplines if self.ledger.enrolled(d)),
      key=lambda d: (self.ledger.enrolled(d), self.block.position(d)))
    for discipline in candidates:
      if self.ledger.total_required() <= len(self.unassigned()):
        break
      freed = list(a.student for a in self.approved(discipline))
      self.closed.append(discipline)
      self.ledger.reject_all(
        a for a in self.applications if a.discipline == discipline)
      logger.info(
        '%s: closed %s, %d student(s) freed',
        self.block, discipline, len(freed))
      for student in strongest_first(freed):
        self.place(student, list(
          a for a in self.applications_of(student)
          if a.discipline not in self.closed))
    return self.closed

  def run(self):
    self.grant_first_priorities()
    expelled = self.expel_overhead()
    self.rank_lower_priorities(
      dict.fromkeys(expelled + self.missed_first_priority()))
    self.popular = popular_disciplines(self.ledger)
    self.close_unviable()
    return self.unassigned()
