from __future__        import annotations
from electives.classes import (
  ChoiceApplication, Discipline, ElectivesBlock, ReasonCode, Status, Student,
  strongest_first)
from electives.ledger  import CapacityLedger
from math              import ceil
from statistics        import fmean, pstdev
from typing            import Iterable

import logging

logger = logging.getLogger(__name__)

def popular_disciplines(ledger: CapacityLedger):
  counts = dict(
    (discipline, enrolled)
    for discipline, enrolled in ledger.counts().items() if enrolled)
  if not counts:
    return list[Discipline]()
  threshold = fmean(counts.values()) - pstdev(counts.values())
  return list(
    discipline for discipline, enrolled in counts.items()
    if enrolled >= threshold)

class GapFiller:
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
    ledger      : CapacityLedger,
    closed      : Iterable[Discipline] = (),
    popular     : Iterable[Discipline] = ()):
    self.block        = block
    self.students     = list(students)
    self.applications = applications
    self.ledger       = ledger
    self.closed       = list(closed)
    self.popular      = list(popular)
    for discipline in block.disciplines:
      if discipline not in self.closed and not ledger.enrolled(discipline):
        self.closed.append(discipline)

  @property
  def opened(self):
    return list(d for d in self.block.disciplines if d not in self.closed)

  def unassigned(self):
    approved = set(
      application.student for application in self.applications
      if application.status is Status.APPROVED)
    return strongest_first(
      student for student in self.students if student not in approved)

  def spare(self, disciplines: Iterable[Discipline]):
    return sum(self.ledger.free(discipline) for discipline in disciplines)

  def assign(self, students: Iterable[Student], discipline: Discipline):
    for student in students:
      application = ChoiceApplication(
        student, discipline, 0,
        reason=ReasonCode.STUDENT_HAD_NO_APPLICATION,
        block=self.block)
      self.ledger.approve(application)
      self.applications.append(application)
      logger.debug('%s: %s assigned to %s', self.block, student, discipline)

  def cover_shortfalls(self):
    pool = self.unassigned()
    short = sorted(
      (d for d in self.opened
       if 0 < self.ledger.required[d] != d.quota.minimum),
      key=lambda d: (self.ledger.required[d], self.block.position(d)))
    for discipline in short:
      if not pool:
        return
      accepted = pool[:self.ledger.required[discipline]]
      del pool[:len(accepted)]
      self.assign(accepted, discipline)

  def fill(self, disciplines: Iterable[Discipline]):
    pool    = self.unassigned()
    targets = list(
      d for d in disciplines
      if d not in self.closed and self.ledger.overhead[d] < 0)
    if not pool or not targets:
      return
    chunk = ceil(len(pool) / len(targets))
    for discipline in targets:
      if not pool:
        return
      accepted = pool[:min(chunk, self.ledger.free(discipline))]
      del pool[:len(accepted)]
      self.assign(accepted, discipline)

  def reopen_closed(self):
    pool = self.unassigned()
    if not pool:
      return
    opened     = self.opened
    candidates = sorted(
      (d for d in self.closed
       if not self.ledger.enrolled(d) and d.quota.maximum),
      key=lambda d: (
        -(d.quota.minimum + d.quota.maximum), self.block.position(d)))
    while pool and candidates and self.spare(opened) < len(pool):
      discipline = candidates.pop(0)
      if discipline.quota.minimum > len(pool):
        continue
      accepted = pool[:max(discipline.quota.midpoint, 1)]
      del pool[:len(accepted)]
      self.assign(accepted, discipline)
      self.closed.remove(discipline)
      opened.append(discipline)
      logger.debug('%s: reopened %s', self.block, discipline)
    for student in list(pool):
      discipline = next(
        (d for d in opened if self.ledger.required[d] > 0),
        next((d for d in opened if self.ledger.overhead[d] < 0), None))
      if discipline is None:
        break
      pool.remove(student)
      self.assign([student], discipline)

  def run(self):
    self.cover_shortfalls()
    self.fill(self.popular)
    self.fill(self.opened)
    self.reopen_closed()
    left = self.unassigned()
    if left:
      logger.warning(
        '%s: no feasible slot for %d student(s)', self.block, len(left))
    return left
