from __future__        import annotations
from electives.classes import (
  BlockContractError, ChangeApplication, Discipline, ElectivesBlock,
  Placement, RepairDidNotConverge, Status, strongest_first, weakest_first)
from electives.ledger  import CapacityLedger
from typing            import Iterable, Literal, Mapping, Optional

import logging

logger = logging.getLogger(__name__)

class ChangeReconciler:
  """Applies change requests of one block on top of an existing allocation.

  Requests are approved tentatively, then the weakest students' requests are
  rejected until every discipline is back within its quota, and finally the
  strongest students' rejected requests are re-approved where seats allow.
  """

  block       : ElectivesBlock
  applications: list[ChangeApplication]
  actionable  : list[ChangeApplication]
  ledger      : CapacityLedger
  sentinel    : Literal['max', 'min']

  def __init__(
    self,
    block       : ElectivesBlock,
    distribution: Mapping[Discipline, Iterable[Placement]],
    applications: Iterable[ChangeApplication],
    sentinel    : Literal['max', 'min'] = 'max',
    ledger      : Optional[CapacityLedger] = None):
    self.block        = block
    self.applications = list(applications)
    self.sentinel     = sentinel
    self.ledger       = ledger or CapacityLedger.from_distribution(
      block.disciplines, distribution)
    self.actionable   = self.screen()

  def screen(self):
    actionable = list[ChangeApplication]()
    requested  = set()
    for application in self.applications:
      for discipline in [application.source, application.target]:
        if discipline not in self.block:
          raise BlockContractError(
            f'{discipline!r} does not belong to block {self.block!r}')
      if any([
        application.source == application.target,
        application.student in requested,
        application.student not in self.ledger.students(application.source)]):
        logger.warning('%s: not actionable: %s', self.block, application)
        application.status = Status.REJECTED
        continue
      requested.add(application.student)
      actionable.append(application)
    return actionable

  @property
  def bound(self):
    return len(self.actionable) + len(self.block.disciplines) + 1

  def approved(self):
    return list(a for a in self.actionable if a.status is Status.APPROVED)

  def short(self, discipline: Discipline):
    required = self.ledger.required[discipline]
    sentinel = (
      discipline.quota.maximum if self.sentinel == 'max'
      else discipline.quota.minimum)
    return required > 0 and required != sentinel

  def resolve_shortfalls(self):
    exhausted = set[Discipline]()
    for _ in range(self.bound):
      short = sorted(
        (d for d in self.block.disciplines
         if d not in exhausted and self.short(d)),
        key=lambda d: (self.ledger.required[d], self.block.position(d)))
      if not short:
        return
      discipline = short[0]
      leaving    = weakest_first(
        (a for a in self.approved() if a.source == discipline),
        lambda a: a.student)
      if not leaving:
        exhausted.add(discipline)
        self.unwind_arrivals(discipline)
        continue
      for application in leaving:
        if self.ledger.required[discipline] <= 0:
          break
        self.ledger.reject(application)
    raise RepairDidNotConverge(f'{self.block!r}: shortfall repair')

  def unwind_arrivals(self, discipline: Discipline):
    """Empties a short discipline that only became occupied through changes."""
    if not self.ledger.enrolled(discipline):
      return
    arriving = list(a for a in self.approved() if a.target == discipline)
    if arriving and len(arriving) == self.ledger.enrolled(discipline):
      self.ledger.reject_all(arriving)
      logger.info(
        '%s: %s stays closed, %d change request(s) rejected',
        self.block, discipline, len(arriving))
      return
    logger.warning(
      '%s: %s stays %d short of its minimum',
      self.block, discipline, self.ledger.required[discipline])

  def resolve_overhead(self):
    exhausted = set[Discipline]()
    for _ in range(self.bound):
      overloaded = sorted(
        (d for d in self.block.disciplines
         if d not in exhausted and self.ledger.overhead[d] > 0),
        key=lambda d: (-self.ledger.overhead[d], self.block.position(d)))
      if not overloaded:
        return
      discipline = overloaded[0]
      arriving   = weakest_first(
        (a for a in self.approved() if a.target == discipline),
        lambda a: a.student)
      if not arriving:
        exhausted.add(discipline)
        logger.warning(
          '%s: %s stays %d over its maximum',
          self.block, discipline, self.ledger.overhead[discipline])
        continue
      for application in arriving:
        if self.ledger.overhead[discipline] <= 0:
          break
        self.ledger.reject(application)
    raise RepairDidNotConverge(f'{self.block!r}: overhead repair')

  def maximize_approvals(self):
    rejected = strongest_first(
      (a for a in self.actionable if a.status is Status.REJECTED),
      lambda a: a.student)
    for application in rejected:
      if all([
        self.ledger.overhead[application.target] < 0,
        self.ledger.required[application.target] <= 1,
        self.ledger.required[application.source] < 0]):
        self.ledger.approve(application)

  def run(self):
    self.ledger.approve_all(self.actionable)
    self.resolve_shortfalls()
    self.resolve_overhead()
    self.maximize_approvals()
    logger.info(
      '%s: %d of %d change request(s) approved',
      self.block, len(self.approved()), len(self.applications))
    return self.ledger.distribution()
