from __future__           import annotations
from concurrent.futures   import Future, ThreadPoolExecutor
from electives.allocator  import PriorityAllocator
from electives.classes    import (
  BlockContractError, ChangeApplication, ChoiceApplication, Curriculum,
  Discipline, Distribution, ElectivesBlock, Placement, ReasonCode, Status, Student)
from electives.gap_filler import GapFiller
from electives.ledger     import CapacityLedger
from electives.reconciler import ChangeReconciler
from electives.settings   import Settings, settings as default_settings
from typing               import Callable, Iterable, Optional, Union

import logging

logger = logging.getLogger(__name__)

DUPLICATE = ReasonCode.STUDENT_HAS_DUPLICATE_APPROVAL_IN_BLOCK

class BlockOutcome:
  block     : ElectivesBlock
  placements: dict[Discipline, list[Placement]]
  duplicates: list[Placement]
  left      : list[Student]
  created   : list[ChoiceApplication]

  def __init__(
    self,
    block     : ElectivesBlock,
    placements: dict[Discipline, list[Placement]],
    duplicates: Iterable[Placement] = (),
    left      : Iterable[Student]   = (),
    created   : Iterable[ChoiceApplication] = ()):
    self.block      = block
    self.placements = placements
    self.duplicates = list(duplicates)
    self.left       = list(left)
    self.created    = list(created)

class AllocationResult:
  distribution: Distribution
  unresolved  : list[Placement]
  failures    : dict[ElectivesBlock, str]
  applications: list[Union[ChoiceApplication, ChangeApplication]]

  def __init__(self):
    self.distribution = dict()
    self.unresolved   = list()
    self.failures     = dict()
    self.applications = list()

  def report(self, student: Student, reason: ReasonCode):
    if (student, reason) not in self.unresolved:
      self.unresolved.append((student, reason))

  def students(self, block: ElectivesBlock):
    return list(
      student
      for placements in self.distribution.get(block, {}).values()
      for student, _ in placements)

def merge_approved(
  block: ElectivesBlock, applications: Iterable[ChoiceApplication]):
  """Distribution of one block built from its approved applications.

  The earliest approval of a student is kept; any later one is re-tagged as
  a duplicate.
  """
  placements  = dict((d, list[Placement]()) for d in block.disciplines)
  duplicates  = list[Placement]()
  encountered = set[Student]()
  for application in applications:
    if application.status is not Status.APPROVED:
      continue
    if application.discipline not in placements:
      raise BlockContractError(
        f'{application.discipline!r} does not belong to block {block!r}')
    if application.student in encountered:
      application.reason = DUPLICATE
      duplicates.append((application.student, DUPLICATE))
    encountered.add(application.student)
    placements[application.discipline].append(
      (application.student, application.reason))
  return placements, duplicates

class AllocationOrchestrator:
  curriculum: Curriculum
  students  : list[Student]
  settings  : Settings

  def __init__(
    self,
    curriculum: Curriculum,
    students  : Iterable[Student],
    settings  : Optional[Settings] = None):
    self.curriculum = curriculum
    self.students   = list(students)
    self.settings   = settings or default_settings

  def eligible(self, block: ElectivesBlock):
    return list(student for student in self.students if block.admits(student))

  def screen(
    self,
    applications: Iterable[Union[ChoiceApplication, ChangeApplication]],
    result      : AllocationResult):
    by_block = dict(
      (block, list[Union[ChoiceApplication, ChangeApplication]]())
      for block in self.curriculum.blocks)
    for application in applications:
      result.applications.append(application)
      if application.reason is ReasonCode.OK and application.block is None:
        if isinstance(application, ChangeApplication):
          application.block = self.curriculum.block_of(
            application.source, application.target)
        else:
          application.block = self.curriculum.block_of(application.discipline)
        if application.block is None:
          application.reason = \
            ReasonCode.STUDENT_APPLIED_TO_UNKNOWN_DISCIPLINE
      if application.reason is not ReasonCode.OK:
        result.report(application.student, application.reason)
        continue
      by_block.setdefault(application.block, list()).append(application)
    return by_block

  def dispatch(
    self,
    tasks : dict[ElectivesBlock, Callable[[], BlockOutcome]],
    result: AllocationResult):
    with ThreadPoolExecutor(
      max_workers=self.settings.max_workers,
      thread_name_prefix='electives') as executor:
      futures = dict[ElectivesBlock, Future](
        (block, executor.submit(task)) for block, task in tasks.items())
    for block in sorted(futures):
      try:
        outcome = futures[block].result()
      except Exception as error:
        logger.exception('%s: block processing failed', block)
        result.failures[block] = f'{type(error).__name__}: {error}'
        continue
      result.distribution[block] = outcome.placements
      result.applications.extend(outcome.created)
      for application in outcome.created:
        result.report(application.student, application.reason)
      for student, reason in outcome.duplicates:
        result.report(student, reason)
      for student in outcome.left:
        result.report(student, ReasonCode.STUDENT_LEFT_UNASSIGNED)
    return result

  def allocate_block(
    self, block: ElectivesBlock, applications: list[ChoiceApplication]):
    students     = self.eligible(block)
    applications = list(
      a for a in applications if a.actionable and a.student in students)
    ledger       = CapacityLedger(block.disciplines)
    for application in applications:
      application.status = Status.NEW
    allocator    = PriorityAllocator(block, students, applications, ledger)
    allocator.run()
    filler = GapFiller(
      block, students, applications, ledger,
      allocator.closed, allocator.popular)
    left = filler.run()
    placements, duplicates = merge_approved(block, applications)
    logger.info(
      '%s: %d of %d student(s) placed [%r]',
      block, len(students) - len(left), len(students), ledger)
    created = list(a for a in applications if a.priority == 0)
    return BlockOutcome(block, placements, duplicates, left, created)

  def allocate(self, applications: Iterable[ChoiceApplication]):
    result   = AllocationResult()
    by_block = self.screen(applications, result)
    for block in list(by_block):
      # Nothing to choose from
      if len(block.disciplines) < 2:
        logger.debug('%s: single discipline, skipped', block)
        del by_block[block]
    tasks = dict(
      (block, lambda block=block: self.allocate_block(block, by_block[block]))
      for block in by_block)
    return self.dispatch(tasks, result)

  def collect(self, applications: Iterable[ChoiceApplication]):
    result   = AllocationResult()
    by_block = self.screen(applications, result)
    tasks    = dict(
      (block, lambda block=block: BlockOutcome(
        block, *merge_approved(block, by_block[block])))
      for block in by_block)
    return self.dispatch(tasks, result)

  def reconcile_block(
    self,
    block       : ElectivesBlock,
    placements  : dict[Discipline, list[Placement]],
    applications: list[ChangeApplication]):
    reconciler = ChangeReconciler(
      block, placements, applications, self.settings.shortfall_sentinel)
    return BlockOutcome(block, reconciler.run())

  def reconcile(
    self,
    distribution: Distribution,
    applications: Iterable[ChangeApplication]):
    result   = AllocationResult()
    by_block = self.screen(applications, result)
    for block, pending in by_block.items():
      if block not in distribution:
        for application in pending:
          application.status = Status.REJECTED
          logger.warning('%s: no initial allocation for %s', block, application)
    tasks = dict(
      (block, lambda block=block: self.reconcile_block(
        block, distribution[block], by_block.get(block, [])))
      for block in distribution)
    return self.dispatch(tasks, result)
