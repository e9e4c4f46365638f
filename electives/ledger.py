from __future__        import annotations
from electives.classes import (
  BlockContractError, ChangeApplication, ChoiceApplication, Discipline,
  Placement, Status, Student)
from typing            import Iterable, Mapping, Union

import logging

logger = logging.getLogger(__name__)

Application = Union[ChoiceApplication, ChangeApplication]

class CapacityLedger:
  """Quota slack of every discipline in one block.

  overhead > 0  - that many students must leave the discipline
  overhead == 0 - the discipline is full
  overhead < 0  - -overhead seats are free
  required == min - nobody is enrolled
  required > 0  - that many students are still missing
  required <= 0 - -required students may leave without breaking the minimum
  """

  disciplines: tuple[Discipline, ...]
  overhead   : dict[Discipline, int]
  required   : dict[Discipline, int]
  __roster   : dict[Discipline, list[Placement]]

  def __init__(self, disciplines: Iterable[Discipline]):
    self.disciplines = tuple(disciplines)
    self.overhead    = dict(
      (discipline, -discipline.quota.maximum)
      for discipline in self.disciplines)
    self.required    = dict(
      (discipline, discipline.quota.minimum)
      for discipline in self.disciplines)
    self.__roster    = dict(
      (discipline, list()) for discipline in self.disciplines)

  @classmethod
  def from_distribution(
    cls,
    disciplines : Iterable[Discipline],
    distribution: Mapping[Discipline, Iterable[Placement]]):
    ledger = cls(disciplines)
    for discipline, placements in distribution.items():
      for placement in placements:
        ledger.__enroll(discipline, placement)
    return ledger

  def __repr__(self):
    return ', '.join(
      f'{d}: {self.enrolled(d)} ({self.overhead[d]}/{self.required[d]})'
      for d in self.disciplines)

  def __check(self, discipline: Discipline):
    if discipline not in self.overhead:
      raise BlockContractError(
        f'Discipline {discipline!r} has no quota in this block')

  def __enroll(self, discipline: Discipline, placement: Placement):
    self.__check(discipline)
    self.__roster[discipline].append(placement)
    self.overhead[discipline] += 1
    self.required[discipline] -= 1

  def __expel(self, discipline: Discipline, student: Student):
    self.__check(discipline)
    for index, placement in enumerate(self.__roster[discipline]):
      if placement[0] == student:
        self.__roster[discipline].pop(index)
        self.overhead[discipline] -= 1
        self.required[discipline] += 1
        return placement
    raise BlockContractError(f'{student!r} is not enrolled in {discipline!r}')

  def approve(self, application: Application):
    if application.status is Status.APPROVED:
      return
    if isinstance(application, ChangeApplication):
      self.__check(application.target)
      placement = self.__expel(application.source, application.student)
      self.__enroll(application.target, placement)
    else:
      self.__enroll(
        application.discipline, (application.student, application.reason))
    application.status = Status.APPROVED

  def reject(self, application: Application):
    was_approved = application.status is Status.APPROVED
    application.status = Status.REJECTED
    if not was_approved:
      return
    if isinstance(application, ChangeApplication):
      placement = self.__expel(application.target, application.student)
      self.__enroll(application.source, placement)
    else:
      self.__expel(application.discipline, application.student)

  def approve_all(self, applications: Iterable[Application]):
    for application in list(applications):
      self.approve(application)

  def reject_all(self, applications: Iterable[Application]):
    for application in list(applications):
      self.reject(application)

  def enrolled(self, discipline: Discipline):
    return len(self.__roster[discipline])

  def free(self, discipline: Discipline):
    return max(0, -self.overhead[discipline])

  def students(self, discipline: Discipline):
    return list(student for student, _ in self.__roster[discipline])

  def placements(self, discipline: Discipline):
    return list(self.__roster[discipline])

  def counts(self):
    return dict((d, self.enrolled(d)) for d in self.disciplines)

  def total_required(self):
    return sum(
      required for discipline, required in self.required.items()
      if 0 < required != discipline.quota.minimum)

  def consistent(self):
    return all(
      self.overhead[d] == self.enrolled(d) - d.quota.maximum
      and self.required[d] == d.quota.minimum - self.enrolled(d)
      for d in self.disciplines)

  def distribution(self):
    return dict((d, self.placements(d)) for d in self.disciplines)
