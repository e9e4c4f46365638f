from __future__           import annotations
from electives.classes    import ReasonCode, Status
from electives.gap_filler import GapFiller, popular_disciplines
from tests.conftest       import (
  CheckedLedger, block, discipline, enroll, student)

def crowd(prefix: str, size: int):
  return list(student(f'{prefix}{i}') for i in range(size))

def test_popular_disciplines_drop_low_outliers():
  a, b, c, d, e = (discipline(name, 0, 10) for name in 'ABCDE')
  ledger = CheckedLedger([a, b, c, d, e])
  for target, size in [(a, 5), (b, 5), (c, 5), (d, 1)]:
    enroll(ledger, target, *crowd(target.name, size))
  assert popular_disciplines(ledger) == [a, b, c]

def test_popular_disciplines_of_empty_block():
  assert popular_disciplines(CheckedLedger([discipline('A')])) == []

def test_shortfalls_covered_before_filling():
  a, b = discipline('A', 3, 5), discipline('B', 1, 5)
  ledger = CheckedLedger([a, b])
  sam, tom = student('Sam', 5), student('Tom', 5)
  applications = enroll(ledger, a, sam) + enroll(ledger, b, tom)
  pool = [student('Uma', 9), student('Val', 8), student('Wes', 7)]
  filler = GapFiller(block(a, b), [sam, tom] + pool, applications, ledger)

  filler.cover_shortfalls()
  assert ledger.students(a) == [sam] + pool[:2]
  assert filler.unassigned() == pool[2:]

  assert filler.run() == []
  assert ledger.students(a) == [sam] + pool
  assert ledger.students(b) == [tom]
  assert ledger.consistent()

  created = applications[2:]
  assert len(created) == 3
  assert all(
    application.priority == 0
    and application.status is Status.APPROVED
    and application.reason is ReasonCode.STUDENT_HAD_NO_APPLICATION
    for application in created)

def test_fill_spreads_pool_in_chunks():
  a, b = discipline('A', 1, 10), discipline('B', 1, 10)
  ledger = CheckedLedger([a, b])
  applications = enroll(ledger, a, student('Sam')) + enroll(
    ledger, b, student('Tom'))
  pool = list(student(f'P{i}', 10 - i) for i in range(5))
  filler = GapFiller(block(a, b), pool, applications, ledger, popular=[a, b])
  assert filler.run() == []
  assert ledger.enrolled(a) == 4
  assert ledger.enrolled(b) == 3

def test_closed_discipline_reopens_with_midpoint_batch():
  a, b, c = discipline('A', 1, 2), discipline('B', 2, 4), discipline('C', 1, 1)
  ledger = CheckedLedger([a, b, c])
  applications = enroll(ledger, a, student('Sam'), student('Tom'))
  pool = [student('P1', 3), student('P2', 2), student('P3', 1)]
  filler = GapFiller(block(a, b, c), pool, applications, ledger)
  assert filler.closed == [b, c]

  assert filler.run() == []
  assert ledger.students(b) == pool
  assert ledger.enrolled(c) == 0
  assert filler.closed == [c]

def test_infeasible_remainder_is_returned():
  a, b = discipline('A', 1, 1), discipline('B', 3, 4)
  ledger = CheckedLedger([a, b])
  applications = enroll(ledger, a, student('Sam'))
  pool = [student('P2', 2), student('P1', 3)]
  filler = GapFiller(block(a, b), pool, applications, ledger)

  assert filler.run() == [pool[1], pool[0]]
  assert ledger.counts() == {a: 1, b: 0}
  assert ledger.consistent()
