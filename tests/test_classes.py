from __future__        import annotations
from electives.classes import (
  ChoiceApplication, Curriculum, Discipline, EnrollmentStatus, QuotaError,
  Quota, ReasonCode, Roster, Student, clear_code, strongest_first,
  weakest_first)
from tests.conftest    import block, discipline, student

import pytest

def test_roster_resolution():
  ann = Student('Ann Lee', 'CS21', 4.0)
  bob = Student('Bob Ray', 'MA20', 3.0)
  twins = [Student('Kim Doe', 'CS/21'), Student('Kim Doe', 'CS/21')]
  roster = Roster('CS/21', [ann, bob] + twins)

  assert roster.students == [ann] + twins
  assert roster.resolve('  Ann   Lee ') == (ann, ReasonCode.OK)
  assert roster.resolve('Bob Ray') == (
    bob, ReasonCode.STUDENT_CURRICULUM_MISMATCH)

  stray, reason = roster.resolve('Kim Doe')
  assert reason is ReasonCode.STUDENT_NOT_IN_ROSTER
  assert stray.synthesized and stray.active
  assert roster.resolve('Kim  Doe')[0] is stray
  assert roster.strays == [stray]

def test_clear_code():
  assert clear_code(' 09.03.01/ИВТ\\21 ') == '09.03.01ИВТ21'

def test_quota_bounds():
  assert Quota(2, 4).midpoint == 3
  with pytest.raises(QuotaError):
    Quota(5, 2)
  with pytest.raises(ValueError):
    Quota(-1, 2)

def test_ordering_breaks_ties_by_name_then_curriculum():
  ann = student('Ann', 3.0)
  amy = student('Amy', 3.0, curriculum='MA20')
  amy_cs = student('Amy', 3.0)
  top = student('Top', 5.0)
  assert weakest_first([top, ann, amy, amy_cs]) == [amy_cs, amy, ann, top]
  assert strongest_first([ann, amy, top, amy_cs]) == [top, amy_cs, amy, ann]

def test_students_compare_by_identity_fields():
  assert Student('Ann', 'CS', 3.0) == Student('Ann', 'CS', 5.0)
  assert Student('Ann', 'CS') != Student('Ann', 'MA')
  assert repr(Student('Ann', 'CS')) == 'Ann'

def test_block_membership_and_admission():
  a, b, x = discipline('A'), discipline('B'), discipline('X')
  special = block(a, b, semester=7, number=2, specialization='ML')
  assert repr(special) == 'S07_2 ML'
  assert a in special and x not in special
  assert special.position(b) == 1
  assert special.admits(student('Ann', specialization='ML'))
  assert not special.admits(student('Bob'))
  assert not special.admits(student('Cid', on_leave=True, specialization='ML'))
  assert block(a).admits(student('Bob'))

def test_curriculum_lookup():
  a, b, c = discipline('Algebra'), discipline('Biology'), discipline('Chess')
  first, second = block(a, b), block(b, c, number=2)
  curriculum = Curriculum('CS/21', [first, second])
  assert curriculum.disciplines == [a, b, c]
  assert curriculum.discipline('chess') is c
  assert curriculum.discipline('Chess') is c
  assert curriculum.discipline('Dance') is None
  assert curriculum.block_of(b, c) == second
  assert curriculum.block_of(a, c) is None

def test_actionable_choice():
  ann = student('Ann')
  target = discipline('A')
  assert ChoiceApplication(ann, target, 1).actionable
  assert not ChoiceApplication(ann, target, 0).actionable
  assert not ChoiceApplication(
    ann, target, 1, reason=ReasonCode.STUDENT_NOT_IN_ROSTER).actionable
  assert not ChoiceApplication(
    Student('Cid', 'CS', status=EnrollmentStatus.ON_LEAVE), target, 1
  ).actionable

def test_reason_descriptions():
  assert ReasonCode.OK.description == ''
  assert all(reason.description for reason in ReasonCode
             if reason is not ReasonCode.OK)
  assert Discipline('A') == Discipline('A', quota=Quota(0, 1))
