"""Placement rules for students.

A student placed in a classroom must belong to the school that owns that
classroom. Enrollment, transfer and student creation all go through the
helpers here so the rule is checked in one place.
"""

import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from school_api.database import is_storable_id
from school_api.models.classroom import Classroom
from school_api.models.school import School
from school_api.models.student import Student

logger = logging.getLogger(__name__)

SCHOOL_NOT_FOUND = 'School not found'
CLASSROOM_NOT_FOUND = 'Classroom not found'
STUDENT_NOT_FOUND = 'Student not found'
CLASSROOM_NOT_IN_SCHOOL = 'Classroom not found or does not belong to this school'


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def get_school_or_404(db: Session, school_id: int) -> School:
    if not is_storable_id(school_id):
        raise _not_found(SCHOOL_NOT_FOUND)
    school = db.query(School).filter(School.id == school_id).first()
    if school is None:
        raise _not_found(SCHOOL_NOT_FOUND)
    return school


def get_classroom_or_404(db: Session, classroom_id: int) -> Classroom:
    if not is_storable_id(classroom_id):
        raise _not_found(CLASSROOM_NOT_FOUND)
    classroom = db.query(Classroom).filter(Classroom.id == classroom_id).first()
    if classroom is None:
        raise _not_found(CLASSROOM_NOT_FOUND)
    return classroom


def get_student_or_404(db: Session, student_id: int) -> Student:
    if not is_storable_id(student_id):
        raise _not_found(STUDENT_NOT_FOUND)
    student = db.query(Student).filter(Student.id == student_id).first()
    if student is None:
        raise _not_found(STUDENT_NOT_FOUND)
    return student


def ensure_classroom_in_school(classroom: Classroom | None, school_id: int | None) -> Classroom:
    if classroom is None or school_id is None or classroom.school_id != school_id:
        raise _not_found(CLASSROOM_NOT_IN_SCHOOL)
    return classroom


def resolve_placement(
    db: Session,
    school_id: int | None,
    classroom_id: int | None,
) -> tuple[School | None, Classroom | None]:
    """Validate an optional school/classroom pair for a new student.

    A classroom given without a school places the student in the
    classroom's own school.
    """
    school = get_school_or_404(db, school_id) if school_id is not None else None
    if classroom_id is None:
        return school, None

    classroom = get_classroom_or_404(db, classroom_id)
    if school is None:
        return get_school_or_404(db, classroom.school_id), classroom

    return school, ensure_classroom_in_school(classroom, school.id)


def enroll_student(
    db: Session,
    school_id: int,
    classroom_id: int,
    first_name: str | None = None,
    last_name: str | None = None,
) -> Student:
    school = get_school_or_404(db, school_id)
    classroom = None
    if is_storable_id(classroom_id):
        classroom = db.query(Classroom).filter(Classroom.id == classroom_id).first()
    ensure_classroom_in_school(classroom, school.id)

    student = Student(
        first_name=first_name,
        last_name=last_name,
        school_id=school.id,
        classroom_id=classroom.id,
    )
    db.add(student)
    logger.info('Enrolling student in school %s, classroom %s', school.id, classroom.id)
    return student


def transfer_student(
    db: Session,
    student_id: int,
    classroom_id: int,
    now: datetime | None = None,
) -> Student:
    student = get_student_or_404(db, student_id)
    classroom = get_classroom_or_404(db, classroom_id)
    ensure_classroom_in_school(classroom, student.school_id)

    transferred_at = _as_utc(now or datetime.now(timezone.utc))
    if student.enrollment_date is not None:
        transferred_at = max(transferred_at, _as_utc(student.enrollment_date))

    logger.info(
        'Transferring student %s from classroom %s to %s',
        student.id,
        student.classroom_id,
        classroom.id,
    )
    student.classroom_id = classroom.id
    student.transfer_date = transferred_at
    return student
