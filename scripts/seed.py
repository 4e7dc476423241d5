#!/usr/bin/env python3
"""
Development seed data script.

Creates test data for development:
- 1 tenant (Atatürk Özel Eğitim Okulu)
- 1 school admin
- 2 teachers
- 1 class (5-A)
- 5 students with a week of attendance, one assignment and a few grades

Usage:
    python scripts/seed.py [--reset]

All test users have password: "password123"
"""

import argparse
import asyncio
import sys
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from sqlalchemy import delete, select

from iep.database import apply_tenant_scope, async_session_factory, engine
from iep.models import (
    Assignment,
    AssignmentStatus,
    AssignmentType,
    AttendanceRecord,
    AttendanceStatus,
    ClassSchedule,
    ClassStudent,
    ClassTeacher,
    Grade,
    GradeType,
    Role,
    SchoolClass,
    SchoolType,
    Student,
    Teacher,
    Tenant,
    User,
    get_default_tenant_settings,
)
from iep.utils.security import hash_password
from iep.utils.tenant_context import clear_all_context, set_tenant_id

TEST_PASSWORD = "password123"
SUBDOMAIN = "ataturk-ozel-egitim"
ACADEMIC_YEAR = "2024-2025"

TEACHERS = [
    {"first_name": "Ayşe", "last_name": "Yılmaz", "email": "ayse.yilmaz@ataturkozel.k12.tr", "subject": "Matematik"},
    {"first_name": "Mehmet", "last_name": "Demir", "email": "mehmet.demir@ataturkozel.k12.tr", "subject": "Türkçe"},
]

STUDENTS = [
    {"first_name": "Elif", "last_name": "Kaya", "student_number": "2024001"},
    {"first_name": "Yusuf", "last_name": "Çelik", "student_number": "2024002"},
    {"first_name": "Zeynep", "last_name": "Şahin", "student_number": "2024003"},
    {"first_name": "Emir", "last_name": "Yıldız", "student_number": "2024004"},
    {"first_name": "Defne", "last_name": "Öztürk", "student_number": "2024005"},
]

# Weekday pattern per student, cycled over the last five school days
ATTENDANCE_PATTERN = [
    AttendanceStatus.PRESENT,
    AttendanceStatus.PRESENT,
    AttendanceStatus.LATE,
    AttendanceStatus.PRESENT,
    AttendanceStatus.ABSENT,
]


def last_school_days(count: int, today: date | None = None) -> list[date]:
    day = today or date.today()
    days = []
    while len(days) < count:
        day -= timedelta(days=1)
        if day.weekday() < 5:
            days.append(day)
    return sorted(days)


async def delete_existing(session, tenant: Tenant) -> None:
    # Rows in tenant-scoped tables go with the tenant through ON DELETE CASCADE
    await session.execute(delete(User).where(User.tenant_id == tenant.id))
    await session.delete(tenant)
    await session.commit()


async def seed_database(reset: bool = False) -> bool:
    """Seed the database with test data."""
    print("\n" + "=" * 50)
    print("İ-EP.APP - Seeding Development Data")
    print("=" * 50 + "\n")

    async with async_session_factory() as session:
        result = await session.execute(select(Tenant).where(Tenant.subdomain == SUBDOMAIN))
        existing_tenant = result.scalar_one_or_none()

        if existing_tenant:
            print(f"Seed data already exists (tenant '{SUBDOMAIN}' found).")
            if not reset and input("Delete and recreate? (y/n): ").strip().lower() != "y":
                print("Aborting.")
                return False
            print("Deleting existing data...")
            await delete_existing(session, existing_tenant)
            print("Existing data deleted.\n")

        print("Creating tenant: Atatürk Özel Eğitim Okulu...")
        tenant = Tenant(
            name="Atatürk Özel Eğitim Okulu",
            subdomain=SUBDOMAIN,
            email="info@ataturkozel.k12.tr",
            phone="+90 312 555 10 00",
            address="Kızılay Mah. Atatürk Bulvarı No: 1, Çankaya/Ankara",
            school_type=SchoolType.SPECIAL_EDUCATION.value,
            settings=get_default_tenant_settings(),
            is_active=True,
            onboarding_completed=True,
        )
        session.add(tenant)
        await session.flush()

        set_tenant_id(tenant.id)
        await apply_tenant_scope(session)

        print("Creating school admin: mudur@ataturkozel.k12.tr...")
        admin = User(
            tenant_id=tenant.id,
            email="mudur@ataturkozel.k12.tr",
            password_hash=hash_password(TEST_PASSWORD),
            first_name="Fatma",
            last_name="Arslan",
            role=Role.ADMIN.value,
            language="tr",
        )
        session.add(admin)

        print("Creating teachers...")
        teachers = []
        for data in TEACHERS:
            user = User(
                tenant_id=tenant.id,
                email=data["email"],
                password_hash=hash_password(TEST_PASSWORD),
                first_name=data["first_name"],
                last_name=data["last_name"],
                role=Role.TEACHER.value,
                language="tr",
            )
            session.add(user)
            await session.flush()
            teacher = Teacher(tenant_id=tenant.id, user_id=user.id, **data)
            session.add(teacher)
            teachers.append(teacher)
        await session.flush()

        print("Creating class: 5-A...")
        school_class = SchoolClass(
            tenant_id=tenant.id,
            name="5-A",
            grade="5",
            section="A",
            capacity=20,
            academic_year=ACADEMIC_YEAR,
        )
        session.add(school_class)
        await session.flush()

        for index, teacher in enumerate(teachers):
            session.add(ClassTeacher(
                tenant_id=tenant.id,
                class_id=school_class.id,
                teacher_id=teacher.id,
                is_primary=index == 0,
            ))

        print("Creating students...")
        students = []
        for data in STUDENTS:
            student = Student(tenant_id=tenant.id, **data)
            session.add(student)
            students.append(student)
        await session.flush()

        for student in students:
            session.add(ClassStudent(tenant_id=tenant.id, class_id=school_class.id, student_id=student.id))

        print("Creating timetable...")
        for day in range(5):
            for slot, teacher in enumerate(teachers):
                start = time(9 + slot, 0)
                session.add(ClassSchedule(
                    tenant_id=tenant.id,
                    class_id=school_class.id,
                    teacher_id=teacher.id,
                    subject=teacher.subject,
                    day_of_week=day,
                    start_time=start,
                    end_time=time(start.hour, 40),
                    classroom="B-12",
                ))

        print("Creating attendance for the last week...")
        for offset, day in enumerate(last_school_days(5)):
            for index, student in enumerate(students):
                status = ATTENDANCE_PATTERN[(index + offset) % len(ATTENDANCE_PATTERN)]
                session.add(AttendanceRecord(
                    tenant_id=tenant.id,
                    student_id=student.id,
                    class_id=school_class.id,
                    date=day,
                    status=status.value,
                    time_in=time(8, 50) if status == AttendanceStatus.PRESENT else None,
                    marked_by=teachers[0].user_id,
                ))

        print("Creating assignment and grades...")
        assignment = Assignment(
            tenant_id=tenant.id,
            title="Kesirler Çalışma Kağıdı",
            description="Kesirlerle toplama ve çıkarma alıştırmaları",
            type=AssignmentType.HOMEWORK.value,
            subject="Matematik",
            class_id=school_class.id,
            teacher_id=teachers[0].id,
            due_date=datetime.now(timezone.utc) + timedelta(days=7),
            max_score=100,
            status=AssignmentStatus.PUBLISHED.value,
            is_graded=True,
        )
        session.add(assignment)

        for index, student in enumerate(students):
            for grade_type, value in ((GradeType.EXAM, 70 + index * 5), (GradeType.HOMEWORK, 80 + index * 3)):
                session.add(Grade(
                    tenant_id=tenant.id,
                    student_id=student.id,
                    class_id=school_class.id,
                    teacher_id=teachers[0].id,
                    subject="Matematik",
                    grade_type=grade_type.value,
                    grade_value=Decimal(value),
                    max_grade=Decimal(100),
                    grade_date=date.today(),
                    semester=1,
                    academic_year=ACADEMIC_YEAR,
                ))

        await session.commit()

        print("\n" + "=" * 50)
        print("Seed Data Created Successfully!")
        print("=" * 50)
        print(f"\nTenant: {tenant.name} ({tenant.subdomain})")
        print(f"  ID (x-tenant-id): {tenant.id}")
        print(f"\nUsers (all have password: {TEST_PASSWORD}):")
        print(f"  Admin: {admin.email}")
        for data in TEACHERS:
            print(f"  Teacher: {data['email']}")
        print("\nClass:")
        print(f"  Name: {school_class.name}")
        print(f"  Students: {len(students)}")
        print("=" * 50 + "\n")

        return True


async def main():
    parser = argparse.ArgumentParser(description="Seed İ-EP.APP development data")
    parser.add_argument("--reset", action="store_true", help="Recreate the demo tenant without asking")
    args = parser.parse_args()

    try:
        success = await seed_database(reset=args.reset)
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n\nAborted by user.")
        sys.exit(1)
    finally:
        clear_all_context()
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
