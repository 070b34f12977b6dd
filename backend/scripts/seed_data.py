"""
Populates the database with demo data: sheets for every level, a few
teachers and families with assigned sheets and payments.

Sheets are created through the generator, so serials stay consistent with
the counters.
"""
import sys
from datetime import date, timedelta
from pathlib import Path

# Add the backend directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ticketwise.database import engine, SessionLocal
from ticketwise.models import Base, Family, Level, Teacher
from ticketwise.services.sheet_generator import generate_sheets

Base.metadata.create_all(bind=engine)
db = SessionLocal()

print("[SEED] Seeding the database...")

try:
    # SHEETS
    print("\n[SHEETS] Generating sheets...")
    sheets = {}
    for level, pack_size, count in [
        (Level.P, 24, 3),
        (Level.C, 24, 2),
        (Level.L, 36, 2),
        (Level.S, 12, 2),
        (Level.E, 12, 1),
    ]:
        sheets[level] = generate_sheets(db, level, pack_size, count)
        print(f"  [+] {count} x {pack_size} for {level.value}")

    # TEACHERS
    print("\n[TEACHERS] Creating teachers...")
    teachers = [
        Teacher(id="teacher-demo-1", first_name="Nadia", last_name="Benali",
                email="nadia.benali@ticketwise.ma", specializations=["Mathématiques", "Physique"]),
        Teacher(id="teacher-demo-2", first_name="Karim", last_name="Alaoui",
                email="karim.alaoui@ticketwise.ma", specializations=["Français"]),
        Teacher(id="teacher-demo-3", first_name="Sara", last_name="Idrissi",
                specializations=["Anglais", "SVT"]),
    ]
    db.add_all(teachers)
    db.commit()
    print(f"  [+] {len(teachers)} teachers")

    # FAMILIES
    print("\n[FAMILIES] Creating families...")
    today = date.today()
    demo_families = [
        ("family-demo-1", Level.P, ["Leo Dupuis"], teachers[0], [
            {"method": "cash", "amount": 1560, "status": "completed", "date": today.isoformat()},
        ]),
        ("family-demo-2", Level.C, ["Yasmine Tazi", "Omar Tazi"], teachers[1], [
            {"method": "cheque", "amount": 1800, "due_date": (today - timedelta(days=10)).isoformat(),
             "cheque_received": False},
            {"method": "cheque", "amount": 1800, "due_date": (today + timedelta(days=20)).isoformat(),
             "cheque_received": False},
        ]),
    ]

    for family_id, level, students, teacher, payments in demo_families:
        sheet = sheets[level][0]
        family = Family(
            id=family_id,
            level=level,
            sheet_ids=[sheet.id],
            teacher_ids=[teacher.id],
            parents={"father": f"M. {students[0].split()[-1]}"},
            students=students,
            subjects=[{"name": teacher.specializations[0], "hours": sheet.pack_size, "student_name": students[0]}],
            payments=payments,
            contact={"phone": "+212600000000"},
        )
        sheet.is_assigned = True
        sheet.family_id = family_id
        db.add(family)
        print(f"  [+] {family.display_name} with sheet {sheet.start_code}..{sheet.end_code}")

    db.commit()
    print("\n[SEED] Done!")

except Exception as e:
    db.rollback()
    print(f"\n[SEED] Error: {e}")
    raise
finally:
    db.close()
