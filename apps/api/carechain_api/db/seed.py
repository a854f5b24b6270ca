"""Seed data for development and testing."""

from sqlalchemy.orm import Session

from carechain_api.models import MedicalRecord, User
from carechain_api.services.records import RecordService

DEMO_USERS = [
    {"username": "demo-patient", "email": "patient@example.com", "full_name": "Demo Patient", "role": "patient"},
    {
        "username": "demo-doctor",
        "email": "doctor@example.com",
        "full_name": "Demo Doctor",
        "role": "doctor",
        "specialization": "General Practice",
        "license_number": "MD-0001",
    },
    {
        "username": "demo-pharmacy",
        "email": "pharmacy@example.com",
        "full_name": "Demo Pharmacy",
        "role": "pharmacy",
        "license_number": "PH-0001",
    },
    {"username": "demo-insurer", "email": "insurer@example.com", "full_name": "Demo Insurer", "role": "insurance"},
]


def seed_users(db: Session) -> dict[str, User]:
    """Seed one user per role."""
    users = {}
    for user_data in DEMO_USERS:
        user = db.query(User).filter(User.username == user_data["username"]).first()
        if not user:
            user = User(**user_data)
            db.add(user)
            db.commit()
            print(f"✓ Created {user.role}: {user.username} (ID: {user.id})")
        else:
            print(f"✓ User already exists: {user.username} (ID: {user.id})")
        users[user.role] = user
    return users


def seed_records(db: Session, patient: User):
    """Seed a sample record for the demo patient through the audited upload path."""
    existing = db.query(MedicalRecord).filter(MedicalRecord.patient_id == patient.id).first()
    if existing:
        print(f"✓ Sample record already exists: {existing.title}")
        return

    record = RecordService(db).upload(
        patient.id,
        title="Annual blood panel",
        record_type="lab_report",
        file_type="application/pdf",
        file_size=48213,
        file_name="blood-panel.pdf",
        description="Routine annual blood work",
    )
    print(f"✓ Created sample record: {record.title} (ID: {record.id})")


def seed_all(db: Session):
    """Seed all data."""
    print("Seeding database...")
    users = seed_users(db)
    seed_records(db, users["patient"])
    print("✓ Seeding complete!")
