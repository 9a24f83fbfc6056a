"""Seed the store with demo patients, records and appointments.

Run against a fresh database to get something to click through. Patients
whose email already exists are skipped, and so are their records and
appointments.
"""

import sys
from datetime import date, timedelta

from clinicdesk.core.logging import setup_logging
from clinicdesk.services.appointments import AppointmentService
from clinicdesk.services.medical_records import MedicalRecordService
from clinicdesk.services.patients import PatientService
from clinicdesk.services.store import DocumentStore
from clinicdesk.utils.time import utc_now

DEMO_PATIENTS = [
    {
        "firstName": "Anna",
        "lastName": "Jansen",
        "initials": "A.",
        "dob": "1985-04-12",
        "gender": "Female",
        "email": "anna.jansen@example.com",
        "phone": "+31 6 12345678",
        "address": "Keizersgracht 1, Amsterdam",
    },
    {
        "firstName": "Mark",
        "lastName": "de Vries",
        "initials": "M.P.",
        "dob": "1978-11-02",
        "gender": "Male",
        "email": "mark.devries@example.com",
        "phone": "+31 6 87654321",
        "address": "Oudegracht 20, Utrecht",
    },
    {
        "firstName": "Sam",
        "lastName": "Bakker",
        "initials": "S.",
        "dob": "1992-07-30",
        "gender": "Other",
        "email": "sam.bakker@example.com",
        "phone": "+31 6 11223344",
        "address": "Coolsingel 5, Rotterdam",
    },
]


def demo_record(patient_id: str, visit: date) -> dict:
    return {
        "patientId": patient_id,
        "date": visit.isoformat(),
        "type": "Treatment",
        "provider": "Dr. Demo",
        "complaint": "Frown lines",
        "diagnosis": "Dynamic glabellar lines",
        "treatment": "Botulinum toxin",
        "notes": "Demo record",
        "medications": [
            {
                "productName": "Bocouture",
                "genericName": "Botulinum toxin type A",
                "dosage": "20 units",
                "batch": "DEMO-001",
                "expiryDate": (visit + timedelta(days=365)).isoformat(),
            }
        ],
        "aftercare": ["No exercise for 24 hours", "Do not rub the treated area"],
        "treatmentPoints": [
            {"area": "Glabella", "units": 4, "coordinates": {"x": 50, "y": 30}},
            {"area": "Glabella", "units": 4, "coordinates": {"x": 45, "y": 32}},
        ],
    }


def seed(store: DocumentStore) -> tuple[list[str], list[str]]:
    """Create the demo data; returns (created ids, skipped emails)."""
    patients = PatientService(store)
    records = MedicalRecordService(store)
    appointments = AppointmentService(store)

    existing = {p.email for p in patients.list()}
    created = []
    skipped = []
    now = utc_now()

    for index, data in enumerate(DEMO_PATIENTS):
        if data["email"] in existing:
            skipped.append(data["email"])
            continue

        result = patients.create(data)
        if not result.success:
            print(f"Could not create {data['email']}: {result.message}")
            continue
        patient = result.value
        created.append(patient.id)

        records.create(demo_record(patient.id, now.date() - timedelta(days=30 + index)))
        start = (now + timedelta(days=index + 1)).replace(
            hour=9 + index, minute=0, second=0, microsecond=0
        )
        appointments.create(
            {
                "patientId": patient.id,
                "type": "Follow-up",
                "start": start.isoformat(),
                "end": (start + timedelta(minutes=30)).isoformat(),
            }
        )

    return created, skipped


def print_summary(created: list, skipped: list) -> None:
    print("=" * 60)
    print("DEMO DATA")
    print("=" * 60)
    print()

    if created:
        print(f"Created patients: {', '.join(created)}")
    if skipped:
        print(f"Skipped (already present): {', '.join(skipped)}")
    if not created and not skipped:
        print("Nothing to do")


def main() -> int:
    setup_logging()
    database_url = sys.argv[1] if len(sys.argv) > 1 else None
    store = DocumentStore.from_url(database_url)
    created, skipped = seed(store)
    print_summary(created, skipped)
    return 0


if __name__ == "__main__":
    sys.exit(main())
