"""Tests for schema validation and its error messages."""

import pytest

from clinicdesk.schemas.patient import PatientCreate
from clinicdesk.services.validation import EntityKind, validate, validate_model
from tests.factories import make_patient_data, make_record_data


class TestPatientValidation:
    """Tests for patient payloads."""

    def test_valid_patient(self) -> None:
        result = validate(EntityKind.PATIENT, make_patient_data())

        assert result.success
        assert result.errors == []
        assert result.value.first_name == "Anna"
        assert str(result.value.dob) == "1985-04-12"

    def test_kind_as_string(self) -> None:
        assert validate("patient", make_patient_data()).success

    def test_missing_email_and_phone(self) -> None:
        """Both fields are reported in declaration order with required messages."""
        data = make_patient_data()
        del data["email"]
        del data["phone"]

        result = validate(EntityKind.PATIENT, data)

        assert not result.success
        assert [e.as_dict() for e in result.errors] == [
            {"field": "email", "message": "Email is required"},
            {"field": "phone", "message": "Phone number is required"},
        ]
        assert result.message == "Email is required"

    def test_malformed_email(self) -> None:
        result = validate(EntityKind.PATIENT, make_patient_data(email="not-an-email"))

        assert [e.as_dict() for e in result.errors] == [
            {"field": "email", "message": "Invalid email address"},
        ]

    @pytest.mark.parametrize("blank", ["", "   ", None])
    def test_blank_values_are_required_errors(self, blank) -> None:
        """Empty, whitespace-only and null values count as missing."""
        result = validate(EntityKind.PATIENT, make_patient_data(firstName=blank))

        assert result.errors[0].field == "firstName"
        assert result.errors[0].message == "First name is required"

    def test_surrounding_whitespace_is_kept(self) -> None:
        result = validate(EntityKind.PATIENT, make_patient_data(firstName=" Anna "))

        assert result.value.first_name == " Anna "

    def test_email_kept_as_entered(self) -> None:
        result = validate(EntityKind.PATIENT, make_patient_data(email="Anna.Jansen@EXAMPLE.COM"))

        assert result.success
        assert result.value.email == "Anna.Jansen@EXAMPLE.COM"

    def test_blank_email_is_required(self) -> None:
        result = validate(EntityKind.PATIENT, make_patient_data(email="  "))

        assert result.message == "Email is required"

    def test_invalid_gender(self) -> None:
        result = validate(EntityKind.PATIENT, make_patient_data(gender="Unknown"))

        assert result.message == "Gender must be one of: Male, Female, Other"

    def test_invalid_dob(self) -> None:
        result = validate(EntityKind.PATIENT, make_patient_data(dob="12/04/1985"))

        assert result.errors[0].field == "dob"
        assert result.message == "Invalid date of birth"

    def test_all_missing_in_declaration_order(self) -> None:
        result = validate(EntityKind.PATIENT, {})

        assert [e.field for e in result.errors] == [
            "firstName",
            "lastName",
            "initials",
            "dob",
            "gender",
            "email",
            "phone",
            "address",
        ]

    def test_snake_case_keys_accepted(self) -> None:
        data = make_patient_data()
        data["first_name"] = data.pop("firstName")
        data["last_name"] = data.pop("lastName")

        assert validate(EntityKind.PATIENT, data).success

    def test_candidate_not_mutated(self) -> None:
        data = make_patient_data(email="")
        before = dict(data)

        validate(EntityKind.PATIENT, data)

        assert data == before

    def test_non_object_candidate(self) -> None:
        result = validate(EntityKind.PATIENT, ["not", "an", "object"])

        assert not result.success
        assert result.errors[0].field == ""

    def test_model_candidate(self) -> None:
        """Already typed values are validated through their camelCase form."""
        model = PatientCreate.model_validate(make_patient_data())

        assert validate_model(PatientCreate, model).success


class TestPatientUpdateValidation:
    """Tests for partial patient updates."""

    def test_empty_update_is_valid(self) -> None:
        assert validate(EntityKind.PATIENT_UPDATE, {}).success

    def test_present_fields_still_checked(self) -> None:
        result = validate(EntityKind.PATIENT_UPDATE, {"email": "nope", "lastName": ""})

        assert [e.as_dict() for e in result.errors] == [
            {"field": "lastName", "message": "Last name is required"},
            {"field": "email", "message": "Invalid email address"},
        ]

    def test_whitespace_only_rejected(self) -> None:
        result = validate(EntityKind.PATIENT_UPDATE, {"address": "   "})

        assert result.message == "Address is required"


class TestMedicalRecordValidation:
    """Tests for medical record payloads, including nested items."""

    def test_valid_record(self) -> None:
        result = validate(EntityKind.MEDICAL_RECORD, make_record_data("2024-001"))

        assert result.success
        medication = result.value.medications[0]
        assert medication.product_name == "Bocouture"
        assert medication.id

    def test_nested_medication_field(self) -> None:
        """Errors inside lists carry the item index in the field path."""
        data = make_record_data("2024-001")
        data["medications"].append(
            {
                "productName": "Azzalure",
                "genericName": "Botulinum toxin type A",
                "dosage": "10 units",
                "batch": "",
                "expiryDate": "2025-01-01",
            }
        )

        result = validate(EntityKind.MEDICAL_RECORD, data)

        assert [e.as_dict() for e in result.errors] == [
            {"field": "medications.1.batch", "message": "Batch number is required"},
        ]

    def test_whitespace_only_nested_field(self) -> None:
        data = make_record_data("2024-001")
        data["medications"][0]["dosage"] = "\t "

        result = validate(EntityKind.MEDICAL_RECORD, data)

        assert [e.as_dict() for e in result.errors] == [
            {"field": "medications.0.dosage", "message": "Dosage is required"},
        ]

    @pytest.mark.parametrize("units", [0, 13])
    def test_units_out_of_range(self, units: int) -> None:
        data = make_record_data(
            "2024-001",
            treatmentPoints=[{"area": "Forehead", "units": units, "coordinates": {"x": 1, "y": 2}}],
        )

        result = validate(EntityKind.MEDICAL_RECORD, data)

        assert result.errors[0].field == "treatmentPoints.0.units"
        assert result.message == "Units must be between 1 and 12"

    def test_coordinates_out_of_range(self) -> None:
        data = make_record_data(
            "2024-001",
            treatmentPoints=[{"area": "Lips", "units": 2, "coordinates": {"x": 101, "y": 50}}],
        )

        result = validate(EntityKind.MEDICAL_RECORD, data)

        assert result.errors[0].field == "treatmentPoints.0.coordinates.x"
        assert result.message == "Coordinates must be between 0 and 100"

    def test_required_record_fields(self) -> None:
        result = validate(EntityKind.MEDICAL_RECORD, {"patientId": "2024-001"})

        assert [e.message for e in result.errors] == [
            "Date is required",
            "Record type is required",
            "Provider is required",
            "Chief complaint is required",
            "Diagnosis is required",
            "Treatment is required",
        ]

    def test_empty_follow_up_date_is_absent(self) -> None:
        result = validate(EntityKind.MEDICAL_RECORD, make_record_data("2024-001", followUpDate=""))

        assert result.success
        assert result.value.follow_up_date is None

    def test_invalid_image_type(self) -> None:
        data = make_record_data("2024-001", images=[{"type": "During", "url": "data:image/png"}])

        result = validate(EntityKind.MEDICAL_RECORD, data)

        assert result.errors[0].field == "images.0.type"
        assert result.message == "Image type must be Before or After"


class TestConsentAndAppointmentValidation:
    """Tests for consent forms and appointments."""

    def test_signature_required(self) -> None:
        result = validate(
            EntityKind.CONSENT_FORM,
            {"location": "Amsterdam", "date": "2024-06-01", "patientName": "A. Jansen", "signature": ""},
        )

        assert result.message == "Please provide a signature"

    def test_appointment_required_fields(self) -> None:
        result = validate(EntityKind.APPOINTMENT, {"notes": "walk-in"})

        assert [e.message for e in result.errors] == [
            "Patient is required",
            "Appointment type is required",
            "Start time is required",
            "End time is required",
        ]

    def test_appointment_invalid_type(self) -> None:
        result = validate(
            EntityKind.APPOINTMENT,
            {
                "patientId": "2024-001",
                "type": "Surgery",
                "start": "2024-06-02T09:00:00Z",
                "end": "2024-06-02T09:30:00Z",
            },
        )

        assert result.message == "Appointment type must be one of: Consultation, Treatment, Follow-up"

    def test_end_before_start_allowed(self) -> None:
        """End after start is expected but not enforced."""
        result = validate(
            EntityKind.APPOINTMENT,
            {
                "patientId": "2024-001",
                "type": "Consultation",
                "start": "2024-06-02T10:00:00Z",
                "end": "2024-06-02T09:00:00Z",
            },
        )

        assert result.success
