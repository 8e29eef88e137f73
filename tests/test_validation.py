import json

from conftest import fill_record, image_content, pdf_content

from app.core.form_rules import FormRules, load_form_rules
from app.models.application import ApplicationRecord
from app.models.enums import FormStep
from app.models.session import Acknowledgements
from app.services.validation_service import validate_step

ACKED = Acknowledgements(instructions_read=True, final_note_confirmed=True)


def _filled() -> ApplicationRecord:
    record = ApplicationRecord()
    fill_record(record)
    return record


def test_every_step_passes_for_a_complete_record():
    record = _filled()
    for step in FormStep:
        result = validate_step(step, record, ACKED)
        assert result.ok, (step, result.errors, result.alerts)


def test_instructions_gate_short_circuits_with_empty_error_map():
    result = validate_step(FormStep.INSTRUCTIONS, ApplicationRecord(), Acknowledgements())

    assert not result.ok
    assert result.errors == {}
    assert "read the instructions" in result.alert


def test_personal_step_lists_every_missing_field():
    result = validate_step(FormStep.PERSONAL, ApplicationRecord(), ACKED)

    assert not result.ok
    assert result.errors["name"] == "This field is required"
    assert result.errors["confirm_email"] == "Please re-enter your email"
    assert result.errors["photo"] == "Photograph is required"
    assert "email" in result.errors
    assert result.alerts == []


def test_whitespace_only_counts_as_missing():
    record = _filled()
    record.name = "   "

    result = validate_step(FormStep.PERSONAL, record, ACKED)

    assert result.errors == {"name": "This field is required"}


def test_email_mismatch_reported_on_confirmation_field():
    record = _filled()
    record.confirm_email = "other@example.com"

    result = validate_step(FormStep.PERSONAL, record, ACKED)

    assert result.errors == {"confirm_email": "Email addresses do not match."}


def test_empty_photo_bytes_count_as_missing():
    record = _filled()
    record.photo = image_content().model_copy(update={"data": b""})

    result = validate_step(FormStep.PERSONAL, record, ACKED)

    assert "photo" in result.errors


def test_admin_total_over_25_is_a_gate_level_alert():
    record = _filled()
    record.admin_joint_director = "10"
    record.admin_registrar = "10"
    record.admin_head = "10"

    result = validate_step(FormStep.EXPERIENCE, record, ACKED)

    assert not result.ok
    assert result.errors == {}
    assert result.alerts == ["Total marks for Administrative Responsibilities cannot exceed 25."]


def test_admin_total_of_exactly_25_passes():
    record = _filled()
    record.admin_joint_director = "10"
    record.admin_registrar = "10"
    record.admin_head = "5"

    assert validate_step(FormStep.EXPERIENCE, record, ACKED).ok


def test_research_step_requires_final_note_before_anything_else():
    record = ApplicationRecord()
    acks = Acknowledgements(instructions_read=True)

    result = validate_step(FormStep.RESEARCH, record, acks)

    assert not result.ok
    assert result.errors == {}
    assert result.alerts == ["Please acknowledge that you have read the instructions by checking the box."]


def test_missing_research_entries_get_field_errors_and_one_alert():
    record = _filled()
    record.research.res_phd = ""
    record.research.res_award_nat = ""

    result = validate_step(FormStep.RESEARCH, record, ACKED)

    assert not result.ok
    assert set(result.errors) == {"research.res_phd", "research.res_award_nat"}
    assert len(result.alerts) == 1
    assert "Table 2" in result.alerts[0]


def test_noc_fields_only_required_when_applicant_has_noc():
    record = _filled()
    assert validate_step(FormStep.DECLARATION, record, ACKED).ok

    record.has_noc = "yes"
    result = validate_step(FormStep.DECLARATION, record, ACKED)

    assert not result.ok
    assert result.errors["file_noc"] == "NOC Document is required"
    assert {"emp_name", "emp_designation", "emp_dept"} <= set(result.errors)

    record.emp_name = "Govt College"
    record.emp_designation = "Associate Professor"
    record.emp_dept = "Chemistry"
    record.file_noc = pdf_content(filename="noc.pdf")
    assert validate_step(FormStep.DECLARATION, record, ACKED).ok


def test_validation_does_not_touch_the_record():
    record = ApplicationRecord()
    before = record.model_dump()

    validate_step(FormStep.PERSONAL, record, ACKED)

    assert record.model_dump() == before


def test_rules_can_be_loaded_from_json(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"steps": {"1": {"required": [{"field": "name", "message": "Name please"}]}}}))

    rules = load_form_rules(str(path))
    result = validate_step(FormStep.PERSONAL, ApplicationRecord(), ACKED, rules=rules)

    assert isinstance(rules, FormRules)
    assert result.errors == {"name": "Name please"}
    # Steps absent from the table have nothing to check
    assert validate_step(FormStep.ACADEMIC, ApplicationRecord(), ACKED, rules=rules).ok


def test_mismatch_flagged_even_when_primary_email_is_blank():
    record = _filled()
    record.email = ""
    record.confirm_email = "b@x.com"

    result = validate_step(FormStep.PERSONAL, record, ACKED)

    assert result.errors["confirm_email"] == "Email addresses do not match."
    assert result.errors["email"] == "This field is required"
