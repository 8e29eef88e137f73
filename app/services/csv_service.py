import csv
import io

from app.core.config import settings
from app.core.storage import safe_filename_part
from app.models.application import ApplicationRecord

RESEARCH_PLACEHOLDER = "See PDF for details"

# Column order of the college's Excel database
CSV_COLUMNS = [
    ("Post Applied For", "post_applied_for"),
    ("Category", "category"),
    ("Name", "name"),
    ("Father Name", "father_name"),
    ("DOB", "dob"),
    ("Email", "email"),
    ("Phone 1", "contact_no1"),
    ("Phone 2", "contact_no2"),
    ("Address", "correspondence_address"),
    ("Masters Score", "academic_masters"),
    ("Graduation Score", "academic_graduation"),
    ("12th Score", "academic_12th"),
    ("Teaching Exp Score", "teaching_exp_above15"),
    ("Research Score", "research"),
    ("Drive Link", "google_drive_link"),
    ("UTR No", "utr_no"),
    ("Draft Amount", "draft_amount"),
    ("Draft Date", "draft_date"),
    ("Bank Name", "bank_name"),
    ("Submission Date", "date"),
]


def csv_filename(record: ApplicationRecord) -> str:
    name = safe_filename_part(record.name, "Applicant")
    return f"{settings.COLLEGE_SHORT_NAME}_DB_Record_{name}.csv"


def generate_record_csv(record: ApplicationRecord) -> tuple[str, str]:
    """One header row and one quoted value row for a single applicant."""
    values = []
    for _, field in CSV_COLUMNS:
        if field == "research":
            values.append(RESEARCH_PLACEHOLDER)
        else:
            values.append(str(getattr(record, field) or ""))

    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow([header for header, _ in CSV_COLUMNS])
    csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="").writerow(values)

    return csv_filename(record), buffer.getvalue()
