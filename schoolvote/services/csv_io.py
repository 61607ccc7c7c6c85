import csv
import io

from flask import current_app
from sqlalchemy.exc import IntegrityError

from schoolvote.extensions import db
from schoolvote.models import Voter
from schoolvote.services.errors import ConflictError

VOTER_HEADER = ["Student ID", "Name", "Group", "Status"]
RESULTS_HEADER = ["Rank", "Candidate", "Votes", "Percent"]

_STUDENT_ID_COLUMNS = {"student id", "student_id", "studentid", "nisn", "id"}
_NAME_COLUMNS = {"name", "nama", "full name", "nama lengkap"}
_GROUP_COLUMNS = {"group", "class", "kelas", "group_label"}


def _write_rows(header, rows):
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def export_voters_csv(voters):
    return _write_rows(
        VOTER_HEADER,
        (
            [
                voter.student_id,
                voter.name,
                voter.group_label,
                "Voted" if voter.has_voted else "Not voted",
            ]
            for voter in voters
        ),
    )


def export_results_csv(tally):
    return _write_rows(
        RESULTS_HEADER,
        (
            [rank, row["candidate"].name, row["count"], row["percent"]]
            for rank, row in enumerate(tally["results"], start=1)
        ),
    )


def _column_indices(header):
    normalized = [cell.strip().lower() for cell in header]
    indices = {}
    for i, column in enumerate(normalized):
        if column in _STUDENT_ID_COLUMNS and "student_id" not in indices:
            indices["student_id"] = i
        elif column in _NAME_COLUMNS and "name" not in indices:
            indices["name"] = i
        elif column in _GROUP_COLUMNS and "group_label" not in indices:
            indices["group_label"] = i

    if len(indices) == 3:
        return indices
    return None


def parse_voter_csv(text):
    """Parse a voter roster.

    Columns are ``student_id, name, group`` unless the first row is a header
    naming them, in which case any column order is accepted. Returns
    ``(rows, errors)`` where every row and error carries its 1-based line
    number in the file.
    """
    reader = csv.reader(io.StringIO(text, newline=""))
    records = list(reader)

    indices = {"student_id": 0, "name": 1, "group_label": 2}
    start = 0
    if records:
        header_indices = _column_indices(records[0])
        if header_indices:
            indices = header_indices
            start = 1

    rows = []
    errors = []
    for offset, record in enumerate(records[start:], start=start + 1):
        if not any(cell.strip() for cell in record):
            continue

        values = {
            field: record[i].strip() if i < len(record) else ""
            for field, i in indices.items()
        }
        missing = [field for field, value in values.items() if not value]
        if missing:
            errors.append({"line": offset, "error": f"Missing {', '.join(missing)}."})
            continue

        rows.append(dict(values, line=offset))

    return rows, errors


def import_voters(rows):
    existing = {
        student_id
        for (student_id,) in db.session.query(Voter.student_id).filter(
            Voter.student_id.in_([row["student_id"] for row in rows])
        )
    }

    created = 0
    skipped = []
    for row in rows:
        if row["student_id"] in existing:
            skipped.append({"line": row.get("line"), "student_id": row["student_id"]})
            continue

        db.session.add(
            Voter(
                student_id=row["student_id"],
                name=row["name"],
                group_label=row["group_label"],
            )
        )
        existing.add(row["student_id"])
        created += 1

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Import failed: a student ID in the file is already registered.")

    current_app.logger.info(
        "Voter import: %s created, %s skipped", created, len(skipped)
    )
    return {"created": created, "skipped": skipped}
