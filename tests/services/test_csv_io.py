import csv
import io

import pytest
from sqlalchemy.exc import IntegrityError

from schoolvote.extensions import db
from schoolvote.models import Voter
from schoolvote.services.ballot import cast_vote
from schoolvote.services.csv_io import (
    export_results_csv,
    export_voters_csv,
    import_voters,
    parse_voter_csv,
)
from schoolvote.services.errors import ConflictError
from schoolvote.services.tally import tally_votes


def _read(content):
    return list(csv.reader(io.StringIO(content)))


def test_export_voters_quotes_names_with_commas(db_session, voters, candidates):
    voters[0].name = "Lestari, Ayu"
    db_session.commit()
    cast_vote(voters[0].id, candidates[0].id)

    rows = _read(export_voters_csv(Voter.query.order_by(Voter.student_id).all()))

    assert rows[0] == ["Student ID", "Name", "Group", "Status"]
    assert rows[1] == ["1001", "Lestari, Ayu", "XII IPA 1", "Voted"]
    assert rows[2] == ["1002", "Budi Santoso", "XII IPA 2", "Not voted"]


def test_export_results_ranks_candidates(db_session, voters, candidates):
    cast_vote(voters[0].id, candidates[1].id)
    cast_vote(voters[1].id, candidates[1].id)
    cast_vote(voters[2].id, candidates[0].id)

    rows = _read(export_results_csv(tally_votes()))

    assert rows == [
        ["Rank", "Candidate", "Votes", "Percent"],
        ["1", "Bella", "2", "67"],
        ["2", "Andi", "1", "33"],
        ["3", "Chandra", "0", "0"],
    ]


def test_parse_without_header_uses_default_columns():
    rows, errors = parse_voter_csv("3001,Eka Putri,X-1\n3002,Fajar,X-2\n")

    assert errors == []
    assert rows == [
        {"student_id": "3001", "name": "Eka Putri", "group_label": "X-1", "line": 1},
        {"student_id": "3002", "name": "Fajar", "group_label": "X-2", "line": 2},
    ]


def test_parse_with_header_in_any_order():
    text = 'Kelas,NISN,Nama\nX-3,3003,"Gita, S."\n'

    rows, errors = parse_voter_csv(text)

    assert errors == []
    assert rows == [
        {"student_id": "3003", "name": "Gita, S.", "group_label": "X-3", "line": 2}
    ]


def test_parse_reports_incomplete_rows_and_skips_blank_lines():
    text = "student id,name,group\n3004,Hadi,X-1\n\n3005,,X-2\n3006,Indah\n"

    rows, errors = parse_voter_csv(text)

    assert [row["student_id"] for row in rows] == ["3004"]
    assert [error["line"] for error in errors] == [4, 5]
    assert "name" in errors[0]["error"]
    assert "group_label" in errors[1]["error"]


def test_import_skips_known_and_repeated_student_ids(db_session, voters):
    rows, _ = parse_voter_csv("1001,Ayu Again,X-1\n4001,Joko,X-1\n4001,Joko Twin,X-1\n")

    result = import_voters(rows)

    assert result["created"] == 1
    assert [item["student_id"] for item in result["skipped"]] == ["1001", "4001"]
    assert Voter.query.filter_by(student_id="4001").one().name == "Joko"
    assert Voter.query.count() == 4


def test_import_nothing(db_session):
    assert import_voters([]) == {"created": 0, "skipped": []}


def test_conflict_error_is_raised_for_integrity_failures(db_session, monkeypatch):
    def duplicate_commit():
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    monkeypatch.setattr(db.session(), "commit", duplicate_commit)
    with pytest.raises(ConflictError):
        import_voters([{"student_id": "5001", "name": "Kiki", "group_label": "X-1"}])
