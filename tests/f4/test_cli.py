"""Tests for the mocktest CLI."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from mocktest.cli.commands import app
from mocktest.db import learners_repository, questions_repository, subjects_repository

SAMPLE_BANK = Path(__file__).resolve().parents[2] / "data" / "banks" / "sample_bank.yaml"

runner = CliRunner()


@pytest.fixture
def cli_db(tmp_path, monkeypatch):
    """Point the CLI at a temp database seeded with the sample bank."""
    path = tmp_path / "cli.db"
    monkeypatch.setenv("MOCKTEST_DB", str(path))
    monkeypatch.setenv("MOCKTEST_CONFIG", str(tmp_path / "missing.yaml"))

    assert runner.invoke(app, ["init-db"]).exit_code == 0
    result = runner.invoke(app, ["seed", str(SAMPLE_BANK)])
    assert result.exit_code == 0, result.output
    return path


class TestSetupCommands:
    """Tests for init-db, seed and add-learner."""

    def test_seed_reports_counts(self, cli_db):
        physics = subjects_repository.get_subject_by_slug("physics-11th-12th")
        assert physics is not None
        assert len(questions_repository.list_questions(physics.id)) == 3

    def test_reseed_adds_no_duplicates(self, cli_db):
        result = runner.invoke(app, ["seed", str(SAMPLE_BANK)])
        assert result.exit_code == 0
        assert "Imported 0 questions" in result.output

        physics = subjects_repository.get_subject_by_slug("physics-11th-12th")
        assert len(questions_repository.list_questions(physics.id)) == 3

    def test_seed_missing_file(self, cli_db, tmp_path):
        result = runner.invoke(app, ["seed", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_add_learner(self, cli_db):
        result = runner.invoke(app, ["add-learner", "ana", "--premium"])
        assert result.exit_code == 0
        assert learners_repository.get_learner("ana").is_premium is True

        result = runner.invoke(app, ["add-learner", "ana"])
        assert result.exit_code == 0
        assert learners_repository.get_learner("ana").is_premium is False


class TestChaptersCommand:
    """Tests for mocktest chapters."""

    def test_lists_chapter_slugs(self, cli_db):
        result = runner.invoke(app, ["chapters", "physics-11th-12th"])
        assert result.exit_code == 0
        for slug in ("mechanics", "thermodynamics", "electromagnetism"):
            assert slug in result.output

    def test_unknown_subject(self, cli_db):
        result = runner.invoke(app, ["chapters", "astronomy"])
        assert result.exit_code == 1
        assert "Subject not found" in result.output

    def test_listed_slug_drives_chapter_practice(self, cli_db):
        runner.invoke(app, ["add-learner", "pro", "--premium"])

        result = runner.invoke(
            app, ["exam", "pro", "-s", "physics-11th-12th", "-c", "mechanics"]
        )

        assert result.exit_code == 0, result.output
        assert "2 questions" in result.output


class TestExamCommand:
    """Tests for mocktest exam."""

    def test_exam_writes_paper(self, cli_db, tmp_path):
        runner.invoke(app, ["add-learner", "ana"])
        out = tmp_path / "paper.json"

        result = runner.invoke(app, ["exam", "ana", "--stream", "PCM", "--output", str(out)])

        assert result.exit_code == 0, result.output
        paper = json.loads(out.read_text(encoding="utf-8"))
        assert {q["subject"]["slug"] for q in paper} == {
            "physics-11th-12th",
            "chemistry",
            "mathematics",
        }
        assert all("correct_option" not in q for q in paper)

    def test_exam_limit_reached(self, cli_db):
        learners_repository.insert_learner("spent", free_tests_taken=5)
        result = runner.invoke(app, ["exam", "spent", "--subject", "chemistry"])
        assert result.exit_code == 1
        assert "LIMIT_REACHED" in result.output

    def test_exam_invalid_stream(self, cli_db):
        runner.invoke(app, ["add-learner", "ana"])
        result = runner.invoke(app, ["exam", "ana", "--stream", "XYZ"])
        assert result.exit_code == 1
        assert "Invalid stream" in result.output

    def test_exam_needs_mode(self, cli_db):
        result = runner.invoke(app, ["exam", "ana"])
        assert result.exit_code == 1


class TestSubmitCommand:
    """Tests for mocktest submit, stats and progress."""

    def test_submit_grades_answers(self, cli_db, tmp_path):
        runner.invoke(app, ["add-learner", "ana"])
        chemistry = subjects_repository.get_subject_by_slug("chemistry")
        questions = questions_repository.list_questions(chemistry.id)
        answers = {
            "subject_id": chemistry.id,
            "answers": [
                {"question_id": questions[0].id, "choice": questions[0].correct_option, "time_taken": 30},
                {"question_id": questions[1].id, "choice": None, "time_taken": 10},
            ],
        }
        answers_path = tmp_path / "answers.json"
        answers_path.write_text(json.dumps(answers), encoding="utf-8")

        result = runner.invoke(app, ["submit", "ana", str(answers_path)])

        assert result.exit_code == 0, result.output
        assert "1/2" in result.output
        learner = learners_repository.get_learner("ana")
        assert learner.free_tests_taken == 1
        assert learner.attempted_questions == {questions[0].id, questions[1].id}

        stats = runner.invoke(app, ["stats", "chemistry"])
        assert stats.exit_code == 0
        assert "30.0" in stats.output

        progress = runner.invoke(app, ["progress", "ana"])
        assert progress.exit_code == 0
        assert "Chemistry" in progress.output

    def test_submit_missing_file(self, cli_db, tmp_path):
        result = runner.invoke(app, ["submit", "ana", str(tmp_path / "none.json")])
        assert result.exit_code == 1

    def test_submit_unknown_learner(self, cli_db, tmp_path):
        answers_path = tmp_path / "answers.json"
        answers_path.write_text(
            json.dumps({"answers": [{"question_id": "x", "choice": 0}]}), encoding="utf-8"
        )
        result = runner.invoke(app, ["submit", "ghost", str(answers_path)])
        assert result.exit_code == 1
        assert "Learner not found" in result.output
