"""Tests for domain models and exam request parsing."""

import pytest

from mocktest.core.exam_request import (
    ChapterPracticeRequest,
    SingleSubjectRequest,
    StreamRequest,
    build_exam_request,
    normalize_difficulty,
)
from mocktest.core.models import Question, QuestionOutcome, Subject, Submission
from mocktest.utils.validators import is_slug, new_id, slugify


class TestQuestion:
    """Tests for Question validation and projections."""

    def test_requires_four_options(self):
        with pytest.raises(ValueError, match="exactly 4 options"):
            Question(id="q1", subject_id="s", text="?", options=["a", "b"], correct_option=0)

    def test_correct_option_in_range(self):
        with pytest.raises(ValueError, match="out of range"):
            Question(
                id="q1", subject_id="s", text="?", options=list("abcd"), correct_option=4
            )

    def test_unknown_difficulty(self):
        with pytest.raises(ValueError, match="difficulty"):
            Question(
                id="q1",
                subject_id="s",
                text="?",
                options=list("abcd"),
                correct_option=0,
                difficulty="extreme",
            )

    def test_public_dict_hides_answer(self):
        """Public projection never carries the answer or explanation."""
        subject = Subject(id="s", name="Physics", slug="physics-11th-12th")
        question = Question(
            id="q1",
            subject_id="s",
            text="SI unit of force?",
            options=["Newton", "Joule", "Pascal", "Watt"],
            correct_option=0,
            explanation="F = ma",
        ).with_subject(subject.ref())

        public = question.to_public_dict()
        assert "correct_option" not in public
        assert "explanation" not in public
        assert public["subject"] == {"id": "s", "name": "Physics", "slug": "physics-11th-12th"}
        assert public["options"] == ["Newton", "Joule", "Pascal", "Watt"]


class TestSubmission:
    """Tests for Submission."""

    def test_percentage(self):
        submission = Submission(learner_id="u", subject_id=None, score=3, total_questions=4)
        assert submission.percentage == 75.0

    def test_percentage_of_empty_paper_is_zero(self):
        submission = Submission(learner_id="u", subject_id=None, score=0, total_questions=0)
        assert submission.percentage == 0.0

    def test_negative_time_rejected(self):
        with pytest.raises(ValueError, match="time_taken"):
            QuestionOutcome(question_id="q1", time_taken=-1)


class TestBuildExamRequest:
    """Tests for build_exam_request."""

    def test_stream(self):
        request = build_exam_request(stream="PCB")
        assert request == StreamRequest(name="PCB")
        assert request.premium_only is False

    def test_single_subject(self):
        request = build_exam_request(subject="chemistry", difficulty="hard")
        assert request == SingleSubjectRequest(slug="chemistry", difficulty="hard")

    def test_chapter_practice_is_premium_only(self):
        request = build_exam_request(subject="biology", chapter_id="ch1")
        assert isinstance(request, ChapterPracticeRequest)
        assert request.premium_only is True

    def test_chapter_requires_subject(self):
        with pytest.raises(ValueError, match="requires a subject"):
            build_exam_request(chapter_id="ch1")

    def test_stream_and_subject_conflict(self):
        with pytest.raises(ValueError, match="not both"):
            build_exam_request(stream="PCM", subject="chemistry")

    def test_nothing_given(self):
        with pytest.raises(ValueError, match="Valid stream or subject is required"):
            build_exam_request()

    def test_all_difficulty_means_no_filter(self):
        assert normalize_difficulty("all") is None
        assert normalize_difficulty(None) is None
        assert normalize_difficulty("easy") == "easy"
        with pytest.raises(ValueError):
            normalize_difficulty("extreme")


class TestValidators:
    """Tests for id and slug helpers."""

    def test_new_id_is_unique_hex(self):
        ids = {new_id() for _ in range(50)}
        assert len(ids) == 50
        assert all(len(i) == 24 for i in ids)

    def test_slugify(self):
        assert slugify("Physics (11th & 12th)") == "physics-11th-12th"
        assert slugify("Química Orgánica") == "quimica-organica"
        assert is_slug("physics-11th-12th")
        assert not is_slug("Physics 11")

    def test_slugify_empty(self):
        with pytest.raises(ValueError):
            slugify("***")
