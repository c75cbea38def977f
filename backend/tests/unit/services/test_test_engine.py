"""
Unit Tests for the Test Engine
Tests for: option shuffling, answer mapping, paper assembly, grading
"""
import random
import pytest

from cbt.core.exceptions import InvalidAnswerError
from cbt.models.question import Question, QuestionType
from cbt.schemas.test_result import SubmittedAnswer
from cbt.services import test_engine


def mc_question(qid: str, correct: int = 0, score: int = 1) -> Question:
    return Question(
        id=qid,
        subject="Mathematics",
        class_name="JSS1",
        term="First Term",
        question=f"Question {qid}",
        question_type=QuestionType.MULTIPLE_CHOICE,
        option_a="A",
        option_b="B",
        option_c="C",
        option_d="D",
        correct_answer=str(correct),
        score_per_question=score,
    )


def text_question(qid: str, qtype: QuestionType, expected: str) -> Question:
    return Question(
        id=qid,
        subject="English Language",
        class_name="JSS1",
        term="First Term",
        question="Fill in the blank",
        question_type=qtype,
        correct_answer_text=expected,
    )


class TestShuffleOptions:
    """Test option shuffling and the mapping it records"""

    def test_mapping_is_a_permutation(self):
        shuffled, mapping = test_engine.shuffle_options(["A", "B", "C", "D"], random.Random(3))

        assert sorted(mapping) == [0, 1, 2, 3]
        assert sorted(shuffled) == ["A", "B", "C", "D"]

    def test_mapping_points_back_to_original(self):
        options = ["alpha", "beta", "gamma", "delta"]
        shuffled, mapping = test_engine.shuffle_options(options, random.Random(11))

        for shuffled_index, original_index in enumerate(mapping):
            assert shuffled[shuffled_index] == options[original_index]

    def test_every_shuffled_pick_maps_back_to_the_same_option(self):
        """Whatever the student clicks maps to the option text they saw"""
        options = ["w", "x", "y", "z"]
        rng = random.Random(42)
        for _ in range(50):
            shuffled, mapping = test_engine.shuffle_options(options, rng)
            for picked in range(4):
                original = test_engine.map_answer_to_original(mapping, picked)
                assert options[original] == shuffled[picked]

    def test_seeded_rng_is_reproducible(self):
        first = test_engine.shuffle_options(["A", "B", "C", "D"], random.Random(7))
        second = test_engine.shuffle_options(["A", "B", "C", "D"], random.Random(7))

        assert first == second


class TestMapAnswerToOriginal:
    """Test translation from shuffled index to original index"""

    def test_identity_when_no_mapping(self):
        assert test_engine.map_answer_to_original(None, 2) == 2

    def test_uses_mapping(self):
        assert test_engine.map_answer_to_original([2, 0, 3, 1], 0) == 2
        assert test_engine.map_answer_to_original([2, 0, 3, 1], 3) == 1

    def test_rejects_non_permutation(self):
        with pytest.raises(InvalidAnswerError):
            test_engine.map_answer_to_original([0, 0, 1, 2], 1)

    def test_rejects_out_of_range_index(self):
        with pytest.raises(InvalidAnswerError):
            test_engine.map_answer_to_original([0, 1, 2, 3], 4)


class TestAssemblePaper:
    """Test paper assembly"""

    def test_correct_index_follows_the_shuffle(self):
        questions = [mc_question(f"q{i}", correct=i % 4) for i in range(8)]
        items = test_engine.assemble_paper(questions, 2, random.Random(5))
        by_id = {q.id: q for q in questions}

        for item in items:
            original = by_id[item.question_id]
            assert item.options[item.correct_index] == original.options[int(original.correct_answer)]

    def test_stamps_score_and_totals(self):
        questions = [mc_question(f"q{i}") for i in range(5)]
        items = test_engine.assemble_paper(questions, 3, random.Random(1))

        assert all(item.score_per_question == 3 for item in items)
        assert test_engine.total_possible_score(items) == 15

    def test_keeps_every_question_once(self):
        questions = [mc_question(f"q{i}") for i in range(10)]
        items = test_engine.assemble_paper(questions, 1, random.Random(9))

        assert sorted(item.question_id for item in items) == sorted(q.id for q in questions)

    def test_true_false_gets_fixed_options_without_mapping(self):
        question = Question(
            id="tf1",
            question="The sun is a star",
            question_type=QuestionType.TRUE_FALSE,
            correct_answer="true",
        )
        item = test_engine.build_paper_item(question, 1)

        assert item.options == ["True", "False"]
        assert item.option_mapping is None

    def test_text_questions_have_no_options(self):
        item = test_engine.build_paper_item(text_question("t1", QuestionType.FILL_BLANK, "Abuja"), 1)

        assert item.options is None
        assert item.correct_index is None


class TestIsCorrect:
    """Test per-type answer comparison"""

    def test_option_question_compares_indices(self):
        question = mc_question("q1", correct=2)

        assert test_engine.is_correct(question, 2) is True
        assert test_engine.is_correct(question, 1) is False

    def test_true_false_is_case_insensitive(self):
        question = Question(id="tf", question_type=QuestionType.TRUE_FALSE, correct_answer="false")

        assert test_engine.is_correct(question, "FALSE") is True
        assert test_engine.is_correct(question, "true") is False

    @pytest.mark.parametrize("qtype", [QuestionType.FILL_BLANK, QuestionType.ESSAY])
    def test_text_answers_trimmed_and_lowercased(self, qtype):
        question = text_question("t1", qtype, "Abuja")

        assert test_engine.is_correct(question, "  abuja ") is True
        assert test_engine.is_correct(question, "Lagos") is False

    def test_unanswered_is_wrong(self):
        assert test_engine.is_correct(mc_question("q1"), None) is False


class TestGradeSubmission:
    """Test grading a whole submission against the issued paper"""

    def test_seven_of_ten_at_two_points(self):
        questions = {f"q{i}": mc_question(f"q{i}", correct=0) for i in range(10)}
        answers = [
            SubmittedAnswer(question_id=f"q{i}", answer=0 if i < 7 else 1, option_mapping=[0, 1, 2, 3])
            for i in range(10)
        ]

        graded = test_engine.grade_submission(list(questions), questions, answers, 2)

        assert graded.score == 14
        assert graded.total_possible_score == 20
        assert graded.total_questions == 10
        assert graded.correct_count == 7

    def test_answers_stored_in_original_space(self):
        questions = {"q1": mc_question("q1", correct=3)}
        # Shuffled position 0 shows original option 3
        answers = [SubmittedAnswer(question_id="q1", answer=0, option_mapping=[3, 2, 1, 0])]

        graded = test_engine.grade_submission(["q1"], questions, answers, 1)

        assert graded.mapped_answers == {"q1": 3}
        assert graded.score == 1

    def test_unanswered_counts_toward_possible_score(self):
        questions = {"q1": mc_question("q1"), "q2": mc_question("q2")}
        answers = [
            SubmittedAnswer(question_id="q1", answer=0),
            SubmittedAnswer(question_id="q2", answer=None),
        ]

        graded = test_engine.grade_submission(["q1", "q2"], questions, answers, 1)

        assert graded.score == 1
        assert graded.total_possible_score == 2
        assert "q2" not in graded.mapped_answers

    def test_omitted_questions_still_count(self):
        questions = {f"q{i}": mc_question(f"q{i}") for i in range(5)}

        graded = test_engine.grade_submission(list(questions), questions,
                                              [SubmittedAnswer(question_id="q0", answer=0)], 1)

        assert graded.score == 1
        assert graded.total_questions == 5
        assert graded.total_possible_score == 5

    def test_mixed_question_types(self):
        questions = {
            "mc": mc_question("mc", correct=1),
            "tf": Question(id="tf", question_type=QuestionType.TRUE_FALSE, correct_answer="true"),
            "fb": text_question("fb", QuestionType.FILL_BLANK, "Nile"),
        }
        answers = [
            SubmittedAnswer(question_id="mc", answer=1),
            SubmittedAnswer(question_id="tf", answer=True),
            SubmittedAnswer(question_id="fb", answer="nile "),
        ]

        graded = test_engine.grade_submission(list(questions), questions, answers, 1)

        assert graded.correct_count == 3
        assert graded.mapped_answers["tf"] == "true"

    def test_question_off_the_paper_rejected(self):
        questions = {"q1": mc_question("q1"), "extra": mc_question("extra")}

        with pytest.raises(InvalidAnswerError, match="not on this paper"):
            test_engine.grade_submission(["q1"], questions, [SubmittedAnswer(question_id="extra", answer=0)], 1)

    def test_question_removed_from_bank_is_unanswered(self):
        graded = test_engine.grade_submission(["gone"], {}, [SubmittedAnswer(question_id="gone", answer=0)], 1)

        assert graded.score == 0
        assert graded.total_possible_score == 1
        assert graded.mapped_answers == {}

    def test_issued_mapping_used_when_client_omits_it(self):
        questions = {"q1": mc_question("q1", correct=3)}
        answers = [SubmittedAnswer(question_id="q1", answer=0)]

        graded = test_engine.grade_submission(["q1"], questions, answers, 1, {"q1": [3, 2, 1, 0]})

        assert graded.mapped_answers == {"q1": 3}
        assert graded.score == 1

    def test_mapping_disagreeing_with_issued_rejected(self):
        questions = {"q1": mc_question("q1", correct=3)}
        answers = [SubmittedAnswer(question_id="q1", answer=0, option_mapping=[3, 2, 1, 0])]

        with pytest.raises(InvalidAnswerError, match="does not match"):
            test_engine.grade_submission(["q1"], questions, answers, 1, {"q1": [0, 1, 2, 3]})

    def test_duplicate_answer_rejected(self):
        questions = {"q1": mc_question("q1")}
        answers = [
            SubmittedAnswer(question_id="q1", answer=0),
            SubmittedAnswer(question_id="q1", answer=1),
        ]

        with pytest.raises(InvalidAnswerError):
            test_engine.grade_submission(["q1"], questions, answers, 1)

    def test_non_index_answer_to_option_question_rejected(self):
        questions = {"q1": mc_question("q1")}

        with pytest.raises(InvalidAnswerError):
            test_engine.grade_submission(["q1"], questions, [SubmittedAnswer(question_id="q1", answer="B")], 1)
