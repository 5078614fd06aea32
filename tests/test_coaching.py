import pytest

from conftest import referent_entries, self_entries
from app.schemas.coaching import GapClassification
from app.services.coaching import (
    ALIGNED_TALKING_POINT,
    LARGE_GAP_TALKING_POINT,
    classify,
    coaching_summary,
    employee_rollups,
    list_coaching_rows,
    mean_score,
    round1,
    talking_point,
)
from app.services.referent_evaluation import finalize_evaluation, submit_referent_evaluation
from app.services.self_evaluation import submit_self_evaluation


def _scores(*values):
    return [{"score": v} for v in values]


class TestScoreRules:
    def test_mean_score(self):
        assert mean_score(_scores(3, 4, 5)) == 4.0
        assert mean_score(_scores(2, 3, 3)) == 2.7
        assert mean_score(_scores(1, 2)) == 1.5
        assert mean_score([]) is None

    def test_round_half_up(self):
        assert round1(2.25) == 2.3
        assert round1(2.35) == 2.4
        assert round1(-2.25) == -2.3

    @pytest.mark.parametrize("self_score,referent_score,expected", [
        (5.0, 2.7, GapClassification.over_evaluation),
        (2.0, 3.5, GapClassification.under_evaluation),
        (4.0, 4.0, GapClassification.aligned),
        (4.0, 3.0, GapClassification.aligned),
        (3.0, 4.0, GapClassification.aligned),
        (4.1, 3.0, GapClassification.over_evaluation),
    ])
    def test_classify(self, self_score, referent_score, expected):
        assert classify(self_score, referent_score, threshold=1.0) == expected

    def test_talking_points(self):
        assert talking_point(GapClassification.aligned) == ALIGNED_TALKING_POINT
        assert talking_point(GapClassification.over_evaluation) == LARGE_GAP_TALKING_POINT
        assert talking_point(GapClassification.under_evaluation) == LARGE_GAP_TALKING_POINT


@pytest.fixture
def evaluate(db_session, referent, submitted_set):
    """Run an employee through self and referent evaluation on a new project."""
    def _run(employee, self_scores, ref_scores, title="Data platform migration"):
        objective_set = submitted_set(employee, count=len(self_scores), title=title)
        evaluation = submit_self_evaluation(
            db_session, employee.id, objective_set.id, self_entries(objective_set, self_scores)
        )
        return submit_referent_evaluation(
            db_session, referent.id, evaluation.id, referent_entries(objective_set, ref_scores)
        )
    return _run


class TestCoachingRows:
    def test_aligned_row(self, db_session, coach, employee, evaluate):
        evaluate(employee, [3, 4, 5], [4, 4, 4])
        [row] = list_coaching_rows(db_session, coach.id)
        assert row.self_score == 4.0
        assert row.referent_score == 4.0
        assert row.final_score == 4.0
        assert row.score_delta == 0.0
        assert row.classification == GapClassification.aligned
        assert row.talking_point == ALIGNED_TALKING_POINT
        assert row.employee_name == "Emma Employee"
        assert row.referent_name == "Remy Referent"
        assert row.client_name == "Acme"
        assert len(row.objectives) == 3

    def test_over_evaluation_row(self, db_session, coach, employee, evaluate):
        evaluate(employee, [5, 5, 5], [2, 3, 3])
        [row] = list_coaching_rows(db_session, coach.id)
        assert row.self_score == 5.0
        assert row.referent_score == 2.7
        assert row.final_score == 2.7
        assert row.score_delta == -2.3
        assert row.classification == GapClassification.over_evaluation
        assert row.talking_point == LARGE_GAP_TALKING_POINT

    def test_only_referent_evaluated_and_own_coachees(
        self, db_session, coach, employee, make_user, submitted_set, evaluate
    ):
        other_coach = make_user("Oscar Coach")
        outsider = make_user("Olga Outsider", coach=other_coach)
        evaluate(outsider, [3], [3], title="Other team")

        # Self-evaluated only: not visible yet
        pending = submitted_set(employee, count=1, title="Pending review")
        submit_self_evaluation(db_session, employee.id, pending.id, self_entries(pending, [4]))

        evaluate(employee, [4], [4], title="Reviewed")
        rows = list_coaching_rows(db_session, coach.id)
        assert [r.project_title for r in rows] == ["Reviewed"]
        assert [r.project_title for r in list_coaching_rows(db_session, other_coach.id)] == ["Other team"]

    def test_finalized_rows_stay_visible(self, db_session, coach, employee, evaluate):
        evaluation = evaluate(employee, [4], [4])
        finalize_evaluation(db_session, coach.id, evaluation.id)
        [row] = list_coaching_rows(db_session, coach.id)
        assert row.evaluation_status == "finalized"

    def test_latest_referent_submission_first(self, db_session, coach, employee, evaluate):
        evaluate(employee, [3], [3], title="First")
        evaluate(employee, [4], [4], title="Second")
        rows = list_coaching_rows(db_session, coach.id)
        assert [r.project_title for r in rows] == ["Second", "First"]

    def test_employee_filter(self, db_session, coach, employee, make_user, evaluate):
        colleague = make_user("Colin Colleague", coach=coach)
        evaluate(employee, [4], [4], title="Mine")
        evaluate(colleague, [2], [3], title="Theirs")
        rows = list_coaching_rows(db_session, coach.id, employee_id=colleague.id)
        assert [r.employee_id for r in rows] == [colleague.id]


class TestRollups:
    def test_employee_rollups_and_summary(self, db_session, coach, employee, make_user, evaluate):
        colleague = make_user("Colin Colleague", coach=coach, department="Data")
        evaluate(employee, [3, 4, 5], [4, 4, 4], title="A")
        evaluate(employee, [5, 5, 5], [2, 3, 3], title="B")
        evaluate(colleague, [3], [5], title="C")

        rows = list_coaching_rows(db_session, coach.id)
        rollups = {r.employee_id: r for r in employee_rollups(rows)}
        mine = rollups[employee.id]
        assert mine.evaluation_count == 2
        assert mine.average_final_score == 3.4  # (4.0 + 2.7) / 2 = 3.35
        assert mine.last_submitted_at == max(r.submitted_at for r in rows if r.employee_id == employee.id)
        assert rollups[colleague.id].average_final_score == 5.0

        summary = coaching_summary(rows)
        assert summary.coachee_count == 2
        assert summary.evaluation_count == 3
        assert summary.average_final_score == 3.9  # (4.0 + 2.7 + 5.0) / 3 = 3.9

    def test_empty_summary(self):
        summary = coaching_summary([])
        assert summary.coachee_count == 0
        assert summary.average_final_score is None


class TestCoachingEndpoints:
    def test_rows_for_current_coach(self, client, login, coach, employee, evaluate):
        evaluate(employee, [5, 5, 5], [2, 3, 3])
        login(coach)
        res = client.get("/coaching/rows")
        assert res.status_code == 200
        [row] = res.json()
        assert row["classification"] == "over_evaluation"
        assert row["score_delta"] == -2.3

        res = client.get("/coaching/summary")
        assert res.json()["evaluation_count"] == 1

        res = client.get("/coaching/employees")
        assert res.json()[0]["employee_id"] == employee.id

    def test_admin_can_view_another_coach(self, client, login, admin, coach, employee, evaluate):
        evaluate(employee, [4], [4])
        login(admin)
        assert client.get("/coaching/rows").json() == []
        assert len(client.get("/coaching/rows", params={"coach_id": coach.id}).json()) == 1

    def test_non_admin_coach_id_is_ignored(self, client, login, employee, coach, evaluate):
        evaluate(employee, [4], [4])
        login(employee)
        assert client.get("/coaching/rows", params={"coach_id": coach.id}).json() == []
