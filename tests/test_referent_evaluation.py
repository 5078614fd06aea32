import pytest

from conftest import referent_entries, self_entries
from app.exceptions import AuthorizationError, NotFoundError, StaleStateError, ValidationError
from app.models.evaluation import EvaluationStatus, status_at_least
from app.services.referent_evaluation import (
    finalize_evaluation,
    get_evaluation,
    referent_context,
    reject_evaluation,
    submit_referent_evaluation,
)
from app.services.self_evaluation import save_self_evaluation_draft, submit_self_evaluation


@pytest.fixture
def self_evaluated(db_session, employee, submitted_set):
    objective_set = submitted_set(employee)
    evaluation = submit_self_evaluation(
        db_session, employee.id, objective_set.id, self_entries(objective_set, [3, 4, 5])
    )
    return objective_set, evaluation


class TestReferentSubmission:
    def test_submit_moves_to_evaluated(self, db_session, referent, self_evaluated):
        objective_set, evaluation = self_evaluated
        result = submit_referent_evaluation(
            db_session, referent.id, evaluation.id, referent_entries(objective_set, [4, 4, 4])
        )
        assert result.status == EvaluationStatus.evaluated_by_referent.value
        assert result.referent_id == referent.id
        assert result.referent_submitted_at is not None
        assert len(result.referent_entries) == len(result.self_entries)
        assert status_at_least(result.status, EvaluationStatus.evaluated_by_referent)

    def test_amendment_keeps_status(self, db_session, referent, self_evaluated):
        objective_set, evaluation = self_evaluated
        submit_referent_evaluation(db_session, referent.id, evaluation.id, referent_entries(objective_set, [4, 4, 4]))
        amended = submit_referent_evaluation(
            db_session, referent.id, evaluation.id, referent_entries(objective_set, [5, 4, 3])
        )
        assert amended.status == EvaluationStatus.evaluated_by_referent.value
        assert [e["score"] for e in amended.referent_entries] == [5, 4, 3]

    def test_draft_self_evaluation_is_stale(self, db_session, employee, referent, submitted_set):
        objective_set = submitted_set(employee)
        draft = save_self_evaluation_draft(
            db_session, employee.id, objective_set.id,
            [{"objective_id": o["id"]} for o in objective_set.objectives],
        )
        with pytest.raises(StaleStateError):
            submit_referent_evaluation(db_session, referent.id, draft.id, referent_entries(objective_set, [3, 3, 3]))

    def test_length_must_match(self, db_session, referent, self_evaluated):
        objective_set, evaluation = self_evaluated
        with pytest.raises(ValidationError):
            submit_referent_evaluation(
                db_session, referent.id, evaluation.id, referent_entries(objective_set, [4, 4])
            )

    def test_required_fields(self, db_session, referent, self_evaluated):
        objective_set, evaluation = self_evaluated
        entries = referent_entries(objective_set, [4, 4, 4])
        entries[0]["overall_performance"] = ""
        with pytest.raises(ValidationError) as exc:
            submit_referent_evaluation(db_session, referent.id, evaluation.id, entries)
        assert "overall_performance" in exc.value.detail

    def test_only_the_project_referent(self, db_session, employee, self_evaluated):
        objective_set, evaluation = self_evaluated
        with pytest.raises(AuthorizationError):
            submit_referent_evaluation(db_session, employee.id, evaluation.id, referent_entries(objective_set, [4, 4, 4]))

    def test_unknown_evaluation(self, db_session, referent):
        with pytest.raises(NotFoundError):
            submit_referent_evaluation(db_session, referent.id, "missing", [])

    def test_employee_cannot_resubmit_after_referent(self, db_session, employee, referent, self_evaluated):
        objective_set, evaluation = self_evaluated
        submit_referent_evaluation(db_session, referent.id, evaluation.id, referent_entries(objective_set, [4, 4, 4]))
        with pytest.raises(StaleStateError):
            submit_self_evaluation(db_session, employee.id, objective_set.id, self_entries(objective_set, [5, 5, 5]))


class TestReferentContext:
    def test_pairs_objectives_with_self_entries(self, db_session, referent, self_evaluated):
        objective_set, evaluation = self_evaluated
        context = referent_context(db_session, referent.id, evaluation.id)
        assert [item.index for item in context.items] == [0, 1, 2]
        for item, objective in zip(context.items, objective_set.objectives):
            assert item.objective.id == objective["id"]
            assert item.self_entry.objective_id == objective["id"]
            assert item.referent_entry is None
        assert [item.self_entry.score for item in context.items] == [3, 4, 5]

    def test_strangers_cannot_read(self, db_session, make_user, self_evaluated):
        _, evaluation = self_evaluated
        with pytest.raises(AuthorizationError):
            get_evaluation(db_session, make_user("Sam Stranger").id, evaluation.id)


class TestClosing:
    @pytest.fixture
    def evaluated(self, db_session, referent, self_evaluated):
        objective_set, evaluation = self_evaluated
        return submit_referent_evaluation(
            db_session, referent.id, evaluation.id, referent_entries(objective_set, [4, 4, 4])
        )

    def test_coach_finalizes(self, db_session, coach, evaluated):
        result = finalize_evaluation(db_session, coach.id, evaluated.id)
        assert result.status == EvaluationStatus.finalized.value
        assert result.closed_by == coach.id
        assert result.closed_at is not None

    def test_admin_rejects(self, db_session, admin, evaluated):
        result = reject_evaluation(db_session, admin.id, evaluated.id, is_admin=True)
        assert result.status == EvaluationStatus.rejected.value
        assert not status_at_least(result.status, EvaluationStatus.draft_self)

    def test_referent_cannot_close(self, db_session, referent, evaluated):
        with pytest.raises(AuthorizationError):
            finalize_evaluation(db_session, referent.id, evaluated.id)

    def test_cannot_close_twice(self, db_session, coach, evaluated):
        finalize_evaluation(db_session, coach.id, evaluated.id)
        with pytest.raises(StaleStateError):
            reject_evaluation(db_session, coach.id, evaluated.id)

    def test_cannot_close_before_referent(self, db_session, coach, self_evaluated):
        _, evaluation = self_evaluated
        with pytest.raises(StaleStateError):
            finalize_evaluation(db_session, coach.id, evaluation.id)


class TestReferentEndpoints:
    def test_full_flow_over_http(self, client, login, employee, referent, coach, self_evaluated):
        objective_set, evaluation = self_evaluated

        login(referent)
        res = client.get(f"/evaluations/{evaluation.id}/referent-context")
        assert res.status_code == 200
        assert len(res.json()["items"]) == 3

        res = client.put(
            f"/evaluations/{evaluation.id}/referent-evaluation",
            json={"entries": referent_entries(objective_set, [4, 4, 4])},
        )
        assert res.status_code == 200, res.text
        assert res.json()["status"] == "evaluated_by_referent"

        login(coach)
        res = client.post(f"/evaluations/{evaluation.id}/finalize")
        assert res.status_code == 200
        assert res.json()["status"] == "finalized"

        login(employee)
        res = client.get(f"/evaluations/{evaluation.id}")
        assert res.status_code == 200
        assert len(res.json()["referent_evaluation"]["entries"]) == 3

    def test_referent_on_draft_is_409(self, client, login, db_session, employee, referent, submitted_set):
        objective_set = submitted_set(employee)
        draft = save_self_evaluation_draft(
            db_session, employee.id, objective_set.id,
            [{"objective_id": o["id"]} for o in objective_set.objectives],
        )
        login(referent)
        res = client.put(
            f"/evaluations/{draft.id}/referent-evaluation",
            json={"entries": referent_entries(objective_set, [3, 3, 3])},
        )
        assert res.status_code == 409
