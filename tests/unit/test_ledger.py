"""Unit tests for the cost ledger: add_cost, remove_cost, total_cost, costs_by_task."""
from decimal import Decimal

import pytest

from purchase_workflow.core.catalog import TRANSPORT_STAGE
from purchase_workflow.core.cost import CostDraft
from purchase_workflow.core.errors import UnknownTaskError, ValidationError, ValidationErrorKind
from purchase_workflow.engine.ledger import (
    add_cost,
    costs_by_task,
    remove_cost,
    remove_completion_costs,
    stage_currency,
    total_cost,
)
from purchase_workflow.engine.stages import create_stage
from tests.mocks import T0, make_attachment


def _draft(amount="50000", description="Truck to yard", task_key="transport_arranged", currency=None, **kw):
    return CostDraft(task_key=task_key, description=description, amount=Decimal(amount), currency=currency, **kw)


@pytest.fixture
def stage():
    return create_stage(TRANSPORT_STAGE)


class TestAddCost:
    def test_appends_entry_with_audit_fields(self, stage):
        updated = add_cost(stage, _draft(), "Kenji", "JPY", now=T0)

        assert len(updated.costs) == 1
        entry = updated.costs[0]
        assert entry.id
        assert entry.task_key == "transport_arranged"
        assert entry.description == "Truck to yard"
        assert entry.amount == Decimal("50000")
        assert entry.currency == "JPY"
        assert entry.created_by == "Kenji"
        assert entry.created_at == T0
        assert entry.recorded_on_completion is False

    def test_input_stage_unchanged(self, stage):
        add_cost(stage, _draft(), "Kenji", "JPY")
        assert stage.costs == ()

    def test_generates_unique_ids(self, stage):
        stage = add_cost(stage, _draft(), "Kenji", "JPY")
        stage = add_cost(stage, _draft(), "Kenji", "JPY")
        assert stage.costs[0].id != stage.costs[1].id

    def test_explicit_currency_wins_over_default(self, stage):
        updated = add_cost(stage, _draft(currency="usd"), "Kenji", "JPY")
        assert updated.costs[0].currency == "USD"

    def test_keeps_attachment(self, stage):
        invoice = make_attachment()
        updated = add_cost(stage, _draft(attachment=invoice), "Kenji", "JPY")
        assert updated.costs[0].attachment == invoice

    def test_strips_description(self, stage):
        updated = add_cost(stage, _draft(description="  Truck  "), "Kenji", "JPY")
        assert updated.costs[0].description == "Truck"

    def test_cost_does_not_change_status(self, stage):
        updated = add_cost(stage, _draft(), "Kenji", "JPY")
        assert updated.status == stage.status


class TestAddCostValidation:
    @pytest.mark.parametrize("description", ["", "   "])
    def test_rejects_empty_description(self, stage, description):
        with pytest.raises(ValidationError) as exc_info:
            add_cost(stage, _draft(description=description), "Kenji", "JPY")
        assert exc_info.value.kind == ValidationErrorKind.EMPTY_DESCRIPTION
        assert exc_info.value.code == "empty_description"

    @pytest.mark.parametrize("amount", ["0", "-1", "-0.01"])
    def test_rejects_non_positive_amount(self, stage, amount):
        with pytest.raises(ValidationError) as exc_info:
            add_cost(stage, _draft(amount=amount), "Kenji", "JPY")
        assert exc_info.value.kind == ValidationErrorKind.NON_POSITIVE_AMOUNT

    def test_empty_description_reported_before_amount(self, stage):
        with pytest.raises(ValidationError) as exc_info:
            add_cost(stage, _draft(description="", amount="0"), "Kenji", "JPY")
        assert exc_info.value.kind == ValidationErrorKind.EMPTY_DESCRIPTION

    def test_rejects_second_currency_in_stage(self, stage):
        stage = add_cost(stage, _draft(), "Kenji", "JPY")
        with pytest.raises(ValidationError) as exc_info:
            add_cost(stage, _draft(currency="USD"), "Kenji", "JPY")
        assert exc_info.value.kind == ValidationErrorKind.CURRENCY_MISMATCH
        assert len(stage.costs) == 1

    def test_rejects_unknown_task_when_schema_given(self, stage):
        with pytest.raises(UnknownTaskError):
            add_cost(stage, _draft(task_key="booking_requested"), "Kenji", "JPY", schema=TRANSPORT_STAGE)

    def test_rejects_task_that_does_not_capture_costs(self, stage):
        with pytest.raises(ValidationError) as exc_info:
            add_cost(stage, _draft(task_key="yard_notified"), "Kenji", "JPY", schema=TRANSPORT_STAGE)
        assert exc_info.value.kind == ValidationErrorKind.COST_NOT_ALLOWED

    @pytest.mark.parametrize("task_key", ["transport_arranged", "photos_requested"])
    def test_accepts_cost_capturing_tasks(self, stage, task_key):
        updated = add_cost(stage, _draft(task_key=task_key), "Kenji", "JPY", schema=TRANSPORT_STAGE)
        assert updated.costs[0].task_key == task_key

    def test_any_task_key_accepted_without_schema(self, stage):
        updated = add_cost(stage, _draft(task_key="misc"), "Kenji", "JPY")
        assert updated.costs[0].task_key == "misc"


class TestRemoveCost:
    def test_removes_entry(self, stage):
        stage = add_cost(stage, _draft(amount="100"), "Kenji", "JPY")
        stage = add_cost(stage, _draft(amount="200"), "Kenji", "JPY")
        first_id = stage.costs[0].id

        updated = remove_cost(stage, first_id)

        assert [c.amount for c in updated.costs] == [Decimal("200")]

    def test_unknown_id_is_noop(self, stage):
        stage = add_cost(stage, _draft(), "Kenji", "JPY")
        assert remove_cost(stage, "does-not-exist") is stage

    def test_remove_completion_costs_only_touches_flagged_entries(self, stage):
        stage = add_cost(stage, _draft(amount="100"), "Kenji", "JPY")
        stage = add_cost(stage, _draft(amount="200"), "Kenji", "JPY", recorded_on_completion=True)
        stage = add_cost(
            stage, _draft(amount="300", task_key="photos_requested"), "Kenji", "JPY",
            recorded_on_completion=True,
        )

        updated = remove_completion_costs(stage, "transport_arranged")

        assert [c.amount for c in updated.costs] == [Decimal("100"), Decimal("300")]


class TestTotals:
    def test_empty_ledger_totals_zero(self, stage):
        assert total_cost(stage) == Decimal("0")
        assert stage_currency(stage) is None

    def test_total_tracks_add_and_remove_sequence(self, stage):
        amounts = ["50000", "1200.50", "3000", "99.99"]
        for amount in amounts:
            stage = add_cost(stage, _draft(amount=amount), "Kenji", "JPY")
        assert total_cost(stage) == sum(Decimal(a) for a in amounts)

        stage = remove_cost(stage, stage.costs[1].id)
        stage = remove_cost(stage, "missing")
        assert total_cost(stage) == sum(c.amount for c in stage.costs)
        assert total_cost(stage) == Decimal("53099.99")

    def test_costs_by_task(self, stage):
        stage = add_cost(stage, _draft(amount="100"), "Kenji", "JPY")
        stage = add_cost(stage, _draft(amount="50", task_key="photos_requested"), "Kenji", "JPY")
        stage = add_cost(stage, _draft(amount="25"), "Kenji", "JPY")

        assert costs_by_task(stage) == {
            "transport_arranged": Decimal("125"),
            "photos_requested": Decimal("50"),
        }

    def test_stage_currency_from_first_entry(self, stage):
        stage = add_cost(stage, _draft(), "Kenji", "JPY")
        assert stage_currency(stage) == "JPY"
