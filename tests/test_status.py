from reimbursement_tracker.models import CLAIM_HEADERS, CLAIMS_TABLE
from reimbursement_tracker.providers import BudgetSyncProviderBase, SimulatedBudgetSyncProvider
from reimbursement_tracker.tracker import ReimbursementTracker

from helpers import add_claim, append_raw_claim


def get_claim(tracker, claim_id):
    for claim in tracker.list_reimbursements({"limit": 1000})["reimbursements"]:
        if claim["reimbursementId"] == claim_id:
            return claim
    raise AssertionError(f"claim {claim_id} not listed")


class ExplodingProvider(BudgetSyncProviderBase):
    def update_net_cost(self, transaction_id, amount_reimbursed):
        raise ConnectionError("budget system unreachable")


class EmptyResponseProvider(BudgetSyncProviderBase):
    def update_net_cost(self, transaction_id, amount_reimbursed):
        return None


class TestStatusChanges:
    def test_invalid_status_is_rejected(self, tracker, clock):
        claim_id = add_claim(tracker, clock)

        result = tracker.update_status({"reimbursementId": claim_id, "status": "archived"})

        assert result["success"] is False
        assert result["error"].startswith("Invalid status")
        assert get_claim(tracker, claim_id)["status"] == "pending"

    def test_status_is_case_insensitive(self, tracker, clock):
        claim_id = add_claim(tracker, clock)
        result = tracker.update_status({"reimbursementId": claim_id, "status": "REJECTED"})
        assert result["newStatus"] == "rejected"
        assert result["updatedFields"] == ["status -> rejected"]

    def test_unknown_claim(self, tracker, clock):
        add_claim(tracker, clock)
        result = tracker.update_status({"reimbursementId": "R-404", "status": "paid"})
        assert result == {"success": False, "error": "Reimbursement not found: R-404"}

    def test_id_is_required(self, tracker):
        result = tracker.update_status({"status": "paid"})
        assert result == {"success": False, "error": "reimbursementId is required"}

    def test_approved_stamps_approved_date(self, tracker, clock):
        claim_id = add_claim(tracker, clock)

        result = tracker.update_status({"reimbursementId": claim_id, "status": "approved"})

        assert result["updatedFields"] == ["status -> approved", "approvedDate"]
        claim = get_claim(tracker, claim_id)
        assert claim["approvedDate"] == "2024-05-01"
        assert claim["paidDate"] is None

    def test_approved_uses_explicit_date(self, tracker, clock):
        claim_id = add_claim(tracker, clock)
        result = tracker.update_status({
            "reimbursementId": claim_id, "status": "approved", "approvedDate": "2024-04-20",
        })
        assert result["updatedFields"] == ["status -> approved", "approvedDate"]
        assert get_claim(tracker, claim_id)["approvedDate"] == "2024-04-20"

    def test_paid_does_not_restamp_approved_date(self, tracker, clock):
        claim_id = add_claim(tracker, clock)
        tracker.update_status({"reimbursementId": claim_id, "status": "approved", "approvedDate": "2024-04-20"})
        clock.advance(days=10)

        result = tracker.update_status({"reimbursementId": claim_id, "status": "paid"})

        assert "approvedDate" not in result["updatedFields"]
        claim = get_claim(tracker, claim_id)
        assert claim["approvedDate"] == "2024-04-20"
        assert claim["paidDate"] == "2024-05-11"

    def test_paid_from_pending_stamps_both_dates(self, tracker, clock):
        claim_id = add_claim(tracker, clock)
        tracker.update_status({"reimbursementId": claim_id, "status": "paid", "paidDate": "2024-04-30"})
        claim = get_claim(tracker, claim_id)
        assert claim["approvedDate"] == "2024-05-01"
        assert claim["paidDate"] == "2024-04-30"

    def test_repeated_paid_keeps_first_paid_date(self, tracker, clock):
        claim_id = add_claim(tracker, clock)
        tracker.update_status({"reimbursementId": claim_id, "status": "paid"})
        clock.advance(days=3)
        tracker.update_status({"reimbursementId": claim_id, "status": "paid"})
        assert get_claim(tracker, claim_id)["paidDate"] == "2024-05-01"

    def test_explicit_approved_date_overwrites_without_status(self, tracker, clock):
        claim_id = add_claim(tracker, clock, status="approved", approvedDate="2024-04-01")

        result = tracker.update_status({"reimbursementId": claim_id, "approvedDate": "2024-04-05"})

        assert result["updatedFields"] == ["approvedDate -> 2024-04-05"]
        assert get_claim(tracker, claim_id)["approvedDate"] == "2024-04-05"

    def test_hand_entered_approved_date_is_not_restamped(self, tracker, store):
        append_raw_claim(
            store, ReimbursementID="R-legacy", Category="hmo", Source="Acme",
            Description="Dental", AmountClaimed=800, Status="pending",
            ApprovedDate="early April",
        )

        result = tracker.update_status({"reimbursementId": "R-legacy", "status": "approved"})

        assert result["updatedFields"] == ["status -> approved"]
        row = store.read_rows(CLAIMS_TABLE)[0]
        assert row[CLAIM_HEADERS.index("ApprovedDate")] == "early April"


class TestFieldUpdates:
    def test_field_updates_and_descriptions(self, tracker, clock):
        claim_id = add_claim(tracker, clock)

        result = tracker.update_status({
            "reimbursementId": claim_id,
            "claimId": "67-RM1",
            "claimType": "OT",
            "benefitType": "optical",
            "description": "Eyeglasses",
            "amountApproved": 0,
            "amountDisapproved": "250",
            "submittedDate": "2024-04-12",
            "receiptNumber": "OR-7",
        })

        assert result["updatedFields"] == [
            "claimId -> 67-RM1",
            "claimType -> OT",
            "benefitType -> optical",
            "description",
            "amountApproved -> 0.0",
            "amountDisapproved -> 250.0",
            "submittedDate -> 2024-04-12",
            "receiptNumber -> OR-7",
        ]
        claim = get_claim(tracker, claim_id)
        assert claim["claimId"] == "67-RM1"
        assert claim["reimbursementId"] == claim_id
        assert claim["description"] == "Eyeglasses"
        assert claim["amountDisapproved"] == 250
        assert claim["submittedDate"] == "2024-04-12"

    def test_notes_are_appended(self, tracker, clock):
        claim_id = add_claim(tracker, clock, notes="Filed online")

        tracker.update_status({"reimbursementId": claim_id, "notes": "Called HMO"})
        tracker.update_status({"reimbursementId": claim_id, "notes": "Approved by phone"})

        assert get_claim(tracker, claim_id)["notes"] == "Filed online | Called HMO | Approved by phone"

    def test_notes_on_empty(self, tracker, clock):
        claim_id = add_claim(tracker, clock)
        tracker.update_status({"reimbursementId": claim_id, "notes": "Called HMO"})
        assert get_claim(tracker, claim_id)["notes"] == "Called HMO"

    def test_updated_at_is_stamped(self, tracker, clock):
        claim_id = add_claim(tracker, clock)
        clock.advance(hours=2)
        tracker.update_status({"reimbursementId": claim_id})
        assert get_claim(tracker, claim_id)["updatedAt"] == clock.now.isoformat()


class TestNetCostSync:
    def test_paid_with_link_syncs_claimed_amount(self, tracker, clock, sync_provider):
        claim_id = add_claim(tracker, clock, amountClaimed=1200, linkedTransactionId="TX-9")

        result = tracker.update_status({"reimbursementId": claim_id, "status": "paid"})

        assert sync_provider.calls == [("TX-9", 1200)]
        assert result["syncResult"]["success"] is True
        assert "syncWarning" not in result

    def test_paid_with_link_syncs_approved_amount(self, tracker, clock, sync_provider):
        claim_id = add_claim(tracker, clock, amountClaimed=1200, linkedTransactionId="TX-9")
        tracker.update_status({"reimbursementId": claim_id, "status": "paid", "amountApproved": 1000})
        assert sync_provider.calls == [("TX-9", 1000)]

    def test_no_sync_without_link(self, tracker, clock, sync_provider):
        claim_id = add_claim(tracker, clock)
        result = tracker.update_status({"reimbursementId": claim_id, "status": "paid"})
        assert sync_provider.calls == []
        assert "syncResult" not in result

    def test_no_sync_for_non_paid_status(self, tracker, clock, sync_provider):
        claim_id = add_claim(tracker, clock, linkedTransactionId="TX-9")
        tracker.update_status({"reimbursementId": claim_id, "status": "approved"})
        assert sync_provider.calls == []

    def test_no_sync_when_not_configured(self, settings, store, clock):
        tracker = ReimbursementTracker(settings, store, sync_provider=None, clock=clock)
        claim_id = add_claim(tracker, clock, linkedTransactionId="TX-9")

        result = tracker.update_status({"reimbursementId": claim_id, "status": "paid"})

        assert result["success"] is True
        assert "syncResult" not in result
        assert "syncWarning" not in result

    def test_rejected_sync_keeps_status_change(self, settings, store, clock):
        provider = SimulatedBudgetSyncProvider(force_fail=True)
        tracker = ReimbursementTracker(settings, store, sync_provider=provider, clock=clock)
        claim_id = add_claim(tracker, clock, linkedTransactionId="TX-9")

        result = tracker.update_status({"reimbursementId": claim_id, "status": "paid"})

        assert result["success"] is True
        assert result["syncWarning"] == "NetCost sync failed: Transaction not found: TX-9"
        assert get_claim(tracker, claim_id)["status"] == "paid"

    def test_sync_exception_keeps_status_change(self, settings, store, clock):
        tracker = ReimbursementTracker(settings, store, sync_provider=ExplodingProvider(), clock=clock)
        claim_id = add_claim(tracker, clock, linkedTransactionId="TX-9")

        result = tracker.update_status({"reimbursementId": claim_id, "status": "paid", "notes": "Bank credit"})

        assert result["success"] is True
        assert result["syncWarning"] == "NetCost sync failed: budget system unreachable"
        claim = get_claim(tracker, claim_id)
        assert claim["status"] == "paid"
        assert claim["paidDate"] == "2024-05-01"
        assert claim["notes"] == "Bank credit"

    def test_empty_sync_response_keeps_update(self, settings, store, clock):
        tracker = ReimbursementTracker(settings, store, sync_provider=EmptyResponseProvider(), clock=clock)
        claim_id = add_claim(tracker, clock, linkedTransactionId="TX-9")

        result = tracker.update_status({"reimbursementId": claim_id, "status": "paid", "notes": "n1"})

        assert result["success"] is True
        assert result["syncWarning"] == "NetCost sync failed: unexpected response from budget system"
        claim = get_claim(tracker, claim_id)
        assert claim["status"] == "paid"
        assert claim["notes"] == "n1"
        assert claim["updatedAt"] == clock().isoformat()

    def test_zero_approved_amount_syncs_claimed_amount(self, tracker, clock, sync_provider):
        claim_id = add_claim(tracker, clock, amountClaimed=1500, linkedTransactionId="TX-2")
        tracker.update_status({"reimbursementId": claim_id, "status": "paid", "amountApproved": 0})
        assert sync_provider.calls == [("TX-2", 1500)]
