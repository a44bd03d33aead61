import sys

from .config import get_settings
from .db import get_engine, init_db
from .providers import provider_from_settings
from .stores import SqlRowStore
from .tracker import ReimbursementTracker


def build_tracker() -> ReimbursementTracker:
    settings = get_settings()
    init_db()
    return ReimbursementTracker(
        settings=settings,
        store=SqlRowStore(get_engine()),
        sync_provider=provider_from_settings(settings),
    )


def seed_tables(tracker: ReimbursementTracker) -> bool:
    result = tracker.initialize()
    if not result["success"]:
        print(f"ERROR: {result['error']}")
        return False
    print(f"{result['message']} ({len(result['headers'])} columns)")

    result = tracker.initialize_reference_data()
    if not result["success"]:
        print(f"ERROR: {result['error']}")
        return False
    print(result["message"])
    return True


def show_summary(tracker: ReimbursementTracker) -> bool:
    result = tracker.get_summary({})
    if not result["success"]:
        print(f"ERROR: {result['error']}")
        return False

    s = result["summary"]
    print("REIMBURSEMENT SUMMARY")
    print(f"  Total Claimed:  {s['totalClaimed']:,.2f}")
    print(f"  Total Approved: {s['totalApproved']:,.2f}")
    print(f"  Total Paid:     {s['totalPaid']:,.2f}")
    print(f"  Total Pending:  {s['totalPending']:,.2f}")
    print(f"  Total Claims:   {s['count']}")
    for src in result["bySource"]:
        print(f"  - {src['source']}: {src['claimed']:,.2f} ({src['count']} claims)")
    return True


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    command = argv[0] if argv else "init"

    tracker = build_tracker()
    if command == "init":
        return 0 if seed_tables(tracker) else 1
    if command == "summary":
        return 0 if show_summary(tracker) else 1

    print(f"Unknown command: {command} (expected 'init' or 'summary')")
    return 2


if __name__ == "__main__":
    sys.exit(main())
