#!/usr/bin/env python3
"""
Quick verification that the project board works end-to-end.
"""
from datetime import datetime, timezone

from pkg.projectboard.board import ProjectBoard
from pkg.projectboard.config import BoardConfig, configure_logging
from pkg.projectboard.schema import Project, ProjectStatus
from pkg.projectboard.store import ProjectStore


def main():
    print("=" * 60)
    print("Project Board Verification")
    print("=" * 60)

    cfg = BoardConfig.load()
    configure_logging(cfg)

    print("\n[1/5] Creating store with one Todo project...")
    store = ProjectStore([
        Project(id="1", title="First", due_date=datetime.now(timezone.utc)),
    ])
    board = ProjectBoard(store=store, config=cfg)
    outputs = board.connect()

    latest = {}
    for status in ProjectStatus:
        outputs.for_status(status).projects.subscribe(
            lambda projects, status=status: latest.__setitem__(status, [p.id for p in projects])
        )
    _show(latest)

    print("\n[2/5] Adding project 2...")
    board.router.add(Project(id="2", title="Second"))
    _show(latest)

    print("\n[3/5] Moving project 1 to Done...")
    board.router.change_status("1", ProjectStatus.DONE)
    _show(latest)

    print("\n[4/5] Deleting project 2...")
    board.router.delete("2")
    _show(latest)

    print("\n[5/5] Deleting project 2 again...")
    board.router.delete("2")
    _show(latest)

    board.close()

    assert latest[ProjectStatus.TODO] == []
    assert latest[ProjectStatus.DOING] == []
    assert latest[ProjectStatus.DONE] == ["1"]

    print("\n" + "=" * 60)
    print("✅ ALL CHECKS PASSED")
    print("=" * 60)


def _show(latest):
    for status in ProjectStatus:
        print(f"   {status.title:<6} {latest.get(status, [])}")


if __name__ == "__main__":
    main()
