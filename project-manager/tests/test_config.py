"""Tests for configuration, shared store and board wiring from config."""
from pathlib import Path

from pkg.projectboard.board import ProjectBoard
from pkg.projectboard.config import BoardConfig
from pkg.projectboard.schema import ProjectStatus
from pkg.projectboard.seed import demo_projects
from pkg.projectboard.store import build_store, get_shared_store, reset_shared_store


def test_defaults_when_file_missing(tmp_path):
    cfg = BoardConfig.load(str(tmp_path / "missing.yaml"))
    assert cfg.db_path is None
    assert cfg.strict is False
    assert cfg.log_level == "INFO"


def test_load_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "db_path: ~/boards/main.db\n"
        "strict: true\n"
        "log_level: debug\n"
        "unknown_key: ignored\n"
    )
    cfg = BoardConfig.load(str(path))
    assert cfg.db_path == str(Path.home() / "boards" / "main.db")
    assert cfg.strict is True
    assert cfg.log_level == "DEBUG"


def test_unreadable_yaml_falls_back(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("db_path: [unclosed\n")
    cfg = BoardConfig.load(str(path))
    assert cfg == BoardConfig()


def test_environment_overrides(tmp_path, monkeypatch):
    db = tmp_path / "env.db"
    monkeypatch.setenv("PROJECTBOARD_DB", str(db))
    monkeypatch.setenv("PROJECTBOARD_STRICT", "yes")
    monkeypatch.setenv("PROJECTBOARD_LOG_LEVEL", "warning")
    cfg = BoardConfig.load(str(tmp_path / "missing.yaml"))
    assert cfg.db_path == str(db)
    assert cfg.strict is True
    assert cfg.log_level == "WARNING"


def test_seeded_store():
    store = build_store(BoardConfig(seed_demo_data=True))
    assert len(store) == len(demo_projects())
    for status in ProjectStatus:
        assert store.list_by_status(status)


def test_seed_skipped_for_existing_database(tmp_path):
    cfg = BoardConfig(db_path=str(tmp_path / "board.db"), seed_demo_data=True)
    first = build_store(cfg)
    first.delete(first.all()[0].id)

    second = build_store(cfg)
    assert len(second) == len(demo_projects()) - 1


def test_shared_store_is_built_once():
    first = get_shared_store(BoardConfig(seed_demo_data=True))
    second = get_shared_store()
    assert first is second
    assert len(second) == len(demo_projects())

    reset_shared_store()
    assert get_shared_store() is not first


def test_board_from_config_shares_store():
    cfg = BoardConfig(use_shared_store=True)
    one = ProjectBoard.from_config(cfg)
    two = ProjectBoard.from_config(cfg)
    assert one.store is two.store

    outputs = one.connect()
    seen = []
    two.connect().todo.projects.subscribe(lambda ps: seen.append(len(ps)))
    one.router.add(demo_projects()[0])
    # two's Todo column re-reads the shared store on its next emission
    two.router.delete("no-such-id")
    assert seen == [0, 1]
    assert outputs.todo.projects.value[0].title == demo_projects()[0].title
    one.close()
    two.close()


def test_board_from_config_with_database(tmp_path):
    cfg = BoardConfig(db_path=str(tmp_path / "board.db"), use_shared_store=False)
    with ProjectBoard.from_config(cfg) as board:
        board.router.add(demo_projects()[0])

    reopened = ProjectBoard.from_config(cfg)
    assert len(reopened.store) == 1
