"""
Project storage.

ProjectStore is the single source of truth for the board: an in-memory
mapping id → Project guarded by a lock. An optional SQLiteProjectRepository
gives it load-all-on-start and save-on-mutation persistence.
"""
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Dict, List, Optional

from .errors import DuplicateIdError, NotFoundError
from .schema import Project, ProjectStatus
from .seed import demo_projects

logger = logging.getLogger(__name__)


MEMORY_DB = ":memory:"


def _connect(db_path: str) -> sqlite3.Connection:
    """Open a connection with row access by name and WAL mode."""
    conn = sqlite3.connect(db_path, check_same_thread=db_path != MEMORY_DB)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


class SQLiteProjectRepository:
    """SQLite persistence adapter for ProjectStore."""

    def __init__(self, db_path: str):
        """Initialize repository and create tables if needed."""
        self.db_path = db_path
        # An in-memory database lives only as long as its connection
        self._memory_conn = _connect(db_path) if db_path == MEMORY_DB else None
        if self._memory_conn is None:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        if self._memory_conn is not None:
            return self._memory_conn
        return _connect(self.db_path)

    def _init_schema(self):
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS projects (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT,
                    due_date TEXT,
                    status TEXT DEFAULT 'todo',
                    position INTEGER NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_projects_status ON projects(status)")
            conn.commit()

    def save(self, project: Project) -> bool:
        """Insert or update a project, keeping its first position."""
        try:
            with self._connect() as conn:
                data = project.to_dict()
                conn.execute("""
                    INSERT INTO projects (id, title, description, due_date, status, position)
                    VALUES (?, ?, ?, ?, ?, (SELECT COALESCE(MAX(position), 0) + 1 FROM projects))
                    ON CONFLICT(id) DO UPDATE SET
                        title = excluded.title,
                        description = excluded.description,
                        due_date = excluded.due_date,
                        status = excluded.status
                """, (
                    data["id"],
                    data["title"],
                    data["description"],
                    data["due_date"],
                    data["status"],
                ))
                conn.commit()
                return True
        except sqlite3.Error as e:
            logger.error(f"Error saving project {project.id}: {e}")
            return False

    def delete(self, project_id: str) -> bool:
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))
                conn.commit()
                return True
        except sqlite3.Error as e:
            logger.error(f"Error deleting project {project_id}: {e}")
            return False

    def list_all(self) -> List[Project]:
        """All stored projects in insertion order."""
        try:
            with self._connect() as conn:
                rows = conn.execute("SELECT * FROM projects ORDER BY position ASC").fetchall()
            return [Project.from_dict(dict(row)) for row in rows]
        except sqlite3.Error as e:
            logger.error(f"Error listing projects: {e}")
            return []


class ProjectStore:
    """In-memory store for all projects on the board.

    Every operation holds the store lock, so insert/update/delete each run to
    completion before the next one starts. Values go in and come out as
    copies; nothing handed to a caller aliases store state.
    """

    def __init__(self, projects: Optional[List[Project]] = None,
                 repository: Optional[SQLiteProjectRepository] = None):
        self._projects: Dict[str, Project] = {}
        self._lock = threading.RLock()
        self.repository = repository

        if repository is not None:
            for project in repository.list_all():
                self._projects[project.id] = project
        for project in projects or []:
            if project.id in self._projects:
                logger.warning(f"Skipping duplicate project {project.id} while loading")
                continue
            project.validate()
            self._projects[project.id] = project.copy()
            self._persist_save(project)

    def insert(self, project: Project) -> Project:
        project.validate()
        with self._lock:
            if project.id in self._projects:
                raise DuplicateIdError(project.id)
            self._projects[project.id] = project.copy()
            self._persist_save(project)
        logger.debug(f"Inserted project {project.id} into {project.status.value}")
        return project.copy()

    def update(self, project: Project) -> Project:
        project.validate()
        with self._lock:
            if project.id not in self._projects:
                raise NotFoundError(project.id)
            self._projects[project.id] = project.copy()
            self._persist_save(project)
        logger.debug(f"Updated project {project.id} ({project.status.value})")
        return project.copy()

    def delete(self, project_id: str) -> None:
        with self._lock:
            if project_id not in self._projects:
                raise NotFoundError(project_id)
            del self._projects[project_id]
            if self.repository is not None:
                self.repository.delete(project_id)
        logger.debug(f"Deleted project {project_id}")

    def get(self, project_id: str) -> Optional[Project]:
        with self._lock:
            project = self._projects.get(project_id)
            return project.copy() if project else None

    def all(self) -> List[Project]:
        """Snapshot of every project, in insertion order."""
        with self._lock:
            return [p.copy() for p in self._projects.values()]

    def list_by_status(self, status: ProjectStatus) -> List[Project]:
        with self._lock:
            return [p.copy() for p in self._projects.values() if p.status == status]

    def _persist_save(self, project: Project) -> None:
        if self.repository is not None:
            self.repository.save(project)

    def __len__(self) -> int:
        with self._lock:
            return len(self._projects)

    def __contains__(self, project_id: object) -> bool:
        with self._lock:
            return project_id in self._projects


# ── Process-wide store ───────────────────────────────────────────────────────

_shared_store: Optional[ProjectStore] = None
_shared_lock = threading.Lock()


def get_shared_store(config=None) -> ProjectStore:
    """Return the process-wide store, building it on first call.

    ``config`` (a BoardConfig) only matters on the first call.
    """
    global _shared_store
    with _shared_lock:
        if _shared_store is None:
            _shared_store = build_store(config)
            logger.info(f"Shared project store ready ({len(_shared_store)} projects)")
        return _shared_store


def reset_shared_store() -> None:
    """Forget the process-wide store. The next get_shared_store() rebuilds it."""
    global _shared_store
    with _shared_lock:
        _shared_store = None


def build_store(config=None) -> ProjectStore:
    """Build a store from a BoardConfig (None = empty, in-memory)."""
    if config is None:
        return ProjectStore()

    repository = SQLiteProjectRepository(config.db_path) if config.db_path else None
    store = ProjectStore(repository=repository)
    if config.seed_demo_data and len(store) == 0:
        for project in demo_projects():
            store.insert(project)
    return store
