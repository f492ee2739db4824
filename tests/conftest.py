"""Pytest configuration and fixtures for Promoter tests."""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pytest
from sqlalchemy import create_engine, text

from promoter.constants import SSH_PROBE_COMMAND, SSH_PROBE_MARKER
from promoter.models.config import (
    DatabaseConfig,
    DeploymentConfig,
    DevelopmentConfig,
    ProductionConfig,
)
from promoter.models.results import RemoteResult
from promoter.services.orchestrator import DeploymentOrchestrator
from promoter.services.remote_executor import RemoteExecutor


class FakeExecutor(RemoteExecutor):
    """
    Recording RemoteExecutor.

    Every call is appended to `calls` as (kind, payload). Responses are
    scripted by substring: the most recently added matching rule wins.
    Unmatched calls succeed with empty output, except the SSH probe,
    which answers like a healthy host.
    """

    def __init__(self, host: str = "prod.example.com"):
        self._host = host
        self.calls: List[Tuple[str, object]] = []
        self.uploads: Dict[str, str] = {}
        self._rules: List[Tuple[str, Union[RemoteResult, Exception]]] = []

    @property
    def host(self) -> str:
        return self._host

    def respond(self, fragment: str, returncode: int = 0, stdout: str = "", stderr: str = ""):
        self._rules.append(
            (fragment, RemoteResult(returncode=returncode, stdout=stdout, stderr=stderr, host=self._host))
        )

    def fail_with(self, fragment: str, error: Exception):
        self._rules.append((fragment, error))

    def _answer(self, key: str) -> RemoteResult:
        for fragment, outcome in reversed(self._rules):
            if fragment in key:
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        if key == SSH_PROBE_COMMAND:
            return RemoteResult(returncode=0, stdout=f"{SSH_PROBE_MARKER}\n", host=self._host)
        return RemoteResult(returncode=0, host=self._host)

    def run(self, command: str, timeout: Optional[float] = None) -> RemoteResult:
        self.calls.append(("run", command))
        return self._answer(command)

    def upload(self, local_path, remote_path: str, timeout: Optional[float] = None) -> RemoteResult:
        self.calls.append(("upload", remote_path))
        self.uploads[remote_path] = Path(local_path).read_text(encoding="utf-8")
        return self._answer(f"upload {remote_path}")

    def mirror(
        self,
        source,
        destination: str,
        excludes: Sequence[str] = (),
        dry_run: bool = False,
        timeout: Optional[float] = None,
    ) -> RemoteResult:
        self.calls.append(
            (
                "mirror",
                {
                    "source": str(source),
                    "destination": destination,
                    "excludes": list(excludes),
                    "dry_run": dry_run,
                },
            )
        )
        return self._answer(f"mirror {destination}")

    @property
    def commands(self) -> List[str]:
        return [payload for kind, payload in self.calls if kind == "run"]

    @property
    def kinds(self) -> List[str]:
        return [kind for kind, _ in self.calls]

    @property
    def mirrors(self) -> List[dict]:
        return [payload for kind, payload in self.calls if kind == "mirror"]


DEV_SCHEMA = [
    "CREATE TABLE properties (id INTEGER PRIMARY KEY, title TEXT, price REAL, description TEXT, is_featured INTEGER)",
    "CREATE TABLE blog_posts (id INTEGER PRIMARY KEY, title TEXT, body TEXT)",
    "CREATE TABLE featured_news (id INTEGER PRIMARY KEY, headline TEXT)",
    "CREATE TABLE market_reports (id INTEGER PRIMARY KEY, area TEXT, data TEXT)",
    "CREATE TABLE email_templates (id INTEGER PRIMARY KEY, name TEXT, html TEXT)",
    "CREATE TABLE email_campaigns (id INTEGER PRIMARY KEY, template_id INTEGER, subject TEXT)",
    "CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT, password TEXT, role TEXT, "
    "profile TEXT, is_active INTEGER, created_at TEXT, updated_at TEXT)",
]

DEV_ROWS = [
    "INSERT INTO properties VALUES (1, 'Harbor View', 450000.0, 'Two bed', 1)",
    "INSERT INTO properties VALUES (2, 'O''Neil Cottage', 299000.5, NULL, 0)",
    "INSERT INTO properties VALUES (3, 'Ridge Loft', 610000.0, 'Top floor', 0)",
    "INSERT INTO blog_posts VALUES (1, 'Spring market', 'Prices are up')",
    "INSERT INTO blog_posts VALUES (2, 'Moving tips', 'Pack early')",
    "INSERT INTO users VALUES (1, 'admin@example.com', '$2b$12$hash', 'admin', "
    "'{\"first_name\": \"Ada\"}', 1, '2024-01-01 10:00:00', '2024-01-02 10:00:00')",
    "INSERT INTO users VALUES (2, 'agent@example.com', '$2b$12$other', 'agent', NULL, 1, "
    "'2024-02-01 09:00:00', '2024-02-01 09:00:00')",
]


@pytest.fixture
def dev_database_url(tmp_path) -> str:
    """SQLite file standing in for the development database."""
    url = f"sqlite:///{tmp_path / 'development.db'}"
    engine = create_engine(url)
    with engine.begin() as conn:
        for statement in DEV_SCHEMA + DEV_ROWS:
            conn.execute(text(statement))
    engine.dispose()
    return url


@pytest.fixture
def dev_engine(dev_database_url):
    engine = create_engine(dev_database_url)
    yield engine
    engine.dispose()


@pytest.fixture
def dev_tree(tmp_path) -> Path:
    root = tmp_path / "dev"
    (root / "public" / "uploads").mkdir(parents=True)
    (root / "package.json").write_text('{"name": "site"}')
    (root / "public" / "uploads" / "house.jpg").write_bytes(b"\xff\xd8")
    return root


@pytest.fixture
def config(tmp_path, dev_tree, dev_database_url) -> DeploymentConfig:
    return DeploymentConfig(
        production=ProductionConfig(
            host="prod.example.com",
            ssh_user="deploy",
            remote_path="/var/www/site",
            database=DatabaseConfig(name="site_prod", user="site", password="pa'ss"),
        ),
        development=DevelopmentConfig(
            local_path=str(dev_tree),
            database=DatabaseConfig(url=dev_database_url),
        ),
        scripts_dir=str(tmp_path / "scripts"),
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def orchestrator(config, executor, dev_engine) -> DeploymentOrchestrator:
    return DeploymentOrchestrator(config, executor, engine=dev_engine)
