"""Version name to id resolution with a per-run, per-project cache."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from work_mgmt_client_interface.client import IssueTrackerClient, Session

logger = logging.getLogger(__name__)


class VersionCache:
    """
    Project key -> {version name -> version id}.

    One instance belongs to exactly one run. Entries are only ever added;
    a project whose catalog could not be fetched is remembered as unavailable
    so it is not fetched again in the same run.
    """

    def __init__(self) -> None:
        self._projects: dict[str, dict[str, str]] = {}
        self._unavailable: set[str] = set()

    def __contains__(self, project_key: str) -> bool:
        return project_key in self._projects or project_key in self._unavailable

    def store(self, project_key: str, versions: dict[str, str]) -> None:
        self._projects[project_key] = dict(versions)

    def mark_unavailable(self, project_key: str) -> None:
        self._unavailable.add(project_key)

    def is_unavailable(self, project_key: str) -> bool:
        return project_key in self._unavailable

    def lookup(self, project_key: str, name: str) -> str | None:
        return self._projects.get(project_key, {}).get(name)

    def add(self, project_key: str, name: str, version_id: str) -> None:
        self._projects.setdefault(project_key, {})[name] = version_id


class VersionResolver:
    """Maps human version names to tracker ids for one run.

    Args:
        client:         Tracker client used to fetch catalogs and create versions
        session:        Session of the current run
        cache:          Cache of the current run
        create_missing: Create versions that do not exist yet instead of skipping them

    """

    def __init__(
        self,
        client: IssueTrackerClient,
        session: Session,
        cache: VersionCache,
        *,
        create_missing: bool = False,
    ) -> None:
        self._client = client
        self._session = session
        self._cache = cache
        self._create_missing = create_missing

    def resolve(self, project_key: str, names: Iterable[str]) -> set[str]:
        """Return the ids of the named versions; unknown names are logged and skipped."""
        self._ensure_catalog(project_key)
        if self._cache.is_unavailable(project_key):
            return set()

        ids: set[str] = set()
        for raw_name in names:
            name = raw_name.strip() if raw_name else ""
            if not name:
                continue
            version_id = self._cache.lookup(project_key, name)
            if version_id is None and self._create_missing:
                version_id = self._create(project_key, name)
            elif version_id is None:
                logger.warning("Cannot find version %s in project %s", name, project_key)
            if version_id is not None:
                ids.add(version_id)
        return ids

    def _ensure_catalog(self, project_key: str) -> None:
        # lazy fetching, at most once per project and run
        if project_key in self._cache:
            return
        outcome = self._client.list_versions(self._session, project_key)
        if not outcome:
            logger.error("Could not fetch versions of project %s: %s", project_key, outcome.message)
            self._cache.mark_unavailable(project_key)
            return
        self._cache.store(project_key, {v.name: v.id for v in outcome.value or []})
        logger.debug("Cached %d versions of project %s", len(outcome.value or []), project_key)

    def _create(self, project_key: str, name: str) -> str | None:
        logger.info("Creating non-existent version %s in project %s", name, project_key)
        outcome = self._client.create_version(self._session, project_key, name)
        if not outcome or outcome.value is None:
            logger.error("There was a problem creating version %s in project %s: %s", name, project_key, outcome.message)
            return None
        self._cache.add(project_key, name, outcome.value.id)
        return outcome.value.id
