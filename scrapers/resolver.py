"""
Resolver
Two-tier entity lookup: direct addressing first, keyword search as fallback
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional
import logging

from models import JobSpec
from scrapers.job_runner import JobRunner
from utils.exceptions import CompetitorResearchError, ResearchCancelled, ResolutionFailed


logger = logging.getLogger(__name__)


class EmptyResult(CompetitorResearchError):
    """A lookup tier finished without items"""
    pass


class LookupSpecBuilder(ABC):
    """Builds the job specs of both lookup tiers for one provider"""

    @abstractmethod
    def direct(self, entity_key: str, kind: str, limit: int) -> JobSpec:
        """Spec addressing the entity by its canonical identifier"""
        pass

    @abstractmethod
    def search(self, entity_key: str, kind: str, limit: int) -> JobSpec:
        """Spec finding the entity by keyword search"""
        pass


class Resolver:
    """
    Direct lookup is precise but breaks on renamed or private entities; the
    keyword search is noisier but more forgiving, so it only runs when the
    direct tier errors or comes back empty.
    """

    def __init__(self, runner: JobRunner, specs: LookupSpecBuilder):
        self.runner = runner
        self.specs = specs

    async def _run_tier(self, spec: JobSpec, timeout: Optional[float], tier: str, entity_key: str) -> List[Dict[str, Any]]:
        items = await self.runner.run(spec, timeout=timeout)
        if not items:
            raise EmptyResult(f"No results from {tier} for {entity_key}")
        return items

    async def resolve(
        self,
        entity_key: str,
        kind: str,
        limit: int,
        *,
        allow_fallback: bool = True,
        timeout: Optional[float] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Resolve an entity into result items

        Args:
            entity_key: entity identifier (e.g. a username)
            kind: result type requested from the provider
            limit: maximum items
            allow_fallback: try the search tier when the direct tier fails
            timeout: per-job timeout override
            should_stop: checked before each tier; True means no new job is started

        Raises:
            ResolutionFailed: both tiers failed
            ResearchCancelled: should_stop turned True before a tier started
            Exception: the direct tier's error when fallback is disabled
        """
        if should_stop and should_stop():
            raise ResearchCancelled(f"Lookup of {entity_key} ({kind}) cancelled")

        try:
            items = await self._run_tier(
                self.specs.direct(entity_key, kind, limit), timeout, "direct lookup", entity_key
            )
            logger.info(f"Direct lookup for {entity_key} ({kind}) returned {len(items)} items")
            return items
        except Exception as direct_exc:
            logger.warning(f"Direct lookup for {entity_key} ({kind}) failed: {direct_exc}")
            if not allow_fallback:
                raise
            if should_stop and should_stop():
                raise ResearchCancelled(
                    f"Search fallback for {entity_key} ({kind}) cancelled"
                ) from direct_exc
            direct_error = str(direct_exc)

        logger.info(f"Falling back to search for {entity_key} ({kind})")
        try:
            items = await self._run_tier(
                self.specs.search(entity_key, kind, limit), timeout, "search", entity_key
            )
        except Exception as search_exc:
            logger.error(f"Both lookups failed for {entity_key} ({kind})")
            raise ResolutionFailed(entity_key, direct_error, str(search_exc)) from search_exc

        logger.info(f"Search fallback for {entity_key} ({kind}) returned {len(items)} items")
        return items
