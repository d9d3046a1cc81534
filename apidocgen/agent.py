"""Task execution: cache lookup, discovery, batched inference and merge."""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Any, Dict, List, Optional, Sequence

from .config import AgentConfig
from .dispatch import BatchDispatcher
from .git.remote import GitRemote
from .llm.gemini import GeminiClient
from .logging import get_logger
from .merge import merge_endpoints, prepare_document
from .models import (
    FileResult,
    ItemOutcome,
    OutcomeStatus,
    TaskDescription,
    TaskResult,
    WorkItem,
)
from .signature import compute_signature
from .sources import SourceCollector
from .sources.patterns import DEFAULT_LANGUAGE, language_from_path
from .stores import TaskCache

CACHE_HIT_PREFIX = "[CACHE HIT] "
NOTHING_TO_DO_MESSAGE = "No code files were found to process."


class DocAgent:
    """Runs documentation tasks against a shared cache and inference client."""

    def __init__(
        self,
        *,
        cache: TaskCache,
        client: GeminiClient,
        dispatcher: BatchDispatcher | None = None,
        collector: SourceCollector | None = None,
        git: GitRemote | None = None,
    ) -> None:
        self.cache = cache
        self.client = client
        self.dispatcher = dispatcher or BatchDispatcher()
        self.git = git or GitRemote()
        self.collector = collector or SourceCollector(self.git)
        self.logger = get_logger("agent")

    @classmethod
    def from_config(cls, config: AgentConfig) -> "DocAgent":
        cache = TaskCache(config.cache.path, capacity=config.cache.capacity)
        client = GeminiClient(
            api_key=config.gemini.api_key,
            model=config.gemini.model,
            base_url=config.gemini.base_url,
            request_timeout=config.gemini.request_timeout,
        )
        dispatcher = BatchDispatcher(
            batch_size=config.batch.size,
            cooldown=config.batch.cooldown_seconds,
            item_timeout=config.batch.item_timeout,
        )
        return cls(cache=cache, client=client, dispatcher=dispatcher)

    async def execute(self, task: TaskDescription) -> TaskResult:
        """Return the documentation for ``task``, from the cache when possible.

        Raises ``ConfigurationError`` or ``DiscoveryError`` when the task
        cannot be attempted at all; per-file inference failures are reported
        inside the result instead.
        """
        loop = asyncio.get_running_loop()
        signature = await loop.run_in_executor(
            None, partial(compute_signature, task, self.git.resolve_revision)
        )
        self.logger.info("Task signature: %s", signature)

        cached = self.cache.get(signature)
        if cached is not None:
            self.logger.info("Cache hit for %s; returning stored result", signature[:10])
            result = TaskResult.from_dict(cached)
            result.status_message = f"{CACHE_HIT_PREFIX}{result.status_message}"
            result.cache_hit = True
            return result

        self.logger.info("Cache miss for %s; running full analysis", signature[:10])
        items = await loop.run_in_executor(None, self.collector.collect, task)
        if not items:
            self.logger.info("No files found to process")
            return TaskResult(
                status_message=NOTHING_TO_DO_MESSAGE,
                endpoints_found=0,
                file_by_file_results=[],
                merged_documentation={},
            )

        self.client.ensure_configured()

        language = await self._detect_language(task.language, items)
        result = await self._analyze(items, language, task.existing_documentation)
        self.cache.put(signature, result.to_dict())
        return result

    async def aclose(self) -> None:
        await self.client.aclose()

    # ------------------------------------------------------------------
    # Internals

    async def _analyze(
        self,
        items: Sequence[WorkItem],
        language: str,
        existing_documentation: Optional[Dict[str, Any]],
    ) -> TaskResult:
        document = prepare_document(existing_documentation)
        file_results: List[Dict[str, Any]] = []
        total_endpoints = 0

        async def _worker(item: WorkItem) -> List[Dict[str, Any]]:
            return await self.client.extract_endpoints(item.content, language)

        def _apply(outcome: ItemOutcome) -> None:
            nonlocal total_endpoints
            file_result = FileResult(
                file_path=outcome.item.path,
                language_detected=language,
                status=outcome.status.value,
                error=outcome.error,
            )
            endpoints = outcome.payload or []
            if outcome.status is OutcomeStatus.SUCCESS and endpoints:
                self.logger.info("Found %d endpoints in %s", len(endpoints), outcome.item.path)
                merge_endpoints(document, endpoints)
                file_result.endpoints_found = len(endpoints)
                file_result.documentation = list(endpoints)
                total_endpoints += len(endpoints)
            elif outcome.status is OutcomeStatus.SUCCESS:
                self.logger.info("No API endpoints found in %s", outcome.item.path)
            file_results.append(file_result.to_dict())

        await self.dispatcher.run(items, _worker, on_outcome=_apply)
        self.logger.info("All files processed; %d endpoint(s) found", total_endpoints)

        return TaskResult(
            status_message=(
                f"Documentation successfully processed for {total_endpoints} endpoint(s)."
            ),
            endpoints_found=total_endpoints,
            file_by_file_results=file_results,
            merged_documentation=document,
        )

    async def _detect_language(self, hint: Optional[str], items: Sequence[WorkItem]) -> str:
        if hint and hint.strip():
            self.logger.info("Using language provided with the task: %s", hint)
            return hint.strip()

        first = items[0]
        detected = language_from_path(first.path)
        if detected:
            self.logger.info("Detected language from path '%s': %s", first.path, detected)
            return detected

        self.logger.info("Could not detect language from path; asking the model")
        try:
            detected = await self.client.detect_language(first.content)
        except Exception as exc:
            self.logger.warning("Language detection failed (%s); defaulting to %s", exc, DEFAULT_LANGUAGE)
            return DEFAULT_LANGUAGE
        if detected:
            self.logger.info("Model detected language: %s", detected)
            return detected
        return DEFAULT_LANGUAGE


__all__ = ["CACHE_HIT_PREFIX", "DocAgent", "NOTHING_TO_DO_MESSAGE"]
