"""Matching pipeline assembly and execution."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

import pendulum
import structlog

from . import __version__
from .adapters import AdapterRegistry, default_adapter_registry
from .adapters.base import board_of
from .core import BatchMatcher, MatchEntry, PostingLoadError, summarize
from .schemas import BoardType, VisaProfile
from .service import CatalogVerificationSource


class PostingLoader:
    """Load posting constraint payloads through board adapters.

    Records are returned unvalidated; constraint validation happens per item
    during evaluation.
    """

    def __init__(self, registry: AdapterRegistry, *, default_board: BoardType = BoardType.FULL_TIME):
        self._registry = registry
        self._default_board = default_board

    def load(self, path: Path) -> list[dict[str, Any]]:
        postings: list[dict[str, Any]] = []
        errors: list[str] = []
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"line {idx}: invalid JSON ({exc})")
                    continue
                try:
                    postings.append(self.parse(record))
                except (KeyError, ValueError) as exc:
                    errors.append(f"line {idx}: {exc}")
        if errors:
            raise PostingLoadError(errors, postings)
        return postings

    def load_one(self, path: Path) -> dict[str, Any]:
        with path.open("r", encoding="utf-8") as handle:
            try:
                record = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid posting JSON: {exc}") from exc
        return self.parse(record)

    def parse(self, record: Any) -> dict[str, Any]:
        if not isinstance(record, dict):
            raise ValueError("posting record must be a JSON object")
        metadata = {} if board_of(record) else {"boardType": self._default_board.value}
        adapter = self._registry.resolve(record, metadata)
        return adapter.parse_posting(record)


class VisaProfileLoader:
    """Load a worker's visa profile from JSON."""

    def __init__(self, verifications: CatalogVerificationSource | None = None):
        self._verifications = verifications

    def load(self, path: Path, *, use_catalog_defaults: bool = False) -> VisaProfile:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid visa profile JSON: {exc}") from exc
        profile = VisaProfile.model_validate(data)
        if not use_catalog_defaults:
            return profile
        if self._verifications is None:
            raise ValueError("Catalog defaults requested without a verification source")
        base = self._verifications.profile_for(profile.visa_code)
        overrides = profile.attributes.model_dump(exclude_unset=True)
        values = base.attributes.model_dump()
        values.update(overrides)
        return VisaProfile(visa_code=base.visa_code, attributes=values)


class OutputWriter:
    """Persist matching results."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")


class MatchingPipeline:
    """File-driven runner for both matching directions."""

    def __init__(
        self,
        *,
        matcher: BatchMatcher,
        registry: AdapterRegistry | None = None,
        verifications: CatalogVerificationSource | None = None,
        posting_loader: PostingLoader | None = None,
        visa_loader: VisaProfileLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._matcher = matcher
        registry = registry or default_adapter_registry()
        self._postings = posting_loader or PostingLoader(registry)
        self._visas = visa_loader or VisaProfileLoader(verifications)
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run_jobs(
        self,
        *,
        visa_path: Path,
        postings_path: Path,
        output_path: Path,
        use_catalog_defaults: bool = False,
        eligible_only: bool = False,
        audit_logger: AuditLogger | None = None,
    ) -> list[dict]:
        """Evaluate one visa profile against every posting in a JSONL file."""
        profile = self._visas.load(visa_path, use_catalog_defaults=use_catalog_defaults)
        load_errors: list[str] = []
        try:
            postings = self._postings.load(postings_path)
        except PostingLoadError as exc:
            postings = exc.partial
            load_errors.extend(exc.errors)
            self._logger.warning("postings.partial_load", errors=exc.errors)

        entries = self._matcher.jobs_eligible_for(profile, postings)
        visible = [
            entry for entry in entries if not eligible_only or entry.status in ("eligible", "conditional")
        ]
        serialized = [entry.to_payload() for entry in visible]

        self._audit(audit_logger, entries, direction="jobs", visa_code=profile.visa_code)
        for entry in entries:
            self._logger.info(
                "matching.result",
                visa_code=profile.visa_code,
                job_id=entry.subject_id,
                status=entry.status,
            )

        self._writer.write(
            output_path,
            {
                "metadata": self._metadata(errors=load_errors, visa_code=profile.visa_code),
                "summary": summarize(entries).model_dump(mode="json", by_alias=True),
                "results": serialized,
            },
        )
        return serialized

    def run_visas(
        self,
        *,
        posting_path: Path,
        output_path: Path,
        visa_codes: Iterable[str] | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> dict:
        """Evaluate every (or the given) visa code against one posting."""
        posting = self._postings.load_one(posting_path)
        entries = self._matcher.visas_matching_job(posting, visa_codes)
        report = self._matcher.group_by_status(
            entries,
            posting,
            matched_at=pendulum.now("UTC").to_iso8601_string(),
        )
        payload = report.to_payload()

        self._audit(audit_logger, entries, direction="visas", job_id=report.job_id)
        self._logger.info(
            "matching.report",
            job_id=report.job_id,
            summary=payload["summary"],
        )

        self._writer.write(
            output_path,
            {"metadata": self._metadata(errors=[], job_id=report.job_id), "report": payload},
        )
        return payload

    def _metadata(self, *, errors: list[str], **extra: Any) -> dict[str, Any]:
        return {
            **extra,
            "errors": errors,
            "ruleset_version": self._matcher.evaluator.registry.version,
            "timestamp": pendulum.now().to_iso8601_string(),
            "app_version": __version__,
        }

    @staticmethod
    def _audit(
        audit_logger: AuditLogger | None,
        entries: list[MatchEntry],
        **context: Any,
    ) -> None:
        if audit_logger is None:
            return
        for entry in entries:
            audit_logger.append({**context, **entry.to_payload()})
