"""Guide (SRG) import: benchmark document in, guide plus canonical rules out."""

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vulcan.config import Settings, get_settings
from vulcan.errors import BASE, BenchmarkParseError, RuleImportError
from vulcan.logging_config import get_logger
from vulcan.models.guide import SecurityRequirementsGuide
from vulcan.notifications import Notification, NotificationType, Notifier, NullNotifier
from vulcan.parsers.base import RawRule
from vulcan.parsers.xccdf import parse_benchmark
from vulcan.repositories import CanonicalRuleRepository, GuideRepository
from vulcan.services.cloning import canonical_from_raw

logger = get_logger(__name__)

BULK_REJECTION_MESSAGE = "Some rules failed to import successfully for the SRG."
IMPORT_CONTEXT = "to the SRG"
DEPENDENT_COMPONENTS_MESSAGE = "Cannot delete record because dependent components exist"


@dataclass
class GuideImportResult:
    """Outcome of one guide import."""

    guide: SecurityRequirementsGuide
    rules_imported: int = 0

    @property
    def success(self) -> bool:
        return self.guide.is_valid

    def to_dict(self) -> dict:
        return {
            "srg_id": self.guide.srg_id,
            "title": self.guide.title,
            "version": self.guide.version,
            "rules_imported": self.rules_imported,
            "errors": self.guide.errors.full_messages(),
        }


class CanonicalRuleImporter:
    """All-or-nothing bulk insert of canonical rules under one guide."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.rule_repo = CanonicalRuleRepository(session)

    async def import_rules(self, guide: SecurityRequirementsGuide, rules: Iterable[RawRule]) -> int:
        """Insert every descriptor or none of them.

        Returns:
            Number of canonical rules created

        Raises:
            RuleImportError: if any descriptor cannot become a canonical rule
        """
        records = []
        for raw in rules:
            if not raw.rule_id:
                logger.warning("Benchmark rule without id", guide=guide.srg_id, position=raw.position)
                raise RuleImportError(BULK_REJECTION_MESSAGE)
            records.append(canonical_from_raw(raw, guide.id))

        try:
            async with self.session.begin_nested():
                await self.rule_repo.create_many(records)
        except IntegrityError as e:
            logger.warning("Canonical rule insert rejected", guide=guide.srg_id, error=str(e.orig))
            raise RuleImportError(BULK_REJECTION_MESSAGE) from e
        return len(records)


class GuideImportService:
    """Creates guides from benchmark documents."""

    def __init__(
        self,
        session: AsyncSession,
        notifier: Optional[Notifier] = None,
        settings: Optional[Settings] = None,
    ):
        self.session = session
        self.notifier = notifier or NullNotifier()
        self.settings = settings or get_settings()
        self.guide_repo = GuideRepository(session)

    async def import_guide(
        self,
        document: Union[str, bytes],
        filename: Optional[str] = None,
    ) -> GuideImportResult:
        """Parse, validate and persist a guide with its canonical rules.

        Failures are attached to ``result.guide.errors``; nothing is persisted
        unless the whole import succeeds.
        """
        guide = SecurityRequirementsGuide(filename=filename)
        result = GuideImportResult(guide=guide)

        size = len(document.encode("utf-8")) if isinstance(document, str) else len(document)
        if size > self.settings.max_guide_size_bytes:
            guide.errors.add("xml", "is too large")
            return result
        if isinstance(document, bytes):
            try:
                document = document.decode("utf-8")
            except UnicodeDecodeError:
                guide.errors.add("xml", "must be UTF-8 encoded")
                return result
        guide.xml = document

        try:
            parsed = parse_benchmark(document)
        except BenchmarkParseError as e:
            guide.errors.add(e.field, e.message)
            return result

        guide.cache_benchmark(parsed)
        guide.srg_id = parsed.metadata.benchmark_id
        guide.title = parsed.metadata.title
        guide.version = parsed.metadata.version

        await self._validate(guide)
        if not guide.is_valid:
            return result

        try:
            async with self.session.begin_nested():
                await self.guide_repo.create(guide)
                importer = CanonicalRuleImporter(self.session)
                result.rules_imported = await importer.import_rules(guide, parsed.iter_rules())
        except RuleImportError as e:
            guide.errors.add(BASE, e.message)
            return result
        except Exception as e:
            logger.error("Guide import failed", srg_id=guide.srg_id, exc_info=True)
            guide.errors.add(BASE, RuleImportError.wrap(IMPORT_CONTEXT, e).message)
            return result

        logger.info(
            "Guide imported",
            srg_id=guide.srg_id,
            version=guide.version,
            rules=result.rules_imported,
        )
        await self.notifier.send(
            Notification.build(
                NotificationType.UPLOAD_SRG,
                {"SRG ID": guide.srg_id, "Title": guide.full_title},
            )
        )
        return result

    async def _validate(self, guide: SecurityRequirementsGuide) -> None:
        for field_name in ("srg_id", "title", "version", "xml"):
            if not getattr(guide, field_name):
                guide.errors.add(field_name, "can't be blank")
        if guide.srg_id and guide.version:
            existing = await self.guide_repo.get_by_srg_id_and_version(guide.srg_id, guide.version)
            if existing is not None:
                guide.errors.add("srg_id", "ID has already been taken")

    async def delete_guide(self, guide: SecurityRequirementsGuide) -> bool:
        """Delete a guide and its canonical rules unless components still use it."""
        if await self.guide_repo.count_components(guide.id) > 0:
            guide.errors.add(BASE, DEPENDENT_COMPONENTS_MESSAGE)
            return False

        srg_id, full_title = guide.srg_id, guide.full_title
        async with self.session.begin_nested():
            await self.guide_repo.delete(guide)
        logger.info("Guide deleted", srg_id=srg_id)
        await self.notifier.send(
            Notification.build(NotificationType.REMOVE_SRG, {"SRG ID": srg_id, "Title": full_title})
        )
        return True
