"""Security Requirements Guide (SRG) model."""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vulcan.models.base import ErrorsMixin, VulcanBase
from vulcan.parsers.xccdf import ParsedBenchmark, parse_benchmark

if TYPE_CHECKING:
    from vulcan.models.component import Component
    from vulcan.models.rule import CanonicalRule


class SecurityRequirementsGuide(ErrorsMixin, VulcanBase):
    """An XCCDF benchmark describing how to evaluate generic IT systems.

    The guide owns its canonical rules; components derive their rules from them.
    """

    __tablename__ = "security_requirements_guides"
    __table_args__ = (
        UniqueConstraint("srg_id", "version", name="uq_security_requirements_guides_srg_id_version"),
    )

    srg_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    version: Mapped[str] = mapped_column(String(50), nullable=False)
    xml: Mapped[str] = mapped_column(Text, nullable=False, deferred=True)
    filename: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    srg_rules: Mapped[list["CanonicalRule"]] = relationship(
        back_populates="guide",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CanonicalRule.position",
    )
    components: Mapped[list["Component"]] = relationship(
        back_populates="based_on",
        passive_deletes="all",
    )

    @property
    def full_title(self) -> str:
        return f"{self.title} {self.version}"

    async def benchmark(self) -> ParsedBenchmark:
        """Parse the stored document on first use and keep the result on the instance.

        ``xml`` is a deferred column, so it is loaded through ``awaitable_attrs``
        when the guide was read without it.
        """
        parsed = self.__dict__.get("_parsed_benchmark")
        if parsed is None:
            parsed = parse_benchmark(await self.awaitable_attrs.xml)
            self.__dict__["_parsed_benchmark"] = parsed
        return parsed

    def cache_benchmark(self, parsed: ParsedBenchmark) -> None:
        """Keep an already parsed document so ``benchmark()`` does not parse it again."""
        self.__dict__["_parsed_benchmark"] = parsed

    def __repr__(self) -> str:
        return f"<SecurityRequirementsGuide {self.srg_id} {self.version}>"
