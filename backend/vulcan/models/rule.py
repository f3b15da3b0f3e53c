"""Rule models: canonical SRG rules, component-owned rules and their sub-entities."""

from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vulcan.constants import DEFAULT_SEVERITY, DEFAULT_STATUS
from vulcan.database import Base
from vulcan.models.base import UUIDType, VulcanBase

if TYPE_CHECKING:
    from vulcan.models.component import Component
    from vulcan.models.guide import SecurityRequirementsGuide


class RuleContentMixin:
    """Columns shared by canonical rules and the rules derived from them."""

    rule_id: Mapped[str] = mapped_column(String(255), nullable=False)
    version: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ident: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ident_system: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    fixtext: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    fixtext_fixref: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    fix_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    rule_severity: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DEFAULT_SEVERITY, server_default=DEFAULT_SEVERITY
    )
    rule_weight: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)


class CanonicalRule(RuleContentMixin, VulcanBase):
    """Immutable snapshot of one benchmark rule, owned by a guide."""

    __tablename__ = "srg_rules"
    __table_args__ = (
        UniqueConstraint(
            "security_requirements_guide_id", "rule_id", name="uq_srg_rules_guide_rule_id"
        ),
    )

    security_requirements_guide_id: Mapped[UUID] = mapped_column(
        ForeignKey("security_requirements_guides.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    guide: Mapped["SecurityRequirementsGuide"] = relationship(back_populates="srg_rules")
    disa_rule_descriptions: Mapped[list["DisaRuleDescription"]] = relationship(
        back_populates="srg_rule",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    checks: Mapped[list["Check"]] = relationship(
        back_populates="srg_rule",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<CanonicalRule {self.version} {self.rule_id}>"


class RuleSatisfaction(Base):
    """Directed edge: ``satisfying_rule`` fulfils the intent of ``satisfied_rule``."""

    __tablename__ = "rule_satisfactions"
    __table_args__ = (
        CheckConstraint(
            "satisfying_rule_id != satisfied_rule_id", name="ck_rule_satisfactions_not_self"
        ),
    )

    satisfying_rule_id: Mapped[UUID] = mapped_column(
        ForeignKey("rules.id", ondelete="CASCADE"),
        primary_key=True,
    )
    satisfied_rule_id: Mapped[UUID] = mapped_column(
        ForeignKey("rules.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )


class Rule(RuleContentMixin, VulcanBase):
    """A component-owned, mutable derivation of a canonical rule or of another rule."""

    __tablename__ = "rules"
    __table_args__ = (
        UniqueConstraint("component_id", "rule_id", name="uq_rules_component_rule_id"),
    )

    component_id: Mapped[UUID] = mapped_column(
        ForeignKey("components.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    srg_rule_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("srg_rules.id", ondelete="SET NULL"),
        nullable=True,
    )

    status: Mapped[str] = mapped_column(
        String(100), nullable=False, default=DEFAULT_STATUS, server_default=DEFAULT_STATUS
    )
    status_justification: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    artifact_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    vendor_comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    locked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false", index=True
    )

    component: Mapped["Component"] = relationship(back_populates="rules")
    srg_rule: Mapped[Optional[CanonicalRule]] = relationship()
    disa_rule_descriptions: Mapped[list["DisaRuleDescription"]] = relationship(
        back_populates="rule",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    checks: Mapped[list["Check"]] = relationship(
        back_populates="rule",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    # Read-only views of the satisfies graph; edges are written as RuleSatisfaction rows
    satisfies: Mapped[list["Rule"]] = relationship(
        secondary="rule_satisfactions",
        primaryjoin="Rule.id == RuleSatisfaction.satisfying_rule_id",
        secondaryjoin="Rule.id == RuleSatisfaction.satisfied_rule_id",
        viewonly=True,
    )
    satisfied_by: Mapped[list["Rule"]] = relationship(
        secondary="rule_satisfactions",
        primaryjoin="Rule.id == RuleSatisfaction.satisfied_rule_id",
        secondaryjoin="Rule.id == RuleSatisfaction.satisfying_rule_id",
        viewonly=True,
    )

    @property
    def disa_rule_description(self) -> Optional["DisaRuleDescription"]:
        return self.disa_rule_descriptions[0] if self.disa_rule_descriptions else None

    @property
    def check(self) -> Optional["Check"]:
        return self.checks[0] if self.checks else None

    def __repr__(self) -> str:
        return f"<Rule {self.rule_id} ({self.version})>"


class RuleSubEntityMixin:
    """Owner columns for records that hang off either kind of rule."""

    srg_rule_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("srg_rules.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    component_rule_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("rules.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )


class DisaRuleDescription(RuleSubEntityMixin, VulcanBase):
    """Structured DISA description fields extracted from a rule's description text."""

    __tablename__ = "disa_rule_descriptions"
    __table_args__ = (
        CheckConstraint(
            "(srg_rule_id IS NULL) != (component_rule_id IS NULL)",
            name="ck_disa_rule_descriptions_single_owner",
        ),
    )

    vuln_discussion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    false_positives: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    false_negatives: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    documentable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    mitigations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    severity_override_guidance: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    potential_impacts: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    third_party_tools: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    mitigation_control: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    responsibility: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ia_controls: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    srg_rule: Mapped[Optional[CanonicalRule]] = relationship(back_populates="disa_rule_descriptions")
    rule: Mapped[Optional[Rule]] = relationship(back_populates="disa_rule_descriptions")


class Check(RuleSubEntityMixin, VulcanBase):
    """How to verify a rule."""

    __tablename__ = "checks"
    __table_args__ = (
        CheckConstraint(
            "(srg_rule_id IS NULL) != (component_rule_id IS NULL)",
            name="ck_checks_single_owner",
        ),
    )

    system: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    content_ref_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    content_ref_href: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    srg_rule: Mapped[Optional[CanonicalRule]] = relationship(back_populates="checks")
    rule: Mapped[Optional[Rule]] = relationship(back_populates="checks")
