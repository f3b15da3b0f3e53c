"""Initial schema for Vulcan.

Revision ID: 0001
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _rule_content() -> list[sa.Column]:
    return [
        sa.Column("rule_id", sa.String(255), nullable=False),
        sa.Column("version", sa.String(255), nullable=True),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("ident", sa.Text(), nullable=True),
        sa.Column("ident_system", sa.String(255), nullable=True),
        sa.Column("fixtext", sa.Text(), nullable=True),
        sa.Column("fixtext_fixref", sa.String(255), nullable=True),
        sa.Column("fix_id", sa.String(255), nullable=True),
        sa.Column("rule_severity", sa.String(20), server_default="medium", nullable=False),
        sa.Column("rule_weight", sa.String(20), nullable=True),
    ]


def _rule_owner() -> list[sa.Column]:
    return [
        sa.Column("srg_rule_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("component_rule_id", postgresql.UUID(as_uuid=True), nullable=True),
    ]


def _rule_owner_constraints(table: str) -> list:
    return [
        sa.ForeignKeyConstraint(["srg_rule_id"], ["srg_rules.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["component_rule_id"], ["rules.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "(srg_rule_id IS NULL) != (component_rule_id IS NULL)",
            name=f"ck_{table}_single_owner",
        ),
    ]


def upgrade() -> None:
    # Create projects table
    op.create_table(
        "projects",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    # Create security_requirements_guides table
    op.create_table(
        "security_requirements_guides",
        _id(),
        sa.Column("srg_id", sa.String(255), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("version", sa.String(50), nullable=False),
        sa.Column("xml", sa.Text(), nullable=False),
        sa.Column("filename", sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("srg_id", "version", name="uq_security_requirements_guides_srg_id_version"),
    )
    op.create_index("ix_security_requirements_guides_srg_id", "security_requirements_guides", ["srg_id"])

    # Create srg_rules table (canonical rules)
    op.create_table(
        "srg_rules",
        _id(),
        sa.Column("security_requirements_guide_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("position", sa.Integer(), server_default="0", nullable=False),
        *_rule_content(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["security_requirements_guide_id"], ["security_requirements_guides.id"], ondelete="CASCADE"
        ),
        sa.UniqueConstraint("security_requirements_guide_id", "rule_id", name="uq_srg_rules_guide_rule_id"),
    )
    op.create_index("ix_srg_rules_security_requirements_guide_id", "srg_rules", ["security_requirements_guide_id"])
    op.create_index("ix_srg_rules_version", "srg_rules", ["version"])

    # Create components table
    op.create_table(
        "components",
        _id(),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("security_requirements_guide_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("component_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("prefix", sa.String(10), nullable=True),
        sa.Column("version", sa.Integer(), nullable=True),
        sa.Column("release", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(500), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("released", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("rules_count", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["security_requirements_guide_id"], ["security_requirements_guides.id"], ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(["component_id"], ["components.id"], ondelete="CASCADE"),
        sa.CheckConstraint("component_id IS NULL OR component_id != id", name="ck_components_not_own_overlay"),
    )
    op.create_index("ix_components_project_id", "components", ["project_id"])
    op.create_index("ix_components_security_requirements_guide_id", "components", ["security_requirements_guide_id"])
    op.create_index("ix_components_component_id", "components", ["component_id"])

    # Create rules table (component-owned rules)
    op.create_table(
        "rules",
        _id(),
        sa.Column("component_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("srg_rule_id", postgresql.UUID(as_uuid=True), nullable=True),
        *_rule_content(),
        sa.Column("status", sa.String(100), server_default="Not Yet Determined", nullable=False),
        sa.Column("status_justification", sa.Text(), nullable=True),
        sa.Column("artifact_description", sa.Text(), nullable=True),
        sa.Column("vendor_comments", sa.Text(), nullable=True),
        sa.Column("locked", sa.Boolean(), server_default="false", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["component_id"], ["components.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["srg_rule_id"], ["srg_rules.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("component_id", "rule_id", name="uq_rules_component_rule_id"),
    )
    op.create_index("ix_rules_component_id", "rules", ["component_id"])
    op.create_index("ix_rules_version", "rules", ["version"])
    op.create_index("ix_rules_locked", "rules", ["locked"])

    # Create rule_satisfactions table (satisfies graph edges)
    op.create_table(
        "rule_satisfactions",
        sa.Column("satisfying_rule_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("satisfied_rule_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.PrimaryKeyConstraint("satisfying_rule_id", "satisfied_rule_id"),
        sa.ForeignKeyConstraint(["satisfying_rule_id"], ["rules.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["satisfied_rule_id"], ["rules.id"], ondelete="CASCADE"),
        sa.CheckConstraint("satisfying_rule_id != satisfied_rule_id", name="ck_rule_satisfactions_not_self"),
    )
    op.create_index("ix_rule_satisfactions_satisfied_rule_id", "rule_satisfactions", ["satisfied_rule_id"])

    # Create disa_rule_descriptions table
    op.create_table(
        "disa_rule_descriptions",
        _id(),
        *_rule_owner(),
        sa.Column("vuln_discussion", sa.Text(), nullable=True),
        sa.Column("false_positives", sa.Text(), nullable=True),
        sa.Column("false_negatives", sa.Text(), nullable=True),
        sa.Column("documentable", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("mitigations", sa.Text(), nullable=True),
        sa.Column("severity_override_guidance", sa.Text(), nullable=True),
        sa.Column("potential_impacts", sa.Text(), nullable=True),
        sa.Column("third_party_tools", sa.Text(), nullable=True),
        sa.Column("mitigation_control", sa.Text(), nullable=True),
        sa.Column("responsibility", sa.Text(), nullable=True),
        sa.Column("ia_controls", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        *_rule_owner_constraints("disa_rule_descriptions"),
    )
    op.create_index("ix_disa_rule_descriptions_srg_rule_id", "disa_rule_descriptions", ["srg_rule_id"])
    op.create_index("ix_disa_rule_descriptions_component_rule_id", "disa_rule_descriptions", ["component_rule_id"])

    # Create checks table
    op.create_table(
        "checks",
        _id(),
        *_rule_owner(),
        sa.Column("system", sa.String(255), nullable=True),
        sa.Column("content_ref_name", sa.String(255), nullable=True),
        sa.Column("content_ref_href", sa.String(255), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        *_rule_owner_constraints("checks"),
    )
    op.create_index("ix_checks_srg_rule_id", "checks", ["srg_rule_id"])
    op.create_index("ix_checks_component_rule_id", "checks", ["component_rule_id"])


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_table("checks")
    op.drop_table("disa_rule_descriptions")
    op.drop_table("rule_satisfactions")
    op.drop_table("rules")
    op.drop_table("components")
    op.drop_table("srg_rules")
    op.drop_table("security_requirements_guides")
    op.drop_table("projects")
