"""Business logic services."""

from vulcan.services.component import ComponentService
from vulcan.services.derivation import (
    ComponentDerivationService,
    CreationMode,
    DerivationResult,
)
from vulcan.services.export import export_component_csv
from vulcan.services.guide_import import (
    CanonicalRuleImporter,
    GuideImportResult,
    GuideImportService,
)
from vulcan.services.release import ReleaseLockEngine, released_was
from vulcan.services.rules import RuleService
from vulcan.services.spreadsheet_import import TabularOverrideImporter

__all__ = [
    "CanonicalRuleImporter",
    "ComponentDerivationService",
    "ComponentService",
    "CreationMode",
    "DerivationResult",
    "GuideImportResult",
    "GuideImportService",
    "ReleaseLockEngine",
    "RuleService",
    "TabularOverrideImporter",
    "export_component_csv",
    "released_was",
]
