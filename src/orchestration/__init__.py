"""
Orchestration package for the planning wizard.

This package provides:
- WizardSession holding mapped schools and each stage's result
- Stage navigation and prerequisite checks
"""

from .wizard import WizardSession, WizardStage, WizardStateError, STAGE_TITLES

__all__ = [
    "WizardSession",
    "WizardStage",
    "WizardStateError",
    "STAGE_TITLES",
]
