"""FastAPI dependency injection functions."""

from typing import Annotated

from fastapi import Depends

from interlock.services.consent_service import ConsentService
from interlock.services.exit_intent import ExitIntentDetector
from interlock.services.personalization_service import PersonalizationService
from interlock.services.progress_persistence import ProgressPersistence
from interlock.services.recovery_email_service import RecoveryEmailService
from interlock.services.recovery_presenter import RecoveryPresenter
from interlock.services.runtime import WizardRuntime, get_runtime
from interlock.services.wizard_controller import WizardController


def get_controller(runtime: Annotated[WizardRuntime, Depends(get_runtime)]) -> WizardController:
    """Get the wizard controller that owns the draft session."""
    return runtime.controller


def get_progress(runtime: Annotated[WizardRuntime, Depends(get_runtime)]) -> ProgressPersistence:
    """Get checkout progress persistence."""
    return runtime.progress


def get_detector(runtime: Annotated[WizardRuntime, Depends(get_runtime)]) -> ExitIntentDetector:
    """Get the exit-intent detector for the current page life."""
    return runtime.detector


def get_presenter(runtime: Annotated[WizardRuntime, Depends(get_runtime)]) -> RecoveryPresenter:
    """Get the recovery banner presenter."""
    return runtime.presenter


def get_consent_service(runtime: Annotated[WizardRuntime, Depends(get_runtime)]) -> ConsentService:
    """Get the cookie consent service."""
    return runtime.consent


def get_personalization(runtime: Annotated[WizardRuntime, Depends(get_runtime)]) -> PersonalizationService:
    """Get the visitor personalization service."""
    return runtime.personalization


def get_recovery_email(runtime: Annotated[WizardRuntime, Depends(get_runtime)]) -> RecoveryEmailService:
    """Get the abandoned-cart reminder address store."""
    return runtime.recovery_email


# Type aliases for cleaner dependency injection
Controller = Annotated[WizardController, Depends(get_controller)]
Progress = Annotated[ProgressPersistence, Depends(get_progress)]
Detector = Annotated[ExitIntentDetector, Depends(get_detector)]
Presenter = Annotated[RecoveryPresenter, Depends(get_presenter)]
Consent = Annotated[ConsentService, Depends(get_consent_service)]
Personalization = Annotated[PersonalizationService, Depends(get_personalization)]
RecoveryEmailStore = Annotated[RecoveryEmailService, Depends(get_recovery_email)]
