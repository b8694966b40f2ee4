"""Process-wide wiring of the media and services for one device."""

import logging
from dataclasses import dataclass

from interlock.core.config import Settings, get_settings
from interlock.core.storage import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from interlock.services.consent_service import ConsentService
from interlock.services.exit_intent import ExitIntentDetector, build_exit_intent_detector
from interlock.services.personalization_service import PersonalizationService
from interlock.services.progress_persistence import ProgressPersistence
from interlock.services.recovery_email_service import RecoveryEmailService
from interlock.services.recovery_presenter import RecoveryPresenter
from interlock.services.session_repository import SessionRepository
from interlock.services.wizard_controller import WizardController

logger = logging.getLogger(__name__)


@dataclass
class WizardRuntime:
    """Everything the API layer needs, built from one ``Settings``."""

    store: KeyValueStore
    session_store: KeyValueStore
    repository: SessionRepository
    progress: ProgressPersistence
    controller: WizardController
    detector: ExitIntentDetector
    consent: ConsentService
    personalization: PersonalizationService
    recovery_email: RecoveryEmailService
    presenter: RecoveryPresenter

    def close(self) -> None:
        """Cancel pending writes and timers."""
        self.progress.close()
        self.detector.close()


def build_store(settings: Settings) -> KeyValueStore:
    """Create the persistent medium selected by ``storage_backend``."""
    if settings.storage_backend == "memory":
        return InMemoryKeyValueStore(quota_chars=settings.storage_quota_chars)
    return JsonFileKeyValueStore(settings.storage_path, quota_chars=settings.storage_quota_chars)


def build_runtime(settings: Settings, store: KeyValueStore | None = None) -> WizardRuntime:
    """Wire media and services.

    Args:
        settings: Application settings.
        store: Persistent medium to use instead of the configured one.

    Returns:
        WizardRuntime: Fresh services; the wizard starts at home until restored.
    """
    store = store if store is not None else build_store(settings)
    session_store = InMemoryKeyValueStore(quota_chars=settings.storage_quota_chars)

    repository = SessionRepository(store, ttl_ms=settings.session_ttl_ms)
    progress = ProgressPersistence(
        store,
        ttl_ms=settings.checkout_progress_ttl_ms,
        debounce_seconds=settings.progress_debounce_ms / 1000,
    )
    personalization = PersonalizationService(store)
    recovery_email = RecoveryEmailService(store)

    return WizardRuntime(
        store=store,
        session_store=session_store,
        repository=repository,
        progress=progress,
        controller=WizardController(repository, progress),
        detector=build_exit_intent_detector(settings, session_store),
        consent=ConsentService(store, ttl_ms=settings.consent_ttl_ms),
        personalization=personalization,
        recovery_email=recovery_email,
        presenter=RecoveryPresenter(repository, progress, personalization, recovery_email),
    )


# Global runtime instance
_runtime: WizardRuntime | None = None


def get_runtime() -> WizardRuntime:
    """Get or create the global runtime instance."""
    global _runtime
    if _runtime is None:
        _runtime = build_runtime(get_settings())
    return _runtime


def init_runtime() -> WizardRuntime:
    """Build the runtime, restore any saved draft and count the visit. Call at app startup."""
    global _runtime
    if _runtime is not None:
        _runtime.close()
    _runtime = build_runtime(get_settings())
    step = _runtime.controller.restore()
    prefs = _runtime.personalization.record_visit()
    logger.info("Wizard ready at step %s (visit %d)", step.value, prefs.visit_count)
    return _runtime


def shutdown_runtime() -> None:
    """Mark an unfinished draft as abandoned and cancel pending work. Call at app shutdown."""
    global _runtime
    if _runtime is None:
        return

    controller = _runtime.controller
    session = controller.session
    if session is not None and not session.order_complete and session.selected_shapes:
        _runtime.personalization.track_cart_abandonment(session.tier, controller.step.value)
        logger.info("Session %s left unfinished at step %s", session.id, controller.step.value)

    _runtime.close()
    _runtime = None
