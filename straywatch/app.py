"""
Application composition root.

Wires the shared backend, stores and notifier into the page controllers
so every view sees the same state.
"""

from dataclasses import dataclass

from straywatch.config import configure_logging, get_logger, get_settings
from straywatch.services.backend import ReportBackend, close_backend, get_backend
from straywatch.services.notifications import Notifier, get_notifier
from straywatch.services.reports import ReportService, get_report_service
from straywatch.stores.auth import AuthStore, get_auth_store
from straywatch.stores.ui import UIStore, get_ui_store
from straywatch.views.home import HomeView
from straywatch.views.profile import ProfileView

logger = get_logger(__name__)


@dataclass
class StrayWatchApp:
    """Shared state plus the two page controllers built on it."""

    backend: ReportBackend
    ui: UIStore
    auth: AuthStore
    reports: ReportService
    notifier: Notifier
    shared: bool = False

    def __post_init__(self) -> None:
        self.home = HomeView(self.ui, self.auth, self.reports, self.backend, self.notifier)
        self.profile = ProfileView(
            self.ui, self.auth, self.reports, self.backend, self.notifier
        )

    async def shutdown(self) -> None:
        """Stop following session changes and release the HTTP client."""
        self.profile.close()
        self.auth.close()
        if self.shared:
            await close_backend()
        else:
            await self.backend.close()
        logger.info("StrayWatch stopped")


def create_app(backend: ReportBackend | None = None) -> StrayWatchApp:
    """
    Build the application.

    Args:
        backend: Backend to use. When omitted the process-wide backend,
                 stores and notifier are used; when given, fresh stores
                 are built around it.
    """
    settings = get_settings()
    configure_logging(
        json_format=settings.log_json or settings.is_production,
        log_level=settings.log_level,
    )

    if backend is None:
        app = StrayWatchApp(
            backend=get_backend(),
            ui=get_ui_store(),
            auth=get_auth_store(),
            reports=get_report_service(),
            notifier=get_notifier(),
            shared=True,
        )
    else:
        app = StrayWatchApp(
            backend=backend,
            ui=UIStore(),
            auth=AuthStore(backend),
            reports=ReportService(backend),
            notifier=Notifier(),
        )

    logger.info(
        "StrayWatch started",
        version=settings.app_version,
        environment=settings.environment,
        backend_configured=app.backend.is_configured,
    )
    return app
