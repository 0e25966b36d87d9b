"""ApplicationCatalogQuery — one deduplicated list of launchable apps."""

from __future__ import annotations

import logging as _logging

from tvhome.core import intents
from tvhome.core.errors import NotFoundError
from tvhome.core.interfaces.platform import PackageManagerInterface
from tvhome.core.models.device import Application, LaunchTarget

_log = _logging.getLogger(__name__)


class ApplicationCatalogQuery:
    """Merges TV-optimized (leanback) and general launcher listings.

    TV-optimized entries come first, tagged ``sideloaded=False``; general
    entries follow only for packages not already listed, tagged
    ``sideloaded=True``.  Each group keeps platform enumeration order.

    Args:
        packages: Package manager used for enumeration and metadata.
    """

    def __init__(self, packages: PackageManagerInterface) -> None:
        self._packages = packages

    def list(self) -> list[Application]:
        tv_targets = self._packages.query_launch_targets(intents.CATEGORY_LEANBACK_LAUNCHER)
        general_targets = self._packages.query_launch_targets(intents.CATEGORY_LAUNCHER)

        seen: set[str] = set()
        catalog: list[Application] = []
        for targets, sideloaded in ((tv_targets, False), (general_targets, True)):
            for target in targets:
                if target.package_id in seen:
                    continue
                app = self._build(target, sideloaded)
                if app is None:
                    continue
                seen.add(target.package_id)
                catalog.append(app)

        _log.debug(
            "Catalog: %d entries (%d leanback targets, %d launcher targets)",
            len(catalog), len(tv_targets), len(general_targets),
        )
        return catalog

    def get(self, package_id: str) -> Application | None:
        """Resolve a single package, preferring its leanback entry."""
        target = self._packages.resolve_launch_target(
            package_id, intents.CATEGORY_LEANBACK_LAUNCHER
        )
        if target is not None:
            return self._build(target, sideloaded=False)
        target = self._packages.resolve_launch_target(package_id, intents.CATEGORY_LAUNCHER)
        if target is not None:
            return self._build(target, sideloaded=True)
        return None

    def _build(self, target: LaunchTarget, sideloaded: bool) -> Application | None:
        try:
            info = self._packages.get_package_info(target.package_id)
        except NotFoundError:
            # Uninstalled between enumeration and lookup.
            _log.debug("Package %s vanished during catalog query", target.package_id)
            return None
        return Application(
            package_id=target.package_id,
            display_name=target.label or target.package_id,
            icon=target.icon,
            banner=target.banner,
            version=info.version_name,
            sideloaded=sideloaded,
            is_system_app=info.is_system_app,
        )
