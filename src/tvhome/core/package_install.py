"""PrivilegedInstallCascade — install a package file, silently when allowed.

Not a blind cascade: each rung decides where control goes next.

1. Missing file -> ``FILE_MISSING``.
2. Device owner -> headless session install -> ``SILENT_STARTED``;
   failures fall through without retry.
3. Unknown-sources consent required and not granted ->
   ``MISSING_MANIFEST_PERMISSION`` or (consent screen opened)
   ``NEEDS_PERMISSION``.
4. Standard install request -> ``STARTED`` / ``ERROR``.
"""

from __future__ import annotations

import logging as _logging
import shutil
from pathlib import Path

from tvhome.core import intents
from tvhome.core.cascade_executor import StrategyCascadeExecutor
from tvhome.core.errors import MissingPermissionError, SuspendedError, describe_error
from tvhome.core.interfaces.platform import (
    ActivityManagerInterface,
    DevicePolicyInterface,
    PackageInstallerInterface,
    PackageManagerInterface,
)
from tvhome.core.intents import Intent
from tvhome.core.models.cascade import Strategy
from tvhome.core.models.state import CascadePolicy, InstallResult

_log = _logging.getLogger(__name__)

# API level where unknown-sources consent became per-app.
CONSENT_SDK_LEVEL = 26
_CHUNK_SIZE = 64 * 1024
_SPLIT_NAME = "base.apk"


class PrivilegedInstallCascade:
    """Runs the install decision ladder for one file.

    Args:
        packages: Package manager (permission state, file sharing).
        installer: Session installer for the headless path.
        policy: Device policy (device-owner check).
        activity: Activity manager for consent and install screens.
        own_package: Package id of the app performing the install.
        executor: Cascade runner used for the headless attempt.
    """

    def __init__(
        self,
        packages: PackageManagerInterface,
        installer: PackageInstallerInterface,
        policy: DevicePolicyInterface,
        activity: ActivityManagerInterface,
        own_package: str,
        executor: StrategyCascadeExecutor | None = None,
    ) -> None:
        self._packages = packages
        self._installer = installer
        self._policy = policy
        self._activity = activity
        self._own_package = own_package
        self._executor = executor or StrategyCascadeExecutor()

    def install(self, file_path: str | Path) -> InstallResult:
        path = Path(file_path)
        if not path.is_file():
            _log.warning("Install aborted, file not found: %s", path)
            return InstallResult.FILE_MISSING

        if self._is_device_owner():
            outcome = self._executor.run(
                [Strategy("silent-session-install", lambda: self._silent_install(path))],
                CascadePolicy.FIRST_SUCCESS,
                cascade_name="silent-install",
            )
            if outcome.succeeded:
                return InstallResult.SILENT_STARTED

        try:
            self._require_consent()
        except MissingPermissionError as exc:
            _log.error("Cannot install %s: %s", path.name, exc)
            return InstallResult.MISSING_MANIFEST_PERMISSION
        except SuspendedError as exc:
            _log.info("Install of %s suspended: %s", path.name, exc)
            return InstallResult.NEEDS_PERMISSION
        except Exception as exc:
            _log.error("Install permission check failed: %s", describe_error(exc))
            return InstallResult.ERROR

        try:
            uri = self._packages.share_file(path)
            intent = Intent(
                action=intents.ACTION_INSTALL_PACKAGE,
                data=uri,
                extras={intents.EXTRA_NOT_UNKNOWN_SOURCE: True},
            ).with_flags(intents.FLAG_ACTIVITY_NEW_TASK, intents.FLAG_GRANT_READ_URI_PERMISSION)
            self._activity.start_activity(intent)
        except Exception as exc:
            _log.error("Install request for %s failed: %s", path.name, describe_error(exc))
            return InstallResult.ERROR
        _log.info("Install request for %s dispatched", path.name)
        return InstallResult.STARTED

    def can_request_package_installs(self) -> bool:
        """Whether installs can proceed without a consent screen."""
        if self._packages.sdk_level() < CONSENT_SDK_LEVEL:
            return True
        return self._packages.can_request_package_installs()

    def open_consent_screen(self) -> bool:
        if self._packages.sdk_level() < CONSENT_SDK_LEVEL:
            return True
        try:
            self._activity.start_activity(
                Intent(
                    action=intents.ACTION_MANAGE_UNKNOWN_APP_SOURCES,
                    data=intents.package_uri(self._own_package),
                ).with_flags(intents.FLAG_ACTIVITY_NEW_TASK)
            )
        except Exception as exc:
            _log.error("Could not open unknown-sources settings: %s", describe_error(exc))
            return False
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _is_device_owner(self) -> bool:
        try:
            return self._policy.is_device_owner(self._own_package)
        except Exception as exc:
            _log.debug("Device-owner check failed: %s", exc)
            return False

    def _require_consent(self) -> None:
        """Raise ``SuspendedError`` when the user must grant consent first.

        ``MissingPermissionError`` propagates from the permission check.
        """
        if self.can_request_package_installs():
            return
        # Suspended even when the screen fails to open; the caller retries.
        self.open_consent_screen()
        raise SuspendedError("unknown-sources consent required")

    def _silent_install(self, path: Path) -> None:
        session = self._installer.create_session()
        try:
            with path.open("rb") as src, session.open_write(
                _SPLIT_NAME, path.stat().st_size
            ) as out:
                shutil.copyfileobj(src, out, _CHUNK_SIZE)
            session.commit(self._on_commit_complete)
        except Exception:
            try:
                session.abandon()
            except Exception as exc:
                _log.debug("Abandoning install session failed: %s", exc)
            raise
        finally:
            session.close()

    @staticmethod
    def _on_commit_complete(ok: bool, message: str) -> None:
        if ok:
            _log.info("Silent install committed: %s", message)
        else:
            _log.warning("Silent install rejected: %s", message)
