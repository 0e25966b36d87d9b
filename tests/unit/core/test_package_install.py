"""Tests for the privileged-install decision ladder."""

from __future__ import annotations

from pathlib import Path

import pytest

from tvhome.core import intents
from tvhome.core.models.state import InstallResult
from tvhome.core.package_install import PrivilegedInstallCascade
from tvhome.platform.mock.mock_factory import MockPlatformFactory

OWN_PACKAGE = "org.tvhome.launcher"


@pytest.fixture
def apk(tmp_path: Path) -> Path:
    path = tmp_path / "game.apk"
    path.write_bytes(b"PK\x03\x04" + b"\x00" * 200_000)
    return path


def _cascade(factory: MockPlatformFactory) -> PrivilegedInstallCascade:
    return PrivilegedInstallCascade(
        factory.packages, factory.installer, factory.policy, factory.activity, OWN_PACKAGE
    )


class TestFileMissing:
    def test_missing_file(self, factory: MockPlatformFactory, tmp_path: Path) -> None:
        result = _cascade(factory).install(tmp_path / "nope.apk")
        assert result is InstallResult.FILE_MISSING
        assert factory.installer.sessions == []
        assert factory.activity.started == []


class TestSilentInstall:
    def test_device_owner_installs_headless(self, factory: MockPlatformFactory, apk: Path) -> None:
        factory.policy.device_owners.add(OWN_PACKAGE)
        result = _cascade(factory).install(apk)

        assert result is InstallResult.SILENT_STARTED
        session = factory.installer.sessions[0]
        assert session.written["base.apk"] == apk.read_bytes()
        assert session.committed and session.closed
        assert not session.abandoned
        assert factory.activity.started == []

    def test_commit_failure_falls_through_to_standard(
        self, factory: MockPlatformFactory, apk: Path
    ) -> None:
        factory.policy.device_owners.add(OWN_PACKAGE)
        factory.installer.fail.add("commit")
        result = _cascade(factory).install(apk)

        assert result is InstallResult.STARTED
        session = factory.installer.sessions[0]
        assert session.abandoned and session.closed
        assert len(factory.installer.sessions) == 1

    def test_session_creation_failure_falls_through(
        self, factory: MockPlatformFactory, apk: Path
    ) -> None:
        factory.policy.device_owners.add(OWN_PACKAGE)
        factory.installer.fail.add("create_session")
        assert _cascade(factory).install(apk) is InstallResult.STARTED

    def test_device_owner_check_failure_is_not_owner(
        self, factory: MockPlatformFactory, apk: Path
    ) -> None:
        factory.policy.fail.add("is_device_owner")
        assert _cascade(factory).install(apk) is InstallResult.STARTED
        assert factory.installer.sessions == []


class TestConsent:
    def test_needs_permission_opens_settings(self, factory: MockPlatformFactory, apk: Path) -> None:
        factory.packages.install_permission_granted = False
        result = _cascade(factory).install(apk)

        assert result is InstallResult.NEEDS_PERMISSION
        intent = factory.activity.started[0]
        assert intent.action == intents.ACTION_MANAGE_UNKNOWN_APP_SOURCES
        assert intent.data == f"package:{OWN_PACKAGE}"

    def test_needs_permission_even_if_settings_fail(
        self, factory: MockPlatformFactory, apk: Path
    ) -> None:
        factory.packages.install_permission_granted = False
        factory.activity.fail.add("start_activity")
        assert _cascade(factory).install(apk) is InstallResult.NEEDS_PERMISSION

    def test_undeclared_permission(self, factory: MockPlatformFactory, apk: Path) -> None:
        factory.packages.install_permission_declared = False
        result = _cascade(factory).install(apk)
        assert result is InstallResult.MISSING_MANIFEST_PERMISSION
        assert factory.activity.started == []

    def test_old_platform_skips_consent(self, factory: MockPlatformFactory, apk: Path) -> None:
        factory.packages.sdk = 25
        factory.packages.install_permission_declared = False
        assert _cascade(factory).install(apk) is InstallResult.STARTED

    def test_permission_check_error(self, factory: MockPlatformFactory, apk: Path) -> None:
        factory.packages.fail.add("can_request_package_installs")
        assert _cascade(factory).install(apk) is InstallResult.ERROR


class TestStandardInstall:
    def test_install_intent(self, factory: MockPlatformFactory, apk: Path) -> None:
        assert _cascade(factory).install(apk) is InstallResult.STARTED

        intent = factory.activity.started[0]
        assert intent.action == intents.ACTION_INSTALL_PACKAGE
        assert intent.data == "content://mock.fileprovider/game.apk"
        assert intent.extras == {intents.EXTRA_NOT_UNKNOWN_SOURCE: True}
        assert set(intent.flags) == {
            intents.FLAG_ACTIVITY_NEW_TASK,
            intents.FLAG_GRANT_READ_URI_PERMISSION,
        }
        assert factory.packages.shared_files == [apk]

    def test_start_failure_is_error(self, factory: MockPlatformFactory, apk: Path) -> None:
        factory.activity.fail.add("start_activity")
        assert _cascade(factory).install(apk) is InstallResult.ERROR

    def test_share_failure_is_error(self, factory: MockPlatformFactory, apk: Path) -> None:
        factory.packages.fail.add("share_file")
        assert _cascade(factory).install(apk) is InstallResult.ERROR


class TestConsentHelpers:
    def test_can_request_on_old_platform(self, factory: MockPlatformFactory) -> None:
        factory.packages.sdk = 24
        factory.packages.install_permission_granted = False
        assert _cascade(factory).can_request_package_installs() is True

    def test_open_consent_screen_on_old_platform_is_noop(self, factory: MockPlatformFactory) -> None:
        factory.packages.sdk = 24
        assert _cascade(factory).open_consent_screen() is True
        assert factory.activity.started == []
