"""CapabilityProbe — detects vendor control surfaces on the running device."""

from __future__ import annotations

import logging as _logging

from tvhome.core.interfaces.platform import VendorServicesInterface
from tvhome.core.models.cascade import CapabilityProfile
from tvhome.core.models.config import VendorConfig
from tvhome.core.models.state import VendorKind

_log = _logging.getLogger(__name__)


class CapabilityProbe:
    """Best-effort existence check against the configured vendor identifiers.

    A failed lookup counts as "not present".  The probe is cheap and has no
    side effects, so cascades call it on every invocation instead of
    caching a profile that could go stale.

    Args:
        vendor: Vendor services used for the presence checks.
        config: Vendor identifiers to look for.
    """

    def __init__(self, vendor: VendorServicesInterface, config: VendorConfig) -> None:
        self._vendor = vendor
        self._identifiers = list(config.probe_identifiers)

    def detect_vendor(self) -> CapabilityProfile:
        for identifier in self._identifiers:
            if self._is_present(identifier):
                _log.debug("Vendor surface %s present", identifier)
                return CapabilityProfile(
                    vendor_kind=VendorKind.MEDIATEK, matched_identifier=identifier
                )
        return CapabilityProfile(vendor_kind=VendorKind.GENERIC)

    def _is_present(self, identifier: str) -> bool:
        try:
            return bool(self._vendor.has_component(identifier))
        except Exception as exc:  # lookup failures mean "absent"
            _log.debug("Presence check for %s failed: %s", identifier, exc)
            return False
