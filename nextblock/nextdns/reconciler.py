"""Reconciles configured sites against the NextDNS denylist.

Local configuration is authoritative for the ``active`` flag of exactly the
configured domains. Nothing is read back from NextDNS, and domains not in
the configuration are never touched.

Entering the blocked window asserts membership with a POST; outside the
window the same entries are deactivated with a PATCH. Repeating either call
in the same state converges on the same remote state.
"""

import logging
from collections.abc import Iterable
from typing import Optional

from nextblock.config import NextDNSCredentials
from nextblock.errors import CredentialsMissing, one_line
from nextblock.models import DenylistEntry, DenylistResponse
from nextblock.nextdns.client import NextDNSClient

logger = logging.getLogger(__name__)


def build_entries(blocked: bool, blocked_sites: Iterable[str]) -> list[DenylistEntry]:
    """Desired denylist entries: every site active iff blocked."""
    return [DenylistEntry(id=site, active=blocked) for site in sorted(blocked_sites)]


class DenylistReconciler:
    """Pushes the desired denylist state to NextDNS each tick."""

    def __init__(self, client: NextDNSClient) -> None:
        self.client = client

    async def reconcile(
        self,
        blocked: bool,
        blocked_sites: Iterable[str],
        credentials: NextDNSCredentials,
    ) -> Optional[DenylistResponse]:
        """Push one batched denylist update.

        Args:
            blocked: Whether the blocked window is active
            blocked_sites: Configured domains
            credentials: NextDNS profile ID and API key

        Returns:
            The API response, or None when no sites are configured

        Raises:
            CredentialsMissing: Profile ID or API key absent (no request made)
            RemoteRequestFailed: Network error or non-2xx reply
        """
        sites = list(blocked_sites)
        if not sites:
            logger.info("No blocked websites defined in configuration.")
            return None

        if not credentials.profile_id:
            raise CredentialsMissing("NextDNS profile ID not configured.")
        if not credentials.api_key:
            raise CredentialsMissing("NextDNS API key not configured.")

        entries = build_entries(blocked, sites)
        if blocked:
            logger.info("Blocked time active: updating NextDNS denylist (adding websites)...")
            method = "POST"
        else:
            logger.info("Off blocked time: deactivating NextDNS denylist entries...")
            method = "PATCH"

        response = await self.client.send_denylist(
            method,
            credentials.profile_id,
            credentials.api_key,
            entries,
        )
        logger.info(f"NextDNS {method} response: {one_line(response.body)}")
        return response
