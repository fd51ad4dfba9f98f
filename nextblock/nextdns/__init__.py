"""NextDNS denylist synchronisation."""

from nextblock.nextdns.client import NextDNSClient, NextDNSConfig
from nextblock.nextdns.reconciler import DenylistReconciler, build_entries

__all__ = ["DenylistReconciler", "NextDNSClient", "NextDNSConfig", "build_entries"]
