"""Fetch signed SSH certificates and load them into ssh-agent."""

from ssh_cert_client.client import VERSION

__version__ = VERSION
