"""
Services module for ipa-connect.
"""

from .bootstrap import bootstrap, build_transport
from .directory import ClientHandle, DirectoryClient, KerberosConnectOptions, TransportOptions
from .freeipa import FreeIPAClient, IPASession

__all__ = [
    "bootstrap",
    "build_transport",
    "ClientHandle",
    "DirectoryClient",
    "KerberosConnectOptions",
    "TransportOptions",
    "FreeIPAClient",
    "IPASession",
]
