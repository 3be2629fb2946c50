"""
ipa-connect - FreeIPA connection bootstrap for Python.

Resolves provider configuration from explicit values, the environment
and defaults, validates it for password or Kerberos/keytab
authentication, and produces a connected FreeIPA client handle.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
