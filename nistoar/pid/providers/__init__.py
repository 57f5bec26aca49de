"""
PID provider implementations.

A provider manages the identifiers of one protocol:
  * ``perma`` -- :py:class:`PermaLinkPidProvider` (local; no external registry)
  * ``doi``   -- :py:class:`DataCiteDOIProvider`, :py:class:`EZIdDOIProvider`, or
                 :py:class:`FakeDOIProvider`
  * ``hdl``   -- :py:class:`HandlePidProvider`
"""
from .base import PidProvider, AbstractPidProvider, DEPENDENT, INDEPENDENT
from .registry import RegistryPidProvider
from .perma import PermaLinkPidProvider, PERMA_PROTOCOL, PERMA_PROVIDER_NAME
from .doi import AbstractDOIProvider, DataCiteDOIProvider, EZIdDOIProvider, FakeDOIProvider, DATACITE, EZID, FAKE
from .handle import HandlePidProvider, HANDLE_NET
