"""
Selection of the PID provider to use for a given protocol.

A :py:class:`PidProviderDispatcher` maps a protocol (e.g. "doi") to a resolver function that
picks a provider out of a :py:class:`ProviderContext`--the set of providers constructed at
start-up together with the system settings.  For DOIs, the choice among the available DOI
providers is made by the ``:DoiProvider`` setting.

Failure to find a provider is never an error:  :py:meth:`PidProviderDispatcher.get_provider`
logs the problem and returns None, and the caller is expected to treat a missing provider as a
configuration problem to report.
"""
from collections.abc import Mapping
from types import MappingProxyType
from typing import List

from .config import Key, SettingsLookup, ConfigSettings
from .globalid import GlobalId, DOI_PROTOCOL, HDL_PROTOCOL, PERMA_PROTOCOL
from .globalid import parse as _parse
from .providers.base import PidProvider
from .providers.doi import DATACITE, EZID, FAKE
from . import system as _sys

log = _sys.getSysLogger().getChild("dispatch")

__all__ = [ 'ProviderContext', 'PidProviderDispatcher', 'DEFAULT_RESOLVERS' ]

class ProviderContext(object):
    """
    the providers available to the system along with the settings used to choose among them.

    Providers are registered under a name:  DOI providers under their DOI provider name
    ("DataCite", "EZID", "FAKE") and the others under their protocol ("hdl", "perma").
    """

    def __init__(self, settings: SettingsLookup=None, providers: Mapping=None):
        """
        :param SettingsLookup settings:  the system settings
        :param Mapping       providers:  the available providers, keyed by name
        """
        if settings is None:
            settings = ConfigSettings()
        self.settings = settings
        self._providers = dict(providers or {})

    def get(self, name: str) -> PidProvider:
        """
        return the provider registered with the given name or None if it is not available
        """
        return self._providers.get(name)

    def names(self) -> List[str]:
        """
        return the names of the available providers
        """
        return list(self._providers.keys())

    @property
    def providers(self) -> List[PidProvider]:
        """
        the available providers
        """
        return list(self._providers.values())

def _resolve_handle(ctxt: ProviderContext) -> PidProvider:
    return ctxt.get(HDL_PROTOCOL)

def _resolve_doi(ctxt: ProviderContext) -> PidProvider:
    doiprov = ctxt.settings.get_value_for_key(Key.DoiProvider, "")
    if doiprov in (EZID, DATACITE, FAKE):
        out = ctxt.get(doiprov)
        if out is None:
            log.error("DOI provider %s is not configured", doiprov)
        return out
    log.error("Unknown DOI provider: %s", doiprov)
    return None

def _resolve_perma(ctxt: ProviderContext) -> PidProvider:
    return ctxt.get(PERMA_PROTOCOL)

DEFAULT_RESOLVERS = MappingProxyType({
    HDL_PROTOCOL:    _resolve_handle,
    DOI_PROTOCOL:    _resolve_doi,
    PERMA_PROTOCOL:  _resolve_perma
})

class PidProviderDispatcher(object):
    """
    a selector of PID providers by protocol.  The mapping of protocols to resolver functions is
    fixed at construction.
    """

    def __init__(self, resolvers: Mapping=None):
        """
        :param Mapping resolvers:  a mapping of protocol names to functions that each take a
                                   ProviderContext and return a provider (or None).  If not
                                   provided, DEFAULT_RESOLVERS is used.
        """
        if resolvers is None:
            resolvers = DEFAULT_RESOLVERS
        self._resolvers = MappingProxyType(dict(resolvers))

    @property
    def protocols(self) -> List[str]:
        """
        the protocols this dispatcher can resolve providers for
        """
        return list(self._resolvers.keys())

    def get_provider(self, ctxt: ProviderContext, protocol: str=None) -> PidProvider:
        """
        return the provider to use for the given protocol.
        :param ProviderContext ctxt:  the available providers and settings
        :param str protocol:  the protocol of interest; if not provided, the value of the
                              ``:Protocol`` setting is used.
        :return:  the provider, or None if one could not be determined
        """
        if protocol is None:
            protocol = ctxt.settings.get_value_for_key(Key.Protocol, "")

        resolver = self._resolvers.get(protocol)
        if not resolver:
            log.warning("Unknown protocol: %s", protocol)
            return None

        out = resolver(ctxt)
        if out is not None:
            log.debug("get_provider returns %s for protocol %s",
                      out.get_provider_information()[0], protocol)
        return out

    def parse(self, ctxt: ProviderContext, pidstr: str) -> GlobalId:
        """
        parse an identifier string using the grammars of the available providers, returning
        None if none of them recognize it.
        """
        return _parse(pidstr, ctxt.providers)

    def get_provider_for(self, ctxt: ProviderContext, gid: GlobalId) -> PidProvider:
        """
        return the provider that manages the given identifier.  A provider that claims the
        identifier via its authority, shoulder, or managed list is preferred; otherwise, the
        provider selected for the identifier's protocol is returned.
        """
        for prov in ctxt.providers:
            if prov.protocol == gid.protocol and prov.can_manage_pid(gid):
                return prov
        return self.get_provider(ctxt, gid.protocol)
