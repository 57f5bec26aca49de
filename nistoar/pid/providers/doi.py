"""
PID providers for Digital Object Identifiers (DOIs).

Three DOI providers are available, selected by the ``:DoiProvider`` setting:
  * ``DataCite`` -- :py:class:`DataCiteDOIProvider`, registering DOIs with DataCite
  * ``EZID``     -- :py:class:`EZIdDOIProvider`, registering DOIs with EZID
  * ``FAKE``     -- :py:class:`FakeDOIProvider`, which registers nothing and is intended for
                    testing and demonstration deployments
"""
from collections.abc import Mapping
from typing import List

from ..globalid import (GlobalId, DOI_PROTOCOL, DOI_RESOLVER_URL, HTTP_DOI_RESOLVER_URL,
                        DXDOI_RESOLVER_URL, HTTP_DXDOI_RESOLVER_URL, check_doi_authority)
from ..dvobject import DvObject
from ..service import PIDService
from ..clients import RegistryClient
from .base import AbstractPidProvider
from .registry import RegistryPidProvider

__all__ = [ 'AbstractDOIProvider', 'DataCiteDOIProvider', 'EZIdDOIProvider', 'FakeDOIProvider',
            'DATACITE', 'EZID', 'FAKE' ]

DATACITE = "DataCite"
EZID = "EZID"
FAKE = "FAKE"

_resolver_urls = [ DOI_RESOLVER_URL, HTTP_DOI_RESOLVER_URL, DXDOI_RESOLVER_URL, HTTP_DXDOI_RESOLVER_URL ]

class AbstractDOIProvider(object):
    """
    a mix-in for PID provider classes that provides the DOI identifier grammar.  It must
    precede an :py:class:`~nistoar.pid.providers.base.AbstractPidProvider` class in the list
    of base classes.

    DOIs are rendered as ``doi:<authority>/<identifier>`` and resolve via https://doi.org/.
    Resolver URLs (with or without the "dx." host and over either http or https) are accepted
    as input; an authority must begin with "10.".
    """

    @property
    def separator(self) -> str:
        return "/"

    @property
    def url_prefix(self) -> str:
        return DOI_RESOLVER_URL

    def parse_persistent_id(self, pidstr: str) -> GlobalId:
        if pidstr:
            for url in _resolver_urls:
                if pidstr.startswith(url):
                    pidstr = DOI_PROTOCOL + ":" + pidstr[len(url):]
                    break
        return super(AbstractDOIProvider, self).parse_persistent_id(pidstr)

    def parse_protocol_identifier(self, protocol: str, idstr: str) -> GlobalId:
        if protocol != DOI_PROTOCOL:
            return None
        out = super(AbstractDOIProvider, self).parse_protocol_identifier(protocol, idstr)
        if out is not None and not check_doi_authority(out.authority):
            return None
        return out

    def parse_persistent_id_parts(self, protocol: str, authority: str, identifier: str) -> GlobalId:
        if protocol != DOI_PROTOCOL:
            return None
        return super(AbstractDOIProvider, self).parse_persistent_id_parts(protocol, authority, identifier)

class _RegistryDOIProvider(AbstractDOIProvider, RegistryPidProvider):

    def __init__(self, authority: str, shoulder: str, id_gen_style: str=None,
                 datafile_pid_format: str=None, managed_list=None, excluded_list=None,
                 client: RegistryClient=None, pidsvc: PIDService=None, config: Mapping=None):
        super(_RegistryDOIProvider, self).__init__(DOI_PROTOCOL, authority, shoulder, id_gen_style,
                                                   datafile_pid_format, managed_list, excluded_list,
                                                   client, pidsvc, config)

class DataCiteDOIProvider(_RegistryDOIProvider):
    """
    a provider of DOIs registered with DataCite
    """
    TYPE = "datacite"
    PROVIDER_NAME = DATACITE

class EZIdDOIProvider(_RegistryDOIProvider):
    """
    a provider of DOIs registered with EZID
    """
    TYPE = "ezid"
    PROVIDER_NAME = EZID

class FakeDOIProvider(AbstractDOIProvider, AbstractPidProvider):
    """
    a DOI provider that does not register its DOIs anywhere.  It generates and parses DOIs like
    the other DOI providers, but the DOIs it creates do not resolve.  It is intended for
    testing and demonstration deployments.
    """
    TYPE = "FAKE"
    PROVIDER_NAME = FAKE

    def __init__(self, authority: str, shoulder: str, id_gen_style: str=None,
                 datafile_pid_format: str=None, managed_list=None, excluded_list=None,
                 pidsvc: PIDService=None, config: Mapping=None):
        super(FakeDOIProvider, self).__init__(DOI_PROTOCOL, authority, shoulder, id_gen_style,
                                              datafile_pid_format, managed_list, excluded_list,
                                              pidsvc, config)

    def get_provider_information(self) -> List[str]:
        return [FAKE, "https://dataverse.org"]

    def already_registered_pid(self, gid: GlobalId, no_provider_default: bool) -> bool:
        exists_locally = bool(self.pidsvc) and not self.pidsvc.is_global_id_locally_unique(gid)
        return exists_locally or no_provider_default

    def register_when_published(self) -> bool:
        return False

    def create_identifier(self, dvo: DvObject) -> str:
        return dvo.global_id.as_string()

    def get_identifier_metadata(self, dvo: DvObject) -> Mapping:
        return {}

    def modify_identifier_target_url(self, dvo: DvObject) -> str:
        return self.get_target_url(dvo)

    def delete_identifier(self, dvo: DvObject):
        pass

    def publicize_identifier(self, dvo: DvObject) -> bool:
        if not dvo.identifier:
            self.generate_identifier(dvo)
        return True
