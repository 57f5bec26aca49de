"""
A base for PID providers that register their identifiers with an external registry service.
"""
from collections.abc import Mapping
from typing import List

from ..globalid import GlobalId
from ..dvobject import DvObject
from ..service import PIDService
from ..clients import RegistryClient
from ..exceptions import PIDRegistryException, PIDNotFound, ConfigurationException
from .base import AbstractPidProvider

__all__ = [ 'RegistryPidProvider' ]

class RegistryPidProvider(AbstractPidProvider):
    """
    a PID provider whose identifiers are registered with and resolved by an external service,
    accessed via a :py:class:`~nistoar.pid.clients.RegistryClient`.

    Failures of the service are not retried; they propagate as
    :py:class:`~nistoar.pid.exceptions.PIDRegistryException` errors from the lifecycle operations
    (except for ``publicize_identifier()``, which reports them as a False return value).
    """
    PROVIDER_NAME = None

    def __init__(self, protocol: str, authority: str, shoulder: str, id_gen_style: str=None,
                 datafile_pid_format: str=None, managed_list=None, excluded_list=None,
                 client: RegistryClient=None, pidsvc: PIDService=None, config: Mapping=None):
        """
        create the provider
        :param RegistryClient client:  the client for accessing the registry service (required)
        (See :py:class:`~nistoar.pid.providers.base.AbstractPidProvider` for the other parameters.)
        """
        super(RegistryPidProvider, self).__init__(protocol, authority, shoulder, id_gen_style,
                                                  datafile_pid_format, managed_list, excluded_list,
                                                  pidsvc, config)
        if client is None:
            raise ConfigurationException("%s: a registry client is required" % type(self).__name__)
        self.client = client

    def get_provider_information(self) -> List[str]:
        return [self.PROVIDER_NAME, self.cfg.get('service_url') or self.client.endpoint or ""]

    def already_registered_pid(self, gid: GlobalId, no_provider_default: bool) -> bool:
        return self.client.exists(gid.as_string())

    def register_when_published(self) -> bool:
        return True

    def create_identifier(self, dvo: DvObject) -> str:
        pid = self.get_identifier(dvo)
        self.log.debug("creating identifier: %s", pid)
        out = self.client.reserve(pid, self.get_metadata_for_create_indicator(dvo))
        if not out or pid not in out:
            raise PIDRegistryException(pid, message="Unexpected reply from registry while "
                                       "creating %s: %s" % (pid, out))
        return out

    def get_identifier_metadata(self, dvo: DvObject) -> Mapping:
        pid = self.get_identifier(dvo)
        try:
            return dict(self.client.get_metadata(pid))
        except PIDNotFound:
            self.log.debug("No metadata available for unregistered identifier: %s", pid)
            return {}

    def modify_identifier_target_url(self, dvo: DvObject) -> str:
        pid = self.get_identifier(dvo)
        self.log.debug("modifying target URL for %s", pid)
        md = self.get_metadata_for_target_url(dvo)
        self.client.update(pid, md)
        return md["_target"]

    def delete_identifier(self, dvo: DvObject):
        pid = self.get_identifier(dvo)
        self.log.info("deleting identifier: %s", pid)
        self.client.delete(pid)

    def publicize_identifier(self, dvo: DvObject) -> bool:
        if not dvo.identifier:
            self.generate_identifier(dvo)
        pid = self.get_identifier(dvo)
        md = self.get_metadata_for_create_indicator(dvo)
        md["_status"] = "public"
        try:
            self.client.publicize(pid, md)
        except PIDRegistryException as ex:
            self.log.error("Failed to publicize %s: %s", pid, str(ex))
            return False
        dvo.identifier_registered = True
        return True
