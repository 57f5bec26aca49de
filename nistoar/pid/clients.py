"""
The interface to external PID registry services.

Registry-backed PID providers (DataCite, EZID, Handle.Net) do not speak their services' wire
protocols themselves; they delegate to a :py:class:`RegistryClient`.  Implementations of this
interface are expected to signal failures with the exceptions defined in
:py:mod:`nistoar.pid.exceptions`:  :py:class:`~nistoar.pid.exceptions.PIDNotFound` when the
identifier is unknown to the service, :py:class:`~nistoar.pid.exceptions.PIDRegistryClientError`
when the service rejects a request, and :py:class:`~nistoar.pid.exceptions.PIDRegistryServerError`
when the service fails.  Clients must be safe to call from multiple threads.
"""
from abc import ABCMeta, abstractmethod
from collections.abc import Mapping

__all__ = [ 'RegistryClient' ]

class RegistryClient(object, metaclass=ABCMeta):
    """
    a client for an external PID registry service.  Identifiers are passed to these methods
    in their canonical string form (e.g. "doi:10.5072/FK2/BYM3IW").
    """

    @property
    def endpoint(self) -> str:
        """
        the base URL of the registry service, if known
        """
        return None

    @abstractmethod
    def exists(self, pid: str) -> bool:
        """
        return True if the given identifier is registered (or reserved) with the service
        """
        raise NotImplementedError()

    @abstractmethod
    def reserve(self, pid: str, metadata: Mapping) -> str:
        """
        register the given identifier with the service in a reserved (non-public) state
        :return:  a message from the service that includes the registered identifier
        """
        raise NotImplementedError()

    @abstractmethod
    def get_metadata(self, pid: str) -> Mapping:
        """
        return the metadata the service holds for the given identifier
        """
        raise NotImplementedError()

    @abstractmethod
    def update(self, pid: str, metadata: Mapping):
        """
        update the metadata (including, with the "_target" property, the target URL) of an
        identifier already registered with the service
        """
        raise NotImplementedError()

    @abstractmethod
    def publicize(self, pid: str, metadata: Mapping):
        """
        make the given identifier public, registering or updating it with the given metadata
        """
        raise NotImplementedError()

    @abstractmethod
    def delete(self, pid: str):
        """
        remove the given identifier from the service
        """
        raise NotImplementedError()
