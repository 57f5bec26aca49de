"""
A PID provider for Handles registered with a Handle.Net service
"""
from collections.abc import Mapping

from ..globalid import HDL_PROTOCOL, HDL_RESOLVER_URL, HTTP_HDL_RESOLVER_URL, GlobalId
from ..service import PIDService
from ..clients import RegistryClient
from .registry import RegistryPidProvider

__all__ = [ 'HandlePidProvider', 'HDL_PROTOCOL', 'HANDLE_NET' ]

HANDLE_NET = "HandleNet"

class HandlePidProvider(RegistryPidProvider):
    """
    a provider of Handles (e.g. ``hdl:1902.1/111012``), which resolve via https://hdl.handle.net/
    """
    TYPE = "hdl"
    PROVIDER_NAME = HANDLE_NET

    def __init__(self, authority: str, shoulder: str, id_gen_style: str=None,
                 datafile_pid_format: str=None, managed_list=None, excluded_list=None,
                 client: RegistryClient=None, pidsvc: PIDService=None, config: Mapping=None):
        super(HandlePidProvider, self).__init__(HDL_PROTOCOL, authority, shoulder, id_gen_style,
                                                datafile_pid_format, managed_list, excluded_list,
                                                client, pidsvc, config)

    @property
    def separator(self) -> str:
        return "/"

    @property
    def url_prefix(self) -> str:
        return HDL_RESOLVER_URL

    def parse_persistent_id(self, pidstr: str) -> GlobalId:
        if pidstr:
            for url in (HDL_RESOLVER_URL, HTTP_HDL_RESOLVER_URL):
                if pidstr.startswith(url):
                    pidstr = HDL_PROTOCOL + ":" + pidstr[len(url):]
                    break
        return super(HandlePidProvider, self).parse_persistent_id(pidstr)

    def parse_protocol_identifier(self, protocol: str, idstr: str) -> GlobalId:
        if protocol != HDL_PROTOCOL:
            return None
        return super(HandlePidProvider, self).parse_protocol_identifier(protocol, idstr)

    def parse_persistent_id_parts(self, protocol: str, authority: str, identifier: str) -> GlobalId:
        if protocol != HDL_PROTOCOL:
            return None
        return super(HandlePidProvider, self).parse_persistent_id_parts(protocol, authority, identifier)
