"""
The PermaLink provider: a minimalist permanent identifier provider intended for use with
real datasets and files where the use case nonetheless doesn't lend itself to DOIs or
Handles (e.g. due to cost, or for a catalog of datasets whose DOIs are managed elsewhere).

PermaLinks are minted and resolved entirely locally; no external registry is contacted.  They
resolve to the site's existing landing pages (using the ``?persistentId=<id>`` format).
"""
from collections.abc import Mapping
from typing import List

from ..globalid import GlobalId, PERMA_PROTOCOL, format_identifier_string, test_for_null_terminator
from ..dvobject import DvObject
from ..service import PIDService
from ..utils import blab
from .base import AbstractPidProvider

__all__ = [ 'PermaLinkPidProvider', 'PERMA_PROTOCOL', 'PERMA_PROVIDER_NAME' ]

PERMA_PROVIDER_NAME = "PERMA"

class PermaLinkPidProvider(AbstractPidProvider):
    """
    a provider of PermaLink identifiers (protocol "perma").

    The separator between the authority and the identifier is configurable and is empty by
    default, so that by default a PermaLink looks like ``perma:<authority><identifier>``.
    """
    TYPE = "perma"

    def __init__(self, authority: str, shoulder: str, id_gen_style: str=None,
                 datafile_pid_format: str=None, managed_list=None, excluded_list=None,
                 base_url: str=None, pidsvc: PIDService=None, config: Mapping=None,
                 separator: str=""):
        """
        create the provider
        :param str base_url:   the base URL of the site that resolves these PermaLinks; if not
                               provided, the configured 'site_url' is used.
        :param str separator:  the delimiter between the authority and identifier
        (See :py:class:`~nistoar.pid.providers.base.AbstractPidProvider` for the other parameters.)
        """
        self._separator = separator or ""
        super(PermaLinkPidProvider, self).__init__(PERMA_PROTOCOL, authority, shoulder, id_gen_style,
                                                   datafile_pid_format, managed_list, excluded_list,
                                                   pidsvc, config)
        self._baseurl = (base_url or self.site_url).rstrip('/')

    @property
    def separator(self) -> str:
        return self._separator

    @property
    def base_url(self) -> str:
        return self._baseurl

    @property
    def url_prefix(self) -> str:
        return self._baseurl + "/citation?persistentId=" + PERMA_PROTOCOL + ":"

    def get_provider_information(self) -> List[str]:
        return [PERMA_PROVIDER_NAME, self._baseurl]

    def already_registered_pid(self, gid: GlobalId, no_provider_default: bool) -> bool:
        # PermaLinks are not registered anywhere, so all locally used PIDs are treated as
        # registered
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
        # data files may not have had an identifier created for them yet
        if not dvo.identifier:
            self.generate_identifier(dvo)
        return True

    def parse_persistent_id(self, pidstr: str) -> GlobalId:
        if pidstr and pidstr.startswith(self.url_prefix):
            pidstr = PERMA_PROTOCOL + ":" + pidstr[len(self.url_prefix):]
        return super(PermaLinkPidProvider, self).parse_persistent_id(pidstr)

    def parse_protocol_identifier(self, protocol: str, idstr: str) -> GlobalId:
        blab(self.log, "Checking Perma: %s", idstr)
        if protocol != PERMA_PROTOCOL:
            return None

        identifier = None
        if self._authority and idstr and idstr.startswith(self._authority):
            identifier = idstr[len(self._authority):]
            if self._separator and identifier.startswith(self._separator):
                identifier = identifier[len(self._separator):]

        identifier = format_identifier_string(identifier)
        if not identifier or test_for_null_terminator(identifier):
            return None
        return super(PermaLinkPidProvider, self).parse_persistent_id_parts(PERMA_PROTOCOL,
                                                                           self._authority, identifier)

    def parse_persistent_id_parts(self, protocol: str, authority: str, identifier: str) -> GlobalId:
        if protocol != PERMA_PROTOCOL:
            return None
        return super(PermaLinkPidProvider, self).parse_persistent_id_parts(protocol, authority, identifier)
