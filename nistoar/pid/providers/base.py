"""
The PID provider interface and a base implementation shared by all providers.

A :py:class:`PidProvider` manages identifiers under a single protocol (and, for providers that
mint new identifiers, a configured authority and shoulder).  Providers with an external
registry service (DataCite, EZID, Handle.Net) register identifiers with that service; providers
without one (e.g. PermaLinks) manage identifiers entirely locally.  Providers are configured
once at construction and hold no per-call state, so a single instance may be shared across
threads.
"""
import re
from abc import ABCMeta, abstractmethod
from collections.abc import Mapping
from typing import List, Set

from ..globalid import GlobalId, is_valid_global_id
from ..dvobject import DvObject, Dataset, DataFile
from ..service import PIDService
from ..minter import minter_for_style, RANDOM_STRING
from ..exceptions import (PIDRegistryException, PIDConflictError, PIDGenerationException,
                          ConfigurationException)
from ..utils import blab
from .. import system as _sys

syslog = _sys.getSysLogger().getChild("providers")

__all__ = [ 'PidProvider', 'AbstractPidProvider', 'DEPENDENT', 'INDEPENDENT' ]

DEPENDENT = "DEPENDENT"
INDEPENDENT = "INDEPENDENT"

class PidProvider(object, metaclass=ABCMeta):
    """
    the interface every PID provider implements
    """

    @abstractmethod
    def already_registered(self, dvo: DvObject) -> bool:
        """
        return True if the identifier assigned to the given object has been registered
        """
        raise NotImplementedError()

    @abstractmethod
    def already_registered_pid(self, gid: GlobalId, no_provider_default: bool) -> bool:
        """
        report whether a PID is registered with the provider's external service.  For
        providers like DOIs/Handles with an external service, this should accurately report
        whether the PID has been registered in the service.  For providers with no external
        service, this should return True if the PID is in use locally; if it isn't,
        ``no_provider_default`` is returned.

        :param GlobalId gid:  the identifier to check
        :param bool no_provider_default:  the value to return when there is no external
                              service and no local use of the PID
        :raises PIDRegistryException:  if the external service could not be queried
        """
        raise NotImplementedError()

    @abstractmethod
    def register_when_published(self) -> bool:
        """
        return True if identifiers must be explicitly registered when their objects are published
        """
        raise NotImplementedError()

    @abstractmethod
    def can_manage_pid(self, gid: GlobalId=None) -> bool:
        """
        return True if this provider is authoritative for the given identifier (or, if none is
        given, for identifiers under its configured authority and shoulder)
        """
        raise NotImplementedError()

    @abstractmethod
    def get_provider_information(self) -> List[str]:
        """
        return a list describing this provider; the first element is its display name
        """
        raise NotImplementedError()

    @abstractmethod
    def create_identifier(self, dvo: DvObject) -> str:
        """
        register the identifier assigned to the given object.  On success, the returned string
        contains the identifier.
        :raises PIDRegistryException:  if the registry service failed to register the identifier
        """
        raise NotImplementedError()

    @abstractmethod
    def get_identifier_metadata(self, dvo: DvObject) -> Mapping:
        """
        return the metadata the provider holds for the object's identifier; this may be empty
        """
        raise NotImplementedError()

    @abstractmethod
    def modify_identifier_target_url(self, dvo: DvObject) -> str:
        """
        update the URL the object's identifier resolves to, making it the object's current
        landing page, and return that URL.
        :raises PIDRegistryException:  if the registry service failed to update the target
        """
        raise NotImplementedError()

    @abstractmethod
    def delete_identifier(self, dvo: DvObject):
        """
        remove (unregister) the identifier assigned to the given object
        :raises PIDRegistryException:  if the registry service failed to delete the identifier
        """
        raise NotImplementedError()

    @abstractmethod
    def get_metadata_for_create_indicator(self, dvo: DvObject) -> Mapping:
        raise NotImplementedError()

    @abstractmethod
    def get_metadata_for_target_url(self, dvo: DvObject) -> Mapping:
        raise NotImplementedError()

    @abstractmethod
    def generate_identifier(self, dvo: DvObject) -> DvObject:
        """
        assign a new, unique identifier to the given object and return it
        """
        raise NotImplementedError()

    @abstractmethod
    def get_identifier(self, dvo: DvObject) -> str:
        raise NotImplementedError()

    @abstractmethod
    def publicize_identifier(self, dvo: DvObject) -> bool:
        """
        make the object's identifier public, generating one first if necessary.  This is called
        when the object is published.
        :return:  True if successful
        """
        raise NotImplementedError()

    @abstractmethod
    def generate_dataset_identifier(self, dataset: Dataset) -> str:
        raise NotImplementedError()

    @abstractmethod
    def generate_datafile_identifier(self, datafile: DataFile) -> str:
        raise NotImplementedError()

    @abstractmethod
    def is_global_id_unique(self, gid: GlobalId) -> bool:
        """
        return True if no object, locally or (for registry-backed providers) remotely,
        currently holds the given identifier
        """
        raise NotImplementedError()

    @abstractmethod
    def parse_persistent_id(self, pidstr: str) -> GlobalId:
        """
        parse a persistent identifier string into a GlobalId.

        Example 1: doi:10.5072/FK2/BYM3IW
            protocol: doi
            authority: 10.5072
            identifier: FK2/BYM3IW

        Example 2: hdl:1902.1/111012
            protocol: hdl
            authority: 1902.1
            identifier: 111012

        :return:  the parsed identifier, or None if the string is not recognized by this provider
        """
        raise NotImplementedError()

    @abstractmethod
    def parse_persistent_id_parts(self, protocol: str, authority: str, identifier: str) -> GlobalId:
        """
        create a GlobalId from its parts, or return None if the parts are not valid for this
        provider
        """
        raise NotImplementedError()

    @property
    @abstractmethod
    def url_prefix(self) -> str:
        raise NotImplementedError()

    @property
    @abstractmethod
    def separator(self) -> str:
        raise NotImplementedError()

    @property
    @abstractmethod
    def protocol(self) -> str:
        raise NotImplementedError()

    @property
    @abstractmethod
    def provider_type(self) -> str:
        raise NotImplementedError()

    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError()

    @property
    @abstractmethod
    def authority(self) -> str:
        raise NotImplementedError()

    @property
    @abstractmethod
    def shoulder(self) -> str:
        raise NotImplementedError()

    @property
    @abstractmethod
    def identifier_generation_style(self) -> str:
        raise NotImplementedError()

def _as_set(lst) -> Set[str]:
    if not lst:
        return set()
    if isinstance(lst, str):
        lst = re.split(r'[,\s]+', lst)
    return set([s.strip() for s in lst if s and s.strip()])

class AbstractPidProvider(PidProvider):
    """
    a base implementation of the PidProvider interface that provides the identifier generation,
    management-scope, metadata, and generic parsing behavior shared by all providers.

    This class can take a configuration dictionary on construction; the following parameters
    are supported:
    :param str          site_url:  the base URL of the site hosting the objects' landing pages
    :param int max_generation_attempts:  the number of candidate identifiers to try when
                                     generating a new one before giving up (default: 20)
    :param str   random_template:  the NOID template for the randomString generation style
    :param str sequence_template:  the NOID template for the storedProcGenerated generation style
    """
    TYPE = None
    MAX_GENERATION_ATTEMPTS = 20

    def __init__(self, protocol: str, authority: str, shoulder: str, id_gen_style: str=None,
                 datafile_pid_format: str=None, managed_list=None, excluded_list=None,
                 pidsvc: PIDService=None, config: Mapping=None):
        """
        create the provider

        :param str     protocol:  the protocol of the identifiers this provider manages
        :param str    authority:  the authority to create new identifiers under
        :param str     shoulder:  the namespace prefix (under the authority) for new identifiers
        :param str id_gen_style:  the identifier generation style, either "randomString"
                                   (default) or "storedProcGenerated"
        :param str datafile_pid_format:  either "DEPENDENT" (default), where data file
                                   identifiers extend their dataset's identifier, or "INDEPENDENT"
        :param managed_list:      identifiers (as strings) this provider manages regardless of
                                   their authority and shoulder
        :param excluded_list:     identifiers (as strings) this provider does not manage, even if
                                   they match its authority and shoulder
        :param PIDService pidsvc: the service used to check for and reserve locally used
                                   identifiers
        :param Mapping   config:  other configuration parameters
        """
        if config is None:
            config = {}
        self.cfg = config
        self._protocol = protocol
        self._authority = authority or ""
        self._shoulder = shoulder or ""
        self._idgenstyle = id_gen_style or RANDOM_STRING
        self._dfpidfmt = (datafile_pid_format or DEPENDENT).upper()
        if self._dfpidfmt not in (DEPENDENT, INDEPENDENT):
            raise ConfigurationException("datafile_pid_format: must be DEPENDENT or INDEPENDENT: " +
                                         str(datafile_pid_format))
        self._managed = _as_set(managed_list)
        self._excluded = _as_set(excluded_list)
        self.pidsvc = pidsvc
        self.site_url = self.cfg.get('site_url', '').rstrip('/')

        self.max_attempts = self.cfg.get('max_generation_attempts', self.MAX_GENERATION_ATTEMPTS)
        self._minter = minter_for_style(self._idgenstyle, pidsvc, self.cfg)
        self.log = syslog.getChild(type(self).__name__)

    @property
    def protocol(self) -> str:
        return self._protocol

    @property
    def authority(self) -> str:
        return self._authority

    @property
    def shoulder(self) -> str:
        return self._shoulder

    @property
    def identifier_generation_style(self) -> str:
        return self._idgenstyle

    @property
    def datafile_pid_format(self) -> str:
        return self._dfpidfmt

    @property
    def provider_type(self) -> str:
        return type(self).TYPE

    @property
    def name(self) -> str:
        return self.get_provider_information()[0]

    @property
    def managed_set(self) -> Set[str]:
        return set(self._managed)

    @property
    def excluded_set(self) -> Set[str]:
        return set(self._excluded)

    def already_registered(self, dvo: DvObject) -> bool:
        if dvo is None:
            self.log.error("Null DvObject sent to already_registered()")
            return False
        gid = dvo.global_id
        if gid is None:
            return False
        return self.already_registered_pid(gid, False)

    def can_manage_pid(self, gid: GlobalId=None) -> bool:
        if gid is None:
            return bool(self._authority)
        pid = gid.as_string()
        if pid in self._excluded:
            return False
        if pid in self._managed:
            return True
        return gid.protocol == self.protocol and gid.authority == self._authority and \
               gid.identifier.startswith(self._shoulder)

    def get_identifier(self, dvo: DvObject) -> str:
        gid = dvo.global_id
        return (gid and gid.as_string()) or None

    def get_target_url(self, dvo: DvObject) -> str:
        """
        return the URL of the given object's landing page
        """
        return self.site_url + dvo.target_path + (self.get_identifier(dvo) or "")

    def get_metadata_for_create_indicator(self, dvo: DvObject) -> Mapping:
        self.log.debug("getting metadata for identifier creation: %s", dvo)
        out = self._basic_metadata(dvo)
        out["datacite.resourcetype"] = "Dataset"
        out["_status"] = "reserved"
        out["_target"] = self.get_target_url(dvo)
        return out

    def get_metadata_for_target_url(self, dvo: DvObject) -> Mapping:
        return { "_target": self.get_target_url(dvo) }

    def _basic_metadata(self, dvo: DvObject) -> Mapping:
        # data files are described by their dataset's metadata
        src = dvo
        if not dvo.is_dataset() and getattr(dvo, 'owner', None):
            src = dvo.owner
        out = {}
        out["datacite.creator"] = "; ".join(src.authors) or ":unav"
        out["datacite.title"] = dvo.title or src.title or ":unav"
        out["datacite.publisher"] = src.publisher or ":unav"
        out["datacite.publicationyear"] = str(src.publication_year or ":unav")
        return out

    def generate_identifier(self, dvo: DvObject) -> DvObject:
        """
        assign a new identifier to the given object according to the configured generation
        style.  Generation is serialized within the scope of this provider's authority and
        shoulder, and a candidate that turns out to be in use is discarded and another is tried.

        :raises PIDGenerationException:  if a unique identifier could not be found after the
                                         configured number of attempts
        """
        if dvo.is_dataset():
            self.generate_dataset_identifier(dvo)
        else:
            self.generate_datafile_identifier(dvo)
        return dvo

    def generate_dataset_identifier(self, dataset: Dataset) -> str:
        dataset.protocol = self.protocol
        dataset.authority = self._authority
        return self._generate_unique(dataset, self._shoulder)

    def generate_datafile_identifier(self, datafile: DataFile) -> str:
        owner = datafile.owner
        if self._dfpidfmt == DEPENDENT and owner is not None and owner.identifier:
            prefix = owner.identifier + "/"
            datafile.protocol = owner.protocol
            datafile.authority = owner.authority
        else:
            prefix = self._shoulder
            datafile.protocol = self.protocol
            datafile.authority = self._authority
        return self._generate_unique(datafile, prefix)

    def _generate_unique(self, dvo: DvObject, prefix: str) -> str:
        scope = "%s:%s%s%s" % (dvo.protocol, dvo.authority, self.separator, prefix)
        with self._scope_lock(scope):
            for i in range(self.max_attempts):
                ident = prefix + self._minter.mint(scope)
                gid = GlobalId(dvo.protocol, dvo.authority, ident, self.separator,
                               self.url_prefix, self.name)
                if not self.is_global_id_unique(gid):
                    self.log.debug("generated identifier already in use: %s", gid)
                    continue
                if self.pidsvc:
                    try:
                        self.pidsvc.reserve(gid, {"provider": self.name})
                    except PIDConflictError:
                        self.log.debug("lost race to reserve identifier: %s", gid)
                        continue
                dvo.set_global_id(gid)
                return ident

        raise PIDGenerationException("Unable to generate a unique identifier under %s after %d attempts"
                                     % (scope, self.max_attempts))

    def _scope_lock(self, scope):
        if self.pidsvc:
            return self.pidsvc.lock_for(scope)
        return _NoLock()

    def is_global_id_unique(self, gid: GlobalId) -> bool:
        if self.pidsvc and not self.pidsvc.is_global_id_locally_unique(gid):
            return False

        # not in local use; look in the persistent identifier service
        try:
            return not self.already_registered_pid(gid, False)
        except PIDRegistryException as ex:
            # a failed look-up is treated as the identifier not being found remotely
            self.log.info("Unable to check registry for %s (assuming unique): %s", gid, str(ex))
        return True

    def parse_persistent_id(self, pidstr: str) -> GlobalId:
        if not pidstr:
            return None

        # the protocol delimiter occasionally arrives still URL-encoded
        pidstr = pidstr.replace("%3A", ":")
        idx = pidstr.find(':')
        if idx > 0:
            return self.parse_protocol_identifier(pidstr[:idx], pidstr[idx+1:])

        self.log.info("Error parsing identifier: %s: '<protocol>:' not found in string", pidstr)
        return None

    def parse_protocol_identifier(self, protocol: str, idstr: str) -> GlobalId:
        """
        parse the part of an identifier string following its protocol into a GlobalId, or
        return None if it cannot be parsed by this provider
        """
        if idstr is None:
            return None
        sep = self.separator
        idx = idstr.find(sep) if sep else -1
        if idx > 0 and idx + len(sep) < len(idstr):
            return self.parse_persistent_id_parts(protocol, idstr[:idx], idstr[idx+len(sep):])

        self.log.info("Error parsing identifier: %s: ':<authority>%s<identifier>' not found in string",
                      idstr, sep)
        return None

    def parse_persistent_id_parts(self, protocol: str, authority: str, identifier: str) -> GlobalId:
        blab(self.log, "Parsing: %s:%s%s%s in %s", protocol, authority, self.separator, identifier,
             self.name)
        if not is_valid_global_id(protocol, authority, identifier):
            return None
        return GlobalId(protocol, authority, identifier, self.separator, self.url_prefix, self.name)

    def __repr__(self):
        return "%s(%s:%s%s%s)" % (type(self).__name__, self.protocol, self._authority, self.separator,
                                  self._shoulder)

class _NoLock(object):
    def __enter__(self):
        return self
    def __exit__(self, *exc):
        return False
