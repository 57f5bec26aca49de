"""
The global identifier value type and the formatting rules shared by all PID providers.

A PID has a canonical string form, ``protocol:authority<separator>identifier``; for example:

    doi:10.5072/FK2/BYM3IW    (protocol: doi;  authority: 10.5072;  identifier: FK2/BYM3IW)
    hdl:1902.1/111012         (protocol: hdl;  authority: 1902.1;   identifier: 111012)

and a resolvable URL form, ``<url_prefix>authority<separator>identifier``.
"""
import re, logging
from typing import Iterable

from .exceptions import PIDValidationException

__all__ = [ 'GlobalId', 'format_identifier_string', 'test_for_null_terminator', 'is_valid_global_id',
            'check_doi_authority', 'parse', 'DOI_PROTOCOL', 'HDL_PROTOCOL', 'PERMA_PROTOCOL',
            'DOI_RESOLVER_URL', 'HDL_RESOLVER_URL' ]

DOI_PROTOCOL = "doi"
HDL_PROTOCOL = "hdl"
PERMA_PROTOCOL = "perma"

DOI_RESOLVER_URL = "https://doi.org/"
HTTP_DOI_RESOLVER_URL = "http://doi.org/"
DXDOI_RESOLVER_URL = "https://dx.doi.org/"
HTTP_DXDOI_RESOLVER_URL = "http://dx.doi.org/"
HDL_RESOLVER_URL = "https://hdl.handle.net/"
HTTP_HDL_RESOLVER_URL = "http://hdl.handle.net/"

_resolvers = {
    DOI_PROTOCOL: DOI_RESOLVER_URL,
    HDL_PROTOCOL: HDL_RESOLVER_URL
}

_ignored_chars_re = re.compile(r"\s+|'|;")
NULL_TERMINATOR = '\u0000'

log = logging.getLogger("PID").getChild("globalid")

def format_identifier_string(s: str) -> str:
    """
    return a normalized form of an identifier part, with all whitespace, single quotes, and
    semicolons removed.  None is returned if the input is None.
    """
    if s is None:
        return None
    return _ignored_chars_re.sub('', s)

def test_for_null_terminator(s: str) -> bool:
    """
    return True if the given string contains a null character after its first position.
    A null at the very start is not considered a terminator.
    """
    if s is None:
        return False
    return s.find(NULL_TERMINATOR) > 0

def is_valid_global_id(protocol: str, authority: str, identifier: str) -> bool:
    """
    return True if the given parts can form a legal GlobalId:  none may be None, and the
    authority and identifier must already be in normalized form with no embedded null
    terminators.
    """
    if protocol is None or authority is None or identifier is None:
        return False
    if authority != format_identifier_string(authority):
        return False
    if test_for_null_terminator(authority):
        return False
    if identifier != format_identifier_string(identifier):
        return False
    if test_for_null_terminator(identifier):
        return False
    return True

def check_doi_authority(doi_authority: str) -> bool:
    """
    return True if the given string is a legal DOI authority (i.e. it starts with "10.")
    """
    if doi_authority is None:
        return False
    return doi_authority.startswith("10.")

class GlobalId(object):
    """
    an immutable, parsed persistent identifier.

    Instances are usually created by parsing an identifier string (see :py:func:`parse` or a
    provider's ``parse_persistent_id()``) or by a provider when it generates a new identifier.
    Two GlobalIds are equal if their protocols, authorities, and identifiers are equal.
    """
    __slots__ = ('_protocol', '_authority', '_identifier', '_separator', '_urlpfx', '_provname')

    def __init__(self, protocol: str, authority: str, identifier: str, separator: str="/",
                 url_prefix: str=None, provider_name: str=None):
        """
        create the identifier.
        :param str protocol:    the identifier scheme (e.g. "doi", "hdl", "perma")
        :param str authority:   the namespace-owning prefix (e.g. "10.5072")
        :param str identifier:  the local identifier within the authority
        :param str separator:   the delimiter rendered between the authority and identifier
        :param str url_prefix:  the resolver base URL used to build resolvable URLs; if not
                                provided, a default for a known protocol will be used.
        :param str provider_name:  the name of the provider that produced this identifier
        :raises PIDValidationException:  if the parts do not form a valid identifier
        """
        if not is_valid_global_id(protocol, authority, identifier):
            raise PIDValidationException(protocol=protocol, authority=authority, identifier=identifier)
        if separator is None:
            separator = ""
        if url_prefix is None:
            url_prefix = _resolvers.get(protocol, "")
        object.__setattr__(self, '_protocol', protocol)
        object.__setattr__(self, '_authority', authority)
        object.__setattr__(self, '_identifier', identifier)
        object.__setattr__(self, '_separator', separator)
        object.__setattr__(self, '_urlpfx', url_prefix)
        object.__setattr__(self, '_provname', provider_name)

    def __setattr__(self, name, value):
        raise AttributeError("GlobalId is immutable")

    def __delattr__(self, name):
        raise AttributeError("GlobalId is immutable")

    @property
    def protocol(self) -> str:
        """the identifier scheme"""
        return self._protocol

    @property
    def authority(self) -> str:
        """the namespace-owning prefix"""
        return self._authority

    @property
    def identifier(self) -> str:
        """the local identifier under the authority"""
        return self._identifier

    @property
    def separator(self) -> str:
        return self._separator

    @property
    def url_prefix(self) -> str:
        return self._urlpfx

    @property
    def provider_name(self) -> str:
        return self._provname

    def as_string(self) -> str:
        """
        return the canonical string form, ``protocol:authority<separator>identifier``
        """
        return "%s:%s%s%s" % (self._protocol, self._authority, self._separator, self._identifier)

    def as_url(self) -> str:
        """
        return the resolvable URL form of this identifier
        """
        return "%s%s%s%s" % (self._urlpfx, self._authority, self._separator, self._identifier)

    def with_identifier(self, identifier: str):
        """
        return a new GlobalId that is the same as this one except for its identifier part
        """
        return GlobalId(self._protocol, self._authority, identifier, self._separator,
                        self._urlpfx, self._provname)

    def _key(self):
        return (self._protocol, self._authority, self._identifier)

    def __eq__(self, other):
        if not isinstance(other, GlobalId):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __str__(self):
        return self.as_string()

    def __repr__(self):
        return "GlobalId(%r)" % self.as_string()

def _parse_generic(pidstr: str, separator: str="/") -> GlobalId:
    pidstr = pidstr.replace("%3A", ":")
    idx = pidstr.find(':')
    if idx <= 0:
        log.info("Error parsing identifier: %s: '<protocol>:' not found in string", pidstr)
        return None
    protocol = pidstr[:idx]
    rest = pidstr[idx+1:]

    idx = rest.find(separator)
    if idx <= 0 or idx + len(separator) >= len(rest):
        log.info("Error parsing identifier: %s: '<authority>%s<identifier>' not found in string",
                 pidstr, separator)
        return None
    authority = rest[:idx]
    identifier = rest[idx+len(separator):]
    if not is_valid_global_id(protocol, authority, identifier):
        return None
    return GlobalId(protocol, authority, identifier, separator)

def parse(pidstr: str, providers: Iterable=None) -> GlobalId:
    """
    parse the given identifier string into a GlobalId.  If a list of providers is given, each
    provider's grammar is tried in turn and the first successful result is returned; otherwise,
    the generic ``protocol:authority/identifier`` grammar is applied.

    :param str pidstr:  the identifier string to parse
    :param providers:   the PidProviders (or a PidProviderDispatcher) whose grammars should
                        be applied
    :return:  the parsed identifier or None if the string is not recognized as a PID
    """
    if not pidstr:
        return None
    if providers is None:
        return _parse_generic(pidstr)

    for prov in providers:
        out = prov.parse_persistent_id(pidstr)
        if out is not None:
            return out
    return None
