"""
Minters for the local part of new identifiers, built on NOID templates.

A template has the form ``[prefix.]mask`` where the mask starts with a generator character
('r' for random, 's' for sequential, 'z' for an unbounded sequence), followed by one character
per position ('d' for a digit, 'e' for an extended digit, i.e. a digit or consonant), and an
optional trailing 'k' requesting a NOID check character (computed via pynoid).

The PID providers combine the output of these minters with a shoulder (or a dataset's
identifier, for dependent data file identifiers) to create candidate identifiers; it is the
provider's job to ensure the candidate is unique.
"""
import random, re
from abc import ABCMeta, abstractmethod

from pynoid import __checkdigit as checkdigit

from .exceptions import ConfigurationException

__all__ = [ 'IDMinter', 'RandomStringMinter', 'SequenceMinter', 'RANDOM_STRING', 'STORED_PROC_GENERATED',
            'minter_for_style', 'render_noid' ]

RANDOM_STRING = "randomString"
STORED_PROC_GENERATED = "storedProcGenerated"

_DIGITS = "0123456789"
_XDIGITS = "0123456789bcdfghjkmnpqrstvwxz"
_mask_re = re.compile(r'^[rsz][de]+k?$')

def _split_template(template):
    if '.' in template:
        prefix, mask = template.rsplit('.', 1)
    else:
        prefix, mask = "", template
    if not _mask_re.match(mask):
        raise ConfigurationException("Not a legal NOID template: " + template)
    return prefix, mask

def _capacity(mask):
    total = 1
    for c in mask[1:]:
        if c == 'd':
            total *= len(_DIGITS)
        elif c == 'e':
            total *= len(_XDIGITS)
    return total

def render_noid(template: str, n: int) -> str:
    """
    render the n-th identifier described by the given NOID template.
    :param str template:  the NOID template, ``[prefix.]mask``
    :param int n:         the (non-negative) ordinal of the identifier to render
    :raises ValueError:   if n is negative or, for a bounded ('r' or 's') mask, too large
                          to fit the mask
    :raises ConfigurationException:  if the template is not legal
    """
    prefix, mask = _split_template(template)
    if n < 0:
        raise ValueError("render_noid: n must not be negative: " + str(n))
    positions = mask[1:].rstrip('k')

    out = []
    for c in reversed(positions):
        alphabet = (c == 'd' and _DIGITS) or _XDIGITS
        n, i = divmod(n, len(alphabet))
        out.append(alphabet[i])

    if n > 0:
        if mask[0] != 'z':
            raise ValueError("NOID template exhausted: " + template)
        # unbounded masks grow on the left using the type of their leftmost position
        alphabet = (positions[0] == 'd' and _DIGITS) or _XDIGITS
        while n > 0:
            n, i = divmod(n, len(alphabet))
            out.append(alphabet[i])

    noid = prefix + "".join(reversed(out))
    if mask.endswith('k'):
        noid += checkdigit(noid)
    return noid

class IDMinter(object, metaclass=ABCMeta):
    """
    a minter of local identifier strings
    """

    @abstractmethod
    def mint(self, scope: str=None) -> str:
        """
        return a newly minted identifier string.
        :param str scope:  the namespace the identifier is being minted for; minters that issue
                           identifiers in sequence keep a separate sequence for each scope.
        """
        raise NotImplementedError()

class RandomStringMinter(IDMinter):
    """
    a minter that returns random upper-case strings of digits and consonants
    (e.g. "BYM3KW").  The template's mask must start with 'r'.
    """

    def __init__(self, template: str="reeeeee", upper: bool=True):
        prefix, mask = _split_template(template)
        if mask[0] != 'r':
            raise ConfigurationException("RandomStringMinter: template mask must start with 'r': " +
                                         template)
        self.template = template
        self.upper = upper
        self._total = _capacity(mask)
        self._rand = random.SystemRandom()

    def mint(self, scope: str=None) -> str:
        out = render_noid(self.template, self._rand.randrange(self._total))
        if self.upper:
            out = out.upper()
        return out

class SequenceMinter(IDMinter):
    """
    a minter that renders the next number from a sequence through a NOID template.  The
    sequence numbers come from a PIDService, which keeps a separate sequence for each scope.
    """

    def __init__(self, pidsvc, template: str="zd"):
        if pidsvc is None:
            raise ConfigurationException("SequenceMinter: a PIDService is required to supply "
                                         "sequence numbers")
        prefix, mask = _split_template(template)
        if mask[0] not in "sz":
            raise ConfigurationException("SequenceMinter: template mask must start with 's' or 'z': " +
                                         template)
        self.template = template
        self.pidsvc = pidsvc

    def mint(self, scope: str=None) -> str:
        return render_noid(self.template, self.pidsvc.next_sequence(scope or ""))

def minter_for_style(style: str, pidsvc, config=None) -> IDMinter:
    """
    return the minter appropriate for the given identifier generation style.  An unrecognized
    style gets a random string minter.
    :param str   style:  the identifier generation style; one of RANDOM_STRING or
                         STORED_PROC_GENERATED
    :param PIDService pidsvc:  the service that provides sequence numbers (required for
                         STORED_PROC_GENERATED)
    :param Mapping config:  the provider's configuration, which may override the default NOID
                         templates via 'random_template' and 'sequence_template'
    :raises ConfigurationException:  if STORED_PROC_GENERATED is requested without a pidsvc
    """
    if config is None:
        config = {}
    if style == STORED_PROC_GENERATED:
        if pidsvc is None:
            raise ConfigurationException(STORED_PROC_GENERATED +
                                         " identifier generation requires a PIDService")
        return SequenceMinter(pidsvc, config.get('sequence_template', "zd"))
    return RandomStringMinter(config.get('random_template', "reeeeee"))
