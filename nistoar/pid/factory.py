"""
Construction of the PID providers from configuration.

The configuration passed to :py:func:`create_context` supports the following parameters:

:param str       site_url:  the base URL for landing pages of the objects being identified
:param dict      settings:  system settings, including ``:Protocol`` (the default protocol) and
                            ``:DoiProvider`` (which DOI provider to use).  The settings
                            ``:Authority``, ``:Shoulder``, ``:IdentifierGenerationStyle`` and
                            ``:DataFilePIDFormat`` provide defaults for the provider parameters.
:param dict  pid_registry:  the configuration for the local registry of issued identifiers (see
                            :py:class:`~nistoar.pid.service.IssuedPIDRegistry`); ``store_dir``
                            gives the directory to persist it to.
:param dict     providers:  the providers to create, keyed by type:  ``perma``, ``datacite``,
                            ``ezid``, ``fake``, or ``handle``.  Each supports ``authority``,
                            ``shoulder``, ``identifier_generation_style``,
                            ``datafile_pid_format``, ``managed_list``, and ``excluded_list``;
                            ``perma`` also supports ``base_url`` and ``separator``.  A
                            registry-backed provider with ``client: sim`` is given a
                            :py:class:`~nistoar.pid.sim.SimRegistryClient`.
"""
from collections.abc import Mapping

from .config import Key, ConfigSettings, merge_config, load_from_file
from .service import PIDService, IssuedPIDRegistry
from .dispatch import ProviderContext
from .providers import (PermaLinkPidProvider, DataCiteDOIProvider, EZIdDOIProvider, FakeDOIProvider,
                        HandlePidProvider, PERMA_PROTOCOL, DATACITE, EZID, FAKE)
from .globalid import HDL_PROTOCOL
from .exceptions import ConfigurationException
from .sim import SimRegistryClient
from . import system as _sys

log = _sys.getSysLogger().getChild("factory")

__all__ = [ 'create_context', 'create_context_from_file', 'create_provider', 'PROVIDER_TYPES' ]

# provider type -> (class, name registered in the context, whether a registry client is needed)
PROVIDER_TYPES = {
    "perma":    (PermaLinkPidProvider, PERMA_PROTOCOL, False),
    "datacite": (DataCiteDOIProvider,  DATACITE,       True),
    "ezid":     (EZIdDOIProvider,      EZID,           True),
    "fake":     (FakeDOIProvider,      FAKE,           False),
    "handle":   (HandlePidProvider,    HDL_PROTOCOL,   True)
}

_inherited_params = [ 'site_url', 'max_generation_attempts', 'random_template', 'sequence_template' ]

def create_provider(ptype: str, config: Mapping, settings=None, pidsvc: PIDService=None, client=None):
    """
    create a single PID provider of the given type
    :param str     ptype:  the provider type; one of the keys of PROVIDER_TYPES
    :param Mapping config:  the provider's configuration
    :param SettingsLookup settings:  the system settings to draw default values from
    :param PIDService pidsvc:  the local identifier service
    :param RegistryClient client:  the registry client (required for registry-backed types)
    :raises ConfigurationException:  if the type is unrecognized or a required client is missing
    """
    if ptype not in PROVIDER_TYPES:
        raise ConfigurationException("Unrecognized PID provider type: " + str(ptype))
    if settings is None:
        settings = ConfigSettings()
    cls, name, needs_client = PROVIDER_TYPES[ptype]

    def param(cfgname, key, default=None):
        val = config.get(cfgname)
        if val is None:
            val = settings.get_value_for_key(key, default)
        return val

    args = [ param('authority', Key.Authority, ""),
             param('shoulder', Key.Shoulder, ""),
             param('identifier_generation_style', Key.IdentifierGenerationStyle),
             param('datafile_pid_format', Key.DataFilePIDFormat),
             config.get('managed_list'),
             config.get('excluded_list') ]
    kw = { 'pidsvc': pidsvc, 'config': config }

    if ptype == "perma":
        kw['base_url'] = config.get('base_url')
        kw['separator'] = config.get('separator', "")
    elif needs_client:
        if client is None:
            raise ConfigurationException("%s provider requires a registry client" % name)
        kw['client'] = client

    return cls(*args, **kw)

def create_context(config: Mapping, pidsvc: PIDService=None, clients: Mapping=None) -> ProviderContext:
    """
    create the set of PID providers described by the given configuration.

    Registry-backed providers (datacite, ezid, handle) are only created if a client for their
    type is provided in ``clients``; a configured provider without a client is skipped with a
    warning.

    :param Mapping  config:  the PID system configuration (see module documentation)
    :param PIDService pidsvc:  the local identifier service; if not provided, an
                             IssuedPIDRegistry will be created from the ``pid_registry`` parameter
    :param Mapping clients:  registry clients, keyed by provider type
    """
    if config is None:
        config = {}
    if clients is None:
        clients = {}
    settings = ConfigSettings(config.get('settings', {}))

    if pidsvc is None:
        regcfg = config.get('pid_registry', {})
        pidsvc = IssuedPIDRegistry(regcfg.get('store_dir'), regcfg, regcfg.get('name'))

    defaults = dict([(p, config[p]) for p in _inherited_params if p in config])
    provcfgs = config.get('providers', {})
    if not isinstance(provcfgs, Mapping):
        raise ConfigurationException("providers: not a dictionary: " + str(type(provcfgs)))

    providers = {}
    for ptype, pcfg in provcfgs.items():
        if ptype not in PROVIDER_TYPES:
            raise ConfigurationException("Unrecognized PID provider type: " + str(ptype))
        pcfg = pcfg or {}
        cls, name, needs_client = PROVIDER_TYPES[ptype]
        client = clients.get(ptype)
        if needs_client and client is None and pcfg.get('client') == "sim":
            client = SimRegistryClient(pcfg.get('service_url', "https://registry.example.com/"))
            log.warning("Using simulated registry client for %s provider", name)
        if needs_client and client is None:
            log.warning("No registry client available for %s provider; skipping", name)
            continue
        pcfg = merge_config(pcfg, defaults)
        providers[name] = create_provider(ptype, pcfg, settings, pidsvc, client)
        log.info("Created %s PID provider", name)

    return ProviderContext(settings, providers)

def create_context_from_file(configfile: str, pidsvc: PIDService=None,
                             clients: Mapping=None) -> ProviderContext:
    """
    create the set of PID providers described by the configuration in the given file
    """
    return create_context(load_from_file(configfile), pidsvc, clients)
