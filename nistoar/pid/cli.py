"""
a command-line interface for examining persistent identifiers and the PID provider
configuration.  The :py:func:`main` function provides the implementation.

Sub-commands:
  * ``parse PID ...``       -- parse identifier strings and print their parts
  * ``validate PROTOCOL AUTHORITY IDENTIFIER`` -- check whether the parts form a valid identifier
  * ``providers [PROTOCOL ...]`` -- report the provider selected for each protocol
"""
import os, sys, re, logging, traceback as tb
from argparse import ArgumentParser

import yaml

from . import config
from .config import ConfigurationException
from .globalid import is_valid_global_id, parse as generic_parse
from .dispatch import PidProviderDispatcher, ProviderContext
from .factory import create_context

prog = re.sub(r'\.py$', '', os.path.basename(sys.argv[0]))

class Failure(Exception):
    """
    An exception that indicates that a failure occured while executing the command.  The
    command is expected to exit with a non-zero exit code.

    The following conventions for exit codes are used:
      * 1:  an identifier was found to be invalid or unparseable
      * 2:  error due to missing or otherwise misused command-line options
      * 3:  syntax or other read error while reading the configuration
      * 6:  a configuration error was detected
    """
    def __init__(self, message, exitcode=1, cause=None):
        super(Failure, self).__init__(message)
        self.exitcode = exitcode
        self.cause = cause

def define_options(progname):
    """
    return an ArgumentParser instance that is configured with options
    for the command-line interface.
    """
    description = "parse and validate persistent identifiers, and report on the PID providers " \
                  "available to the system"
    epilog = None

    parser = ArgumentParser(progname, None, description, epilog)
    parser.add_argument('-c', '--config-file', type=str, dest='cfgfile', metavar='FILE',
                        help="a file containing the PID provider configuration.  If not provided, "+
                             "the OAR_PID_CONFIG environment variable will be consulted.")
    parser.add_argument('-l', '--logfile', action='store', dest='logfile', type=str, metavar='FILE',
                        help="write messages that normally go to standard error to FILE as well.  "+
                             "If -q is also specified, the messages will only go to the logfile")
    parser.add_argument('-v', '--verbose', action='store_true', dest='verbose',
                        help="print more (debug) messages to standard error and/or the log file")
    parser.add_argument('-q', '--quiet', action='store_true', dest='quiet',
                        help="suppress all error and warning messages to standard error")

    subparsers = parser.add_subparsers(title="subcommands", dest="cmd")

    p = subparsers.add_parser("parse", help="parse identifier strings and print their parts")
    p.add_argument('pids', metavar='PID', type=str, nargs='+',
                   help="an identifier string, either in its PID form (e.g. doi:10.5072/FK2/ABCDEF) "+
                        "or its resolvable URL form")

    p = subparsers.add_parser("validate", help="check whether identifier parts form a valid PID")
    p.add_argument('protocol', metavar='PROTOCOL', type=str)
    p.add_argument('authority', metavar='AUTHORITY', type=str)
    p.add_argument('identifier', metavar='IDENTIFIER', type=str)

    p = subparsers.add_parser("providers", help="report the provider selected for each protocol")
    p.add_argument('protocols', metavar='PROTOCOL', type=str, nargs='*', default=[],
                   help="the protocols to report on; if not provided, all supported protocols "+
                        "are reported")

    return parser

def main(progname, args, out=None):
    """
    execute the ``pidtool`` command
    :param str progname:  the name of the program, used in messages
    :param list    args:  the command-line arguments
    :param file     out:  the stream to write results to (default: standard out)
    """
    if out is None:
        out = sys.stdout
    parser = define_options(progname)
    opts = parser.parse_args(args)
    if not opts.cmd:
        raise Failure("Missing subcommand (run with -h for help)", 2)

    rootlog = logging.getLogger()
    level = (opts.verbose and logging.DEBUG) or logging.INFO
    if opts.logfile:
        fmt = "%(asctime)s " + progname + ".%(name)s %(levelname)s: %(message)s"
        hdlr = logging.FileHandler(opts.logfile)
        hdlr.setFormatter(logging.Formatter(fmt))
        hdlr.setLevel(logging.DEBUG)
        rootlog.addHandler(hdlr)
        rootlog.setLevel(level)

    if not opts.quiet:
        fmt = progname + ": %(levelname)s: %(message)s"
        hdlr = logging.StreamHandler(sys.stderr)
        hdlr.setFormatter(logging.Formatter(fmt))
        hdlr.setLevel(logging.WARNING if not opts.verbose else logging.DEBUG)
        rootlog.addHandler(hdlr)
        rootlog.setLevel(level)
    elif not rootlog.handlers:
        rootlog.addHandler(logging.NullHandler())

    if opts.cmd == "validate":
        return validate(opts.protocol, opts.authority, opts.identifier, out)

    cfgfile = opts.cfgfile or os.environ.get('OAR_PID_CONFIG')
    ctxt = None
    if cfgfile:
        try:
            ctxt = create_context(read_config(cfgfile))
        except ConfigurationException as ex:
            raise Failure("Configuration error: "+str(ex), 6, ex) from ex
    elif opts.cmd == "providers":
        raise Failure("Unable to locate configuration; set OAR_PID_CONFIG or use -c", 2)

    if opts.cmd == "parse":
        return parse_pids(opts.pids, ctxt, out)
    return report_providers(opts.protocols, ctxt, out)

def read_config(filepath):
    """
    read the configuration from a file having the given filepath

    :except Failure:  if the contents contains syntax or format errors, or the file cannot be read
    """
    try:
        return config.load_from_file(filepath)
    except EnvironmentError as ex:
        raise Failure("problem reading config file, {0}: {1}".format(filepath, ex.strerror), 3, ex) \
            from ex
    except (ValueError, yaml.YAMLError, ConfigurationException) as ex:
        raise Failure("Config parsing error: "+str(ex), 3, ex) from ex

def parse_pids(pids, ctxt: ProviderContext=None, out=sys.stdout):
    """
    parse each of the given identifier strings and print their parts.  If a provider context is
    given, the providers' grammars are used; otherwise, the generic grammar is applied.
    :raises Failure:  if any of the identifiers could not be parsed
    """
    dispatcher = PidProviderDispatcher()
    bad = []
    for pid in pids:
        if ctxt:
            gid = dispatcher.parse(ctxt, pid)
        else:
            gid = generic_parse(pid)
        if not gid:
            bad.append(pid)
            out.write("%s: not a recognized PID\n" % pid)
            continue
        out.write("%s:\n" % pid)
        out.write("  protocol:   %s\n" % gid.protocol)
        out.write("  authority:  %s\n" % gid.authority)
        out.write("  identifier: %s\n" % gid.identifier)
        out.write("  URL:        %s\n" % gid.as_url())
        if gid.provider_name:
            out.write("  provider:   %s\n" % gid.provider_name)

    if bad:
        raise Failure("%d of %d identifiers could not be parsed" % (len(bad), len(pids)))

def validate(protocol, authority, identifier, out=sys.stdout):
    """
    print whether the given identifier parts form a valid PID
    :raises Failure:  if they do not
    """
    if not is_valid_global_id(protocol, authority, identifier):
        raise Failure("Invalid PID parts: %r %r %r" % (protocol, authority, identifier))
    out.write("valid\n")

def report_providers(protocols, ctxt: ProviderContext, out=sys.stdout):
    """
    print the provider that is selected for each of the given protocols
    :raises Failure:  if a provider could not be found for any of the protocols
    """
    dispatcher = PidProviderDispatcher()
    if not protocols:
        protocols = dispatcher.protocols
    missing = []
    for protocol in protocols:
        prov = dispatcher.get_provider(ctxt, protocol)
        if not prov:
            missing.append(protocol)
            out.write("%s: (no provider available)\n" % protocol)
            continue
        info = prov.get_provider_information()
        out.write("%s: %s (%s)\n" % (protocol, info[0], ", ".join(info[1:])))
        out.write("  authority: %s  shoulder: %s  style: %s\n" %
                  (prov.authority, prov.shoulder, prov.identifier_generation_style))

    if missing:
        raise Failure("No provider available for: " + ", ".join(missing))

def run():
    """
    run the ``pidtool`` command using the arguments on the command line, exiting with an
    appropriate status
    """
    try:
        main(prog, sys.argv[1:])
    except Failure as ex:
        rootlog = logging.getLogger()
        if rootlog.handlers:
            rootlog.error(str(ex))
        else:
            sys.stderr.write("%s: %s\n" % (prog, str(ex)))
        sys.exit(ex.exitcode)
    except Exception as ex:
        tb.print_exc()
        sys.stderr.write("%s: %s\n" % (prog, str(ex)))
        sys.exit(1)
    sys.exit(0)
