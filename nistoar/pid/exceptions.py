"""
Exceptions raised by the PID management system.

Two families matter to callers:  a :py:class:`PIDValidationException` reflects a local problem
with an identifier's parts (which is recoverable by the caller), while a
:py:class:`PIDRegistryException` reflects a failure of an external registry service (which
may be retryable by the caller).  Note that parsing and provider dispatch never raise for
unrecognized input; they return None instead.
"""

__all__ = [ 'PIDException', 'ConfigurationException', 'StateException', 'PIDValidationException',
            'PIDConflictError', 'PIDGenerationException', 'PIDRegistryException',
            'PIDRegistryServerError', 'PIDRegistryClientError', 'PIDNotFound' ]

class PIDException(Exception):
    """
    a general base class for exceptions that occur while managing persistent identifiers
    """
    def __init__(self, message=None, cause=None):
        if not message:
            if cause:
                message = str(cause)
            else:
                message = "Unknown PID management error"
        super(PIDException, self).__init__(message)
        self.cause = cause

class ConfigurationException(PIDException):
    """
    an exception indicating a missing or illegal configuration parameter
    """
    pass

class StateException(PIDException):
    """
    an exception indicating that the system or an object is in an illegal or unexpected
    state that prevents an operation.
    """
    pass

class PIDValidationException(PIDException):
    """
    an exception indicating that the parts of an identifier violate the identifier formatting
    rules (e.g. embedded whitespace or a null terminator).
    """
    def __init__(self, message=None, protocol=None, authority=None, identifier=None, cause=None):
        if not message:
            message = "Invalid global identifier: {0}:{1}/{2}".format(protocol, authority, identifier)
        super(PIDValidationException, self).__init__(message, cause)
        self.protocol = protocol
        self.authority = authority
        self.identifier = identifier

class PIDConflictError(StateException):
    """
    an exception indicating that an identifier was already issued and cannot be reserved again
    """
    def __init__(self, pid, message=None, cause=None):
        if not message:
            message = "PID is already in use: " + str(pid)
        super(PIDConflictError, self).__init__(message, cause)
        self.pid = pid

class PIDGenerationException(StateException):
    """
    an exception indicating that a new, unique identifier could not be generated
    """
    pass

class PIDRegistryException(PIDException):
    """
    an exception indicating a problem communicating with an external PID registry service
    (such as DataCite, EZID, or Handle.Net).

    This exception includes three extra public properties, `resource`, `code`, and `status`,
    which capture the identifier being operated on, and (when available) the HTTP response
    status code and associated message.
    """
    def __init__(self, resource=None, http_code=None, http_reason=None, message=None, cause=None):
        if not message:
            if resource:
                message = f"Trouble accessing {resource} via the PID registry service"
            else:
                message = "Problem accessing the PID registry service"
            if http_code or http_reason:
                message += ":"
                if http_code:
                    message += " "+str(http_code)
                if http_reason:
                    message += " "+str(http_reason)
            elif cause:
                message += ": "+str(cause)

        super(PIDRegistryException, self).__init__(message, cause)
        self.resource = resource
        self.code = http_code
        self.status = http_reason

class PIDRegistryServerError(PIDRegistryException):
    """
    an exception indicating an error occurred on the server side of a PID registry service
    """
    pass

class PIDRegistryClientError(PIDRegistryException):
    """
    an exception indicating that a PID registry service rejected a request (e.g. because the
    request was malformed or unauthorized).
    """
    def __init__(self, resource, http_code, http_reason, message=None, cause=None):
        if not message:
            message = "client-side PID registry error occurred"
            if resource:
                message += " while processing " + resource
            message += ": {0} {1}".format(http_code, http_reason)
        super(PIDRegistryClientError, self).__init__(resource, http_code, http_reason, message, cause)

class PIDNotFound(PIDRegistryClientError):
    """
    an exception indicating that the identifier is not known to the PID registry service
    """
    def __init__(self, resource, http_reason=None, message=None, cause=None):
        if not message:
            message = "PID not found in registry"
            if resource:
                message += ": "+resource
        super(PIDNotFound, self).__init__(resource, 404, http_reason, message, cause)
