"""
The identifier-bearing objects that PID providers operate on.

A :py:class:`DvObject` (a dataset or a data file) carries the fields that make up its
persistent identifier--its protocol, authority, and identifier--along with the descriptive
metadata that registry-backed providers send to their services.  The life cycle of these
objects (creation, persistence, deletion) belongs to the caller; the PID providers only
read these fields and, when generating a new identifier, set them.
"""
from typing import List

from .globalid import GlobalId, is_valid_global_id

__all__ = [ 'DvObject', 'Dataset', 'DataFile' ]

class DvObject(object):
    """
    a digital object that can be assigned a persistent identifier
    """
    #: the landing page path (relative to the site URL) that precedes the identifier
    target_path = "/dvn/?persistentId="

    def __init__(self, protocol: str=None, authority: str=None, identifier: str=None,
                 title: str=None, authors: List[str]=None, publisher: str=None,
                 publication_year: str=None):
        self.protocol = protocol
        self.authority = authority
        self.identifier = identifier
        self.separator = "/"
        self.provider_name = None
        self.url_prefix = None
        self.title = title
        self.authors = list(authors) if authors else []
        self.publisher = publisher
        self.publication_year = publication_year
        self.identifier_registered = False
        self.global_id_create_time = None

    @property
    def global_id(self) -> GlobalId:
        """
        the identifier assigned to this object, or None if one has not been (fully or validly)
        set.
        """
        if not is_valid_global_id(self.protocol, self.authority, self.identifier) or \
           not self.identifier:
            return None
        return GlobalId(self.protocol, self.authority, self.identifier, self.separator,
                        self.url_prefix, self.provider_name)

    def set_global_id(self, gid: GlobalId):
        """
        assign the given identifier to this object, or clear it if gid is None
        """
        if gid is None:
            self.protocol = self.authority = self.identifier = None
            return
        self.protocol = gid.protocol
        self.authority = gid.authority
        self.identifier = gid.identifier
        self.separator = gid.separator
        self.url_prefix = gid.url_prefix
        self.provider_name = gid.provider_name

    def is_dataset(self) -> bool:
        return False

    def __repr__(self):
        gid = self.global_id
        return "%s(%s)" % (type(self).__name__, (gid and gid.as_string()) or "")

class Dataset(DvObject):
    """
    a dataset, an aggregation of data files that is assigned its own identifier
    """
    target_path = "/dataset.xhtml?persistentId="

    def __init__(self, protocol: str=None, authority: str=None, identifier: str=None, **kw):
        super(Dataset, self).__init__(protocol, authority, identifier, **kw)
        self.files = []

    def is_dataset(self) -> bool:
        return True

    def add_file(self, datafile):
        """
        add a data file to this dataset, making this dataset its owner
        """
        datafile.owner = self
        self.files.append(datafile)
        return datafile

class DataFile(DvObject):
    """
    a data file that belongs to a dataset
    """
    target_path = "/file.xhtml?persistentId="

    def __init__(self, protocol: str=None, authority: str=None, identifier: str=None,
                 owner: Dataset=None, **kw):
        super(DataFile, self).__init__(protocol, authority, identifier, **kw)
        self.owner = owner
