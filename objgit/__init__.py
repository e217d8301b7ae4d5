from .errors import ObjGitError, NotFound, MalformedObject, CorruptData, IOFailure, RemoteError
from .codec import TreeEntry, Commit
from .store import ObjectStore
from .tree_builder import TreeBuilder

__version__ = "0.1.0"
