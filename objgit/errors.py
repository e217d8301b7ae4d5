class ObjGitError(Exception):
    kind = "error"


class NotFound(ObjGitError):
    """No stored object for the requested digest."""
    kind = "not-found"


class MalformedObject(ObjGitError):
    """Object bytes violate the header, tree or commit grammar."""
    kind = "malformed"


class CorruptData(ObjGitError):
    """Stored bytes are not a valid zlib stream."""
    kind = "corrupt"


class IOFailure(ObjGitError):
    kind = "io"


class RemoteError(ObjGitError):
    kind = "remote"
