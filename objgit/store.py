"""Hash-addressed object database.

Objects live at ``<root>/objects/<first 2 hex>/<remaining 38 hex>``, each file
holding the zlib-compressed encoded object. Objects are never rewritten or
removed.
"""
import logging
import os
import tempfile
from collections import deque

from . import codec, compressor, hasher
from .errors import IOFailure, MalformedObject, NotFound

logger = logging.getLogger(__name__)


class ObjectStore:
    def __init__(self, root):
        self.root = os.path.abspath(os.fspath(root))
        self.objects_dir = os.path.join(self.root, "objects")
        self.refs_dir = os.path.join(self.root, "refs")

    def __repr__(self):
        return f"ObjectStore({self.root!r})"

    def init(self):
        try:
            os.makedirs(self.objects_dir, exist_ok=True)
            os.makedirs(self.refs_dir, exist_ok=True)
        except OSError as e:
            raise IOFailure(f"cannot create object database at {self.root}: {e}") from e

    def object_path(self, sha1):
        if not hasher.is_hex_digest(sha1):
            raise NotFound(f"not a valid object name: {sha1!r}")
        sha1 = sha1.lower()
        return os.path.join(self.objects_dir, sha1[:2], sha1[2:])

    def contains(self, sha1):
        try:
            return os.path.isfile(self.object_path(sha1))
        except NotFound:
            return False

    def put(self, encoded):
        sha1 = hasher.hexdigest(encoded)
        path = self.object_path(sha1)
        if os.path.exists(path):
            return sha1

        path_dir = os.path.dirname(path)
        try:
            os.makedirs(path_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=path_dir, prefix=f".{sha1[2:]}.tmp-")
            try:
                with os.fdopen(fd, 'wb') as f:
                    f.write(compressor.compress(encoded))
                os.replace(tmp_path, path)
            finally:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
        except OSError as e:
            raise IOFailure(f"cannot write object {sha1}: {e}") from e
        logger.debug("wrote object %s (%d bytes)", sha1, len(encoded))
        return sha1

    def get(self, sha1):
        """Return the decompressed ``header + payload`` bytes of an object."""
        path = self.object_path(sha1)
        try:
            with open(path, 'rb') as f:
                raw = f.read()
        except FileNotFoundError as e:
            raise NotFound(f"object {sha1} not found") from e
        except NotADirectoryError as e:
            raise NotFound(f"object {sha1} not found") from e
        except OSError as e:
            raise IOFailure(f"cannot read object {sha1}: {e}") from e
        return compressor.decompress(raw)

    def iter_objects(self):
        if not os.path.isdir(self.objects_dir):
            return
        for dir_prefix in sorted(os.listdir(self.objects_dir)):
            dir_path = os.path.join(self.objects_dir, dir_prefix)
            if len(dir_prefix) != 2 or not os.path.isdir(dir_path):
                continue
            for file_name in sorted(os.listdir(dir_path)):
                sha1 = dir_prefix + file_name
                if hasher.is_hex_digest(sha1):
                    yield sha1

    def hash_object(self, data, obj_type='blob', write=True):
        encoded = codec.encode_object(obj_type, data)
        if obj_type != 'blob':
            codec.decode(encoded)
        if write:
            return self.put(encoded)
        return hasher.hexdigest(encoded)

    def read_object(self, sha1, expected=None):
        obj_type, body = codec.load_object(self.get(sha1))
        if expected is not None and obj_type != expected:
            raise MalformedObject(f"object {sha1} is a {obj_type}, expected {expected}")
        return obj_type, body

    def read_tree(self, sha1):
        _, body = self.read_object(sha1, expected='tree')
        return codec.parse_tree(body)

    def read_commit(self, sha1):
        _, body = self.read_object(sha1, expected='commit')
        return codec.parse_commit(body)

    def ls_tree(self, sha1):
        entries = sorted(self.read_tree(sha1), key=lambda e: os.fsencode(e.name))
        return [(e.mode, e.name) for e in entries]

    def write_tree(self, entries):
        return self.put(codec.encode_tree(entries))

    def write_commit(self, tree, message, author, parent=None, committer=None):
        commit = codec.Commit(
            tree=tree,
            parent=parent,
            author=author,
            committer=committer or author,
            message=message,
        )
        return self.put(codec.encode_commit(commit))

    def iter_reachable(self, commit_sha):
        """Yield ``(sha1, obj_type)`` for every object reachable from a commit.

        Walks the parent chain and each commit's tree; each object is yielded
        once, before its children.
        """
        visited = set()
        pending = deque([(commit_sha.lower(), 'commit')])
        while pending:
            sha1, obj_type = pending.popleft()
            if sha1 in visited:
                continue
            visited.add(sha1)
            yield sha1, obj_type
            if obj_type == 'commit':
                commit = self.read_commit(sha1)
                pending.append((commit.tree, 'tree'))
                if commit.parent:
                    pending.append((commit.parent, 'commit'))
            elif obj_type == 'tree':
                for entry in self.read_tree(sha1):
                    pending.append((entry.sha, codec.entry_type(entry.mode)))
