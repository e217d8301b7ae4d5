import fnmatch
import logging
import os
import stat

from . import codec
from .errors import IOFailure

logger = logging.getLogger(__name__)


def is_ignored(path, ignores):
    norm = path.replace(os.sep, '/')
    for pattern in ignores:
        if pattern.endswith('/'):
            base = pattern.rstrip('/')
            if norm == base or norm.startswith(base + '/'):
                return True
        if fnmatch.fnmatch(norm, pattern):
            return True

    return False


def file_mode(st):
    if st.st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH):
        return codec.MODE_EXECUTABLE
    return codec.MODE_FILE


class TreeBuilder:
    """Snapshot a directory into tree and blob objects, children first.

    The store's own root is never part of a snapshot, even when it lives
    inside the directory being built.
    """

    def __init__(self, store, ignores=None):
        self.store = store
        self.ignores = list(ignores or [])

    def build(self, path):
        root = os.path.abspath(os.fspath(path))
        try:
            return self._write_tree(root, root)
        except OSError as e:
            raise IOFailure(f"cannot snapshot {root}: {e}") from e

    def _is_store_root(self, full_path):
        return os.path.realpath(full_path) == os.path.realpath(self.store.root)

    def _write_tree(self, path, root):
        entries = []

        for entry in sorted(os.listdir(path)):
            full_path = os.path.join(path, entry)
            if self._is_store_root(full_path):
                continue
            rel_path = os.path.relpath(full_path, root).replace(os.sep, '/')
            if is_ignored(rel_path, self.ignores):
                continue
            st = os.stat(full_path)
            if stat.S_ISDIR(st.st_mode):
                sha1 = self._write_tree(full_path, root)
                entries.append(codec.TreeEntry(codec.MODE_DIRECTORY, entry, sha1))
            elif stat.S_ISREG(st.st_mode):
                with open(full_path, 'rb') as f:
                    content = f.read()
                sha1 = self.store.put(codec.encode_blob(content))
                entries.append(codec.TreeEntry(file_mode(st), entry, sha1))
            else:
                logger.debug("skipping special file %s", rel_path)
                continue
            logger.debug("%s %s %s", entries[-1].mode, sha1, rel_path)

        return self.store.write_tree(entries)
