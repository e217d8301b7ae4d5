import os
import re

from django.conf import settings
from django.http import Http404

from objgit import NotFound, ObjectStore
from objgit.codec import entry_type
from objgit.hasher import is_hex_digest

REPO_NAME_RE = re.compile(r'^[A-Za-z0-9._-]+$')
MAIN_REF = "refs/heads/main"


def repo_store(name: str, create: bool = False) -> ObjectStore:
    if not REPO_NAME_RE.match(name) or name in ('.', '..'):
        raise Http404(f"Repository '{name}' not found")
    store = ObjectStore(os.path.join(settings.OBJGIT_SERVER_ROOT, name))
    if create:
        store.init()
    elif not os.path.isdir(store.objects_dir):
        raise Http404(f"Repository '{name}' not found")
    return store


def list_repos():
    root = settings.OBJGIT_SERVER_ROOT
    if not os.path.isdir(root):
        return []
    return sorted(
        name for name in os.listdir(root)
        if os.path.isdir(os.path.join(root, name, "objects"))
    )


def read_ref(store: ObjectStore, ref: str = MAIN_REF):
    path = os.path.join(store.root, ref)
    try:
        with open(path, 'r') as f:
            value = f.read().strip()
    except FileNotFoundError:
        return None
    return value or None


def write_ref(store: ObjectStore, ref: str, sha1: str):
    path = os.path.join(store.root, ref)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w') as f:
        f.write(sha1 + "\n")


def valid_ref_name(ref) -> bool:
    if not isinstance(ref, str) or not ref.startswith("refs/heads/"):
        return False
    parts = ref.split("/")
    return all(p and p not in ('.', '..') for p in parts)


def entry_dict(entry):
    return {
        "mode": entry.mode,
        "type": entry_type(entry.mode),
        "sha": entry.sha,
        "name": entry.name,
    }


def commit_dict(commit, sha1=None):
    info = {
        "tree": commit.tree,
        "parents": [commit.parent] if commit.parent else [],
        "author_line": commit.author,
        "committer_line": commit.committer,
        "message": commit.message,
    }
    if sha1:
        info["sha"] = sha1
    return info


def get_commit_or_404(store: ObjectStore, sha1: str):
    if not is_hex_digest(sha1):
        raise Http404(f"Commit '{sha1}' not found")
    try:
        return store.read_commit(sha1)
    except NotFound:
        raise Http404(f"Commit '{sha1}' not found")


def get_tree_or_404(store: ObjectStore, sha1: str):
    try:
        return store.read_tree(sha1)
    except NotFound:
        raise Http404(f"Tree '{sha1}' not found")
