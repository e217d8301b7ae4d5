"""Canonical byte encoding of blob, tree and commit objects.

Every object is stored as ``b"<type> <len>\\0" + payload``. That exact byte
string is what gets hashed and compressed, so any change here changes every
digest.
"""
import os
from collections import namedtuple

from . import hasher
from .errors import MalformedObject

OBJECT_TYPES = ('blob', 'tree', 'commit')

MODE_FILE = '100644'
MODE_EXECUTABLE = '100755'
MODE_DIRECTORY = '40000'
TREE_MODES = (MODE_FILE, MODE_EXECUTABLE, MODE_DIRECTORY)

TreeEntry = namedtuple('TreeEntry', ['mode', 'name', 'sha'])
Commit = namedtuple('Commit', ['tree', 'parent', 'author', 'committer', 'message'])


def entry_type(mode):
    return 'tree' if mode == MODE_DIRECTORY else 'blob'


def make_identity(name_email, timestamp, tz='+0000'):
    return f"{name_email} {int(timestamp)} {tz}"


def encode_object(obj_type, payload):
    if obj_type not in OBJECT_TYPES:
        raise MalformedObject(f"unknown object type {obj_type!r}")
    header = f"{obj_type} {len(payload)}\0".encode()
    return header + payload


def load_object(raw):
    """Split encoded bytes into ``(obj_type, payload)``, checking the header."""
    null_index = raw.find(b'\0')
    if null_index == -1:
        raise MalformedObject("object header is not NUL terminated")
    header = raw[:null_index]
    body = raw[null_index + 1:]

    obj_type, sep, size = header.partition(b' ')
    if not sep or not size.isdigit() or (len(size) > 1 and size.startswith(b'0')):
        raise MalformedObject(f"bad object header {header[:32]!r}")
    obj_type = obj_type.decode('ascii', errors='replace')
    if obj_type not in OBJECT_TYPES:
        raise MalformedObject(f"unknown object type {obj_type!r}")
    if int(size) != len(body):
        raise MalformedObject(
            f"{obj_type} header declares {int(size)} bytes, payload has {len(body)}")
    return obj_type, body


def encode_blob(data):
    return encode_object('blob', bytes(data))


def _name_key(entry):
    return os.fsencode(entry.name)


def encode_tree(entries):
    entries = sorted(entries, key=_name_key)
    parts = []
    seen = set()
    for mode, name, sha in entries:
        if mode not in TREE_MODES:
            raise MalformedObject(f"unsupported tree entry mode {mode!r}")
        if not name or '/' in name or '\0' in name or name in ('.', '..'):
            raise MalformedObject(f"invalid tree entry name {name!r}")
        if name in seen:
            raise MalformedObject(f"duplicate tree entry {name!r}")
        if not hasher.is_hex_digest(sha):
            raise MalformedObject(f"tree entry {name!r} has bad digest {sha!r}")
        seen.add(name)
        parts.append(mode.encode() + b' ' + os.fsencode(name) + b'\0' + bytes.fromhex(sha))
    return encode_object('tree', b''.join(parts))


def parse_tree(body):
    entries = []
    pos = 0
    while pos < len(body):
        null_index = body.find(b'\0', pos)
        if null_index == -1:
            raise MalformedObject(f"tree entry at offset {pos} has no name terminator")
        end = null_index + 21
        if end > len(body):
            raise MalformedObject(f"tree entry at offset {pos} has a truncated digest")
        mode, sep, name = body[pos:null_index].partition(b' ')
        if not sep:
            raise MalformedObject(f"tree entry at offset {pos} has no mode separator")
        mode = mode.decode('ascii', errors='replace')
        if mode not in TREE_MODES:
            raise MalformedObject(f"tree entry at offset {pos} has bad mode {mode!r}")
        if not name:
            raise MalformedObject(f"tree entry at offset {pos} has an empty name")
        entries.append(TreeEntry(mode, os.fsdecode(name), body[null_index + 1:end].hex()))
        pos = end
    return entries


def encode_commit(commit):
    for label, sha in (('tree', commit.tree), ('parent', commit.parent)):
        if (label == 'tree' or sha is not None) and not hasher.is_hex_digest(sha):
            raise MalformedObject(f"commit {label} {sha!r} is not a hex digest")
    for label, identity in (('author', commit.author), ('committer', commit.committer)):
        if not identity or '\n' in identity:
            raise MalformedObject(f"commit {label} must be a single non-empty line")
    lines = [f"tree {commit.tree.lower()}"]
    if commit.parent:
        lines.append(f"parent {commit.parent.lower()}")
    lines.append(f"author {commit.author}")
    lines.append(f"committer {commit.committer}")
    text = '\n'.join(lines) + '\n\n' + commit.message + '\n'
    return encode_object('commit', text.encode())


def parse_commit(body):
    try:
        text = body.decode()
    except UnicodeDecodeError as e:
        raise MalformedObject(f"commit is not valid UTF-8: {e}") from e
    header, sep, message = text.partition('\n\n')
    if not sep or not message.endswith('\n'):
        raise MalformedObject("commit has no message section")

    fields = {}
    for line in header.split('\n'):
        key, _, value = line.partition(' ')
        if key not in ('tree', 'parent', 'author', 'committer'):
            raise MalformedObject(f"unknown commit field {key!r}")
        if key in fields:
            raise MalformedObject(f"repeated commit field {key!r}")
        fields[key] = value

    for key in ('tree', 'author', 'committer'):
        if key not in fields:
            raise MalformedObject(f"commit has no {key} line")
    for key in ('tree', 'parent'):
        if key in fields and not hasher.is_hex_digest(fields[key]):
            raise MalformedObject(f"commit {key} {fields[key]!r} is not a hex digest")

    return Commit(
        tree=fields['tree'],
        parent=fields.get('parent'),
        author=fields['author'],
        committer=fields['committer'],
        message=message[:-1],
    )


def decode(raw):
    """Decode full object bytes into ``(obj_type, value)``.

    The value is ``bytes`` for a blob, a list of :class:`TreeEntry` for a tree
    and a :class:`Commit` for a commit.
    """
    obj_type, body = load_object(raw)
    if obj_type == 'tree':
        return obj_type, parse_tree(body)
    if obj_type == 'commit':
        return obj_type, parse_commit(body)
    return obj_type, body
