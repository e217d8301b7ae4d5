import hashlib

import pytest

from objgit import MalformedObject
from objgit.codec import (
    Commit, TreeEntry, decode, encode_blob, encode_commit, encode_object,
    encode_tree, load_object, make_identity, parse_tree,
)

EMPTY_BLOB = "e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"
EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"


def sha(raw):
    return hashlib.sha1(raw).hexdigest()


def test_blob_header_exact():
    assert encode_blob(b"hello") == b"blob 5\0hello"
    assert encode_blob(b"") == b"blob 0\0"


def test_blob_digest_matches_git():
    assert sha(encode_blob(b"")) == EMPTY_BLOB
    assert sha(encode_blob(b"hello world\n")) == "3b18e512dba79e4c8300dd08aeb37f8e728b8dad"


def test_blob_is_binary_safe():
    data = b"\0\xff\x00binary\0"
    assert decode(encode_blob(data)) == ("blob", data)


def test_empty_tree_digest_matches_git():
    assert encode_tree([]) == b"tree 0\0"
    assert sha(encode_tree([])) == EMPTY_TREE


def test_tree_entries_sorted_by_name():
    entries = [TreeEntry("100644", name, EMPTY_BLOB) for name in ["b.txt", "a.txt", "c.txt"]]
    _, body = load_object(encode_tree(entries))
    assert [e.name for e in parse_tree(body)] == ["a.txt", "b.txt", "c.txt"]


def test_tree_sort_is_plain_byte_order():
    entries = [
        TreeEntry("100644", "foo.txt", EMPTY_BLOB),
        TreeEntry("40000", "foo", EMPTY_TREE),
        TreeEntry("100644", "Zeta", EMPTY_BLOB),
    ]
    _, body = load_object(encode_tree(entries))
    assert [e.name for e in parse_tree(body)] == ["Zeta", "foo", "foo.txt"]


def test_tree_entry_layout():
    raw = encode_tree([TreeEntry("100644", "a", EMPTY_BLOB)])
    payload = b"100644 a\0" + bytes.fromhex(EMPTY_BLOB)
    assert raw == b"tree %d\0" % len(payload) + payload


def test_tree_round_trip():
    entries = [
        TreeEntry("40000", "sub", EMPTY_TREE),
        TreeEntry("100755", "run.sh", EMPTY_BLOB),
        TreeEntry("100644", "x.txt", EMPTY_BLOB),
    ]
    obj_type, decoded = decode(encode_tree(entries))
    assert obj_type == "tree"
    assert decoded == sorted(entries, key=lambda e: e.name)


def test_tree_decoding_does_not_require_order():
    payload = (b"100644 b\0" + bytes.fromhex(EMPTY_BLOB)
               + b"100644 a\0" + bytes.fromhex(EMPTY_BLOB))
    assert [e.name for e in parse_tree(payload)] == ["b", "a"]


def test_tree_rejects_duplicate_names():
    with pytest.raises(MalformedObject):
        encode_tree([TreeEntry("100644", "a", EMPTY_BLOB), TreeEntry("40000", "a", EMPTY_TREE)])


@pytest.mark.parametrize("name", ["", "a/b", "nul\0", "..", "."])
def test_tree_rejects_bad_names(name):
    with pytest.raises(MalformedObject):
        encode_tree([TreeEntry("100644", name, EMPTY_BLOB)])


def test_tree_rejects_bad_digest_and_mode():
    with pytest.raises(MalformedObject):
        encode_tree([TreeEntry("100644", "a", "xyz")])
    with pytest.raises(MalformedObject):
        encode_tree([TreeEntry("644", "a", EMPTY_BLOB)])


@pytest.mark.parametrize("payload", [
    b"100644",
    b"100644 a",
    b"100644 a\0" + b"\x01" * 19,
    b"100644a\0" + b"x" * 20 + b"100644 b\0" + b"\x01" * 20,
    b"10\x0044 a\0" + b"\x01" * 20,
    b"644 a\0" + b"\x01" * 20,
    b"100644 \0" + b"\x01" * 20,
])
def test_parse_tree_rejects_bad_entries(payload):
    with pytest.raises(MalformedObject):
        parse_tree(payload)


def test_commit_encoding_layout():
    commit = Commit(
        tree=EMPTY_TREE,
        parent=None,
        author="A U Thor <a@example.com> 1700000000 +0000",
        committer="A U Thor <a@example.com> 1700000000 +0000",
        message="first",
    )
    _, body = load_object(encode_commit(commit))
    assert body == (
        b"tree " + EMPTY_TREE.encode() + b"\n"
        b"author A U Thor <a@example.com> 1700000000 +0000\n"
        b"committer A U Thor <a@example.com> 1700000000 +0000\n"
        b"\n"
        b"first\n"
    )


def test_commit_with_parent_round_trip():
    identity = make_identity("A U Thor <a@example.com>", 1700000000)
    commit = Commit(EMPTY_TREE, "a" * 40, identity, identity, "second\n\nbody text")
    raw = encode_commit(commit)
    assert b"\nparent " + b"a" * 40 + b"\n" in raw
    assert decode(raw) == ("commit", commit)


def test_commit_without_parent_round_trip():
    identity = make_identity("X <x@y>", 5, tz="+0100")
    commit = Commit(EMPTY_TREE, None, identity, identity, "")
    assert decode(encode_commit(commit)) == ("commit", commit)


def test_commit_rejects_bad_tree_and_multiline_author():
    with pytest.raises(MalformedObject):
        encode_commit(Commit("nothex", None, "a", "a", "m"))
    with pytest.raises(MalformedObject):
        encode_commit(Commit(EMPTY_TREE, None, "a\nb", "a", "m"))


@pytest.mark.parametrize("text", [
    b"tree " + EMPTY_TREE.encode() + b"\nauthor a\ncommitter a\nmissing blank line",
    b"author a\ncommitter a\n\nmsg\n",
    b"tree " + EMPTY_TREE.encode() + b"\nparent " + b"b" * 40 + b"\nparent " + b"c" * 40
    + b"\nauthor a\ncommitter a\n\nmsg\n",
    b"tree " + EMPTY_TREE.encode() + b"\nauthor a\ncommitter a\ngpgsig x\n\nmsg\n",
    b"tree short\nauthor a\ncommitter a\n\nmsg\n",
])
def test_parse_commit_rejects(text):
    with pytest.raises(MalformedObject):
        decode(encode_object("commit", text))


def test_load_object_requires_nul():
    with pytest.raises(MalformedObject):
        load_object(b"blob 5 hello")


@pytest.mark.parametrize("raw", [
    b"blob 4\0hello",
    b"blob five\0hello",
    b"blob\0",
    b"thing 0\0",
])
def test_load_object_bad_header(raw):
    with pytest.raises(MalformedObject):
        load_object(raw)


def test_encode_object_unknown_type():
    with pytest.raises(MalformedObject):
        encode_object("tag", b"")


def test_load_object_rejects_padded_length():
    with pytest.raises(MalformedObject):
        load_object(b"blob 05\0hello")
    assert load_object(b"blob 0\0") == ("blob", b"")


def test_commit_requires_tree():
    with pytest.raises(MalformedObject):
        encode_commit(Commit(None, None, "a", "a", "m"))
