import argparse
import logging
import os
import sys
import time

from . import codec, config, remote
from .errors import IOFailure, ObjGitError
from .store import ObjectStore
from .tree_builder import TreeBuilder


def open_store(args):
    return ObjectStore(args.git_dir)


def init(args):
    store = open_store(args)
    store.init()
    head_file = os.path.join(store.root, "HEAD")
    if not os.path.exists(head_file):
        try:
            with open(head_file, "w") as f:
                f.write(f"ref: {config.DEFAULT_REF}\n")
        except OSError as e:
            raise IOFailure(f"cannot write {head_file}: {e}") from e
    print(f"Initialized empty objgit repository in {store.root}")


def format_entry(entry):
    return f"{entry.mode:0>6} {codec.entry_type(entry.mode)} {entry.sha}\t{entry.name}"


def cat_file(args):
    store = open_store(args)
    obj_type, body = store.read_object(args.object)
    if args.type:
        print(obj_type)
        return
    if obj_type == 'tree':
        for entry in codec.parse_tree(body):
            print(format_entry(entry))
        return
    sys.stdout.flush()
    sys.stdout.buffer.write(body)
    sys.stdout.flush()


def hash_object(args):
    try:
        with open(args.file, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise IOFailure(f"cannot read {args.file}: {e}") from e
    store = open_store(args)
    print(store.hash_object(data, args.type, write=args.write))


def ls_tree(args):
    store = open_store(args)
    entries = sorted(store.read_tree(args.tree), key=lambda e: os.fsencode(e.name))
    for entry in entries:
        print(entry.name if args.name_only else format_entry(entry))


def write_tree(args):
    store = open_store(args)
    ignores = config.load_ignores(os.path.join(args.path, config.IGNORE_FILE))
    print(TreeBuilder(store, ignores=ignores).build(args.path))


def commit_tree(args):
    store = open_store(args)
    store.read_object(args.tree, expected='tree')
    if args.parent:
        store.read_object(args.parent, expected='commit')
    timestamp = args.timestamp if args.timestamp is not None else time.time()
    identity = codec.make_identity(config.author(), timestamp)
    print(store.write_commit(args.tree, args.message, identity, parent=args.parent))


def push(args):
    store = open_store(args)
    resp = remote.push(store, args.commit, args.repo_name, remote_url=args.remote)
    print("Push response:", resp.status_code)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='objgit', description="objgit object database plumbing")
    parser.add_argument('--git-dir', default=config.repo_dir(), help='Object database root')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debug output')
    commands = parser.add_subparsers(dest='command')
    commands.required = True

    init_parser = commands.add_parser('init')
    init_parser.set_defaults(func=init)

    cat_file_parser = commands.add_parser('cat-file')
    cat_file_parser.set_defaults(func=cat_file)
    mode = cat_file_parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('-p', dest='pretty', action='store_true', help='Print object contents')
    mode.add_argument('-t', dest='type', action='store_true', help='Print object type')
    cat_file_parser.add_argument('object')

    hash_object_parser = commands.add_parser('hash-object')
    hash_object_parser.set_defaults(func=hash_object)
    hash_object_parser.add_argument('-w', dest='write', action='store_true', help='Write the object')
    hash_object_parser.add_argument('-t', '--type', default='blob', choices=codec.OBJECT_TYPES)
    hash_object_parser.add_argument('file')

    ls_tree_parser = commands.add_parser('ls-tree')
    ls_tree_parser.set_defaults(func=ls_tree)
    ls_tree_parser.add_argument('--name-only', action='store_true')
    ls_tree_parser.add_argument('tree')

    write_tree_parser = commands.add_parser('write-tree')
    write_tree_parser.set_defaults(func=write_tree)
    write_tree_parser.add_argument('path', nargs='?', default='.')

    commit_tree_parser = commands.add_parser('commit-tree')
    commit_tree_parser.set_defaults(func=commit_tree)
    commit_tree_parser.add_argument('tree')
    commit_tree_parser.add_argument('-p', dest='parent')
    commit_tree_parser.add_argument('-m', '--message', required=True)
    commit_tree_parser.add_argument('--timestamp', type=int, default=None, help=argparse.SUPPRESS)

    push_parser = commands.add_parser('push')
    push_parser.set_defaults(func=push)
    push_parser.add_argument('-r', '--repo_name', required=True, help='Repo name on the remote')
    push_parser.add_argument('--remote', default=None, help='Remote base URL')
    push_parser.add_argument('commit')

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except ObjGitError as e:
        print(f"fatal: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
