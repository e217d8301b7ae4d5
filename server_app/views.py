import functools
import json
import logging
import os

from django.http import JsonResponse, Http404, HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt

from objgit import MalformedObject, NotFound, ObjGitError
from objgit.codec import MODE_DIRECTORY, decode
from objgit.hasher import hexdigest, is_hex_digest
from .helpers import (
    MAIN_REF, repo_store, list_repos, read_ref, write_ref, valid_ref_name,
    entry_dict, commit_dict, get_commit_or_404, get_tree_or_404,
)

logger = logging.getLogger(__name__)


def object_errors(view):
    """Report damaged objects in a repository as a JSON 500."""
    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except NotFound as e:
            raise Http404(str(e))
        except ObjGitError as e:
            logger.error("object error in %s: %s", view.__name__, e)
            return JsonResponse({"error": str(e), "kind": e.kind}, status=500)
    return wrapper


def bad_request(message: str) -> JsonResponse:
    return JsonResponse({"error": message}, status=400)


def _check_objects(objects):
    """Validate pushed objects, returning their encoded bytes."""
    checked = []
    for obj in objects:
        try:
            sha1 = obj['sha1']
            raw = bytes.fromhex(obj['data'])
            obj_type, _ = decode(raw)
        except (KeyError, TypeError, ValueError):
            raise ValueError("object entries need 'sha1', 'type' and hex 'data'")
        except MalformedObject as e:
            raise ValueError(f"malformed object {obj.get('sha1')}: {e}")
        if hexdigest(raw) != sha1:
            raise ValueError(f"digest mismatch for object {sha1}")
        if obj.get('type', obj_type) != obj_type:
            raise ValueError(f"object {sha1} is a {obj_type}, not a {obj['type']}")
        checked.append((sha1, raw))
    return checked


@csrf_exempt
@object_errors
def push_objects(request: HttpRequest, repo_name: str) -> JsonResponse:
    if request.method == 'POST':
        try:
            data = json.loads(request.body)
        except ValueError:
            return bad_request("request body is not valid JSON")
        if not isinstance(data, dict) or not isinstance(data.get('objects', []), list):
            return bad_request("expected an object with an 'objects' list")

        head = data.get('head')
        ref_name = data.get('ref', MAIN_REF)
        if not is_hex_digest(head):
            return bad_request("'head' must be a 40 character hex digest")
        if not valid_ref_name(ref_name):
            return bad_request(f"invalid ref name {ref_name!r}")
        try:
            checked = _check_objects(data.get('objects', []))
        except ValueError as e:
            return bad_request(str(e))

        repo = repo_store(repo_name, create=True)
        stored = 0
        for sha1, raw in checked:
            if not repo.contains(sha1):
                repo.put(raw)
                stored += 1
        if not repo.contains(head):
            return bad_request(f"head {head} was not pushed")
        try:
            repo.read_commit(head)
        except MalformedObject as e:
            return bad_request(str(e))
        write_ref(repo, ref_name, head.lower())
        logger.info("push to %s: %d new objects, %s -> %s", repo_name, stored, ref_name, head)
        return JsonResponse({"status": "pushed", "stored": stored})
    return JsonResponse({'status': "online"})


def repo_list(request: HttpRequest) -> JsonResponse:
    return JsonResponse({"repos": list_repos()})


@object_errors
def repo_overview(request: HttpRequest, name: str) -> JsonResponse:
    repo = repo_store(name)
    head_sha = read_ref(repo)
    if not head_sha:
        raise Http404(f"Repository '{name}' has no {MAIN_REF}")
    commit = get_commit_or_404(repo, head_sha)
    entries = get_tree_or_404(repo, commit.tree)
    context = {
        "repo": name,
        "head_sha": head_sha,
        "commit": commit_dict(commit, head_sha),
        "entries": [entry_dict(e) for e in entries],
    }
    return JsonResponse(context)


def _resolve_tree_sha(repo, commit_sha, rel_path):
    commit = get_commit_or_404(repo, commit_sha)

    current_tree_sha = commit.tree
    if not rel_path:
        return current_tree_sha, commit

    parts = [p for p in rel_path.strip("/").split("/") if p]
    for part in parts:
        entries = get_tree_or_404(repo, current_tree_sha)
        match = next(
            (e for e in entries if e.name == part and e.mode == MODE_DIRECTORY),
            None,
        )
        if not match:
            raise Http404(f"Directory '{rel_path}' not found")
        current_tree_sha = match.sha

    return current_tree_sha, commit


@object_errors
def tree_view(request, name, commit_sha, path=""):
    repo = repo_store(name)
    tree_sha, commit = _resolve_tree_sha(repo, commit_sha, path)
    entries = get_tree_or_404(repo, tree_sha)

    return JsonResponse(
        {
            "repo": name,
            "commit": commit_dict(commit, commit_sha),
            "path": path,
            "tree": tree_sha,
            "entries": [entry_dict(e) for e in sorted(entries, key=lambda e: os.fsencode(e.name))],
        }
    )


@object_errors
def blob_view(request, name, commit_sha, path):
    repo = repo_store(name)
    parent_path, _, leaf = path.rstrip("/").rpartition("/")
    tree_sha, _ = _resolve_tree_sha(repo, commit_sha, parent_path)

    entries = get_tree_or_404(repo, tree_sha)
    file_entry = next(
        (e for e in entries if e.name == leaf and e.mode != MODE_DIRECTORY),
        None,
    )
    if not file_entry:
        raise Http404("File not found")

    _, body = repo.read_object(file_entry.sha, expected="blob")
    return HttpResponse(body, content_type="application/octet-stream")


@object_errors
def commit_list(request, name):
    repo = repo_store(name)
    sha = read_ref(repo)
    if not sha:
        raise Http404(f"Repository '{name}' has no {MAIN_REF}")
    commits = []
    seen = set()
    while sha and sha not in seen:
        seen.add(sha)
        commit = get_commit_or_404(repo, sha)
        commits.append(commit_dict(commit, sha))
        sha = commit.parent

    return JsonResponse({"repo": name, "commits": commits})


@object_errors
def commit_detail(request, name, commit_sha):
    repo = repo_store(name)
    commit = get_commit_or_404(repo, commit_sha)
    return JsonResponse({"repo": name, "commit": commit_dict(commit, commit_sha)})
