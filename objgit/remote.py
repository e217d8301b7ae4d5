import logging

import requests

from . import codec, config
from .errors import RemoteError

logger = logging.getLogger(__name__)

PUSH_TIMEOUT = 30


def collect_objects(store, head_sha):
    objects_data = []
    for sha1, _ in store.iter_reachable(head_sha):
        raw = store.get(sha1)
        obj_type, _ = codec.load_object(raw)
        objects_data.append({
            "sha1": sha1,
            "type": obj_type,
            "data": raw.hex(),
        })
    return objects_data


def push(store, head_sha, repo_name, remote_url=None, ref=config.DEFAULT_REF):
    """Send every object reachable from ``head_sha`` and point ``ref`` at it."""
    remote_url = (remote_url or config.remote_url()).rstrip('/')
    objects_data = collect_objects(store, head_sha)
    payload = {"objects": objects_data, "head": head_sha.lower(), "ref": ref}
    url = f"{remote_url}/{repo_name}/push"
    logger.debug("pushing %d objects to %s", len(objects_data), url)
    try:
        resp = requests.post(url, json=payload, timeout=PUSH_TIMEOUT)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise RemoteError(f"push to {url} failed: {e}") from e
    return resp
