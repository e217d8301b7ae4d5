import os

DEFAULT_REPO_DIR = ".git"
DEFAULT_REMOTE_URL = "http://localhost:8000/api/git"
DEFAULT_AUTHOR = "User <user@example.com>"
DEFAULT_REF = "refs/heads/main"
IGNORE_FILE = ".objgitignore"


def repo_dir():
    return os.environ.get("OBJGIT_DIR", DEFAULT_REPO_DIR)


def remote_url():
    return os.environ.get("OBJGIT_REMOTE_URL", DEFAULT_REMOTE_URL).rstrip("/")


def author():
    return os.environ.get("OBJGIT_AUTHOR", DEFAULT_AUTHOR)


def load_ignores(path=IGNORE_FILE):
    try:
        with open(path, 'r') as f:
            patterns = []
            for line in f:
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                patterns.append(line)
            return patterns
    except FileNotFoundError:
        return []
