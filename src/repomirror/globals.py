class Globals:
    DEFAULT_CONFIG_FILES = ["config.yaml", "config.json"]
    DEFAULT_CONFIG_DIRS = [".", "~/.config/repomirror", "/etc/repomirror"]
    DEFAULT_REPOS_DIR = "repos"
    REQUIRED_SYSTEM_BINS = ["git"]
    GIT_BIN = "git"
    IDENTITY_SEPARATOR = "\0"
