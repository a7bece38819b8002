"""Keep a committed .env.example in sync with the keys of .env and .env.local."""

from .keys import KeyEntry, MergedKeys, index_keys, merge_sources
from .parser import Token, tokenize
from .sync import EnvSyncError, SyncOutcome, sync_env_example
from .template import annotate_unknown_keys, append_missing_keys, build_template

__all__ = [
    "EnvSyncError",
    "KeyEntry",
    "MergedKeys",
    "SyncOutcome",
    "Token",
    "annotate_unknown_keys",
    "append_missing_keys",
    "build_template",
    "index_keys",
    "merge_sources",
    "sync_env_example",
    "tokenize",
]
