"""Source registry."""

from readlater_sync.providers.sources import (
    guardian,
    hbr,
    irishtimes,
    medium,
    readwise,
    wired,
)

# Browser-driven sources, in the order they run
INTERACTIVE_SOURCES = {
    "wired": wired,
    "guardian": guardian,
    "hbr": hbr,
    "medium": medium,
    "irishtimes": irishtimes,
}

# API sources authenticated with a pre-issued key
TOKEN_SOURCES = {
    "readwise": readwise,
}

SOURCES = {**INTERACTIVE_SOURCES, **TOKEN_SOURCES}
