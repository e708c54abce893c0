"""Logical tables shared by the forum and Discord import scripts.

Each table is a JSONStore with its own key prefix inside one bucket. Record
field names are part of the stored format and must not change.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from glue_store.protocols.kv_store import KVStore
from glue_store.typed import JSONStore

# Feed item ID hash -> item title, for items already posted
SEEN_URLS = "seen-urls"
# Discourse topic slug -> raw topic JSON
DISCOURSE_TOPICS = "discourse"
# Discourse topic slug -> cleaned up question thread
DISCOURSE_THREADS = "discourse-thread"
# Discourse topic slug -> Discord forum channel ID
DISCORD_THREAD_MAPPING = "discord-thread-mapping"
# Discourse user ID -> generated Discord persona
DISCORD_GENERATED_USERNAMES = "discord-generated-usernames"


class DiscoursePost(BaseModel):
    """One post of a Discourse thread."""

    model_config = ConfigDict(populate_by_name=True)

    body: str = ""
    user_id: str = Field(default="", alias="userID")
    accepted: bool = False


class DiscourseQuestion(BaseModel):
    """A Discourse question thread, stripped down to what gets reposted."""

    title: str = ""
    slug: str = ""
    posts: list[DiscoursePost] | None = None


class FakeUser(BaseModel):
    """Generated persona standing in for a forum user on Discord."""

    model_config = ConfigDict(populate_by_name=True)

    actual_uid: str = ""
    username: str = ""
    avatar_key: str = Field(default="", alias="avatar_url")


@dataclass
class Tables:
    """All logical tables over a single raw store."""

    seen_urls: JSONStore[str]
    discourse_topics: JSONStore[dict[str, Any]]
    discourse_threads: JSONStore[DiscourseQuestion]
    discord_thread_mapping: JSONStore[str]
    discord_generated_usernames: JSONStore[FakeUser]

    @classmethod
    def from_store(cls, store: KVStore) -> "Tables":
        """Build every table on top of store."""
        return cls(
            seen_urls=JSONStore(store, SEEN_URLS, type_=str),
            discourse_topics=JSONStore(store, DISCOURSE_TOPICS, type_=dict[str, Any]),
            discourse_threads=JSONStore(store, DISCOURSE_THREADS, type_=DiscourseQuestion),
            discord_thread_mapping=JSONStore(store, DISCORD_THREAD_MAPPING, type_=str),
            discord_generated_usernames=JSONStore(
                store, DISCORD_GENERATED_USERNAMES, type_=FakeUser
            ),
        )
