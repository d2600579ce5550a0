"""Static action catalog and the palette matcher over it."""

from __future__ import annotations

from dataclasses import dataclass, field

SCORE_EXACT_KEY = 100
SCORE_EXACT_LABEL = 90
SCORE_EXACT_ALIAS = 80
SCORE_LABEL_PREFIX = 70
SCORE_ALIAS_PREFIX = 60
SCORE_LABEL_SUBSTRING = 40
SCORE_HINT_SUBSTRING = 20


@dataclass(frozen=True, slots=True)
class PromptField:
    """One argument the dashboard asks for before running an action."""

    name: str
    label: str
    required: bool = True
    strip_prefix: str = ""

    def clean(self, raw: str) -> str:
        value = raw.strip()
        if self.strip_prefix and value.startswith(self.strip_prefix):
            value = value[len(self.strip_prefix):]
        return value


@dataclass(frozen=True, slots=True)
class Action:
    key: str
    label: str
    aliases: frozenset[str] = field(default_factory=frozenset)
    hint: str = ""
    summary: str = ""
    example: str = ""
    cost_hint: str = ""
    prompt: PromptField | None = None


ACTIONS: tuple[Action, ...] = (
    Action(
        key="search",
        label="Search",
        aliases=frozenset({"s", "find", "query"}),
        hint="search recent posts by keyword or operator query",
        summary="Full-text search over recent posts with ranking and dedupe.",
        example='xint search "AI agents"',
        cost_hint="~1 read per 100 posts",
        prompt=PromptField(name="query", label="Search query"),
    ),
    Action(
        key="trends",
        label="Trends",
        aliases=frozenset({"t", "trending"}),
        hint="trending topics worldwide or for a location",
        summary="Current trending topics, optionally scoped to a location.",
        example="xint trends Berlin",
        cost_hint="1 read",
        prompt=PromptField(
            name="location",
            label="Location (blank for worldwide)",
            required=False,
        ),
    ),
    Action(
        key="profile",
        label="Profile",
        aliases=frozenset({"p", "user", "u"}),
        hint="recent posts and stats for a username",
        summary="Profile details and the latest posts of one account.",
        example="xint profile @jack",
        cost_hint="~2 reads",
        prompt=PromptField(
            name="username",
            label="Username (@optional)",
            strip_prefix="@",
        ),
    ),
    Action(
        key="thread",
        label="Thread",
        aliases=frozenset({"th", "conversation"}),
        hint="reconstruct a conversation from a post id or url",
        summary="Walks replies to rebuild the full conversation thread.",
        example="xint thread 1234567890",
        cost_hint="~1 read per 100 replies",
        prompt=PromptField(name="tweet", label="Tweet ID or URL"),
    ),
    Action(
        key="article",
        label="Article",
        aliases=frozenset({"a", "read", "url"}),
        hint="fetch and summarize a linked article",
        summary="Fetches an article url and extracts its readable text.",
        example="xint article https://example.com/post",
        cost_hint="1 fetch",
        prompt=PromptField(name="url", label="Article URL"),
    ),
    Action(
        key="help",
        label="Help",
        aliases=frozenset({"h", "?", "usage"}),
        hint="show command usage for the underlying tool",
        summary="Prints the underlying tool's usage text.",
        example="xint --help",
        cost_hint="free",
    ),
)


def normalize(raw: str, actions: tuple[Action, ...] = ACTIONS) -> str:
    """Return the key of the action whose key or alias equals ``raw``, else ''."""
    needle = raw.strip().lower()
    if not needle:
        return ""
    for action in actions:
        if needle == action.key.lower():
            return action.key
    for action in actions:
        if needle in {alias.lower() for alias in action.aliases}:
            return action.key
    return ""


def score(action: Action, query: str) -> int:
    """Additive relevance of ``action`` for a palette query; 0 means no match."""
    q = query.strip().lower()
    if not q:
        return 0
    key = action.key.lower()
    label = action.label.lower()
    aliases = [alias.lower() for alias in action.aliases]

    total = 0
    if q == key:
        total += SCORE_EXACT_KEY
    if q == label:
        total += SCORE_EXACT_LABEL
    if q in aliases:
        total += SCORE_EXACT_ALIAS
    if label.startswith(q):
        total += SCORE_LABEL_PREFIX
    if any(alias.startswith(q) for alias in aliases):
        total += SCORE_ALIAS_PREFIX
    if q in label:
        total += SCORE_LABEL_SUBSTRING
    if q in action.hint.lower():
        total += SCORE_HINT_SUBSTRING
    return total


def best_match(query: str, actions: tuple[Action, ...] = ACTIONS) -> Action | None:
    """Highest-scoring action; ties go to the earlier catalog entry."""
    best: Action | None = None
    best_score = 0
    for action in actions:
        current = score(action, query)
        if current > best_score:
            best, best_score = action, current
    return best


def index_of(key: str, actions: tuple[Action, ...] = ACTIONS) -> int:
    for index, action in enumerate(actions):
        if action.key == key:
            return index
    raise KeyError(key)
