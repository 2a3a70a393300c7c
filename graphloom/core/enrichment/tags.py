"""Tag and importance mining from node text."""

import math
import re
from datetime import datetime

from graphloom.config import EnrichmentConfig, PaletteConfig
from graphloom.models.graph import NodeMetadata, Tag, TagCategory
from graphloom.utils.keys import slugify_type

# Patterns are ASCII-only so results do not depend on locale or Unicode tables
_NON_WORD = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+", re.ASCII)
_TECHNICAL_TERM = re.compile(r"\b[A-Z][a-z]*(?:[A-Z][a-z]*)*\b", re.ASCII)
_COMPOUND_WORD = re.compile(r"\b\w+[-_]\w+\b", re.ASCII)
_UPPERCASE = re.compile(r"[A-Z]", re.ASCII)


def clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class TagMiner:
    """
    Derives typed, weighted tags from a node's text and type.

    Precedence (first writer for a tag name wins):
    1. Explicit markers (#word), weight 6
    2. Type tag (slug-cased type), weight 8
    3. Keyword tags, weight from importance indicators, repetition and shape

    Output is deterministic for identical input.
    """

    def __init__(
        self,
        config: EnrichmentConfig | None = None,
        palette: PaletteConfig | None = None,
    ):
        """
        Initialize tag miner.

        Args:
            config: Stop words, importance table and weights
            palette: Color hints attached to tags
        """
        self.config = config or EnrichmentConfig()
        self.palette = palette or PaletteConfig()

        self._stop_words = frozenset(self.config.stop_words)
        self._marker = re.compile(re.escape(self.config.marker) + r"(\w+)", re.ASCII)

    def mine(self, text: str, node_type: str) -> list[Tag]:
        """
        Mine tags from text and type.

        Args:
            text: Concatenated observation text (plus node name)
            node_type: Free-text node type

        Returns:
            Tags deduplicated by name, in precedence order
        """
        tags: list[Tag] = []
        seen: set[str] = set()

        for match in self._marker.findall(text):
            name = match.lower()
            if name in seen:
                continue
            seen.add(name)
            tags.append(
                Tag(
                    name=name,
                    category=TagCategory.HASHTAG,
                    weight=self.config.marker_weight,
                    color=self.palette.layer_color(name),
                )
            )

        if node_type:
            type_tag = slugify_type(node_type)
            if type_tag and type_tag not in seen:
                seen.add(type_tag)
                tags.append(
                    Tag(
                        name=type_tag,
                        category=TagCategory.TYPE,
                        weight=self.config.type_weight,
                        color=self.palette.node_color(node_type),
                    )
                )

        for keyword in self.extract_keywords(text):
            if keyword in seen or len(keyword) < self.config.min_keyword_length:
                continue
            seen.add(keyword)
            tags.append(
                Tag(
                    name=keyword,
                    category=TagCategory.KEYWORD,
                    weight=self.keyword_weight(keyword, text),
                    color=self.palette.layer_color(keyword),
                )
            )

        return tags

    def extract_keywords(self, text: str) -> list[str]:
        """
        Extract candidate keywords from text.

        Plain words are lower-cased, stripped of punctuation and filtered
        against the stop-word list and minimum length. Capitalized technical
        terms and hyphen/underscore compounds are added on top.

        Args:
            text: Source text

        Returns:
            Unique keywords in first-seen order
        """
        cleaned = _NON_WORD.sub(" ", text.lower())
        words = [
            word
            for word in _WHITESPACE.split(cleaned)
            if len(word) >= self.config.min_keyword_length and word not in self._stop_words
        ]
        technical_terms = [term.lower() for term in _TECHNICAL_TERM.findall(text)]
        compound_words = [term.lower() for term in _COMPOUND_WORD.findall(text)]

        return list(dict.fromkeys([*words, *technical_terms, *compound_words]))

    def keyword_weight(self, keyword: str, context: str) -> int:
        """
        Weight a keyword by its surrounding text.

        Args:
            keyword: Lower-cased keyword
            context: Text the keyword was mined from

        Returns:
            Weight clamped to [1, 10]
        """
        lowered = context.lower()
        weight = self.config.keyword_base_weight

        for indicator, value in self.config.importance_keywords.items():
            if indicator in lowered:
                weight = max(weight, value)

        frequency = lowered.count(keyword)
        weight += min(frequency - 1, 3)

        if "-" in keyword or "_" in keyword or _UPPERCASE.search(keyword):
            weight += 1

        return clamp(weight, 1, 10)

    def importance(self, tags: list[Tag]) -> int:
        """Mean tag weight, rounded half up and clamped to [1, 10]."""
        total = sum(tag.weight for tag in tags)
        return clamp(round_half_up(total / max(len(tags), 1)), 1, 10)

    def node_keywords(self, observations: list[str]) -> list[str]:
        """Keywords across observations, bounded by max_keywords."""
        keywords: dict[str, None] = {}
        for observation in observations:
            for keyword in self.extract_keywords(observation):
                keywords.setdefault(keyword, None)
                if len(keywords) >= self.config.max_keywords:
                    return list(keywords)
        return list(keywords)

    def build_metadata(
        self,
        observations: list[str],
        tags: list[Tag],
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> NodeMetadata:
        """
        Create node metadata from observations and tags.

        Connection strength starts at its floor; it is recomputed once the
        node's links are known.
        """
        now = datetime.now()
        return NodeMetadata(
            created_at=created_at or now,
            updated_at=updated_at or now,
            importance=self.importance(tags),
            keywords=self.node_keywords(observations),
        )


def mining_text(name: str, observations: list[str]) -> str:
    """Text a node's tags are mined from: observations followed by the name."""
    return " ".join(observations) + " " + name


def node_size(observation_count: int) -> int:
    return clamp(observation_count * 2, 5, 15)
