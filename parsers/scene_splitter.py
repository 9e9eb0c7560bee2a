"""Deterministic scene splitter for screenplay-like text.

Splits raw text at structural boundary markers (slug lines, transitions,
scene counters, dividers, chapter/act markers).  Documents without usable
markers fall back to blank-line paragraphs, character cues and finally fixed
word windows.  A merge/filter pass then removes fragments that are too short
to classify on their own.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable

from core.models import Language, ScriptDialect
from parsers.dialects import patterns_for, scene_keywords_for

logger = logging.getLogger(__name__)

MIN_SCENE_LENGTH = 50  # marker-pass noise threshold
SHORT_SCENE_LENGTH = 100  # below: appended to the previous scene
MERGE_SCENE_LENGTH = 300  # below: merged forward into the next scene
FALLBACK_CHUNK_LENGTH = 100  # fallback chunks must be longer than this
MAX_SCENES = 20

SOURCE_MARKER = "marker"
SOURCE_BLANK_LINES = "blank_lines"
SOURCE_CHARACTER_CUES = "character_cues"
SOURCE_WORD_WINDOWS = "word_windows"
SOURCE_WHOLE_DOCUMENT = "whole_document"

# Matched against the stripped line.
BOUNDARY_MARKERS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^FADE\s+(?:IN|OUT)\b", re.IGNORECASE),
    re.compile(r"^CUT\s+TO\b", re.IGNORECASE),
    re.compile(r"^(?:INT\.\s*/\s*EXT\.|EXT\.\s*/\s*INT\.|INT/EXT\.|EXT/INT\.|I/E\.|INT\.|EXT\.)", re.IGNORECASE),
    re.compile(r"^SCENE\s+\d+", re.IGNORECASE),
    re.compile(r"^\d+\.\s+"),
    re.compile(r"^(?=.*[A-Z])[A-Z\s]{20,}$"),
    re.compile(r"^-{3,}"),
    re.compile(r"^#{1,6}\s+"),
    re.compile(r"^CHAPTER\s+\d+", re.IGNORECASE),
    re.compile(r"^ACT\s+[IVX\d]+\b", re.IGNORECASE),
)

_BLANK_RUN_RE = re.compile(r"\n\s*\n\s*\n")
_CHARACTER_CUE_RE = re.compile(r"^[A-Z]{2,}[A-Z\s]*$")
_WORD_RE = re.compile(r"\S+")


@dataclass(frozen=True, slots=True)
class CandidateSpan:
    """A contiguous block of the document produced by the splitter."""

    index: int
    text: str
    header: str  # boundary line that opened the span, empty for a preamble
    start_offset: int
    source: str


BoundaryMatcher = Callable[[str], bool]


def build_boundary_matcher(
    language: Language | None = None,
    dialect: ScriptDialect | None = None,
) -> BoundaryMatcher:
    """Return a predicate that recognises boundary lines.

    The generic markers always apply.  The dialect contributes its scene
    header (and transition) pattern, the language its slug keywords, which
    only count on upper-case lines.
    """
    dialect_patterns = []
    if dialect is not None:
        patterns = patterns_for(dialect)
        dialect_patterns.append(patterns.scene_header)
        if patterns.transition is not None:
            dialect_patterns.append(patterns.transition)
    keywords = scene_keywords_for(language)

    def is_boundary(line: str) -> bool:
        stripped = line.strip()
        if not stripped:
            return False
        if any(p.search(stripped) for p in BOUNDARY_MARKERS):
            return True
        if any(p.search(stripped) for p in dialect_patterns):
            return True
        upper = stripped.upper()
        return stripped == upper and any(upper.startswith(k) for k in keywords)

    return is_boundary


# ---------------------------------------------------------------------------
# Splitting
# ---------------------------------------------------------------------------


def split_into_scenes(
    full_text: str,
    language: Language | None = None,
    dialect: ScriptDialect | None = None,
    min_length: int = MIN_SCENE_LENGTH,
) -> list[CandidateSpan]:
    """Split *full_text* into ordered candidate spans.

    Returns an empty list only if *full_text* is empty/whitespace; otherwise
    at least one span (the whole document in the worst case).
    """
    if not full_text or not full_text.strip():
        return []

    text = full_text.replace("\r\n", "\n")

    spans = _split_at_markers(text, build_boundary_matcher(language, dialect), min_length)
    if len(spans) > 1:
        return spans

    for strategy in (_split_blank_lines, _split_character_cues, _split_word_windows):
        chunks = strategy(text)
        if len(chunks) > 1:
            logger.debug("No usable markers; %s produced %d chunks", chunks[0].source, len(chunks))
            return chunks

    return [
        CandidateSpan(
            index=0,
            text=text.strip(),
            header="",
            start_offset=len(text) - len(text.lstrip()),
            source=SOURCE_WHOLE_DOCUMENT,
        )
    ]


def _split_at_markers(
    text: str, is_boundary: BoundaryMatcher, min_length: int
) -> list[CandidateSpan]:
    spans: list[CandidateSpan] = []
    current: list[str] = []
    current_start = 0
    header = ""

    def flush() -> None:
        block = "\n".join(current)
        trimmed = block.strip()
        # Short accumulations between markers are noise.
        if len(trimmed) > min_length:
            spans.append(
                CandidateSpan(
                    index=len(spans),
                    text=trimmed,
                    header=header,
                    start_offset=current_start + len(block) - len(block.lstrip()),
                    source=SOURCE_MARKER,
                )
            )

    offset = 0
    for line in text.split("\n"):
        if is_boundary(line):
            flush()
            current = [line]
            current_start = offset
            header = line.strip()
        else:
            current.append(line)
        offset += len(line) + 1
    flush()

    return spans


def _chunks_to_spans(text: str, chunks: list[str], source: str) -> list[CandidateSpan]:
    spans: list[CandidateSpan] = []
    cursor = 0
    for chunk in chunks:
        trimmed = chunk.strip()
        if len(trimmed) <= FALLBACK_CHUNK_LENGTH:
            continue
        found = text.find(trimmed, cursor)
        start = found if found >= 0 else cursor
        cursor = start + len(trimmed) if found >= 0 else cursor
        spans.append(
            CandidateSpan(
                index=len(spans),
                text=trimmed,
                header="",
                start_offset=start,
                source=source,
            )
        )
    return spans


def _split_blank_lines(text: str) -> list[CandidateSpan]:
    """Fallback (a): paragraphs separated by two or more blank lines."""
    return _chunks_to_spans(text, _BLANK_RUN_RE.split(text), SOURCE_BLANK_LINES)


def _is_character_cue(line: str) -> bool:
    stripped = line.strip()
    return 2 <= len(stripped) <= 30 and bool(_CHARACTER_CUE_RE.match(stripped))


def _split_character_cues(text: str) -> list[CandidateSpan]:
    """Fallback (b): one chunk per character cue and the text that follows it."""
    chunks: list[list[str]] = [[]]
    for line in text.split("\n"):
        if _is_character_cue(line) and chunks[-1]:
            chunks.append([])
        chunks[-1].append(line)
    return _chunks_to_spans(text, ["\n".join(c) for c in chunks], SOURCE_CHARACTER_CUES)


def _split_word_windows(text: str) -> list[CandidateSpan]:
    """Fallback (c): fixed windows of roughly a fifth of the document."""
    chunk_size = max(500, len(text) // 5)
    words_per_chunk = max(chunk_size // 6, 1)  # ~6 characters per word
    words = list(_WORD_RE.finditer(text))

    spans: list[CandidateSpan] = []
    for i in range(0, len(words), words_per_chunk):
        window = words[i : i + words_per_chunk]
        chunk = " ".join(m.group() for m in window)
        if len(chunk) > FALLBACK_CHUNK_LENGTH:
            spans.append(
                CandidateSpan(
                    index=len(spans),
                    text=chunk,
                    header="",
                    start_offset=window[0].start(),
                    source=SOURCE_WORD_WINDOWS,
                )
            )
    return spans


# ---------------------------------------------------------------------------
# Merge / filter
# ---------------------------------------------------------------------------


def _append(span: CandidateSpan, text: str) -> CandidateSpan:
    return replace(span, text=f"{span.text}\n\n{text}")


def merge_and_filter(
    spans: list[CandidateSpan], max_scenes: int = MAX_SCENES
) -> list[CandidateSpan]:
    """Merge short spans into their neighbours, renumber and cap the list.

    * spans under 100 characters are appended to the previous span; a
      leading short span is carried into the next retained span;
    * spans between 100 and 300 characters are merged forward into the next
      retained span (and stay pending while the merge is still short);
    * indices are reassigned densely and only the first *max_scenes* spans
      are kept.
    """
    retained: list[CandidateSpan] = []
    pending: CandidateSpan | None = None
    carry: CandidateSpan | None = None

    for span in spans:
        if len(span.text) < SHORT_SCENE_LENGTH:
            if pending is not None:
                pending = _append(pending, span.text)
            elif retained:
                retained[-1] = _append(retained[-1], span.text)
            elif carry is not None:
                carry = _append(carry, span.text)
            else:
                carry = span
            continue

        if carry is not None:
            span = _append(carry, span.text)
            carry = None

        if pending is not None:
            span = _append(pending, span.text)
            pending = None

        if len(span.text) < MERGE_SCENE_LENGTH:
            pending = span
        else:
            retained.append(span)

    if pending is not None:
        retained.append(pending)
    if carry is not None:
        # Nothing long enough anywhere: the fragments form the sole scene.
        retained.append(carry)

    if len(retained) > max_scenes:
        logger.info("Truncating %d scenes to the first %d", len(retained), max_scenes)

    return [replace(span, index=i) for i, span in enumerate(retained[:max_scenes])]


def segment(
    full_text: str,
    language: Language | None = None,
    dialect: ScriptDialect | None = None,
    min_length: int = MIN_SCENE_LENGTH,
    max_scenes: int = MAX_SCENES,
) -> list[CandidateSpan]:
    """Split *full_text* and run the merge/filter pass."""
    return merge_and_filter(
        split_into_scenes(full_text, language=language, dialect=dialect, min_length=min_length),
        max_scenes=max_scenes,
    )
