"""Candidate pools for the recommendation engine.

The engine never hardcodes what it may suggest. A ``CandidateSource``
supplies the pool: a list held in memory, a JSON file (the bundled
default lives in ``recommender/data/candidates.json``) or a JSON
document served over HTTP.
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from core import clamp

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATES_PATH = Path(__file__).parent / "data" / "candidates.json"


@dataclass
class Candidate:
    """A suggestion before it is scored against a reading pattern."""
    title: str
    author: str
    genre: str
    synopsis: str = ""
    reason: str = ""
    confidence_score: float = 0.5
    tags: list[str] = field(default_factory=list)

    def __post_init__(self):
        self.confidence_score = clamp(float(self.confidence_score), 0.0, 1.0)

    @classmethod
    def from_dict(cls, data: dict) -> "Candidate":
        return cls(
            title=data["title"],
            author=data["author"],
            genre=data["genre"],
            synopsis=data.get("synopsis", ""),
            reason=data.get("reason", ""),
            confidence_score=data.get("confidence_score", 0.5),
            tags=list(data.get("tags", [])),
        )


class CandidateSource(Protocol):
    """Protocol for candidate pool providers."""

    def load(self) -> list[Candidate]:
        """Return the current candidate pool."""
        ...


def parse_candidates(data) -> list[Candidate]:
    if not isinstance(data, list):
        raise ValueError("Candidate pool must be a list of objects.")
    return [Candidate.from_dict(item) for item in data]


class StaticCandidateSource:
    """Candidates held in memory."""

    def __init__(self, candidates: list[Candidate]):
        self.candidates = list(candidates)

    def load(self) -> list[Candidate]:
        return list(self.candidates)


class JsonFileCandidateSource:
    """Candidates read from a JSON file on every load."""

    def __init__(self, path: Path = DEFAULT_CANDIDATES_PATH):
        self.path = Path(path)

    def load(self) -> list[Candidate]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return parse_candidates(data)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to load candidates from {self.path}: {e}")
            return []


class HttpCandidateSource:
    """Candidates fetched from a URL returning the same JSON list."""

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    def load(self) -> list[Candidate]:
        import requests as _requests

        try:
            resp = _requests.get(self.url, headers={"Accept": "application/json"}, timeout=self.timeout)
            resp.raise_for_status()
            return parse_candidates(resp.json())
        except _requests.RequestException as e:
            logger.error(f"Failed to fetch candidates from {self.url}: {e}")
            return []
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid candidate pool at {self.url}: {e}")
            return []


def source_from_config(config: dict) -> CandidateSource:
    """Build the candidate source described by the ``candidates`` config section."""
    section = config.get("candidates", {})
    kind = section.get("source", "builtin")
    if kind == "file" and section.get("path"):
        return JsonFileCandidateSource(Path(section["path"]))
    if kind == "url" and section.get("url"):
        return HttpCandidateSource(section["url"], timeout=float(section.get("timeout", 10.0)))
    if kind not in ("builtin", "file", "url"):
        logger.warning(f"Unknown candidate source '{kind}', using the bundled pool")
    return JsonFileCandidateSource(DEFAULT_CANDIDATES_PATH)
