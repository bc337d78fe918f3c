"""
Intrinsic evaluation of embedding tables on analogy and word-pair benchmarks.

Analogy files use the Google ``questions-words.txt`` layout::

    : capital-common-countries
    Athens Greece Baghdad Iraq

Word-pair files hold ``word1<delim>word2<delim>score`` lines (WordSim-353,
SimLex-999); lines starting with ``#`` are comments.
"""
from __future__ import annotations

import logging
import math
import os
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple, Union

from scipy import stats

from ..query.analogy import AnalogySolver
from ..query.table import EmbeddingTable

logger = logging.getLogger(__name__)

__all__ = [
    "SectionScore",
    "AnalogyReport",
    "WordPairReport",
    "evaluate_analogies",
    "evaluate_word_pairs",
]

PathLike = Union[str, os.PathLike]


@dataclass
class SectionScore:
    """Correct / attempted counts for one analogy section."""
    correct: int = 0
    total: int = 0
    skipped: int = 0

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0


@dataclass
class AnalogyReport:
    """Result of ``evaluate_analogies``.

    Attributes:
        correct: Questions whose expected answer was in the top results.
        total: Questions attempted (all four words known).
        skipped: Questions with at least one unknown word.
        sections: Per-section scores, in file order.
    """
    correct: int = 0
    total: int = 0
    skipped: int = 0
    sections: Dict[str, SectionScore] = field(default_factory=OrderedDict)

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0


@dataclass
class WordPairReport:
    """Result of ``evaluate_word_pairs``.

    Attributes:
        spearman: Spearman rank correlation between table and human scores.
        pvalue: Two-sided p-value of the correlation.
        pairs_used: Pairs with both words in the table.
        pairs_skipped: Pairs with an unknown word.
    """
    spearman: float
    pvalue: float
    pairs_used: int
    pairs_skipped: int


def _require_file(dataset_path: PathLike) -> Path:
    path = Path(dataset_path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found: {path}")
    return path


def evaluate_analogies(
    table: EmbeddingTable,
    dataset_path: PathLike,
    top_n: int = 1,
) -> AnalogyReport:
    """
    Score a table on an analogy question file.

    Each line ``a b c d`` asks "a is to b as c is to ?" with expected answer d.
    Words are compared case-insensitively: each lower-cased question word
    maps to the first table word (in row order) with the same lower-cased
    form. A question counts as correct when an answer among the ``top_n``
    returned by the analogy solver matches d case-insensitively.

    Args:
        table (EmbeddingTable): Table to evaluate.
        dataset_path (str): Path to the question file.
        top_n (int): Answers considered per question.

    Returns:
        AnalogyReport: Overall and per-section counts.

    Raises:
        FileNotFoundError: If the dataset file does not exist.
        ValueError: If a question line does not hold four words.
    """
    path = _require_file(dataset_path)
    report = AnalogyReport()
    section = report.sections.setdefault("default", SectionScore())

    folded: Dict[str, str] = {}
    for word in table.words:
        folded.setdefault(word.lower(), word)

    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            if line.startswith(":"):
                name = line[1:].strip()
                section = report.sections.setdefault(name, SectionScore())
                continue

            parts = line.lower().split()
            if len(parts) != 4:
                raise ValueError(f"{path.name}:{line_no}: expected 4 words, got {len(parts)}")
            a, b, c, expected = parts

            answers = None
            resolved = [folded.get(word) for word in (a, b, c, expected)]
            if None not in resolved:
                answers = AnalogySolver.solve(table, *resolved[:3], top_n)
            if answers is None:
                section.skipped += 1
                report.skipped += 1
                logger.debug(f"Skipping question with unknown word: {line}")
                continue

            hit = any(entry.word.lower() == expected for entry in answers)

            section.total += 1
            report.total += 1
            if hit:
                section.correct += 1
                report.correct += 1

    if not report.sections["default"].total and not report.sections["default"].skipped:
        del report.sections["default"]

    for name, score in report.sections.items():
        logger.info(f"{name}: {score.accuracy:.1%} ({score.correct}/{score.total})")
    logger.info(
        f"Total accuracy: {report.accuracy:.1%} ({report.correct}/{report.total}), "
        f"{report.skipped} skipped"
    )
    return report


def _read_word_pairs(path: Path, delimiter: str) -> List[Tuple[str, str, float]]:
    pairs = []
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            parts = line.split(delimiter)
            if len(parts) < 3:
                raise ValueError(f"{path.name}:{line_no}: expected 3 fields, got {len(parts)}")
            try:
                score = float(parts[2])
            except ValueError:
                raise ValueError(f"{path.name}:{line_no}: score is not a number: {parts[2]!r}")
            pairs.append((parts[0].strip(), parts[1].strip(), score))
    return pairs


def evaluate_word_pairs(
    table: EmbeddingTable,
    dataset_path: PathLike,
    delimiter: str = "\t",
) -> WordPairReport:
    """
    Correlate table similarities with human similarity judgements.

    Args:
        table (EmbeddingTable): Table to evaluate.
        dataset_path (str): Path to the word-pair file.
        delimiter (str): Field separator.

    Returns:
        WordPairReport: Spearman correlation (nan with fewer than two usable
        pairs) and pair counts.

    Raises:
        FileNotFoundError: If the dataset file does not exist.
        ValueError: If a line cannot be parsed.
    """
    path = _require_file(dataset_path)

    model_scores = []
    human_scores = []
    skipped = 0
    for word1, word2, score in _read_word_pairs(path, delimiter):
        sim = table.similarity(word1, word2)
        if sim is None:
            skipped += 1
            continue
        model_scores.append(sim)
        human_scores.append(score)

    if len(model_scores) < 2:
        logger.warning(f"Only {len(model_scores)} usable pair(s) in {path.name}")
        return WordPairReport(math.nan, math.nan, len(model_scores), skipped)

    result = stats.spearmanr(model_scores, human_scores)
    spearman, pvalue = float(result[0]), float(result[1])
    logger.info(
        f"Spearman {spearman:.4f} (p={pvalue:.3g}) over {len(model_scores)} pairs, "
        f"{skipped} skipped"
    )
    return WordPairReport(spearman, pvalue, len(model_scores), skipped)
