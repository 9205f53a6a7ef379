"""High-level ingestion pipeline orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from maid.classification.engine import Classifier
from maid.classification.models import Category
from maid.config.models import MaidConfig
from maid.organization.naming import Namer

from .discovery import DirectoryScanner
from .extractors import ContentSampler
from .models import IngestionResult

LOGGER = logging.getLogger(__name__)


class IngestionPipeline:
    """Scan a root, then classify and name every discovered file."""

    def __init__(
        self,
        scanner: DirectoryScanner,
        sampler: ContentSampler,
        classifier: Classifier,
        namer: Namer,
        excerpt_lines: int = 20,
    ) -> None:
        self.scanner = scanner
        self.sampler = sampler
        self.classifier = classifier
        self.namer = namer
        self.excerpt_lines = excerpt_lines

    @classmethod
    def from_config(
        cls, config: MaidConfig, *, recursive: bool | None = None
    ) -> "IngestionPipeline":
        """Build a pipeline wired from configuration.

        Args:
            config: Effective configuration.
            recursive: Overrides ``processing.recurse_directories`` when not ``None``.
        """
        processing = config.processing
        settings = config.classification
        lexicon = settings.build_lexicon()
        scanner = DirectoryScanner(
            recursive=processing.recurse_directories if recursive is None else recursive,
            include_hidden=processing.process_hidden_files,
            follow_symlinks=processing.follow_symlinks,
            extensions=processing.extensions,
            excluded_dirnames=[config.retention.trash_dirname],
        )
        classifier = Classifier(
            lexicon,
            script_extensions=settings.script_extensions,
            inspect_content=settings.inspect_content,
            low_confidence_hits=settings.low_confidence_hits,
        )
        namer = Namer(
            lexicon,
            noise_words=config.naming.noise_words,
            rename_unknown=config.naming.rename_unknown,
            script_directory=config.organization.script_directory,
        )
        excerpt_lines = settings.excerpt_lines if settings.inspect_content else 0
        return cls(scanner, ContentSampler(), classifier, namer, excerpt_lines=excerpt_lines)

    def run(self, root: Path) -> IngestionResult:
        """Scan ``root`` and return classified, named records.

        Raises:
            RootInaccessibleError: If the root cannot be processed.
        """
        result = IngestionResult()
        for record in self.scanner.scan(root):
            record.excerpt = self.sampler.excerpt(record.path, self.excerpt_lines)
            classification = self.classifier.classify(record.base_name, record.excerpt)
            record.category = classification.category
            record.confidence = classification.confidence
            record.canonical_name = self.namer.canonical_name(record)
            if record.category == Category.UNKNOWN:
                LOGGER.info("No category keyword matched %s", record.path)
            result.records.append(record)
        result.errors.extend(self.scanner.errors)
        return result


__all__ = ["IngestionPipeline"]
