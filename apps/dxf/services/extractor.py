"""
GEB/GEBERIT element extraction.

extract_elements() partitions entities, blocks and layers of a parsed
document by the classifier. harvest_article_codes() collects the text of
elements placed on matching layers.
"""
import logging

from .classifier import PatternClassifier
from .models import ClassifiedSubset, ParsedDocument
from .text_normalizer import clean_dxf_text

logger = logging.getLogger(__name__)


def extract_elements(
    document: ParsedDocument,
    classifier: PatternClassifier,
    with_codes: bool = True,
) -> ClassifiedSubset:
    """
    Return the matching entities, blocks and layers of ``document``.

    Entities match on any field value, blocks and layers on their name or
    their serialized content. Source order is kept.
    """
    entities = [e for e in document.entities if classifier.matches(e)]
    blocks = [
        (name, block)
        for name, block in document.blocks.items()
        if classifier.matches_entry(name, block)
    ]
    layers = [
        (name, layer)
        for name, layer in document.layers.items()
        if classifier.matches_entry(name, layer)
    ]

    subset = ClassifiedSubset(entities=entities, blocks=blocks, layers=layers)
    if with_codes:
        subset.article_codes = harvest_article_codes(document, classifier)

    logger.info(
        "Classified %d entities, %d blocks, %d layers, %d article codes",
        len(subset.entities),
        len(subset.blocks),
        len(subset.layers),
        len(subset.article_codes),
    )
    return subset


def harvest_article_codes(
    document: ParsedDocument, classifier: PatternClassifier
) -> list[str]:
    """
    Collect normalized ``text`` values of elements on matching layers.

    Only the layer assignment counts for entities, a block also qualifies
    by its own name. Block children are checked one level deep. The
    result is de-duplicated in first-occurrence order.
    """
    codes = []

    def _collect(text):
        cleaned = clean_dxf_text(text)
        if cleaned:
            codes.append(cleaned)

    for entity in document.entity_records():
        if classifier.matches_text(entity.layer) and entity.text:
            _collect(entity.text)

    for name, block in document.block_records():
        is_geb_block = classifier.matches_text(name) or classifier.matches_text(block.layer)
        if is_geb_block and block.text:
            _collect(block.text)
        for child in block.children:
            if classifier.matches_text(child.layer) and child.text:
                _collect(child.text)

    return list(dict.fromkeys(codes))
