"""Stage 1: fact extraction from page text into FactSets."""

from listingtrust.extract.fact_extractor import extract_claims, extract_policy
from listingtrust.extract.text import first_sentences, normalize_text

__all__ = ["extract_claims", "extract_policy", "first_sentences", "normalize_text"]
