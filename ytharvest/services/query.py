from typing import List, Optional, Sequence, Tuple


def construct_query(search_name: str, search_terms: Sequence[str], exclusion_terms: Sequence[str]) -> str:
    """Build ``"<name>" (<t1 | t2>) -<e1> -<e2>``; empty clauses are left out.

    Term order follows the input so the same run always logs the same query.
    """
    base_terms = f"({' | '.join(search_terms)})" if search_terms else ""
    exclusions = " ".join(f"-{term}" for term in exclusion_terms) if exclusion_terms else ""
    return " ".join(part for part in (f'"{search_name}"', base_terms, exclusions) if part).strip()


def split_phrases(phrases: Sequence[str]) -> Tuple[List[str], List[str]]:
    include = [p for p in phrases if not p.startswith("-")]
    exclude = [p[1:].strip() for p in phrases if p.startswith("-")]
    return include, exclude


def resolve_terms(
    search_name: str,
    search_phrases: Optional[Sequence[str]],
    search_terms: Optional[Sequence[str]],
    exclusion_terms: Optional[Sequence[str]],
) -> Tuple[List[str], List[str]]:
    # raw phrases win over config terms
    if search_phrases:
        return split_phrases(search_phrases)
    # an explicit empty list means "name only"
    terms = list(search_terms) if search_terms is not None else [search_name]
    return terms, list(exclusion_terms or [])


def search_expression(
    search_name: str,
    search_phrases: Optional[Sequence[str]],
    search_terms: Optional[Sequence[str]],
    exclusion_terms: Optional[Sequence[str]],
) -> str:
    """Term expression stored with the search definition."""
    if search_phrases:
        return ", ".join(search_phrases)
    terms = list(search_terms) if search_terms is not None else [search_name]
    terms.extend(f"-{term}" for term in exclusion_terms or [])
    return ", ".join(terms)
