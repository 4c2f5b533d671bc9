from __future__ import annotations

"""
Entry Page Scoping.

Determines which version entries each output page can actually request, so
a page only receives the tokens of modules reachable from its declared
entry points rather than the global map.
"""

import logging
import re
from typing import Callable, Dict, Iterable, List

from assetversioner.domain.file_models import BuildFile

logger = logging.getLogger(__name__)

EntryExtractor = Callable[[str], List[str]]

# Top-level asynchronous require calls: require(['a', "b"], ...)
_ASYNC_REQUIRE_RX = re.compile(r"\brequire\s*\(\s*\[([^\]]*)\]")
_QUOTED_RX = re.compile(r"""(['"])([^'"]+)\1""")

# -----------------------------------------------------------------------------
# ENTRY EXTRACTION
# -----------------------------------------------------------------------------

def extract_entry_modules(content: str) -> List[str]:
    """
    Extract module ids declared as asynchronous entry dependencies of a page.

    Relative ids, plugin resources ('!') and URLs (':') are not module
    entries and are ignored.

    Args:
        content: Raw page markup.

    Returns:
        List[str]: Entry module ids in declaration order, without duplicates.
    """
    ids: List[str] = []
    for match in _ASYNC_REQUIRE_RX.finditer(content):
        for _, module_id in _QUOTED_RX.findall(match.group(1)):
            module_id = module_id.strip()
            if not module_id or module_id.startswith(".") or "!" in module_id or ":" in module_id:
                continue
            if module_id not in ids:
                ids.append(module_id)
    return ids


def collect_page_entry_modules(
        pages: Iterable[BuildFile],
        extractor: EntryExtractor = extract_entry_modules,
) -> List[str]:
    """Ordered union of the entry module ids of every page."""
    ids: List[str] = []
    for page in pages:
        for module_id in extractor(page.data):
            if module_id not in ids:
                ids.append(module_id)
    return ids

# -----------------------------------------------------------------------------
# PAGE SCOPING
# -----------------------------------------------------------------------------

def scope_page_versions(
        pages: Iterable[BuildFile],
        all_module_versions: Dict[str, str],
        extractor: EntryExtractor = extract_entry_modules,
) -> Dict[str, Dict[str, str]]:
    """
    Restrict the version map to the entries each page can request.

    A key applies to an entry id when it equals the id or is a path prefix
    of it. Pages with an empty intersection are omitted.

    Args:
        pages: Page-like build files.
        all_module_versions: Module id or path prefix to token.
        extractor: Entry-id extractor over raw page content.

    Returns:
        Dict[str, Dict[str, str]]: Page output path to its version subset.
    """
    scoped: Dict[str, Dict[str, str]] = {}

    for page in pages:
        entry_ids = extractor(page.data)
        if not entry_ids:
            continue

        subset = {
            key: token
            for key, token in all_module_versions.items()
            if any(_key_applies(key, module_id) for module_id in entry_ids)
        }
        if subset:
            scoped[page.output_path] = subset
            logger.debug(f"Page '{page.path}' scoped to {len(subset)} version entries")

    return scoped


def _key_applies(key: str, module_id: str) -> bool:
    return module_id == key or module_id.startswith(key + "/")
