"""DOM tagging pass.

Writes correlation markers onto every element the accessibility snapshot
gave a semantic role, so the fiber extraction script can read them back
from ``fiber.stateNode``. Markers are left in place afterwards; the next
pass simply overwrites them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from react_lens.errors import LensError
from react_lens.inspect.fiber import MARKER_NAME, MARKER_REF, MARKER_ROLE
from react_lens.inspect.roles import is_semantic_role
from react_lens.logging import LogSpan

if TYPE_CHECKING:
    from react_lens.browser.driver import PageDriver
    from react_lens.inspect.snapshot import Correlation

TAG_FUNCTION = f"""function (ref, role, name) {{
  if (!this || typeof this.setAttribute !== 'function') return false;
  this.setAttribute('{MARKER_REF}', String(ref));
  this.setAttribute('{MARKER_ROLE}', role);
  this.setAttribute('{MARKER_NAME}', name);
  return true;
}}"""


@dataclass
class TaggingResult:
    tagged: int = 0
    skipped: int = 0
    failed: int = 0


async def tag_elements(driver: PageDriver, correlation: Correlation) -> TaggingResult:
    """Tag each semantically-roled element with its backend id, role and name.

    A node that fails to resolve or tag (removed, detached, not an element)
    is logged at debug level and skipped; the pass always runs to the end.
    """
    result = TaggingResult()
    with LogSpan(span="inspect.tagging", candidates=len(correlation.facts)) as span:
        for ref, fact in correlation.facts.items():
            if not is_semantic_role(fact.role):
                result.skipped += 1
                continue
            object_id: str | None = None
            try:
                object_id = await driver.resolve_node(ref)
                tagged = await driver.call_function_on(
                    object_id, TAG_FUNCTION, [ref, fact.role, fact.name]
                )
                if tagged:
                    result.tagged += 1
                else:
                    result.skipped += 1
            except LensError as e:
                result.failed += 1
                logger.debug(f"Tagging {ref} ({fact.role}) failed: {e}")
            finally:
                if object_id is not None:
                    await driver.release_object(object_id)
        span.add(tagged=result.tagged, skipped=result.skipped, failed=result.failed)
    return result
