import re
from typing import List

from relay_service.core.interfaces import ToolExtractor
from relay_service.core.logging import logger
from relay_service.core.types import ToolInvocation


class UseTagExtractor(ToolExtractor):
    """
    Finds tool calls written inline as <use tool="NAME">ARGS</use>.
    - Name is the attribute value, verbatim
    - ARGS is the tag body with surrounding whitespace removed
    - Bodies may span lines; matching is non-greedy, so several calls in one
      answer are returned separately and in order
    - ARGS is not validated, malformed JSON is passed through as-is
    """

    PATTERN = re.compile(r'<use tool="(.+?)">(.+?)</use>', re.DOTALL)

    def extract(self, answer: str) -> List[ToolInvocation]:
        invocations = [
            ToolInvocation(name=m.group(1), arguments=m.group(2).strip(), position=m.start())
            for m in self.PATTERN.finditer(answer or "")
        ]
        if invocations:
            logger.info(f"Extractor: found {len(invocations)} tool call(s): {[i.name for i in invocations]}")
        return invocations
