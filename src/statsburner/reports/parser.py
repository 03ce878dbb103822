"""XML report parser built on ElementTree."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from statsburner.domain.exceptions import ReportParseError
from statsburner.domain.interfaces import IReportNode, IReportParser


class XmlReportParser(IReportParser):
    """Parses Awareness API XML bodies into an element tree."""

    def parse(self, text: str) -> IReportNode:
        try:
            return ET.fromstring(text)
        except ET.ParseError as exc:
            raise ReportParseError(
                context={"error": str(exc), "preview": text[:100]}
            ) from exc
