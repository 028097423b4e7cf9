import logging
from typing import List

logger = logging.getLogger(__name__)


class URLParser:
    schemes = ("http://", "https://")

    def parse_url_list(self, raw_value: str | None, name: str) -> List[str]:
        """Split a comma separated env value into unique origins without trailing slashes."""
        origins: List[str] = []
        for item in (raw_value or "").split(","):
            item = item.strip().rstrip("/")
            if not item:
                continue
            if not item.startswith(self.schemes):
                logger.warning("Ignoring %s entry without http(s) scheme: %s", name, item)
                continue
            if item not in origins:
                origins.append(item)
        return origins


parser = URLParser()
