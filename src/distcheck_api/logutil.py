import logging
import re
from typing import Iterable, Union


_NODE_HEX = re.compile(r"0x([0-9a-fA-F]{8})[0-9a-fA-F]{48}([0-9a-fA-F]{8})\b")


class NodeAbbreviatingFilter(logging.Filter):
    """Shorten 32-byte hex nodes in log records to 0x1234abcd..89abcdef."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            msg = str(record.getMessage())
            record.msg = _NODE_HEX.sub(r"0x\1..\2", msg)
            record.args = ()
        except Exception:
            pass
        return True


_node_filter = NodeAbbreviatingFilter()


def setup_logging(
    level: Union[int, str] = logging.INFO,
    loggers: Iterable[str] = ("distcheck_api", "distcheck_cli"),
) -> None:
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    # handler-level so records propagated from child loggers are filtered too
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, NodeAbbreviatingFilter) for f in handler.filters):
            handler.addFilter(_node_filter)
    for name in loggers:
        logging.getLogger(name).setLevel(level)
