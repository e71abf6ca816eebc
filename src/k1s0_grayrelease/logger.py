"""ライブラリログの出力設定（structlog）"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

from .config import LogSection

LIBRARY_LOGGER = "k1s0_grayrelease"


class _GrayReleaseHandler(logging.StreamHandler):
    """configure_logging が取り付けたハンドラー（再設定時の付け替え用）。"""


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def configure_logging(
    log: LogSection,
    stream: TextIO | None = None,
) -> structlog.stdlib.BoundLogger:
    """k1s0_grayrelease 配下のログ出力を設定し、component 付きロガーを返す。

    ライブラリ内部は logging.getLogger(__name__) で出力しており、
    extra に渡した項目はそのままイベントのキーになる。
    何度呼んでもハンドラーは 1 つだけ。ルートロガーには伝播させない。

    Args:
        log: ログ設定 (level, format)
        stream: 出力先。省略時は標準エラー出力
    """
    shared = _shared_processors()
    renderer: structlog.types.Processor
    if log.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    handler = _GrayReleaseHandler(stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[*shared, structlog.stdlib.ExtraAdder()],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    for existing in list(library_logger.handlers):
        if isinstance(existing, _GrayReleaseHandler):
            library_logger.removeHandler(existing)
    library_logger.addHandler(handler)
    library_logger.setLevel(log.level)
    library_logger.propagate = False

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    return structlog.stdlib.get_logger(LIBRARY_LOGGER).bind(component="grayrelease")
