"""
Logger adapter that carries structured fields into ``extra``.
"""

import logging

_LOGGING_KWARGS = ("exc_info", "stack_info", "stacklevel", "extra")


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter with bound context fields.

    Keyword arguments that are not logging options become record
    attributes, so JSONFormatter emits them as top-level fields.

    Usage:
        log = ContextLogger(__name__, left="bak_users", right="users")
        log.info("Diff complete", changed=2)

        side_log = log.bind(side="left")
    """

    def __init__(self, name: str, **context):
        super().__init__(logging.getLogger(name), context)

    @property
    def context(self) -> dict:
        return dict(self.extra)

    def bind(self, **context) -> "ContextLogger":
        """Return a new adapter with ``context`` merged over the current fields."""
        return ContextLogger(self.logger.name, **{**self.extra, **context})

    def process(self, msg, kwargs):
        fields = {key: kwargs.pop(key) for key in list(kwargs) if key not in _LOGGING_KWARGS}
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {}), **fields}
        return msg, kwargs
