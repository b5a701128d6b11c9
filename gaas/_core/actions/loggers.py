"""
Logging setup and per-object logging of the gateway.

Messages about specific resources (e.g. a graph being created or deleted)
are logged via :class:`ResourceLogger`, which carries a reference to the
resource. The reference is then rendered either as a ``[namespace/name]``
prefix in the text logs, or as a separate field in the JSON logs.
"""
import copy
import enum
import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, TextIO

from pythonjsonlogger.core import RESERVED_ATTRS
from pythonjsonlogger.json import JsonFormatter

from gaas._cogs.helpers import typedefs
from gaas._cogs.structs import references

logger = logging.getLogger('gaas.objects')

# A key for object references in JSON logs, as seen by the log parsers.
DEFAULT_JSON_REFKEY = 'object'


class LogFormat(enum.Enum):
    """ Log formats, as specified on CLI. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-20.20s [%(levelname)-8.8s] %(message)s'
    JSON = '-json-'  # not used for formatting, only for detection


class ObjectFormatter(logging.Formatter):
    pass


class ObjectTextFormatter(ObjectFormatter, logging.Formatter):
    pass


class ObjectJsonFormatter(ObjectFormatter, JsonFormatter):
    def __init__(
            self,
            *args: Any,
            refkey: str | None = None,
            **kwargs: Any,
    ) -> None:
        # Avoid type checking, as the args are not in the parent consructor.
        reserved_attrs = kwargs.pop('reserved_attrs', RESERVED_ATTRS)
        reserved_attrs = set(reserved_attrs)
        reserved_attrs |= {'k8s_ref'}
        kwargs.update(reserved_attrs=reserved_attrs)
        kwargs.setdefault('timestamp', True)
        super().__init__(*args, **kwargs)
        self._refkey: str = refkey or DEFAULT_JSON_REFKEY

    def add_fields(
            self,
            log_record: dict[str, Any],
            record: logging.LogRecord,
            message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if self._refkey and hasattr(record, 'k8s_ref'):
            ref = getattr(record, 'k8s_ref')
            log_record[self._refkey] = ref

        if 'severity' not in log_record:
            log_record['severity'] = (
                "debug" if record.levelno <= logging.DEBUG else
                "info" if record.levelno <= logging.INFO else
                "warn" if record.levelno <= logging.WARNING else
                "error" if record.levelno <= logging.ERROR else
                "fatal")


class ObjectPrefixingMixin(ObjectFormatter):
    def format(self, record: logging.LogRecord) -> str:
        if hasattr(record, 'k8s_ref'):
            ref = getattr(record, 'k8s_ref')
            namespace = ref.get('namespace', '')
            name = ref.get('name', '')
            prefix = f"[{namespace}/{name}]" if namespace else f"[{name}]"
            record = copy.copy(record)  # shallow
            record.msg = f"{prefix} {record.msg}"
        return super().format(record)


class ObjectPrefixingTextFormatter(ObjectPrefixingMixin, ObjectTextFormatter):
    pass


class ObjectPrefixingJsonFormatter(ObjectPrefixingMixin, ObjectJsonFormatter):
    pass


class ResourceLogger(typedefs.LoggerAdapter):
    """
    A logger/adapter to carry the object identifiers for formatting.

    The object does not need to exist: the reference is built from the
    resource type and the name, as requested by the callers.
    """

    def __init__(
            self,
            *,
            resource: references.Resource,
            namespace: references.Namespace,
            name: str | None,
    ) -> None:
        super().__init__(logger, dict(
            k8s_ref=dict(
                apiVersion=resource.api_version,
                kind=resource.kind,
                name=name,
                namespace=namespace,
            ),
        ))

    def process(
            self,
            msg: str,
            kwargs: MutableMapping[str, Any],
    ) -> tuple[str, MutableMapping[str, Any]]:
        # Native logging overwrites the message's extra with the adapter's extra.
        # We merge them, so that both message's & adapter's extras are available.
        kwargs["extra"] = dict(self.extra or {}, **kwargs.get('extra', {}))
        return msg, kwargs


# Used to identify and remove our own handlers on re-configuration, e.g. in CLI tests,
# where the previous handlers can stream into the already closed interceptors of Click.
if TYPE_CHECKING:
    class _GaasStreamHandler(logging.StreamHandler[TextIO]):
        pass
else:
    class _GaasStreamHandler(logging.StreamHandler):
        pass


def configure(
        debug: bool | None = None,
        verbose: bool | None = None,
        quiet: bool | None = None,
        log_format: LogFormat = LogFormat.FULL,
        log_prefix: bool | None = None,
        log_refkey: str | None = None,
) -> None:
    log_level = 'DEBUG' if debug or verbose else 'WARNING' if quiet else 'INFO'
    formatter = make_formatter(log_format=log_format, log_prefix=log_prefix, log_refkey=log_refkey)
    handler = _GaasStreamHandler()
    handler.setFormatter(formatter)
    logger = logging.getLogger()
    logger.handlers[:] = [h for h in logger.handlers if not isinstance(h, _GaasStreamHandler)]
    logger.addHandler(handler)
    logger.setLevel(log_level)

    # Prevent the low-level logging unless in the debug mode. Keep only the gateway's messages.
    # For no-propagation loggers, add a dummy null handler to prevent printing the messages.
    for name in ['asyncio', 'aiohttp.access']:
        logger = logging.getLogger(name)
        logger.propagate = bool(debug)
        if not debug:
            logger.handlers[:] = [logging.NullHandler()]


def make_formatter(
        log_format: LogFormat = LogFormat.FULL,
        log_prefix: bool | None = None,
        log_refkey: str | None = None,
) -> ObjectFormatter:
    log_prefix = log_prefix if log_prefix is not None else bool(log_format is not LogFormat.JSON)
    match log_format:
        case LogFormat.JSON:
            if log_prefix:
                return ObjectPrefixingJsonFormatter(refkey=log_refkey)
            else:
                return ObjectJsonFormatter(refkey=log_refkey)
        case LogFormat():
            if log_prefix:
                return ObjectPrefixingTextFormatter(log_format.value)
            else:
                return ObjectTextFormatter(log_format.value)
        case _:
            raise ValueError(f"Unsupported log format: {log_format!r}")
