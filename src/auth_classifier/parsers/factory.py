import importlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

from auth_classifier.config.settings import ConfigLoader
from auth_classifier.parsers.base import RecordParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportFormat:
    """A registered export format: its parser and the file suffixes it reads"""
    name: str
    parser_class: Type[RecordParser]
    extensions: Tuple[str, ...] = ()


def _normalize_extensions(extensions: Iterable[str]) -> Tuple[str, ...]:
    # '.HAR', 'har' and '.har' all mean the same suffix
    return tuple(
        ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        for ext in extensions
    )


def _import_parser(dotted_path: str) -> Type[RecordParser]:
    module_path, class_name = dotted_path.rsplit(".", 1)
    return getattr(importlib.import_module(module_path), class_name)


class RecordParserFactory:
    """
    Registry of export formats.

    Maps a format name ('api-calls', 'har') to its RecordParser and the file
    suffixes it reads, so a parser can be picked by name or guessed from the
    file. Registration order matters: when several formats read the same
    suffix, the first registered wins.

    The registry is filled once at startup (usually from parsers.json) and
    then locked.
    """

    _locked = False
    _registry: Dict[str, ExportFormat] = {}

    @classmethod
    def register(
        cls,
        record_format: str,
        parser_class: Type[RecordParser],
        extensions: Iterable[str] = (),
    ) -> None:
        """
        Add an export format.

        Args:
            record_format: Format name used on the command line
            parser_class: RecordParser subclass (the class, not an instance)
            extensions: File suffixes this format is guessed for

        Raises:
            RuntimeError: After lock_registry()
            ValueError: If the format name is taken
            TypeError: If parser_class is not a RecordParser subclass
        """
        if cls._locked:
            raise RuntimeError(f"Cannot register '{record_format}': export formats are already loaded")

        if record_format in cls._registry:
            raise ValueError(f"Export format '{record_format}' is already registered")

        if not isinstance(parser_class, type) or not issubclass(parser_class, RecordParser):
            raise TypeError(f"{parser_class!r} is not a RecordParser subclass")

        cls._registry[record_format] = ExportFormat(
            name=record_format,
            parser_class=parser_class,
            extensions=_normalize_extensions(extensions),
        )

    @classmethod
    def lock_registry(cls):
        cls._locked = True

    @classmethod
    def is_loaded(cls) -> bool:
        return cls._locked

    @classmethod
    def create_parser(cls, record_format: str) -> RecordParser:
        """
        Instantiate the parser for a format name.

        Raises:
            ValueError: If the format is not registered
        """
        export_format = cls._registry.get(record_format)
        if export_format is None:
            raise ValueError(
                f"Unknown export format '{record_format}' "
                f"(known: {', '.join(cls._registry) or 'none'})"
            )

        return export_format.parser_class()

    @classmethod
    def format_for(cls, filepath) -> str:
        """
        Guess the export format from a file's suffix.

        Example:
            RecordParserFactory.format_for('capture.har')     # 'har'
            RecordParserFactory.format_for('api_calls.json')  # 'api-calls'

        Raises:
            ValueError: If no registered format reads this suffix
        """
        suffix = Path(filepath).suffix.lower()

        for export_format in cls._registry.values():
            if suffix in export_format.extensions:
                logger.debug("Guessed format '%s' for %s", export_format.name, filepath)
                return export_format.name

        raise ValueError(
            f"Cannot guess the export format of '{Path(filepath).name}', "
            f"choose one of: {', '.join(cls._registry) or 'none'}"
        )

    @classmethod
    def get_available_formats(cls) -> List[str]:
        return list(cls._registry)

    @classmethod
    def load_parsers_from_config(cls, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Register every format listed in parsers.json, then lock the registry.

        Each entry needs 'format' and 'class' (dotted path to the parser);
        'extensions' is optional. Pass `config` to skip reading the file.

        Raises:
            KeyError: If an entry lacks 'format' or 'class'
            ModuleNotFoundError: If a parser module cannot be imported
        """
        if config is None:
            config = ConfigLoader.load_parsers_config()

        for entry in config["parsers"]:
            cls.register(
                entry["format"],
                _import_parser(str(entry["class"])),
                extensions=entry.get("extensions", ()),
            )

        cls.lock_registry()
        logger.debug("Loaded export formats: %s", ", ".join(cls._registry))
