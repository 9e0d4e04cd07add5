"""
Реестр body-парсеров.

ЦКП: Отображение тег -> парсер, плюс алиасы тегов (wire-тег -> канонический).

Регистрация берётся из config/body_parsers.yaml:

    body_parsers:
      ascii:
        parser: ascii
        aliases: ["0"]

Новый тип тела = новый IBodyParser в PARSER_MAP + секция в YAML,
существующие парсеры не меняются.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Type

import yaml
from loguru import logger

from config.settings import BODY_PARSERS_CONFIG
from src.domain.exceptions import ConfigurationError

from ..domain.interfaces import IBodyParser
from .ascii_body_parser import AsciiBodyParser
from .hex16_body_parser import Hex16BodyParser


class BodyParserRegistry:
    """
    Реестр парсеров тела по тегу.

    Пример:
        registry = BodyParserRegistry.default()
        tag = registry.resolve("1")          # -> "hex16"
        payload = registry.get(tag).parse("00FF")
    """

    # Встроенные реализации, на которые ссылается YAML (поле parser)
    PARSER_MAP: Dict[str, Type[IBodyParser]] = {
        "ascii": AsciiBodyParser,
        "hex16": Hex16BodyParser,
    }

    def __init__(self):
        self._parsers: Dict[str, IBodyParser] = {}
        self._aliases: Dict[str, str] = {}

    def register(self, tag: str, parser: IBodyParser, aliases: Iterable[str] = ()) -> None:
        """
        Зарегистрировать парсер для тега.

        Args:
            tag: Канонический тег (ascii, hex16, ...)
            parser: Экземпляр IBodyParser
            aliases: Дополнительные wire-теги для того же парсера

        Raises:
            ConfigurationError: Если тег или алиас уже занят
        """
        for wire_tag in (tag, *aliases):
            if not wire_tag or any(char.isspace() for char in wire_tag):
                raise ConfigurationError(
                    f"Invalid body type tag {wire_tag!r}", component="BodyParserRegistry"
                )
            if wire_tag in self._aliases:
                raise ConfigurationError(
                    f"Body type tag '{wire_tag}' is already registered "
                    f"for '{self._aliases[wire_tag]}'",
                    component="BodyParserRegistry",
                )

        self._parsers[tag] = parser
        self._aliases[tag] = tag
        for alias in aliases:
            self._aliases[alias] = tag

        logger.debug(
            f"[BodyParserRegistry] Зарегистрирован парсер '{parser.name}' "
            f"для тега '{tag}' (алиасы: {list(aliases)})"
        )

    def resolve(self, wire_tag: str) -> Optional[str]:
        """Канонический тег для wire-тега или None, если тег неизвестен."""
        return self._aliases.get(wire_tag)

    def get(self, tag: str) -> Optional[IBodyParser]:
        """Парсер для канонического тега (или алиаса)."""
        canonical = self._aliases.get(tag)
        if canonical is None:
            return None
        return self._parsers.get(canonical)

    def known_tags(self) -> List[str]:
        """Список канонических тегов."""
        return sorted(self._parsers.keys())

    def tag_map(self) -> Dict[str, str]:
        """Копия отображения wire-тег -> канонический тег (для StructureParser)."""
        return dict(self._aliases)

    @classmethod
    def builtin(cls) -> "BodyParserRegistry":
        """Реестр со встроенными парсерами без алиасов."""
        registry = cls()
        for name, parser_cls in cls.PARSER_MAP.items():
            registry.register(name, parser_cls())
        return registry

    @classmethod
    def from_yaml(cls, config_file: Path) -> "BodyParserRegistry":
        """
        Загружает реестр из YAML.

        Args:
            config_file: Путь к body_parsers.yaml

        Returns:
            BodyParserRegistry

        Raises:
            ConfigurationError: Если файл отсутствует или некорректен
        """
        config_file = Path(config_file)
        if not config_file.exists():
            raise ConfigurationError(
                f"Body parser config not found: {config_file}", component="BodyParserRegistry"
            )

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {config_file}", component="BodyParserRegistry", original_error=e
            ) from e

        sections = data.get("body_parsers") if isinstance(data, dict) else None
        if not isinstance(sections, dict) or not sections:
            raise ConfigurationError(
                f"{config_file}: expected a non-empty 'body_parsers' mapping",
                component="BodyParserRegistry",
            )

        registry = cls()
        for tag, section in sections.items():
            section = section or {}
            if not isinstance(section, dict):
                raise ConfigurationError(
                    f"{config_file}: section for tag '{tag}' must be a mapping",
                    component="BodyParserRegistry",
                )
            parser_name = section.get("parser", tag)
            parser_cls = cls.PARSER_MAP.get(parser_name)
            if parser_cls is None:
                raise ConfigurationError(
                    f"{config_file}: unknown parser '{parser_name}' for tag '{tag}'. "
                    f"Available: {sorted(cls.PARSER_MAP)}",
                    component="BodyParserRegistry",
                )
            aliases = [str(alias) for alias in section.get("aliases", []) or []]
            registry.register(str(tag), parser_cls(), aliases=aliases)

        logger.info(
            f"[BodyParserRegistry] Загружен реестр из {config_file.name}: "
            f"{registry.known_tags()}"
        )
        return registry

    @classmethod
    def default(cls) -> "BodyParserRegistry":
        """
        Реестр по умолчанию: из BODY_PARSERS_CONFIG, а если файла нет -
        встроенные парсеры.
        """
        if not BODY_PARSERS_CONFIG.exists():
            logger.warning(
                f"[BodyParserRegistry] {BODY_PARSERS_CONFIG} не найден, "
                f"используем встроенные парсеры"
            )
            return cls.builtin()
        return cls.from_yaml(BODY_PARSERS_CONFIG)
